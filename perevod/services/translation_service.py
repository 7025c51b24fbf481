# perevod/services/translation_service.py
"""
Main translation service.
Coordinates the Excel processor, the banking dictionary and the relay client.

Run flow:
    API key check → read first sheet → collect unique texts → filter by language
    → batches of 10 (dictionary first, then one relay request) → apply cache
    → rebuild workbook

Status: IDLE → PROCESSING → SUCCESS | ERROR → IDLE (after STATUS_RESET_DELAY)
"""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from perevod.config.settings import AppSettings
from perevod.models.types import (
    RunStatus,
    StatusUpdate,
    TranslationProgress,
    TranslationResult,
    ProgressCallback,
    StatusCallback,
)
from perevod.processors.excel_processor import (
    ExcelProcessor,
    WorkbookSource,
    source_display_name,
)
from perevod.services.dictionary import DictionaryTranslator
from perevod.services.exceptions import (
    ApiKeyError,
    InputError,
    PerevodError,
    TooManyApiErrorsError,
    TranslationAPIError,
)
from perevod.services.language_detector import LanguageDetector
from perevod.services.translate_client import RelayTranslateClient

# Module logger
logger = logging.getLogger(__name__)


class TranslationService:
    """
    Runs one file translation at a time and publishes status and progress.
    """

    # Fixed pipeline constants (provider courtesy limits, not user settings)
    BATCH_SIZE = 10
    MAX_API_ERRORS = 3              # Abort when the count goes above this
    BATCH_DELAY = 0.1               # Seconds after every relay request
    PROGRESS_INTERVAL = 20          # Publish progress every N processed texts
    STATUS_RESET_DELAY = 5.0        # Seconds before SUCCESS/ERROR returns to IDLE
    MIN_API_KEY_LENGTH = 10
    KEY_CHECK_TEXT = "test"

    def __init__(
        self,
        client: Optional[RelayTranslateClient] = None,
        settings: Optional[AppSettings] = None,
        processor: Optional[ExcelProcessor] = None,
        dictionary: Optional[DictionaryTranslator] = None,
        detector: Optional[LanguageDetector] = None,
        on_status: Optional[StatusCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or AppSettings()
        self.client = client or RelayTranslateClient(
            self.settings.relay_url, self.settings.request_timeout
        )
        self.processor = processor or ExcelProcessor()
        self.dictionary = dictionary or DictionaryTranslator()
        self.detector = detector or LanguageDetector()
        self.on_status = on_status
        self.on_progress = on_progress
        self._sleep = sleep

        self._status = StatusUpdate()
        self._progress: Optional[TranslationProgress] = None
        self._state_lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._reset_timer: Optional[threading.Timer] = None

    # =========================================================================
    # Status / progress
    # =========================================================================

    @property
    def status(self) -> StatusUpdate:
        with self._state_lock:
            return self._status

    @property
    def progress(self) -> Optional[TranslationProgress]:
        with self._state_lock:
            return self._progress

    def is_processing(self) -> bool:
        return self.status.type == RunStatus.PROCESSING

    def _update_status(self, status_type: RunStatus, message: str) -> None:
        update = StatusUpdate(status_type, message)
        with self._state_lock:
            self._status = update
        logger.debug("Status: %s - %s", status_type.value, message)
        if self.on_status:
            self.on_status(update)

    def _update_progress(self, current: int, total: int, message: str) -> None:
        progress = TranslationProgress(current=current, total=total, message=message)
        self._set_progress(progress)

    def _set_progress(self, progress: Optional[TranslationProgress]) -> None:
        with self._state_lock:
            self._progress = progress
        if self.on_progress:
            self.on_progress(progress)

    def reset_status(self) -> None:
        """Return to IDLE immediately and clear progress."""
        with self._state_lock:
            if self._reset_timer is not None:
                self._reset_timer.cancel()
                self._reset_timer = None
        self._update_status(RunStatus.IDLE, "")
        self._set_progress(None)

    def _schedule_reset(self) -> None:
        timer = threading.Timer(self.STATUS_RESET_DELAY, self._auto_reset)
        timer.daemon = True
        with self._state_lock:
            if self._reset_timer is not None:
                self._reset_timer.cancel()
            self._reset_timer = timer
        timer.start()

    def _auto_reset(self) -> None:
        # A new run may have started before the timer fired
        if self.is_processing():
            return
        self.reset_status()

    def shutdown(self) -> None:
        """Cancel a pending status reset."""
        with self._state_lock:
            if self._reset_timer is not None:
                self._reset_timer.cancel()
                self._reset_timer = None

    # =========================================================================
    # API key
    # =========================================================================

    def validate_api_key(self, api_key: Optional[str]) -> bool:
        """
        Check an API key: minimum length, then one check translation.
        """
        if not api_key or len(api_key.strip()) < self.MIN_API_KEY_LENGTH:
            return False

        try:
            self.client.translate(self.KEY_CHECK_TEXT, api_key)
            return True
        except TranslationAPIError as e:
            logger.info("API key check failed: %s", e)
            return False

    # =========================================================================
    # Translation
    # =========================================================================

    def translate_file(
        self,
        source: Optional[WorkbookSource],
        api_key: Optional[str],
        filename: Optional[str] = None,
        output_dir: Optional[Path] = None,
    ) -> TranslationResult:
        """
        Translate the first sheet of a workbook into Russian.

        Never raises: every failure ends in an ERROR status and a failed
        TranslationResult.

        Args:
            source: Workbook path, bytes, or binary stream
            api_key: Yandex Cloud API key
            filename: Original file name (for the output name) when `source`
                      is not a path
            output_dir: Save the translated workbook here (optional; without
                        it the caller delivers `result.workbook`)

        Returns:
            TranslationResult
        """
        if not self._run_lock.acquire(blocking=False):
            logger.warning("Translation requested while another run is in progress")
            return TranslationResult(
                status=RunStatus.ERROR,
                message="Перевод уже выполняется",
                error_message="Перевод уже выполняется",
                error_type="RunInProgress",
            )

        start_time = time.time()
        try:
            # Cancel a pending auto-reset from the previous run
            self.shutdown()
            result = self._run(source, api_key, filename, output_dir, start_time)
        except PerevodError as e:
            logger.warning("Translation failed at %s stage: %s", e.stage, e)
            result = self._fail(str(e), e, start_time)
        except Exception as e:
            logger.exception("Unexpected translation failure: %s", e)
            result = self._fail(str(e) or type(e).__name__, e, start_time)
        finally:
            self._run_lock.release()

        self._schedule_reset()
        return result

    def _fail(self, reason: str, error: Exception, start_time: float) -> TranslationResult:
        message = f"Ошибка: {reason}"
        self._update_status(RunStatus.ERROR, message)
        self._set_progress(None)
        api_errors = getattr(error, 'api_errors', 0)
        return TranslationResult(
            status=RunStatus.ERROR,
            message=message,
            api_errors=api_errors,
            duration_seconds=time.time() - start_time,
            error_message=reason,
            error_type=type(error).__name__,
        )

    def _run(
        self,
        source: Optional[WorkbookSource],
        api_key: Optional[str],
        filename: Optional[str],
        output_dir: Optional[Path],
        start_time: float,
    ) -> TranslationResult:
        if source is None or source == "":
            raise InputError("Файл не выбран")
        if isinstance(source, (str, Path)) and not Path(source).exists():
            raise InputError(f"Файл не найден: {Path(source).name}")

        # 1. API key
        self._update_status(RunStatus.PROCESSING, "Проверка API ключа...")
        if not self.validate_api_key(api_key):
            raise ApiKeyError(
                "Неверный API ключ! Проверьте ключ в Yandex Cloud и попробуйте снова."
            )

        # 2. Extraction
        self._update_status(RunStatus.PROCESSING, "Чтение файла...")
        workbook_data = self.processor.read_excel_file(source)

        self._update_status(RunStatus.PROCESSING, "Анализ текстов...")
        unique_texts = self.processor.collect_unique_texts(workbook_data.data)
        # Sorted for a deterministic batch order
        texts_to_translate = sorted(t for t in unique_texts if self.detector.needs_translation(t))
        logger.info(
            "Found %d unique texts, %d need translation",
            len(unique_texts), len(texts_to_translate),
        )

        if not texts_to_translate:
            message = "Файл не содержит текстов для перевода"
            self._update_status(RunStatus.SUCCESS, message)
            self._set_progress(None)
            return TranslationResult(
                status=RunStatus.SUCCESS,
                message=message,
                duration_seconds=time.time() - start_time,
            )

        # 3-4. Batched resolution
        result = TranslationResult(status=RunStatus.PROCESSING, texts_total=len(texts_to_translate))
        translation_cache = self._translate_texts(texts_to_translate, api_key, result)

        # 5. Reinsertion
        self._update_status(RunStatus.PROCESSING, "Создание документа...")
        translated_data = self.processor.apply_translations(workbook_data.data, translation_cache)
        result.workbook = self.processor.create_excel_file(workbook_data, translated_data)
        result.output_name = self.processor.generate_translated_filename(
            source_display_name(source, filename)
        )

        if output_dir is not None:
            result.output_path = self.processor.save_excel_file(
                result.workbook, Path(output_dir), result.output_name
            )
            message = "Файл успешно переведен и сохранен!"
        else:
            message = "Файл успешно переведен!"

        # 6. Completion
        result.status = RunStatus.SUCCESS
        result.message = message
        result.duration_seconds = time.time() - start_time
        self._update_status(RunStatus.SUCCESS, message)
        self._set_progress(None)

        logger.info("%s (%.1fs)", result.get_summary(), result.duration_seconds)
        return result

    def _translate_texts(
        self,
        texts: list[str],
        api_key: str,
        result: TranslationResult,
    ) -> dict[str, str]:
        """
        Resolve every text into a cache: dictionary first, relay for the rest.

        Batches run strictly one after another. A failed relay request keeps
        the batch's texts untranslated until the error budget is exceeded.

        Raises:
            TooManyApiErrorsError: More than MAX_API_ERRORS failed requests
        """
        total = len(texts)
        translation_cache: dict[str, str] = {}

        self._update_progress(0, total, f"Найдено {total} текстов для перевода")

        for i in range(0, total, self.BATCH_SIZE):
            batch = texts[i:i + self.BATCH_SIZE]
            texts_for_api: list[str] = []

            for text in batch:
                translation = self.dictionary.translate(text)
                if self.dictionary.was_resolved(text, translation):
                    translation_cache[text] = translation
                    result.dictionary_count += 1
                    result.translated_count += 1
                else:
                    texts_for_api.append(text)

            if texts_for_api:
                try:
                    translations = self.client.translate_batch(texts_for_api, api_key)
                except TranslationAPIError as e:
                    result.api_errors += 1
                    logger.warning(
                        "Batch %d failed (%d/%d API errors): %s",
                        i // self.BATCH_SIZE + 1, result.api_errors, self.MAX_API_ERRORS, e,
                    )
                    if result.api_errors > self.MAX_API_ERRORS:
                        raise TooManyApiErrorsError(
                            "Слишком много ошибок API. Проверьте ваш API ключ или лимиты.",
                            api_errors=result.api_errors,
                        ) from e

                    for text in texts_for_api:
                        translation_cache[text] = text
                        result.fallback_count += 1
                        result.translated_count += 1
                else:
                    for text, translation in zip(texts_for_api, translations):
                        # Never cache an empty translation
                        translation_cache[text] = translation or text
                        result.api_count += 1
                        result.translated_count += 1

                self._sleep(self.BATCH_DELAY)

            processed_count = i + self.BATCH_SIZE
            current = min(processed_count, total)
            if processed_count >= total or processed_count % self.PROGRESS_INTERVAL == 0:
                self._update_progress(current, total, f"Обработано {current} из {total}")

        return translation_cache

# perevod/services/translate_client.py
"""
Client for the translation relay (/api/translate).

The relay forwards {texts, apiKey} to Yandex Cloud Translate and returns the
provider response unchanged:
    {"translations": [{"text": "...", "detectedLanguageCode": "en"}, ...]}

Every request is independent; a failure of any kind is raised as a single
TranslationAPIError for the whole batch.
"""

import http.client
import json
import logging
import socket
import urllib.error
import urllib.request
from typing import Sequence

from perevod.config.settings import DEFAULT_RELAY_URL
from perevod.services.exceptions import TranslationAPIError

logger = logging.getLogger(__name__)

# Upper bound on the error body kept for diagnostics
_MAX_ERROR_DETAIL_CHARS = 2000


def _parse_translations(payload: object, expected_count: int) -> list[str]:
    if not isinstance(payload, dict):
        raise TranslationAPIError("Некорректный ответ сервиса перевода")
    translations = payload.get("translations")
    if not isinstance(translations, list) or not translations:
        raise TranslationAPIError("No translations returned from API")
    if len(translations) != expected_count:
        raise TranslationAPIError(
            f"Translation count mismatch: expected {expected_count}, got {len(translations)}"
        )

    texts = []
    for item in translations:
        text = item.get("text") if isinstance(item, dict) else None
        texts.append(text if isinstance(text, str) else "")
    return texts


class RelayTranslateClient:
    """
    Sends text batches to the relay and returns positionally aligned results.
    """

    DEFAULT_TIMEOUT = 30  # Seconds

    def __init__(self, relay_url: str = DEFAULT_RELAY_URL, timeout: float | None = None):
        self.relay_url = relay_url
        self.timeout = timeout or self.DEFAULT_TIMEOUT

    def translate_batch(self, texts: Sequence[str], api_key: str) -> list[str]:
        """
        Translate texts in one relay request.

        Args:
            texts: Texts to translate (order is preserved)
            api_key: Yandex Cloud API key

        Returns:
            Translations, same length and order as `texts`

        Raises:
            TranslationAPIError: Transport error, non-2xx status, or malformed response
        """
        if not texts:
            return []

        payload = self._post({"texts": list(texts), "apiKey": api_key})
        return _parse_translations(payload, len(texts))

    def translate(self, text: str, api_key: str) -> str:
        """Translate a single text (used for the API key check)."""
        return self.translate_batch([text], api_key)[0]

    def validate_api_key(self, api_key: str) -> bool:
        """Check a key against the relay with a one-word translation."""
        try:
            self.translate("test", api_key)
            return True
        except TranslationAPIError as e:
            logger.info("API key check failed: %s", e)
            return False

    def _post(self, body: dict) -> object:
        data = json.dumps(body, ensure_ascii=False).encode('utf-8')
        request = urllib.request.Request(
            self.relay_url,
            data=data,
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                raw = response.read()
        except urllib.error.HTTPError as e:
            detail = self._read_error_body(e)
            logger.warning("Relay returned HTTP %d: %s", e.code, detail)
            raise TranslationAPIError(
                f"HTTP Error: {e.code}", status_code=e.code, detail=detail
            ) from e
        except (urllib.error.URLError, ConnectionError) as e:
            logger.warning("Relay connection failed: %s", e)
            raise TranslationAPIError("Network error - check internet connection") from e
        except (socket.timeout, TimeoutError) as e:
            logger.warning("Relay request timed out after %ss", self.timeout)
            raise TranslationAPIError(
                f"Превышено время ожидания ответа ({self.timeout} с)"
            ) from e
        except (OSError, http.client.HTTPException) as e:
            # Broken connection while reading the body (IncompleteRead, SSLError, reset)
            logger.warning("Relay response could not be read: %r", e)
            raise TranslationAPIError("Network error - check internet connection") from e

        try:
            return json.loads(raw.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TranslationAPIError("Некорректный ответ сервиса перевода") from e

    @staticmethod
    def _read_error_body(error: urllib.error.HTTPError) -> str:
        try:
            return error.read().decode('utf-8', errors='replace')[:_MAX_ERROR_DETAIL_CHARS]
        except OSError:
            return ""

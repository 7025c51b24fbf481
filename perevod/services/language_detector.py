# perevod/services/language_detector.py
"""
Local language detection for cell texts.

Armenian and Russian are recognized by script; English is only recognized when
a Latin-only text contains one of the banking keywords. Anything else is left
alone, so ambiguous cells (codes, names, numbers) are never sent for
translation.
"""

import re

from perevod.models.types import Language


class LanguageDetector:
    """
    Script and keyword based language detection.

    Use the singleton instance `language_detector` or create your own instance.

    Example:
        from perevod.services.language_detector import language_detector
        if language_detector.needs_translation("Transfer To Card"):
            ...
    """

    # Latin letters, digits, whitespace and common punctuation only
    _RE_LATIN_TEXT = re.compile(r'^[a-zA-Z0-9\s.,!?;:()\-/\\]+$')

    ENGLISH_KEYWORDS = (
        'invoice',
        'date',
        'payment',
        'transfer',
        'account',
        'commission',
        'exchange',
        'card',
        'software',
        'development',
    )

    # =========================================================================
    # Character Detection Helpers (static methods)
    # =========================================================================

    @staticmethod
    def is_armenian(code: int) -> bool:
        """Check if a Unicode code point is in the Armenian block."""
        return 0x0530 <= code <= 0x058F

    @staticmethod
    def is_cyrillic(code: int) -> bool:
        """Check if a Unicode code point is in the Cyrillic block."""
        return 0x0400 <= code <= 0x04FF

    def has_english_keyword(self, text: str) -> bool:
        lower_text = text.lower()
        return any(keyword in lower_text for keyword in self.ENGLISH_KEYWORDS)

    # =========================================================================
    # Text-level detection
    # =========================================================================

    def detect(self, text: object) -> Language:
        """
        Detect the language of a cell text.

        Detection priority:
        1. Any Armenian character → ARMENIAN (even inside mixed text)
        2. Any Cyrillic character → RUSSIAN (already in target language)
        3. Latin-only text with a banking keyword → ENGLISH
        4. Anything else → UNKNOWN

        Args:
            text: Cell value; non-str values are UNKNOWN

        Returns:
            Detected Language
        """
        if not text or not isinstance(text, str):
            return Language.UNKNOWN

        codes = [ord(char) for char in text]

        if any(self.is_armenian(code) for code in codes):
            return Language.ARMENIAN

        if any(self.is_cyrillic(code) for code in codes):
            return Language.RUSSIAN

        if self._RE_LATIN_TEXT.match(text) and self.has_english_keyword(text):
            return Language.ENGLISH

        return Language.UNKNOWN

    def needs_translation(self, text: object) -> bool:
        """True for Armenian and English texts; Russian and unknown are kept."""
        return self.detect(text) in (Language.ARMENIAN, Language.ENGLISH)


# Singleton instance for convenient access
language_detector = LanguageDetector()


def detect_language(text: object) -> Language:
    """Detect language with the singleton LanguageDetector."""
    return language_detector.detect(text)


def needs_translation(text: object) -> bool:
    """Check whether a cell text should be translated."""
    return language_detector.needs_translation(text)

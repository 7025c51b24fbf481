# perevod/services/__init__.py
"""
Service layer for Perevod.

Use explicit imports like:
    from perevod.services.translation_service import TranslationService
"""

from .exceptions import (
    PerevodError,
    InputError,
    ApiKeyError,
    WorkbookReadError,
    TranslationAPIError,
    TooManyApiErrorsError,
)
from .language_detector import LanguageDetector, language_detector, detect_language, needs_translation
from .dictionary import DictionaryTranslator, apply_dictionary_translation, was_translated_by_dictionary

# Lazy-loaded services via __getattr__ (these pull in openpyxl)
_LAZY_IMPORTS = {
    'TranslationService': 'translation_service',
    'RelayTranslateClient': 'translate_client',
}


def __getattr__(name: str):
    """Lazy-load heavier service modules on first access."""
    import importlib
    if name in _LAZY_IMPORTS:
        module = importlib.import_module(f'.{_LAZY_IMPORTS[name]}', __package__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'PerevodError',
    'InputError',
    'ApiKeyError',
    'WorkbookReadError',
    'TranslationAPIError',
    'TooManyApiErrorsError',
    'LanguageDetector',
    'language_detector',
    'detect_language',
    'needs_translation',
    'DictionaryTranslator',
    'apply_dictionary_translation',
    'was_translated_by_dictionary',
    'TranslationService',
    'RelayTranslateClient',
]

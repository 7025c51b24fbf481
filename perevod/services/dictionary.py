# perevod/services/dictionary.py
"""
Banking dictionary applied before any remote translation.

Two layers, both fixed at import time:
- BANKING_TERMS: whole-cell exact matches (including "Armenian/English" pairs)
- TRANSLATION_PATTERNS: ordered regex rewrites applied cumulatively

Pattern order is significant: a composite bilingual rule must come before the
rules for its single-language parts, otherwise it can never match.
"""

import re
from types import MappingProxyType
from typing import Mapping


BANKING_TERMS: Mapping[str, str] = MappingProxyType({
    'Փոխկպ. հաշվից վճ/Linked Acc. Paym': 'Оплата со связанного счета',
    'Փոխկպ. հաշվից վճ': 'Оплата со связанного счета',
    'Linked Acc. Paym': 'Оплата со связанного счета',
    'Հաճախորդի սպասարկում  ռեզ.իրավ.անձ ,հաշվի.':
        'Обслуживание клиента рез. юр. лицо, счет',
    'Հաճախորդի սպասարկում ռեզ.իրավ.անձ ,հաշվի.':
        'Обслуживание клиента рез. юр. лицо, счет',
    'Գանձում փոխանցումից\\Commission': 'Комиссия за перевод',
    'Գանձում փոխանցումից': 'Комиссия за перевод',
    'Փոխանցում քարտին/Transfer To Card': 'Перевод на карту',
    'Փոխանցում քարտին': 'Перевод на карту',

    'Transfer To Card': 'Перевод на карту',
    'Transfer to Account': 'Перевод на счет',
    'Currency Exchange': 'Обмен валюты',
    'Commission': 'Комиссия',
    'US Dollar': 'Доллар США',
})

# (pattern, replacement) in evaluation order.
# Armenian-only rules stay case-sensitive; bilingual and English rules ignore case.
TRANSLATION_PATTERNS: tuple[tuple[re.Pattern, str], ...] = (
    # Bank statement operations (composite before single-language)
    (re.compile(r'Փոխկպ\.\s*հաշվից\s*վճ[/\\]?Linked\s*Acc\.\s*Paym', re.IGNORECASE),
     'Оплата со связанного счета'),
    (re.compile(r'Փոխկպ\.\s*հաշվից\s*վճ'), 'Оплата со связанного счета'),
    (re.compile(r'Հաճախորդի\s*սպասարկում\s*ռեզ\.իրավ\.անձ\s*,հաշվի\.'),
     'Обслуживание клиента рез. юр. лицо, счет'),
    (re.compile(r'Գանձում\s*փոխանցումից[/\\]?Commission', re.IGNORECASE), 'Комиссия за перевод'),
    (re.compile(r'Գանձում\s*փոխանցումից'), 'Комиссия за перевод'),
    (re.compile(r'Փոխանցում\s*քարտին[/\\]?Transfer\s*To\s*Card', re.IGNORECASE), 'Перевод на карту'),
    (re.compile(r'Փոխանցում\s*քարտին'), 'Перевод на карту'),

    # Invoice boilerplate ("INVOICE NO." before "INVOICE ")
    (re.compile(r'INVOICE\s+NO\.', re.IGNORECASE), 'СЧЕТ-ФАКТУРА №'),
    (re.compile(r'INVOICE\s+DATE:', re.IGNORECASE), 'ДАТА СЧЕТА:'),
    (re.compile(r'INVOICE\s+', re.IGNORECASE), 'СЧЕТ-ФАКТУРА '),
    (re.compile(r'INV\.', re.IGNORECASE), 'СФ.'),
    (re.compile(r'\bDATE\s+', re.IGNORECASE), 'ДАТА '),
    (re.compile(r'SOFTWARE\s+DEVELOPMENT', re.IGNORECASE), 'РАЗРАБОТКА ПРОГРАММНОГО ОБЕСПЕЧЕНИЯ'),
    (re.compile(r'Transfer\s+To\s+Card', re.IGNORECASE), 'Перевод на карту'),
    (re.compile(r'Transfer\s+to\s+Account', re.IGNORECASE), 'Перевод на счет'),
    (re.compile(r'Currency\s+Exchange', re.IGNORECASE), 'Обмен валюты'),
)


class DictionaryTranslator:
    """
    Deterministic term/pattern translator. Pure: no I/O, no state.
    """

    def __init__(
        self,
        terms: Mapping[str, str] = BANKING_TERMS,
        patterns: tuple[tuple[re.Pattern, str], ...] = TRANSLATION_PATTERNS,
    ):
        self.terms = terms
        self.patterns = patterns

    def translate(self, text: str) -> str:
        """
        Translate text with the dictionary.

        Exact term match wins; otherwise every pattern is applied in order to
        the output of the previous one. Returns the input unchanged when
        nothing matched (or when it is not a non-empty str).
        """
        if not text or not isinstance(text, str):
            return text

        term = self.terms.get(text)
        if term:
            return term

        result = text
        for pattern, replacement in self.patterns:
            result = pattern.sub(replacement, result)
        return result

    @staticmethod
    def was_resolved(original: str, translated: str) -> bool:
        """
        True if the dictionary changed the text.

        A rule that maps a text onto itself is reported as unresolved.
        """
        return original != translated


# Singleton instance for convenient access
dictionary_translator = DictionaryTranslator()


def apply_dictionary_translation(text: str) -> str:
    """Translate text with the default banking dictionary."""
    return dictionary_translator.translate(text)


def was_translated_by_dictionary(original: str, translated: str) -> bool:
    """Check whether the dictionary rewrote the text."""
    return DictionaryTranslator.was_resolved(original, translated)

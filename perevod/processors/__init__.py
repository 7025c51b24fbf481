# perevod/processors/__init__.py
"""
File processors for Perevod.
"""

from .excel_processor import ExcelProcessor

__all__ = [
    'ExcelProcessor',
]

# perevod/models/__init__.py
"""
Data models for Perevod.
"""

from .types import (
    CellValue,
    SheetData,
    Language,
    RunStatus,
    StatusUpdate,
    TranslationProgress,
    SheetLayout,
    WorkbookData,
    TranslationResult,
    ProgressCallback,
    StatusCallback,
)

__all__ = [
    'CellValue',
    'SheetData',
    'Language',
    'RunStatus',
    'StatusUpdate',
    'TranslationProgress',
    'SheetLayout',
    'WorkbookData',
    'TranslationResult',
    'ProgressCallback',
    'StatusCallback',
]

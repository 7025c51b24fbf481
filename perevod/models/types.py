# perevod/models/types.py
"""
Core data types for Perevod translation application.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Union


# A single spreadsheet cell. Only str values take part in translation.
CellValue = Union[str, int, float, bool, datetime, date, time, None]

# Rows of cells, top-left cell first. Rows may differ in length.
SheetData = list[list[CellValue]]


class Language(Enum):
    """Language detected for a cell text"""
    ARMENIAN = "hy"      # Source A (Armenian script)
    ENGLISH = "en"       # Source B (Latin banking keywords)
    RUSSIAN = "ru"       # Target
    UNKNOWN = "unknown"


class RunStatus(Enum):
    """Translation run status"""
    IDLE = "idle"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class StatusUpdate:
    """Status shown to the user: state plus a human-readable message."""
    type: RunStatus = RunStatus.IDLE
    message: str = ""


@dataclass
class TranslationProgress:
    """
    Progress information for a translation run.

    `current` counts processed unique texts. It is clamped into [0, total]
    and `percentage` is derived from it.
    """
    current: int                     # Processed texts
    total: int                       # Texts to process
    message: str                     # Status message
    percentage: float = 0.0          # 0.0 - 1.0

    def __post_init__(self):
        if self.total < 0:
            raise ValueError(f"total must be non-negative, got {self.total}")

        if self.current < 0:
            self.current = 0

        if self.total > 0:
            if self.current > self.total:
                self.current = self.total
            self.percentage = self.current / self.total
        else:
            self.percentage = 0.0


@dataclass
class SheetLayout:
    """
    Layout properties carried over from the input sheet.
    Styles, formulas and merged cells are intentionally not part of it.
    """
    dimension: Optional[str] = None                                        # e.g. "A1:D20"
    column_widths: dict[str, tuple[float, Optional[int], Optional[int]]] = field(
        default_factory=dict
    )                                                                      # letter -> (width, min, max)
    row_heights: dict[int, float] = field(default_factory=dict)            # row -> height (pt)

    @property
    def is_empty(self) -> bool:
        return not (self.dimension or self.column_widths or self.row_heights)


@dataclass
class WorkbookData:
    """
    The first sheet of an input workbook, read as a grid of values.
    """
    workbook: Any                    # openpyxl Workbook the grid was read from
    sheet_name: str
    data: SheetData
    layout: SheetLayout = field(default_factory=SheetLayout)

    @property
    def row_count(self) -> int:
        return len(self.data)

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.data), default=0)


@dataclass
class TranslationResult:
    """
    Result of a file translation run.
    """
    status: RunStatus
    message: str = ""
    workbook: Any = None                     # Translated openpyxl Workbook
    output_name: Optional[str] = None        # Derived file name (e.g. "report на русском.xlsx")
    output_path: Optional[Path] = None       # Set when the workbook was saved
    texts_total: int = 0                     # Unique texts that needed translation
    translated_count: int = 0
    dictionary_count: int = 0                # Resolved without a remote call
    api_count: int = 0                       # Resolved by the remote provider
    fallback_count: int = 0                  # Kept untranslated after a failed batch
    api_errors: int = 0
    duration_seconds: float = 0.0
    error_message: Optional[str] = None
    error_type: Optional[str] = None         # Class name of the internal cause

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.SUCCESS

    @property
    def has_fallbacks(self) -> bool:
        """True if some texts were left untranslated after absorbed API errors."""
        return self.fallback_count > 0

    def get_summary(self) -> str:
        """Get a human-readable summary of the run."""
        if not self.succeeded:
            return f"Failed: {self.error_message or self.message}"
        if self.texts_total == 0:
            return "Success: nothing to translate"
        summary = (
            f"Success: {self.translated_count}/{self.texts_total} texts "
            f"({self.dictionary_count} dictionary, {self.api_count} API)"
        )
        if self.has_fallbacks:
            summary += f", {self.fallback_count} left untranslated after {self.api_errors} API errors"
        return summary


# Callback types
ProgressCallback = Callable[[Optional[TranslationProgress]], None]
StatusCallback = Callable[[StatusUpdate], None]

# perevod/processors/excel_processor.py
"""
Processor for Excel files (.xlsx, .xlsm) using openpyxl.

Only the first sheet is read, as a grid of values starting at A1. The
translated workbook is rebuilt from that grid and carries over three layout
properties of the original sheet: the dimension extent, column widths and row
heights.

Not preserved:
- Cell styles and number formats
- Formulas (the cached values are written instead)
- Merged cells, comments, hyperlinks
- Any sheet other than the first
"""

import io
import logging
import re
from pathlib import Path
from typing import BinaryIO, Optional, Union
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.cell import range_boundaries
from openpyxl.utils.exceptions import InvalidFileException

from perevod.models.types import SheetData, SheetLayout, WorkbookData
from perevod.services.exceptions import InputError, WorkbookReadError

# Module logger
logger = logging.getLogger(__name__)

WorkbookSource = Union[Path, str, bytes, BinaryIO]

TRANSLATED_SUFFIX = " на русском"
OUTPUT_EXTENSION = ".xlsx"
_RE_SPREADSHEET_EXTENSION = re.compile(r'\.xls[xm]$', re.IGNORECASE)


class ExcelProcessor:
    """
    Reads the first sheet of a workbook, collects its texts, and writes a
    translated copy.
    """

    @property
    def supported_extensions(self) -> list[str]:
        return ['.xlsx', '.xlsm']

    def supports_extension(self, extension: str) -> bool:
        """Check if this processor supports the given file extension"""
        return extension.lower() in self.supported_extensions

    # =========================================================================
    # Reading
    # =========================================================================

    def read_excel_file(self, source: WorkbookSource) -> WorkbookData:
        """
        Read the first sheet of a workbook.

        Args:
            source: File path, raw bytes, or a binary stream

        Returns:
            WorkbookData with the grid and layout of the first sheet

        Raises:
            InputError: Path does not exist
            WorkbookReadError: Content is not a readable workbook
        """
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise InputError(f"Файл не найден: {path.name}")
            if path.suffix.lower() == '.xls':
                raise WorkbookReadError(
                    "Формат .xls не поддерживается. Сохраните файл как .xlsx и попробуйте снова."
                )
            stream: Union[Path, BinaryIO] = path
        elif isinstance(source, bytes):
            stream = io.BytesIO(source)
        else:
            stream = source

        try:
            wb = openpyxl.load_workbook(stream, data_only=True)
        except (InvalidFileException, BadZipFile, KeyError, ValueError, OSError) as e:
            logger.warning("Failed to read workbook: %s", e)
            raise WorkbookReadError("Ошибка чтения Excel файла") from e

        if not wb.sheetnames:
            raise WorkbookReadError("Ошибка чтения Excel файла: книга не содержит листов")

        sheet_name = wb.sheetnames[0]
        sheet = wb[sheet_name]

        data: SheetData = [
            list(row)
            for row in sheet.iter_rows(
                min_row=1,
                max_row=sheet.max_row,
                min_col=1,
                max_col=sheet.max_column,
                values_only=True,
            )
        ]
        layout = self._read_layout(sheet)

        logger.info(
            "Read sheet '%s': %d rows, %d columns (%d custom widths, %d custom heights)",
            sheet_name, len(data), sheet.max_column,
            len(layout.column_widths), len(layout.row_heights),
        )

        return WorkbookData(workbook=wb, sheet_name=sheet_name, data=data, layout=layout)

    def _read_layout(self, sheet) -> SheetLayout:
        """Collect dimension, explicit column widths and explicit row heights."""
        layout = SheetLayout()

        dimension = sheet.calculate_dimension()
        if dimension:
            layout.dimension = dimension

        for col_letter, col_dim in sheet.column_dimensions.items():
            if col_dim.width is not None and col_dim.customWidth:
                layout.column_widths[col_letter] = (col_dim.width, col_dim.min, col_dim.max)

        for row_num, row_dim in sheet.row_dimensions.items():
            if row_dim.height is not None:
                layout.row_heights[row_num] = row_dim.height

        return layout

    # =========================================================================
    # Text collection and substitution
    # =========================================================================

    @staticmethod
    def collect_unique_texts(data: SheetData) -> set[str]:
        """
        Collect distinct non-blank text cells.

        The cell value itself (not its stripped form) is collected so that it
        matches the cell again in apply_translations().
        """
        unique_texts: set[str] = set()
        for row in data:
            for cell in row:
                if cell and isinstance(cell, str) and cell.strip():
                    unique_texts.add(cell)
        return unique_texts

    @staticmethod
    def apply_translations(data: SheetData, translations: dict[str, str]) -> SheetData:
        """
        Build a new grid with translated text cells.

        Every str cell found in `translations` is replaced; all other cells are
        copied as they are. The input grid is not modified.
        """
        return [
            [
                translations[cell] if isinstance(cell, str) and cell in translations else cell
                for cell in row
            ]
            for row in data
        ]

    # =========================================================================
    # Writing
    # =========================================================================

    def create_excel_file(self, original: WorkbookData, data: SheetData):
        """
        Create a new workbook holding `data` under the original sheet name.

        Args:
            original: Input workbook as returned by read_excel_file()
            data: Translated grid

        Returns:
            New openpyxl Workbook with a single sheet
        """
        wb = openpyxl.Workbook()
        sheet = wb.active
        sheet.title = original.sheet_name

        for row in data:
            sheet.append(list(row))

        # The grid holds values only (read with data_only=True), so a str
        # starting with "=" is literal text. append() would store it as a formula.
        for row in sheet.iter_rows():
            for cell in row:
                if cell.data_type == 'f':
                    cell.data_type = 's'

        self._apply_layout(sheet, original.layout)
        return wb

    def _apply_layout(self, sheet, layout: SheetLayout) -> None:
        """Copy dimension extent, column widths and row heights onto `sheet`."""
        if layout.dimension:
            try:
                _, _, max_col, max_row = range_boundaries(layout.dimension)
            except (ValueError, TypeError):
                logger.debug("Ignoring unparsable dimension: %s", layout.dimension)
            else:
                if max_row and max_col and (sheet.max_row < max_row or sheet.max_column < max_col):
                    # Touching the bottom-right cell extends the written dimension
                    sheet.cell(row=max_row, column=max_col)

        for col_letter, (width, min_col, max_col) in layout.column_widths.items():
            col_dim = sheet.column_dimensions[col_letter]
            col_dim.width = width
            if min_col is not None and max_col is not None:
                col_dim.min = min_col
                col_dim.max = max_col

        for row_num, height in layout.row_heights.items():
            sheet.row_dimensions[row_num].height = height

    @staticmethod
    def generate_translated_filename(original_filename: str) -> str:
        """
        Derive the output file name.

        "report.xlsx" -> "report на русском.xlsx"
        """
        base_name = _RE_SPREADSHEET_EXTENSION.sub('', original_filename)
        return f"{base_name}{TRANSLATED_SUFFIX}{OUTPUT_EXTENSION}"

    def save_excel_file(self, workbook, output_dir: Path, filename: str) -> Path:
        """
        Save workbook into output_dir under a name that does not exist yet.

        Adds _2, _3, ... before the extension when `filename` is taken.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self._generate_output_path(output_dir, filename)
        workbook.save(output_path)
        logger.info("Saved translated workbook: %s", output_path)
        return output_path

    @staticmethod
    def _generate_output_path(output_dir: Path, filename: str) -> Path:
        output_path = output_dir / filename
        if not output_path.exists():
            return output_path

        stem = output_path.stem
        ext = output_path.suffix
        counter = 2
        max_attempts = 10000
        while counter <= max_attempts:
            output_path = output_dir / f"{stem}_{counter}{ext}"
            if not output_path.exists():
                return output_path
            counter += 1

        raise OSError(f"Could not find an available file name for {filename} in {output_dir}")


def source_display_name(source: WorkbookSource, filename: Optional[str] = None) -> str:
    """File name used for the output name: explicit name, then path name."""
    if filename:
        return filename
    if isinstance(source, (str, Path)):
        return Path(source).name
    name = getattr(source, 'name', None)
    if isinstance(name, str) and name:
        return Path(name).name
    return "translated.xlsx"

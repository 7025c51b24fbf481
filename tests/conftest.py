from __future__ import annotations

import sys
from pathlib import Path

import openpyxl
import pytest


# Ensure the project root is importable when running `pytest` via its entrypoint,
# where `sys.path[0]` may not be the repo root.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


ARMENIAN_COMMISSION = "Գանձում փոխանցումից"            # -> Комиссия за перевод
ARMENIAN_FREE_TEXT = "Բարև ձեզ"                          # Not in the dictionary


@pytest.fixture
def bank_statement_xlsx(tmp_path: Path) -> Path:
    """Small statement workbook: Armenian, English, Russian and non-text cells."""
    path = tmp_path / "statement.xlsx"

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Выписка"

    ws["A1"] = "Date"
    ws["B1"] = "Description"
    ws["C1"] = "Amount"
    ws["A2"] = "2024-01-15"
    ws["B2"] = "Commission"
    ws["C2"] = 1500
    ws["A3"] = "2024-01-16"
    ws["B3"] = ARMENIAN_COMMISSION
    ws["C3"] = 250.5
    ws["A4"] = "2024-01-17"
    ws["B4"] = "Перевод"
    ws["C4"] = None
    ws["B5"] = ARMENIAN_FREE_TEXT

    ws.column_dimensions["B"].width = 42
    ws.row_dimensions[1].height = 30

    wb.save(path)
    wb.close()
    return path

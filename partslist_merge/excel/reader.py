from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

"""Excel reader.

Reads one target sheet of a workbook into a plain 2-D list of cell values
(row 0 = header). Empty cells become "" so downstream code compares against
strings only. Trailing rows whose column B is empty are cut off, mirroring
how the parts-list templates pad the sheet with formatted blank rows.

pandas picks the engine from the extension: openpyxl for .xlsx/.xlsm, xlrd
for legacy .xls.
"""

__all__ = [
    "SheetNotFoundError",
    "find_last_data_row",
    "read_sheet_rows",
]

# B列で最終データ行を判定
LAST_ROW_CHECK_COLUMN = 1


class SheetNotFoundError(Exception):
    """Raised when the target sheet does not exist in the workbook."""


def _clean_cell(value: Any) -> Any:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):  # pragma: no cover (non-scalar cell)
        return value
    return value


def find_last_data_row(rows: list[list[Any]], check_column: int = LAST_ROW_CHECK_COLUMN) -> int:
    """Return the 1-based index of the last row with a value in check_column (0 if none)."""
    for i in range(len(rows) - 1, -1, -1):
        row = rows[i]
        if check_column < len(row) and row[check_column] not in ("", None):
            return i + 1
    return 0


def read_sheet_rows(path: Path, sheet_name: str) -> list[list[Any]]:
    """Read sheet_name from the workbook at path as a list of rows.

    Raises:
        SheetNotFoundError: the workbook has no sheet called sheet_name
    """
    with pd.ExcelFile(path) as xls:
        names = [str(n) for n in xls.sheet_names]
        if sheet_name not in names:
            raise SheetNotFoundError(f"sheet '{sheet_name}' not found in {path.name}")
        # dtype=object: 整数セルを float 化させない (ユニット番号の桁抽出に影響)
        df = xls.parse(sheet_name, header=None, dtype=object, keep_default_na=False)

    rows = [[_clean_cell(v) for v in raw] for raw in df.itertuples(index=False, name=None)]
    return rows[:find_last_data_row(rows)]

from __future__ import annotations

import re
from typing import Any

from ..models.revision_key import Category, RevisionKey
from ..models.row_data import NormalizedSheet

"""Filename-derived key extraction.

Filenames look like `20240105_J0123456789_Purchased_02unit.xlsx`: a leading
YYYYMMDD revision date, a project id, a `_<category>_` marker and optionally
`<n>unit`. Everything here is pure.
"""

__all__ = [
    "build_filename_token",
    "build_revision_key",
    "classify_category",
    "extract_project_id",
    "extract_revision_date",
    "extract_unit_digits",
    "token_sort_value",
]

PROJECT_ID_PATTERN = re.compile(r"J\d{10}")
CATEGORY_PATTERN = re.compile(r"_(Purchased|Fabricated|Electrical|購入|製作|電気)_")
UNIT_PATTERN = re.compile(r"(\d+)unit", re.IGNORECASE)
NON_DIGITS = re.compile(r"\D")

DATE_PREFIX_LENGTH = 8  # YYYYMMDD
UNIT_TOKEN_WIDTH = 2
UNIT_COLUMN = 1  # 正規化後 (カテゴリ列付加後) のユニット列


def extract_project_id(filename: str) -> str:
    match = PROJECT_ID_PATTERN.search(filename)
    return match.group(0) if match else ""


def extract_revision_date(filename: str) -> int | None:
    """Leading YYYYMMDD as an int, or None when the prefix is not 8 digits."""
    prefix = filename[:DATE_PREFIX_LENGTH]
    if len(prefix) != DATE_PREFIX_LENGTH or not (prefix.isascii() and prefix.isdigit()):
        return None
    return int(prefix)


def classify_category(filename: str) -> Category:
    match = CATEGORY_PATTERN.search(filename)
    return Category.from_marker(match.group(1)) if match else Category.UNKNOWN


def build_filename_token(filename: str, category: Category) -> str:
    """Category letter plus an optional zero-padded unit number.

    >>> build_filename_token("20240105_J0123456789_Purchased_2unit.xlsx", Category.PURCHASED)
    'P02'
    >>> build_filename_token("20240105_J0123456789_Electrical_3unit.xlsx", Category.ELECTRICAL)
    'E'
    """
    prefix = category.token_prefix
    if not prefix or category is Category.ELECTRICAL:
        return prefix
    match = UNIT_PATTERN.search(filename)
    if match is None:
        return prefix
    return f"{prefix}{match.group(1).zfill(UNIT_TOKEN_WIDTH)}"


def token_sort_value(token: str) -> int:
    digits = NON_DIGITS.sub("", token)
    return int(digits) if digits else 0


def _digits_of(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return NON_DIGITS.sub("", str(value).strip())


def extract_unit_digits(rows: list[Any], column: int = UNIT_COLUMN) -> str:
    """Digits of the first non-empty unit cell among the data rows.

    rows holds the data rows only (NormalizedRow instances or plain value
    sequences); the header must already be excluded.
    """
    for row in rows:
        values = getattr(row, "values", row)
        if column < len(values) and values[column] not in ("", None):
            return _digits_of(values[column])
    return ""


def build_revision_key(filename: str, sheet: NormalizedSheet) -> RevisionKey:
    return RevisionKey(
        project_id=extract_project_id(filename),
        revision_date=extract_revision_date(filename),
        category=sheet.category,
        unit_digits=extract_unit_digits(sheet.rows),
    )

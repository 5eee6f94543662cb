from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from ..models.config_models import MergeConfig
from ..models.revision_key import Category
from ..models.row_data import NormalizedRow, NormalizedSheet

"""Row normalization for one parts-list document.

Steps, in order:
1. Drop column 0 (an index column added by the template), keep 9 columns
2. Drop data rows whose stock-status field equals the exclusion marker
3. Blank the fabrication-only field for Purchased / Electrical lists
4. Prepend the category column
5. Reformat date cells at columns 8 and 9 to YYYY/MM/DD
The header row is never filtered.
"""

__all__ = [
    "EmptySheetError",
    "format_date_cell",
    "normalize_rows",
]

logger = logging.getLogger(__name__)

DROP_COLUMN = 0
KEPT_COLUMN_COUNT = 9
STOCK_STATUS_COLUMN = 2  # 列削除後のインデックス
FABRICATION_ONLY_COLUMN = 7  # 列削除後のインデックス (製作品のみ有効)
DATE_COLUMNS = (8, 9)  # カテゴリ列付加後のインデックス
DATE_FORMAT = "%Y/%m/%d"

BLANKED_CATEGORIES = (Category.PURCHASED, Category.ELECTRICAL)


class EmptySheetError(Exception):
    """Raised when the target sheet holds no rows at all."""


def _prune(row: list[Any]) -> list[Any]:
    kept = list(row[DROP_COLUMN + 1:DROP_COLUMN + 1 + KEPT_COLUMN_COUNT])
    if len(kept) < KEPT_COLUMN_COUNT:
        kept.extend([""] * (KEPT_COLUMN_COUNT - len(kept)))
    return kept


def format_date_cell(value: Any, tz: ZoneInfo) -> Any:
    """Format date values as YYYY/MM/DD; any other value passes through.

    Naive datetimes are taken as wall-clock time already in tz.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.strftime(DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    return value


def normalize_rows(
    document_name: str,
    raw_rows: list[list[Any]],
    category: Category,
    config: MergeConfig,
    source: str | None = None,
) -> NormalizedSheet:
    """Transform raw sheet rows into the canonical 10-column layout.

    source is the document identity stamped on every row (defaults to
    document_name); it must be unique within a run.

    Raises:
        EmptySheetError: raw_rows is empty (not even a header)
    """
    if not raw_rows:
        raise EmptySheetError(f"no data in sheet '{config.target_sheet_name}' of {document_name}")

    pruned = [_prune(row) for row in raw_rows]
    header, body = pruned[0], pruned[1:]

    marker = config.exclude_stock_status
    kept = [row for row in body if row[STOCK_STATUS_COLUMN] != marker]
    if len(kept) != len(body):
        logger.debug("%s: dropped %d out-of-stock rows", document_name, len(body) - len(kept))

    if category in BLANKED_CATEGORIES:
        for row in kept:
            row[FABRICATION_ONLY_COLUMN] = ""

    owner = source or document_name
    tz = ZoneInfo(config.timezone)
    rows: list[NormalizedRow] = []
    for row in kept:
        values = [category.label, *row]
        for col in DATE_COLUMNS:
            values[col] = format_date_cell(values[col], tz)
        rows.append(NormalizedRow(values=tuple(values), source=owner))

    return NormalizedSheet(
        document_name=document_name,
        category=category,
        header=(config.category_column_title, *header),
        rows=rows,
        source=owner,
    )

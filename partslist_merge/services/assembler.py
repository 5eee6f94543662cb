from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from ..models.config_models import MergeConfig
from ..models.processing_result import AggregationResult, AssembledOutput, SortKey
from ..models.revision_key import Category

"""Output assembly.

Turns the pipeline's accumulators into what the presentation layer consumes:
- header from the configured column titles (A..M)
- data rows sorted by SORT_CONTRACT, then numbered from 1 with two blank
  leading columns reserved for the reviewers' checkboxes
- the output name `<project>[_<tokens>]_<YYYYMMDD-HHMM>`
"""

__all__ = [
    "SORT_CONTRACT",
    "assemble",
    "build_header",
    "build_output_name",
    "format_timestamp",
    "number_rows",
    "sort_data_rows",
]

LEADING_COLUMNS = 3  # check, check, sequence number
TIMESTAMP_FORMAT = "%Y%m%d-%H%M"

# 出力列 (1 始まり): D=カテゴリ, E=ユニット, K=手配先, F=部品番号
SORT_CONTRACT: tuple[SortKey, ...] = (
    SortKey(column=4, ascending=True, kind="category"),
    SortKey(column=5, ascending=True, kind="numeric"),
    SortKey(column=11, ascending=True, kind="lexical"),
    SortKey(column=6, ascending=True, kind="lexical"),
)

NAMED_CATEGORIES = (Category.PURCHASED, Category.FABRICATED)


def _category_key(value: Any) -> int:
    return Category.from_label(value).rank


def _numeric_key(value: Any) -> tuple[int, Any]:
    # 数値を先、数値化できない値 (空欄含む) を後ろに並べる
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, float(value))
    try:
        return (0, float(str(value).strip()))
    except ValueError:
        return (1, str(value))


def _lexical_key(value: Any) -> str:
    return "" if value is None else str(value)


_KEY_FUNCS = {
    "category": _category_key,
    "numeric": _numeric_key,
    "lexical": _lexical_key,
}


def _normalized_index(output_column: int) -> int:
    return output_column - 1 - LEADING_COLUMNS


def sort_data_rows(
    rows: Sequence[Sequence[Any]], sort_keys: Sequence[SortKey] = SORT_CONTRACT
) -> list[Sequence[Any]]:
    """Stable multi-key sort of normalized data rows (header excluded)."""
    ordered = list(rows)
    # 最下位キーから順に安定ソート
    for sort_key in reversed(sort_keys):
        idx = _normalized_index(sort_key.column)
        func = _KEY_FUNCS[sort_key.kind]
        ordered.sort(key=lambda row: func(row[idx]), reverse=not sort_key.ascending)
    return ordered


def number_rows(rows: Sequence[Sequence[Any]]) -> list[list[Any]]:
    return [["", "", index, *row] for index, row in enumerate(rows, start=1)]


def format_timestamp(now: datetime | None, timezone: str) -> str:
    tz = ZoneInfo(timezone)
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    else:
        now = now.astimezone(tz)
    return now.strftime(TIMESTAMP_FORMAT)


def build_output_name(
    project_id: str, tokens_by_category: Mapping[Category, Sequence[str]], timestamp: str
) -> str:
    """Assemble the output name.

    >>> build_output_name("J0000000001", {Category.PURCHASED: ["P01", "P03"]}, "20240101-0000")
    'J0000000001_P01-03_20240101-0000'
    """
    parts = []
    for category in NAMED_CATEGORIES:
        tokens = tokens_by_category.get(category) or []
        if tokens:
            parts.append(category.token_prefix + "-".join(t[1:] for t in tokens))
    if tokens_by_category.get(Category.ELECTRICAL):
        parts.append(Category.ELECTRICAL.token_prefix)

    base = "_".join(parts)
    middle = f"_{base}" if base else ""
    return f"{project_id}{middle}_{timestamp}"


def build_header(config: MergeConfig) -> list[str]:
    return config.header_titles


def assemble(result: AggregationResult, config: MergeConfig, now: datetime | None = None) -> AssembledOutput:
    dataset = result.dataset
    ordered = sort_data_rows([row.values for row in dataset.data_rows])
    rows: list[list[Any]] = [build_header(config), *number_rows(ordered)]

    project_id = dataset.project_ids[0] if dataset.project_ids else ""
    name = build_output_name(
        project_id, dataset.filename_tokens, format_timestamp(now, config.timezone)
    )
    return AssembledOutput(name=name, rows=rows, sort_keys=SORT_CONTRACT)

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .revision_key import Category
from .row_data import NormalizedRow

"""MergedDataset accumulator.

Owned by exactly one pipeline run. DeduplicationEngine is the only writer of
header / data_rows / accepted_by_key / filename_tokens; the pipeline feeds the
summary collections.
"""

__all__ = [
    "AcceptedDocument",
    "MergedDataset",
]


@dataclass(frozen=True)
class AcceptedDocument:
    """Registry entry for the current winner of one dedup key."""
    name: str
    revision_date: int | None
    source: str = ""  # row provenance of the winner, "" = name

    @property
    def owner(self) -> str:
        return self.source or self.name


def _append_unique(values: list[str], value: str) -> None:
    if value not in values:
        values.append(value)


@dataclass
class MergedDataset:
    header: tuple[Any, ...] | None = None
    data_rows: list[NormalizedRow] = field(default_factory=list)
    accepted_by_key: dict[str, AcceptedDocument] = field(default_factory=dict)
    # 初出順を保持する集合 (縮小しない)
    project_ids: list[str] = field(default_factory=list)
    unit_numbers: list[str] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    filename_tokens: dict[Category, list[str]] = field(
        default_factory=lambda: {
            Category.PURCHASED: [],
            Category.FABRICATED: [],
            Category.ELECTRICAL: [],
        }
    )

    @property
    def rows(self) -> list[tuple[Any, ...]]:
        """Header (when present) followed by every data row's values."""
        body = [row.values for row in self.data_rows]
        if self.header is None:
            return body
        return [self.header, *body]

    @property
    def data_row_count(self) -> int:
        return len(self.data_rows)

    def note_project_id(self, project_id: str) -> None:
        if project_id:
            _append_unique(self.project_ids, project_id)

    def note_unit_number(self, unit: str) -> None:
        if unit:
            _append_unique(self.unit_numbers, unit)

    def note_category(self, category: Category) -> None:
        if category is not Category.UNKNOWN and category not in self.categories:
            self.categories.append(category)

    def append_rows(self, rows: list[NormalizedRow]) -> None:
        self.data_rows.extend(rows)

    def remove_rows_from(self, source: str) -> int:
        """Drop every data row whose provenance equals source. Returns the count removed."""
        before = len(self.data_rows)
        self.data_rows = [row for row in self.data_rows if row.source != source]
        return before - len(self.data_rows)

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .revision_key import Category

"""NormalizedRow / NormalizedSheet models.

A NormalizedRow is one data row after RowNormalizer: the category label
followed by the nine pruned fields. The owning document identity (folder and
file name) travels with the row as provenance so supersession can drop a
document's rows by exact match.
Provenance is never written to the output.
"""

__all__ = [
    "NORMALIZED_WIDTH",
    "NormalizedRow",
    "NormalizedSheet",
]

NORMALIZED_WIDTH = 10  # category + 9 fields


@dataclass(frozen=True)
class NormalizedRow:
    values: tuple[Any, ...]  # category label + 9 pruned fields
    source: str  # owning document identity (provenance), unique per run

    @property
    def category_label(self) -> Any:
        return self.values[0]

    @property
    def unit(self) -> Any:
        return self.values[1]


@dataclass(frozen=True)
class NormalizedSheet:
    """RowNormalizer output for one document."""
    document_name: str
    category: Category
    header: tuple[Any, ...]
    rows: list[NormalizedRow] = field(default_factory=list)
    source: str = ""  # document identity, "" = document_name

    @property
    def owner(self) -> str:
        return self.source or self.document_name

    def __len__(self) -> int:
        return len(self.rows)

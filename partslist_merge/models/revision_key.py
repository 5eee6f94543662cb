from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Category enum and RevisionKey model.

A RevisionKey is derived per document from its filename and first data rows.
Two documents with the same dedup_key are revisions of the same logical list.
"""

__all__ = [
    "Category",
    "RevisionKey",
]


class Category(Enum):
    """How a listed part is sourced.

    Declaration order is the fixed sort order used for output rows and for
    output-name assembly. UNKNOWN always sorts last.
    """
    PURCHASED = "Purchased"
    FABRICATED = "Fabricated"
    ELECTRICAL = "Electrical"
    UNKNOWN = ""

    @property
    def label(self) -> str:
        """Literal written into the category column of every data row."""
        return self.value

    @property
    def token_prefix(self) -> str:
        return _TOKEN_PREFIXES[self]

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @classmethod
    def from_marker(cls, marker: str) -> Category:
        """Resolve a filename marker (English or Japanese) to a Category."""
        return _MARKERS.get(marker, cls.UNKNOWN)

    @classmethod
    def from_label(cls, label: object) -> Category:
        for category in cls:
            if category.value == label:
                return category
        return cls.UNKNOWN


_TOKEN_PREFIXES = {
    Category.PURCHASED: "P",
    Category.FABRICATED: "F",
    Category.ELECTRICAL: "E",
    Category.UNKNOWN: "",
}

_RANKS = {category: rank for rank, category in enumerate(Category)}

# 旧ファイル名 (購入/製作/電気) も受け付ける
_MARKERS = {
    "Purchased": Category.PURCHASED,
    "Fabricated": Category.FABRICATED,
    "Electrical": Category.ELECTRICAL,
    "購入": Category.PURCHASED,
    "製作": Category.FABRICATED,
    "電気": Category.ELECTRICAL,
}


@dataclass(frozen=True)
class RevisionKey:
    """Revision metadata for one document."""
    project_id: str  # J + 10 digits, "" if absent
    revision_date: int | None  # YYYYMMDD, None when the prefix is not a date
    category: Category
    unit_digits: str  # digits of the first non-empty unit cell

    @property
    def dedup_key(self) -> str:
        return f"{self.project_id}_{self.category.label}_{self.unit_digits}"

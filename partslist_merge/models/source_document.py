from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""Document-store facing models.

DocumentGroup is one source folder; SourceDocument is one spreadsheet file in
it. Both are produced by a DocumentStore and never mutated.
"""

__all__ = [
    "DocumentGroup",
    "SourceDocument",
]

SUPPORTED_EXTENSIONS: tuple[str, ...] = (".xls", ".xlsx", ".xlsm")


@dataclass(frozen=True)
class DocumentGroup:
    group_id: Any  # Store-specific folder handle
    name: str


@dataclass(frozen=True)
class SourceDocument:
    """One input file. The name carries the embedded business metadata."""
    name: str
    handle: Any  # Store-specific file handle
    group_name: str = ""

    @property
    def identity(self) -> str:
        """Folder-qualified name; unique within one store listing."""
        return f"{self.group_name}/{self.name}" if self.group_name else self.name

    @property
    def has_supported_extension(self) -> bool:
        return self.name.lower().endswith(SUPPORTED_EXTENSIONS)

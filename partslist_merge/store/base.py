from __future__ import annotations

from typing import Any, Protocol

from ..models.source_document import DocumentGroup, SourceDocument

"""Collaborator interfaces consumed by the merge pipeline.

DocumentStore enumerates folders and documents and turns a native
spreadsheet into cell data; ResultSink persists the assembled output. The
pipeline only depends on these protocols.
"""

__all__ = [
    "DocumentStore",
    "ResultSink",
    "StoreError",
]


class StoreError(Exception):
    """Raised when the store cannot list or convert something."""


class DocumentStore(Protocol):
    def list_subgroups(self, root_id: Any) -> list[DocumentGroup]:
        ...

    def list_documents(self, group_id: Any) -> list[SourceDocument]:
        ...

    def convert(self, handle: Any) -> Any:
        """Create a temporary converted copy and return its handle."""
        ...

    def read_tabular(self, handle: Any, sheet_name: str) -> list[list[Any]]:
        """Return the sheet's cells; raise SheetNotFoundError when absent."""
        ...

    def discard_temporary(self, handle: Any) -> None:
        ...


class ResultSink(Protocol):
    def publish(
        self,
        name: str,
        rows: list[list[Any]],
        column_widths: dict[str, int] | None = None,
        row_height: int | None = None,
    ) -> str:
        """Persist rows under name and return a locator (path or URL)."""
        ...

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any

from ..excel.reader import read_sheet_rows
from ..models.source_document import DocumentGroup, SourceDocument
from .base import StoreError

"""Local filesystem DocumentStore.

Folders are directories, documents are the files inside them. Listings are
sorted by name so repeated runs see documents in the same order. Reading
goes through a temporary copy so a workbook open in another program is never
touched; the copy is removed by discard_temporary().
"""

__all__ = [
    "LocalDocumentStore",
]

logger = logging.getLogger(__name__)

TEMP_PREFIX = "partslist-"


class LocalDocumentStore:
    def __init__(self, temp_dir: Path | None = None) -> None:
        self.temp_dir = temp_dir

    def list_subgroups(self, root_id: Any) -> list[DocumentGroup]:
        root = Path(root_id)
        if not root.is_dir():
            raise StoreError(f"folder not found: {root}")
        try:
            return [
                DocumentGroup(group_id=p, name=p.name)
                for p in sorted(root.iterdir(), key=lambda p: p.name)
                if p.is_dir()
            ]
        except OSError as e:
            raise StoreError(f"error reading folder {root}: {e}") from e

    def list_documents(self, group_id: Any) -> list[SourceDocument]:
        group = Path(group_id)
        try:
            return [
                SourceDocument(name=p.name, handle=p, group_name=group.name)
                for p in sorted(group.iterdir(), key=lambda p: p.name)
                if p.is_file()
            ]
        except OSError as e:
            raise StoreError(f"error reading folder {group}: {e}") from e

    def convert(self, handle: Any) -> Path:
        src = Path(handle)
        workdir = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX, dir=self.temp_dir))
        dest = workdir / src.name
        try:
            shutil.copy2(src, dest)
        except OSError as e:
            shutil.rmtree(workdir, ignore_errors=True)
            raise StoreError(f"cannot copy {src.name}: {e}") from e
        logger.debug("converted copy %s -> %s", src, dest)
        return dest

    def read_tabular(self, handle: Any, sheet_name: str) -> list[list[Any]]:
        return read_sheet_rows(Path(handle), sheet_name)

    def discard_temporary(self, handle: Any) -> None:
        path = Path(handle)
        path.unlink(missing_ok=True)
        if path.parent.name.startswith(TEMP_PREFIX):
            path.parent.rmdir()

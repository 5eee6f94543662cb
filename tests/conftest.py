# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from partslist_merge.excel.reader import SheetNotFoundError
from partslist_merge.logging.init import reset_logging
from partslist_merge.models.config_models import MergeConfig
from partslist_merge.models.source_document import DocumentGroup, SourceDocument
from partslist_merge.store.base import StoreError

SHEET = "Parts"

RAW_HEADER = [
    "No", "Unit", "Part No", "Stock", "Drawing", "Name",
    "Processing", "Supplier", "Due (fab)", "Due", "Note", "Extra",
]

COLUMN_NAMES = {
    "A": "Checked", "B": "Ordered", "C": "No.", "D": "Category", "E": "Unit",
    "F": "Part No.", "G": "Stock status", "H": "Drawing No.", "I": "Name",
    "J": "Processing", "K": "Supplier", "L": "Due (fab)", "M": "Due",
}


def raw_row(
    unit: Any,
    part: Any,
    stock: str = "",
    supplier: str = "MISUMI",
    due_fab: Any = "",
    due: Any = "",
    name: str = "bolt",
) -> list[Any]:
    """One 12-column raw data row in the parts-list template layout."""
    return [0, unit, part, stock, "DWG-1", name, "", supplier, due_fab, due, "note", "x"]


def raw_sheet(*rows: list[Any]) -> list[list[Any]]:
    return [list(RAW_HEADER), *[list(r) for r in rows]]


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("PARTSLIST_ROOT_DIR", raising=False)
        monkeypatch.delenv("PARTSLIST_OUTPUT_DIR", raising=False)
        yield p


@pytest.fixture()
def merge_config() -> MergeConfig:
    return MergeConfig(
        target_sheet_name=SHEET,
        column_names=dict(COLUMN_NAMES),
        column_widths={"A": 40, "I": 240},
        row_height=21,
        timezone="Asia/Tokyo",
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """TARGET_SHEET_NAME: Parts
TIMEZONE: Asia/Tokyo
ROOT_FOLDER_ID: ./data
OUTPUT_FOLDER_ID: ./output
COLUMN_NAMES:
  A: Checked
  B: Ordered
  C: "No."
  D: Category
  E: Unit
  F: Part No.
  G: Stock status
  H: Drawing No.
  I: Name
  J: Processing
  K: Supplier
  L: Due (fab)
  M: Due
COLUMN_WIDTHS:
  A: 40
  I: 240
ROW_HEIGHT: 21
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "merge.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_workbook() -> Callable[..., Path]:
    """Write a real workbook with pandas (openpyxl engine)."""
    def _make(path: Path, sheets: dict[str, list[list[Any]]]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, rows in sheets.items():
                pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
        return path
    return _make


class FakeStore:
    """In-memory DocumentStore.

    groups maps a group name to {document name: rows | Exception | None}.
    An Exception value is raised from read_tabular(), None means the target
    sheet is missing. parents maps extra folder ids to their child folder
    names (used for project folder selection).
    """

    def __init__(
        self,
        groups: dict[str, dict[str, Any]],
        root: str = "root",
        parents: dict[str, list[str]] | None = None,
    ) -> None:
        self.root = root
        self.groups = groups
        self.parents = parents or {}
        self.fail_list: set[str] = set()
        self.converted: list[str] = []
        self.discarded: list[str] = []
        self.fail_convert: set[str] = set()
        self.fail_discard: set[str] = set()

    def list_subgroups(self, root_id: Any) -> list[DocumentGroup]:
        if root_id in self.parents:
            return [DocumentGroup(group_id=name, name=name) for name in self.parents[root_id]]
        if root_id != self.root:
            raise StoreError(f"folder not found: {root_id}")
        return [DocumentGroup(group_id=name, name=name) for name in self.groups]

    def list_documents(self, group_id: Any) -> list[SourceDocument]:
        if group_id in self.fail_list:
            raise StoreError(f"cannot list {group_id}")
        return [
            SourceDocument(name=name, handle=(group_id, name), group_name=group_id)
            for name in self.groups[group_id]
        ]

    def convert(self, handle: Any) -> Any:
        _, name = handle
        if name in self.fail_convert:
            raise StoreError(f"cannot convert {name}")
        self.converted.append(name)
        return handle

    def read_tabular(self, handle: Any, sheet_name: str) -> list[list[Any]]:
        group, name = handle
        value = self.groups[group][name]
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise SheetNotFoundError(f"sheet '{sheet_name}' not found in {name}")
        return [list(r) for r in value]

    def discard_temporary(self, handle: Any) -> None:
        _, name = handle
        if name in self.fail_discard:
            raise OSError(f"cannot delete {name}")
        self.discarded.append(name)


class RecordingSink:
    def __init__(self) -> None:
        self.published: list[tuple[str, list[list[Any]]]] = []

    def publish(self, name, rows, column_widths=None, row_height=None) -> str:
        self.published.append((name, rows))
        return f"memory://{name}"


@pytest.fixture()
def recording_sink() -> RecordingSink:
    return RecordingSink()

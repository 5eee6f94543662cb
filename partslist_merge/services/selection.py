from __future__ import annotations

from typing import Any

from ..models.config_models import MergeConfig
from ..models.source_document import DocumentGroup
from ..store.base import DocumentStore, StoreError
from .errors import InputSelectionError

"""Root-folder and group-folder selection.

The operator picks one project folder (by name) under the configured parent
folder; the pipeline then works on the "parts list" subfolders of that
project folder.
"""

__all__ = [
    "filter_groups",
    "list_selectable_folders",
    "select_root_folder",
]


def _is_reserved(name: str, config: MergeConfig) -> bool:
    return name.startswith(config.reserved_prefix)


def filter_groups(groups: list[DocumentGroup], config: MergeConfig) -> list[DocumentGroup]:
    """Keep folders that are not reserved and carry the parts-list marker."""
    return [
        g for g in groups
        if not _is_reserved(g.name, config) and config.group_name_marker in g.name
    ]


def list_selectable_folders(store: DocumentStore, parent_id: Any, config: MergeConfig) -> list[DocumentGroup]:
    if parent_id is None:
        raise InputSelectionError("no parent folder configured (ROOT_FOLDER_ID)")
    try:
        folders = store.list_subgroups(parent_id)
    except StoreError as e:
        raise InputSelectionError(f"parent folder not found: {e}") from e
    return [f for f in folders if not _is_reserved(f.name, config)]


def select_root_folder(
    store: DocumentStore, parent_id: Any, folder_name: str | None, config: MergeConfig
) -> Any:
    """Resolve a selectable folder name to its folder id.

    Raises:
        InputSelectionError: no name given, or no selectable folder has that name
    """
    if not folder_name:
        raise InputSelectionError("no folder selected")
    for folder in list_selectable_folders(store, parent_id, config):
        if folder.name == folder_name:
            return folder.group_id
    raise InputSelectionError(f"folder not found: {folder_name}")

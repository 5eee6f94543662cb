from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the parts-list merge tool.

MergeConfig is built once at process start (see partslist_merge.config.loader)
and passed explicitly to every component. Nothing reads settings from module
globals.
"""

__all__ = [
    "OUTPUT_COLUMN_LETTERS",
    "MergeConfig",
]

# 出力列 A..M (A,B: チェック欄 / C: 連番 / D: カテゴリ / E..M: 正規化列)
OUTPUT_COLUMN_LETTERS: tuple[str, ...] = tuple("ABCDEFGHIJKLM")


@dataclass(frozen=True)
class MergeConfig:
    """Root configuration object for one merge run.

    Column titles and widths are keyed by output column letter. Widths and
    row height are passed through to the result sink untouched.
    """
    target_sheet_name: str  # Sheet read from each document
    column_names: dict[str, str]  # Column letter -> header title
    column_widths: dict[str, int] = field(default_factory=dict)  # passthrough
    row_height: int | None = None  # passthrough
    template_spreadsheet_id: str | None = None  # Template copied by the sink
    output_folder_id: str | None = None  # Destination for the sink
    root_folder_id: str | None = None  # Parent of the selectable project folders
    timezone: str = "UTC"  # Used for date reformatting and the output timestamp
    group_name_marker: str = "parts list"  # Group folders must contain this
    reserved_prefix: str = "@"  # Folders starting with this are ignored
    exclude_stock_status: str = "no in-house stock"

    @property
    def category_column_title(self) -> str:
        """Header title of the prepended category column (output column D)."""
        return self.column_names.get("D", "")

    @property
    def header_titles(self) -> list[str]:
        return [self.column_names.get(letter, "") for letter in OUTPUT_COLUMN_LETTERS]

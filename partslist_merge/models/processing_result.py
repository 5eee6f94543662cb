from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .merged_dataset import MergedDataset

"""Processing result models for the parts-list merge tool.

DocumentOutcome / FileStat describe what happened to one document,
AggregationResult is the pipeline's output, AssembledOutput is what the
assembler hands to the result sink, and RunResult is the structured value
returned to callers of combine_parts_lists (never a raw exception).
"""


class DocumentOutcome(Enum):
    """Per-document result of one pipeline pass.

    - ACCEPTED_NEW: first document seen for its dedup key
    - ACCEPTED_SUPERSEDES: replaced an older revision of the same key
    - REJECTED_STALE: an equal-or-newer revision was already accepted
    - SKIPPED: unusable document (missing sheet, empty data, read failure)
    """
    ACCEPTED_NEW = "accepted_new"
    ACCEPTED_SUPERSEDES = "accepted_supersedes"
    REJECTED_STALE = "rejected_stale"
    SKIPPED = "skipped"

    @property
    def admitted(self) -> bool:
        return self in (DocumentOutcome.ACCEPTED_NEW, DocumentOutcome.ACCEPTED_SUPERSEDES)


@dataclass(frozen=True)
class FileStat:
    """Per-document processing statistics."""
    file_name: str  # ファイル名
    group: str  # フォルダ名
    outcome: DocumentOutcome
    rows: int  # 正規化後データ行数
    elapsed_seconds: float


@dataclass(frozen=True)
class AggregationResult:
    """Final accumulators of one AggregationPipeline run."""
    dataset: MergedDataset
    processed_files: int  # admitted documents (new + superseding)
    skipped_files: int
    stale_files: int
    group_count: int
    file_stats: list[FileStat] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return self.dataset.data_row_count


@dataclass(frozen=True)
class SortKey:
    """One entry of the ordering contract handed to the presentation layer."""
    column: int  # 1-based output column
    ascending: bool
    kind: str  # "category" | "numeric" | "lexical"


@dataclass(frozen=True)
class AssembledOutput:
    name: str
    rows: list[list[Any]]  # header + numbered data rows
    sort_keys: tuple[SortKey, ...]

    @property
    def data_row_count(self) -> int:
        return max(len(self.rows) - 1, 0)


@dataclass(frozen=True)
class RunResult:
    success: bool
    url: str | None = None
    processed_files: int = 0
    total_rows: int = 0
    error: str | None = None
    name: str | None = None  # output name, not part of to_dict()

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "url": self.url,
            "processedFiles": self.processed_files,
            "totalRows": self.total_rows,
        }

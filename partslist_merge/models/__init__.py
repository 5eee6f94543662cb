"""Domain models for the parts-list merge tool.

This package contains the dataclasses shared by the merge pipeline: the run
configuration, document-store records, revision keys, normalized rows, the
merged-dataset accumulator and the result types.
"""

from .config_models import MergeConfig
from .error_record import ErrorRecord
from .merged_dataset import AcceptedDocument, MergedDataset
from .processing_result import (
    AggregationResult,
    AssembledOutput,
    DocumentOutcome,
    FileStat,
    RunResult,
    SortKey,
)
from .revision_key import Category, RevisionKey
from .row_data import NormalizedRow, NormalizedSheet
from .source_document import DocumentGroup, SourceDocument

__all__ = [
    # Configuration models
    "MergeConfig",
    # Store models
    "DocumentGroup",
    "SourceDocument",
    # Processing models
    "AcceptedDocument",
    "Category",
    "MergedDataset",
    "NormalizedRow",
    "NormalizedSheet",
    "RevisionKey",
    # Result models
    "AggregationResult",
    "AssembledOutput",
    "DocumentOutcome",
    "ErrorRecord",
    "FileStat",
    "RunResult",
    "SortKey",
]

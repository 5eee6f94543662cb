from __future__ import annotations

"""Fatal error hierarchy for a merge run.

Per-document problems are not listed here: they are logged and the document
is skipped. Everything below aborts the run and is turned into a failed
RunResult by combine_parts_lists().
"""

__all__ = [
    "EmptyResultError",
    "InputSelectionError",
    "NoDocumentsProcessedError",
    "NoMatchingGroupsError",
    "ProcessingError",
]


class ProcessingError(Exception):
    """Base exception for fatal processing errors."""


class InputSelectionError(ProcessingError):
    """No root folder chosen, or the chosen folder does not exist."""


class NoMatchingGroupsError(ProcessingError):
    """No subfolder passed the parts-list folder filter."""


class NoDocumentsProcessedError(ProcessingError):
    """Every document was skipped."""


class EmptyResultError(ProcessingError):
    """Documents were processed but no data rows survived."""

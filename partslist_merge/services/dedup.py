from __future__ import annotations

import logging

from ..models.merged_dataset import AcceptedDocument, MergedDataset
from ..models.processing_result import DocumentOutcome
from ..models.revision_key import RevisionKey
from ..models.row_data import NormalizedSheet
from .key_extractor import build_filename_token

"""Recency-based deduplication.

DeduplicationEngine owns the admit / supersede / reject transitions on a
MergedDataset. Only one document per dedup key survives:

- a newer revision date wins
- a document whose name has no parseable date is older than any dated one
- equal dates fall back to the document name, lexically greater wins, so
  the result does not depend on the order the store lists documents in
- the same name seen twice is rejected (admitting is idempotent)
"""

__all__ = [
    "DeduplicationEngine",
    "is_newer",
]

logger = logging.getLogger(__name__)

_UNDATED = -1


def is_newer(name: str, revision_date: int | None, existing: AcceptedDocument) -> bool:
    """True when (name, revision_date) should replace existing."""
    incoming = _UNDATED if revision_date is None else revision_date
    current = _UNDATED if existing.revision_date is None else existing.revision_date
    if incoming != current:
        return incoming > current
    return name > existing.name


class DeduplicationEngine:
    def __init__(self, dataset: MergedDataset) -> None:
        self.dataset = dataset

    def admit(self, sheet: NormalizedSheet, key: RevisionKey) -> DocumentOutcome:
        """Offer one normalized document to the dataset."""
        existing = self.dataset.accepted_by_key.get(key.dedup_key)
        if existing is None:
            return self._accept_new(sheet, key)
        if is_newer(sheet.document_name, key.revision_date, existing):
            return self._supersede(sheet, key, existing)
        return self._reject(sheet, key, existing)

    def _accept_new(self, sheet: NormalizedSheet, key: RevisionKey) -> DocumentOutcome:
        ds = self.dataset
        ds.accepted_by_key[key.dedup_key] = AcceptedDocument(sheet.document_name, key.revision_date, sheet.owner)
        if ds.header is None:
            ds.header = sheet.header
        ds.append_rows(sheet.rows)

        token = build_filename_token(sheet.document_name, sheet.category)
        if token:
            ds.filename_tokens.setdefault(sheet.category, []).append(token)

        logger.debug("accepted %s key=%s rows=%d", sheet.document_name, key.dedup_key, len(sheet))
        return DocumentOutcome.ACCEPTED_NEW

    def _supersede(
        self, sheet: NormalizedSheet, key: RevisionKey, existing: AcceptedDocument
    ) -> DocumentOutcome:
        ds = self.dataset
        ds.accepted_by_key[key.dedup_key] = AcceptedDocument(sheet.document_name, key.revision_date, sheet.owner)
        removed = ds.remove_rows_from(existing.owner)
        ds.append_rows(sheet.rows)
        logger.info(
            "%s supersedes %s (key=%s, removed=%d, added=%d)",
            sheet.document_name,
            existing.name,
            key.dedup_key,
            removed,
            len(sheet),
        )
        return DocumentOutcome.ACCEPTED_SUPERSEDES

    def _reject(
        self, sheet: NormalizedSheet, key: RevisionKey, existing: AcceptedDocument
    ) -> DocumentOutcome:
        logger.info(
            "%s skipped: %s is the same or a newer revision (key=%s)",
            sheet.document_name,
            existing.name,
            key.dedup_key,
        )
        return DocumentOutcome.REJECTED_STALE

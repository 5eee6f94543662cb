from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from ..excel.reader import SheetNotFoundError
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import MergeConfig
from ..models.merged_dataset import MergedDataset
from ..models.processing_result import AggregationResult, DocumentOutcome, FileStat, RunResult
from ..models.source_document import SourceDocument
from ..store.base import DocumentStore, ResultSink, StoreError
from .assembler import assemble
from .dedup import DeduplicationEngine
from .errors import (
    EmptyResultError,
    InputSelectionError,
    NoDocumentsProcessedError,
    NoMatchingGroupsError,
    ProcessingError,
)
from .key_extractor import (
    build_revision_key,
    classify_category,
    extract_project_id,
    token_sort_value,
)
from .normalizer import EmptySheetError, normalize_rows
from .progress import ProgressTracker
from .selection import filter_groups, select_root_folder

"""Service orchestration for the parts-list merge.

process_all() walks every parts-list folder under the selected project
folder and feeds each spreadsheet through
key extraction -> normalization -> deduplication, strictly one document at a
time. combine_parts_lists() wraps a full run (selection, aggregation,
assembly, publishing) and converts every fatal error into a RunResult.
"""

__all__ = [
    "ProcessingError",
    "combine_parts_lists",
    "process_all",
]

logger = logging.getLogger(__name__)


@contextmanager
def _converted_copy(store: DocumentStore, document: SourceDocument) -> Iterator[Any]:
    """Temporary converted copy of document, released on every path."""
    handle = store.convert(document.handle)
    try:
        yield handle
    finally:
        try:
            store.discard_temporary(handle)
        except Exception as e:
            # 一時ファイル削除失敗は処理結果に影響させない
            logger.error("failed to delete temporary copy of %s: %s", document.name, e)


def _skip(
    document: SourceDocument,
    error_log: ErrorLogBuffer,
    error_type: str,
    message: str,
    start_time: datetime,
) -> FileStat:
    logger.warning("%s skipped: %s", document.name, message)
    error_log.append(ErrorRecord.create(document.name, document.group_name, error_type, message))
    return FileStat(
        file_name=document.name,
        group=document.group_name,
        outcome=DocumentOutcome.SKIPPED,
        rows=0,
        elapsed_seconds=(datetime.now(UTC) - start_time).total_seconds(),
    )


def _process_single_document(
    document: SourceDocument,
    store: DocumentStore,
    config: MergeConfig,
    engine: DeduplicationEngine,
    error_log: ErrorLogBuffer,
) -> FileStat:
    """Read, normalize and admit one document. Per-document errors become a SKIPPED stat."""
    start_time = datetime.now(UTC)
    dataset = engine.dataset
    dataset.note_project_id(extract_project_id(document.name))

    try:
        with _converted_copy(store, document) as handle:
            raw_rows = store.read_tabular(handle, config.target_sheet_name)
            sheet = normalize_rows(
                document.name,
                raw_rows,
                classify_category(document.name),
                config,
                source=document.identity,
            )
    except SheetNotFoundError as e:
        return _skip(document, error_log, "SHEET_NOT_FOUND", str(e), start_time)
    except EmptySheetError as e:
        return _skip(document, error_log, "EMPTY_SHEET", str(e), start_time)
    except StoreError as e:
        return _skip(document, error_log, "CONVERSION_ERROR", str(e), start_time)
    except Exception as e:
        return _skip(document, error_log, "READ_ERROR", f"{type(e).__name__}: {e}", start_time)

    key = build_revision_key(document.name, sheet)
    if key.revision_date is None:
        logger.warning("%s has no YYYYMMDD prefix; treated as the oldest revision", document.name)
    dataset.note_unit_number(key.unit_digits)
    dataset.note_category(key.category)

    outcome = engine.admit(sheet, key)
    return FileStat(
        file_name=document.name,
        group=document.group_name,
        outcome=outcome,
        rows=len(sheet),
        elapsed_seconds=(datetime.now(UTC) - start_time).total_seconds(),
    )


def _sort_filename_tokens(dataset: MergedDataset) -> None:
    for tokens in dataset.filename_tokens.values():
        tokens.sort(key=token_sort_value)


def process_all(
    config: MergeConfig,
    store: DocumentStore,
    root_id: Any,
    error_log: ErrorLogBuffer | None = None,
) -> AggregationResult:
    """Aggregate every parts-list folder under root_id into one MergedDataset.

    Raises:
        InputSelectionError: root_id cannot be listed
        NoMatchingGroupsError: no subfolder passes filter_groups()
        NoDocumentsProcessedError: no document was admitted
        EmptyResultError: no data rows survived
    """
    if error_log is None:
        error_log = ErrorLogBuffer()

    try:
        subgroups = store.list_subgroups(root_id)
    except StoreError as e:
        raise InputSelectionError(f"root folder not found: {e}") from e

    groups = filter_groups(subgroups, config)
    if not groups:
        raise NoMatchingGroupsError(
            f"no folder containing '{config.group_name_marker}' found under {root_id}"
        )

    dataset = MergedDataset()
    engine = DeduplicationEngine(dataset)
    file_stats: list[FileStat] = []
    processed = skipped = stale = 0

    for group in groups:
        logger.info("Processing folder: %s", group.name)
        try:
            documents = store.list_documents(group.group_id)
        except StoreError as e:
            logger.warning("folder %s skipped: %s", group.name, e)
            error_log.append(ErrorRecord.create("<GROUP>", group.name, "GROUP_READ_ERROR", str(e)))
            continue

        candidates = []
        for document in documents:
            if document.has_supported_extension:
                candidates.append(document)
            else:
                logger.warning("%s skipped: unsupported extension", document.name)

        with ProgressTracker(len(candidates), description=group.name) as progress:
            for document in candidates:
                progress.start_document(document.name)
                stat = _process_single_document(document, store, config, engine, error_log)
                file_stats.append(stat)

                if stat.outcome.admitted:
                    processed += 1
                elif stat.outcome is DocumentOutcome.REJECTED_STALE:
                    stale += 1
                else:
                    skipped += 1

                progress.set_postfix(accepted=processed, skipped=skipped, rows=dataset.data_row_count)
                progress.finish_document()

        _sort_filename_tokens(dataset)

    try:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info("skipped documents written to %s", log_path)
    except OSError as e:
        logger.error("failed to write skip log: %s", e)

    if processed == 0:
        raise NoDocumentsProcessedError("no processable documents found")
    if dataset.data_row_count == 0:
        raise EmptyResultError("no valid data rows found")

    return AggregationResult(
        dataset=dataset,
        processed_files=processed,
        skipped_files=skipped,
        stale_files=stale,
        group_count=len(groups),
        file_stats=file_stats,
    )


def combine_parts_lists(
    config: MergeConfig,
    store: DocumentStore,
    sink: ResultSink | None,
    root_id: Any = None,
    folder_name: str | None = None,
    now: datetime | None = None,
) -> RunResult:
    """Run one complete merge and report it as a RunResult.

    Either root_id (the project folder itself) or folder_name (a folder under
    config.root_folder_id) selects the input. With sink=None nothing is
    written (dry run) and url stays None. Exceptions never escape.
    """
    try:
        if folder_name is not None:
            root_id = select_root_folder(store, config.root_folder_id, folder_name, config)
        if root_id is None:
            raise InputSelectionError("no folder selected")

        result = process_all(config, store, root_id)
        output = assemble(result, config, now=now)

        url = None
        if sink is not None:
            url = sink.publish(output.name, output.rows, config.column_widths, config.row_height)
            logger.info("output written: %s", url)
        else:
            logger.info("dry run, output not written: %s", output.name)
    except Exception as e:
        logger.error("merge failed: %s", e)
        return RunResult(success=False, error=str(e))

    return RunResult(
        success=True,
        url=url,
        processed_files=result.processed_files,
        total_rows=result.total_rows,
        name=output.name,
    )

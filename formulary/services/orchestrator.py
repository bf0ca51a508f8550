from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import AppConfig, default_config
from ..core.grouping import group_rows
from ..ingest.reader import (
    CSV_SUFFIXES,
    EXCEL_SUFFIXES,
    EmptyFileError,
    IngestError,
    MissingColumnsError,
    UnsupportedFileError,
    normalize_rows,
    read_table,
)
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.processing_result import FileStat, IngestResult
from ..models.source_file import FileStatus, SourceFile
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

"""Ingestion orchestration.

Coordinates one run: resolve the input files, read and normalize each file
independently (a failing file never stops the others), record rejected rows
in the error log, then group all accepted rows in a single call to the
grouping engine.
"""

FILE_LEVEL_ROW = -1

_FILE_ERROR_TYPES: dict[type[IngestError], str] = {
    UnsupportedFileError: "UNSUPPORTED_FILE",
    EmptyFileError: "EMPTY_FILE",
    MissingColumnsError: "MISSING_COLUMNS",
}


class ProcessingError(Exception):
    """Fatal error that prevents an ingestion run from starting."""
    pass


def scan_source_files(directory: Path) -> list[Path]:
    """List .csv/.xlsx files in directory (non-recursive, sorted by name).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    suffixes = CSV_SUFFIXES | EXCEL_SUFFIXES
    try:
        return sorted(
            (p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in suffixes),
            key=lambda p: p.name,
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def resolve_source_paths(config: AppConfig, paths: Sequence[str] | None = None) -> list[Path]:
    """Pick the input files: explicit paths, then config files, then config directory.

    Raises:
        ProcessingError: If no input file can be determined
    """
    if paths:
        return [Path(p) for p in paths]
    if config.source_files:
        return [Path(p) for p in config.source_files]
    if config.source_directory:
        found = scan_source_files(Path(config.source_directory))
        if found:
            return found
        raise ProcessingError(f"no .csv/.xlsx files in {config.source_directory}")
    raise ProcessingError("no input files given")


def _process_single_file(path: Path, config: AppConfig, error_log: ErrorLogBuffer) -> SourceFile:
    """Read and normalize one file; failures are recorded, never raised."""
    start_time = datetime.now(UTC)

    def failed(error_type: str, message: str) -> SourceFile:
        error_log.append(ErrorRecord.create(path.name, FILE_LEVEL_ROW, error_type, message))
        logger.error(f"{path.name}: {message}")
        return SourceFile(
            path=path,
            name=path.name,
            start_time=start_time,
            end_time=datetime.now(UTC),
            status=FileStatus.FAILED,
            error=message,
        )

    try:
        df = read_table(path)
        table = normalize_rows(df, path.name, null_sentinels=config.null_sentinels)
    except IngestError as e:
        return failed(_FILE_ERROR_TYPES.get(type(e), "READ_ERROR"), str(e))
    except Exception as e:  # unreadable file: missing, corrupt, parser error
        return failed("READ_ERROR", f"{type(e).__name__}: {e}")

    for issue in table.rejected + table.warnings:
        error_log.append(ErrorRecord.create(path.name, issue.row, issue.error_type, issue.message))
        logger.debug(f"{path.name}:{issue.row} {issue.error_type} {issue.message}")
    if table.rejected:
        logger.warning(f"{path.name}: {len(table.rejected)} rows rejected (missing required fields)")
    if table.warnings:
        logger.warning(f"{path.name}: {len(table.warnings)} rows with unreadable unit_cost")

    defaulted = sum(1 for r in table.rows if r.qty_defaulted)
    if defaulted:
        logger.info(f"{path.name}: qty defaulted to 0 on {defaulted} rows")

    return SourceFile(
        path=path,
        name=path.name,
        rows=table.rows,
        start_time=start_time,
        end_time=datetime.now(UTC),
        status=FileStatus.SUCCESS,
        total_rows=table.total_rows,
        rejected_rows=len(table.rejected),
    )


def ingest_files(paths: Sequence[Path], config: AppConfig | None = None) -> IngestResult:
    """Read every file in order and group the accepted rows.

    Rows from all successful files are concatenated in file order before
    grouping, so a formula spread over several files becomes one aggregate.

    Args:
        paths: Input files (.csv / .xlsx)
        config: Application config (defaults when None)

    Returns:
        IngestResult with the grouped formulas and run metrics
    """
    config = config or default_config()
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(Path(config.logs_directory))

    sources: list[SourceFile] = []
    file_stats: list[FileStat] = []
    with ProgressTracker(len(paths)) as progress:
        for path in paths:
            progress.start_file(path)
            source = _process_single_file(path, config, error_log)
            sources.append(source)
            elapsed = 0.0
            if source.start_time and source.end_time:
                elapsed = (source.end_time - source.start_time).total_seconds()
            file_stats.append(
                FileStat(
                    file_name=source.name,
                    status=source.status.value,
                    total_rows=source.total_rows,
                    accepted_rows=source.accepted_rows,
                    rejected_rows=source.rejected_rows,
                    elapsed_seconds=elapsed,
                )
            )
            progress.finish_file(
                success=source.status == FileStatus.SUCCESS,
                rows=sum(s.accepted_rows for s in sources),
            )

    log_path: Path | None = None
    try:
        log_path = error_log.flush()
    except OSError as e:
        logger.warning(f"could not write error log: {e}")

    rows = [row for source in sources for row in source.rows]
    formulas = group_rows(rows)

    end_time = datetime.now(UTC)
    succeeded = [s for s in sources if s.status == FileStatus.SUCCESS]
    return IngestResult(
        success_files=len(succeeded),
        failed_files=len(sources) - len(succeeded),
        total_rows=sum(s.total_rows for s in succeeded),
        accepted_rows=len(rows),
        rejected_rows=sum(s.rejected_rows for s in succeeded),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        formulas=formulas,
        file_stats=file_stats,
        error_log_path=str(log_path) if log_path is not None else None,
    )

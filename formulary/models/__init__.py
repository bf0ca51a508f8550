"""Domain models for the formula grouping tool.

This package contains the value objects shared by the ingestion boundary,
the grouping engine and the presentation services.
"""

from .error_record import ErrorRecord
from .flat_row import FlatRow
from .formula import FormulaAggregate, MaterialLine
from .processing_result import FileStat, IngestResult
from .source_file import FileStatus, SourceFile

__all__ = [
    # Input / output models
    "FlatRow",
    "MaterialLine",
    "FormulaAggregate",
    # Processing models
    "SourceFile",
    "FileStatus",
    "FileStat",
    "IngestResult",
    "ErrorRecord",
]

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .formula import FormulaAggregate

"""Processing result models.

IngestResult carries the grouped formulas together with the metrics needed
for the SUMMARY output line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics."""
    file_name: str
    status: str  # success/failed
    total_rows: int
    accepted_rows: int
    rejected_rows: int
    elapsed_seconds: float


@dataclass(frozen=True)
class IngestResult:
    """Aggregated results of one ingestion run."""
    success_files: int
    failed_files: int
    total_rows: int  # non-blank data rows across all files
    accepted_rows: int
    rejected_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    formulas: list[FormulaAggregate] = field(default_factory=list)
    file_stats: list[FileStat] | None = None
    error_log_path: str | None = None  # set only when errors were written

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files

    @property
    def priced_formulas(self) -> int:
        return sum(1 for f in self.formulas if f.total_cost is not None)

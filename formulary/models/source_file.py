from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from .flat_row import FlatRow

"""SourceFile domain model and FileStatus enum.

SourceFile is the processing context of a single input table, tracking its
status from discovery through normalization.
"""


class FileStatus(Enum):
    """Status of a SourceFile.

    State transitions: pending -> (success | failed)
    """
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class SourceFile:
    """Processing context for a single CSV/xlsx input file."""
    path: Path
    name: str
    rows: list[FlatRow] = field(default_factory=list)  # accepted rows, source order
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: FileStatus = FileStatus.PENDING
    total_rows: int = 0       # non-blank data rows read
    rejected_rows: int = 0    # rows dropped for missing required fields
    error: str | None = None  # failure reason summary

    @property
    def accepted_rows(self) -> int:
        return len(self.rows)

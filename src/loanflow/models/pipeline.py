"""Upload session, per-row outcome and ingestion result models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from loanflow.models.schema_mapping import RecordType


class SessionStatus(StrEnum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    FAILED = "failed"


class RowStatus(StrEnum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"


class RowOutcome(BaseModel):
    """Result of processing a single input row."""

    row_number: int
    loan_id: str = ""
    status: RowStatus
    detail: str = ""

    @classmethod
    def success(cls, row_number: int, loan_id: str) -> RowOutcome:
        return cls(row_number=row_number, loan_id=loan_id, status=RowStatus.SUCCESS)

    @classmethod
    def skipped(cls, row_number: int, loan_id: str, reason: str) -> RowOutcome:
        return cls(row_number=row_number, loan_id=loan_id, status=RowStatus.SKIPPED, detail=reason)

    @classmethod
    def error(cls, row_number: int, loan_id: str, detail: str) -> RowOutcome:
        return cls(row_number=row_number, loan_id=loan_id, status=RowStatus.ERROR, detail=detail)


class PersistenceSummary(BaseModel):
    """Aggregated write counts for one ingestion.

    ``inserted``, ``skipped`` and ``errored`` count input rows and always sum to
    the rows processed. A failed active-event write belongs to a loan group,
    not a row, so it is tallied in ``active_event_errors`` instead.
    """

    inserted: int = 0
    skipped: int = 0
    errored: int = 0
    error_messages: list[str] = Field(default_factory=list)
    group_count: int = 0
    active_event_count: int = 0
    active_event_errors: int = 0

    @property
    def has_errors(self) -> bool:
        return self.errored > 0 or self.active_event_errors > 0

    def record(self, outcome: RowOutcome, max_messages: int) -> None:
        """Count an outcome, keeping only the earliest error messages."""
        if outcome.status is RowStatus.SUCCESS:
            self.inserted += 1
        elif outcome.status is RowStatus.SKIPPED:
            self.skipped += 1
        else:
            self.errored += 1
            if len(self.error_messages) < max_messages:
                self.error_messages.append(f"Row {outcome.row_number}: {outcome.detail}")

    def record_active_event_error(self, outcome: RowOutcome, max_messages: int) -> None:
        self.active_event_errors += 1
        if len(self.error_messages) < max_messages:
            self.error_messages.append(f"Loan {outcome.loan_id}: {outcome.detail}")

    def merge(self, other: PersistenceSummary, max_messages: int) -> None:
        self.inserted += other.inserted
        self.skipped += other.skipped
        self.errored += other.errored
        self.group_count += other.group_count
        self.active_event_count += other.active_event_count
        self.active_event_errors += other.active_event_errors
        room = max(max_messages - len(self.error_messages), 0)
        self.error_messages.extend(other.error_messages[:room])


class UploadSession(BaseModel):
    """Audit record for one processed upload."""

    id: str
    original_filename: str
    record_type: RecordType = RecordType.UNKNOWN
    record_count: int = 0
    status: SessionStatus = SessionStatus.PROCESSING
    inserted_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    active_event_error_count: int = 0
    report_date: Optional[str] = None
    created_at: datetime


class IngestionResult(BaseModel):
    """Structured summary returned to the transport layer."""

    status: Literal["success", "failure"]
    message: str = ""
    file_type: RecordType = RecordType.UNKNOWN
    confidence: float = 0.0
    inserted_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    total_records: int = 0
    report_date: Optional[str] = None
    session_id: str
    session_status: SessionStatus
    error_messages: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    group_count: int = 0
    active_event_count: int = 0
    active_event_error_count: int = 0

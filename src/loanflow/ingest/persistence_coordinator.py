"""PersistenceCoordinator makes fault-isolated history, current and active-event writes."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable

from pydantic import BaseModel

from loanflow.core.logging import get_logger
from loanflow.core.protocols import ILoanStore
from loanflow.models.pipeline import PersistenceSummary, RowOutcome, RowStatus
from loanflow.models.records import (
    ActiveForeclosureEvent,
    DailyMetricsRecord,
    ForeclosureEventRecord,
    LoanEventGroup,
    LoanRecord,
)
from loanflow.models.schema_mapping import RecordType

logger = get_logger(__name__)


def _serialize(value: Any) -> Any:
    """Dates to ISO strings; Decimals and scalars untouched."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


def to_item(model: BaseModel) -> dict[str, Any]:
    return _serialize(model.model_dump())


def record_type_of(record: LoanRecord) -> RecordType:
    if isinstance(record, ForeclosureEventRecord):
        return RecordType.FORECLOSURE_DATA
    if isinstance(record, DailyMetricsRecord):
        return RecordType.DAILY_METRICS
    raise TypeError(f"Unsupported record {type(record).__name__}")


class PersistenceCoordinator:
    """Writes cleaned records to an ILoanStore, one isolated call at a time.

    A store failure on one row is logged and returned as an ``error``
    outcome; it never aborts the rest of the batch.
    """

    def __init__(self, store: ILoanStore, max_error_messages: int = 5) -> None:
        self._store = store
        self._max_error_messages = max_error_messages

    # ---- single-row operations ----

    def append_history(self, record: LoanRecord, report_date: str, session_id: str) -> RowOutcome:
        item = {**to_item(record), "report_date": report_date, "session_id": session_id}
        record_type = record_type_of(record)
        return self._guarded(record, "history insert", lambda: self._store.append_history(record_type, item))

    def upsert_current(self, record: LoanRecord, report_date: str, session_id: str) -> RowOutcome:
        item = {**to_item(record), "report_date": report_date, "session_id": session_id}
        record_type = record_type_of(record)
        return self._guarded(record, "current upsert", lambda: self._store.upsert_current(record_type, item))

    def upsert_active_event(
        self, record: ForeclosureEventRecord, report_date: str, session_id: str
    ) -> RowOutcome:
        def write() -> None:
            projection = ActiveForeclosureEvent.from_event(
                record,
                report_date=report_date,
                session_id=session_id,
                property_state=self._store.get_loan_state(record.loan_id),
            )
            self._store.upsert_active_event(to_item(projection))

        return self._guarded(record, "active event upsert", write)

    def _guarded(self, record: LoanRecord, action: str, operation: Callable[[], None]) -> RowOutcome:
        try:
            operation()
        except Exception as exc:
            logger.exception(
                "row_write_failed",
                action=action,
                loan_id=record.loan_id,
                row_number=record.row_number,
            )
            return RowOutcome.error(record.row_number, record.loan_id, f"{action} failed: {exc}")
        return RowOutcome.success(record.row_number, record.loan_id)

    # ---- batch operations ----

    def persist_daily_metrics(
        self, records: list[DailyMetricsRecord], report_date: str, session_id: str
    ) -> PersistenceSummary:
        """History insert then current upsert; a row succeeds only if both do."""
        summary = PersistenceSummary()
        for record in records:
            outcome = self.append_history(record, report_date, session_id)
            if outcome.status is RowStatus.SUCCESS:
                outcome = self.upsert_current(record, report_date, session_id)
            summary.record(outcome, self._max_error_messages)
            if outcome.status is RowStatus.SUCCESS and summary.inserted % 100 == 0:
                logger.info("daily_metrics_progress", inserted=summary.inserted, session_id=session_id)
        return summary

    def persist_foreclosure_groups(
        self, groups: list[LoanEventGroup], report_date: str, session_id: str
    ) -> PersistenceSummary:
        """Every event goes to history; each group's active event to the projection."""
        summary = PersistenceSummary()
        for group in groups:
            summary.group_count += 1
            for event in group.events:
                summary.record(self.append_history(event, report_date, session_id), self._max_error_messages)

            if group.active_event is None:
                logger.debug("no_active_foreclosure", loan_id=group.loan_id)
                continue
            outcome = self.upsert_active_event(group.active_event, report_date, session_id)
            if outcome.status is RowStatus.SUCCESS:
                summary.active_event_count += 1
            else:
                summary.record_active_event_error(outcome, self._max_error_messages)
        return summary

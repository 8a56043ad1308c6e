"""IngestionService runs one upload through the whole pipeline.

bytes -> FileParserService -> SchemaMatcherService -> FieldMapperService
-> [GroupResolverService] -> PersistenceCoordinator -> IngestionResult.

Whole-file problems (unreadable bytes, no rows, unknown type, archive
failure) end the session as ``failed`` before any row is written. Row-level
problems are only counted. The session record is written exactly once.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable
from uuid import uuid4

from loanflow.core.config import AppSettings
from loanflow.core.exceptions import (
    EmptyFileError,
    FileStoreError,
    IngestionError,
    UnknownFileTypeError,
)
from loanflow.core.logging import get_logger
from loanflow.core.protocols import IFileStore, ILoanStore
from loanflow.core.types import RawRow
from loanflow.ingest.field_mapper import FieldMapperService
from loanflow.ingest.file_parser import FileParserService
from loanflow.ingest.group_resolver import GroupResolverService
from loanflow.ingest.persistence_coordinator import PersistenceCoordinator, to_item
from loanflow.ingest.record_types import get_schema
from loanflow.ingest.report_date import get_report_date, utc_today
from loanflow.ingest.schema_matcher import SchemaMatcherService
from loanflow.models.pipeline import (
    IngestionResult,
    PersistenceSummary,
    SessionStatus,
    UploadSession,
)
from loanflow.models.schema_mapping import ClassificationResult, RecordType

logger = get_logger(__name__)


def final_status(summary: PersistenceSummary) -> SessionStatus:
    """Row-level errors never fail a session; only whole-file errors do."""
    if not summary.has_errors:
        return SessionStatus.COMPLETED
    return SessionStatus.COMPLETED_WITH_ERRORS


def _active_error_note(summary: PersistenceSummary) -> str:
    if not summary.active_event_errors:
        return ""
    return f", {summary.active_event_errors} active event updates failed"


class IngestionService:
    """Orchestrates one ingestion session per call to :meth:`ingest`."""

    def __init__(
        self,
        *,
        store: ILoanStore,
        settings: AppSettings | None = None,
        file_store: IFileStore | None = None,
        today: Callable[[], date] = utc_today,
        new_session_id: Callable[[], str] = lambda: str(uuid4()),
    ) -> None:
        self._settings = settings or AppSettings()
        self._store = store
        self._file_store = file_store
        self._today = today
        self._new_session_id = new_session_id
        self._parser = FileParserService(self._settings.ingest)
        self._matcher = SchemaMatcherService()
        self._resolver = GroupResolverService()
        self._coordinator = PersistenceCoordinator(store, self._settings.ingest.max_error_messages)

    def ingest(self, file_bytes: bytes, original_filename: str) -> IngestionResult:
        session = UploadSession(
            id=self._new_session_id(),
            original_filename=original_filename,
            created_at=datetime.now(timezone.utc),
        )
        log = logger.bind(session_id=session.id, filename=original_filename)
        classification = ClassificationResult(record_type=RecordType.UNKNOWN)

        try:
            rows = self._parse(file_bytes)
            session.record_count = len(rows)
            classification = self._classify(rows)
            session.record_type = classification.record_type
            session.report_date = get_report_date(original_filename, self._today)
            self._archive(session, file_bytes)
        except IngestionError as exc:
            log.warning("ingestion_rejected", reason=str(exc), error_type=type(exc).__name__)
            return self._fail(session, classification, exc)

        log.info(
            "ingestion_started",
            record_type=str(session.record_type),
            rows=len(rows),
            report_date=session.report_date,
        )
        summary = self._process(rows, session)
        session.status = final_status(summary)
        session.inserted_count = summary.inserted
        session.skipped_count = summary.skipped
        session.error_count = summary.errored
        session.active_event_error_count = summary.active_event_errors
        self._save_session(session)

        log.info(
            "ingestion_finished",
            status=str(session.status),
            inserted=summary.inserted,
            skipped=summary.skipped,
            errors=summary.errored,
            active_event_errors=summary.active_event_errors,
        )
        return IngestionResult(
            status="success",
            message=self._message(session.record_type, summary, len(rows)),
            file_type=session.record_type,
            confidence=classification.confidence,
            inserted_count=summary.inserted,
            skipped_count=summary.skipped,
            error_count=summary.errored,
            total_records=len(rows),
            report_date=session.report_date,
            session_id=session.id,
            session_status=session.status,
            error_messages=summary.error_messages,
            group_count=summary.group_count,
            active_event_count=summary.active_event_count,
            active_event_error_count=summary.active_event_errors,
        )

    # ---- whole-file stages ----

    def _parse(self, file_bytes: bytes) -> list[RawRow]:
        rows = self._parser.parse(file_bytes)
        if not rows:
            raise EmptyFileError("No data found in the uploaded file.")
        return rows

    def _classify(self, rows: list[RawRow]) -> ClassificationResult:
        classification = self._matcher.classify(rows[0].keys())
        if not classification.is_known:
            raise UnknownFileTypeError(classification.confidence, self._matcher.supported_types)
        return classification

    def _archive(self, session: UploadSession, file_bytes: bytes) -> None:
        if self._file_store is None:
            return
        try:
            self._file_store.archive_upload(session.id, session.original_filename, file_bytes)
        except FileStoreError as exc:
            raise IngestionError(f"Could not archive upload: {exc}") from exc

    # ---- row stages ----

    def _process(self, rows: list[RawRow], session: UploadSession) -> PersistenceSummary:
        schema = get_schema(session.record_type)
        mapper = FieldMapperService(schema, phone_region=self._settings.ingest.phone_region)
        mapping = mapper.map_rows(rows, session.original_filename)
        limit = self._settings.ingest.max_error_messages

        summary = PersistenceSummary()
        for outcome in mapping.outcomes:
            summary.record(outcome, limit)

        report_date = session.report_date or self._today().isoformat()
        if session.record_type is RecordType.FORECLOSURE_DATA:
            resolution = self._resolver.resolve(mapping.records)
            for outcome in resolution.outcomes:
                summary.record(outcome, limit)
            written = self._coordinator.persist_foreclosure_groups(resolution.groups, report_date, session.id)
        else:
            written = self._coordinator.persist_daily_metrics(mapping.records, report_date, session.id)
        summary.merge(written, limit)
        return summary

    # ---- session bookkeeping ----

    def _fail(
        self, session: UploadSession, classification: ClassificationResult, exc: IngestionError
    ) -> IngestionResult:
        session.status = SessionStatus.FAILED
        self._save_session(session)
        return IngestionResult(
            status="failure",
            message=str(exc),
            error=str(exc),
            file_type=classification.record_type,
            confidence=classification.confidence,
            total_records=session.record_count,
            report_date=session.report_date,
            session_id=session.id,
            session_status=session.status,
        )

    def _save_session(self, session: UploadSession) -> None:
        """Single terminal write of the session record."""
        try:
            self._store.upsert_session(to_item(session))
        except Exception:
            logger.exception("session_save_failed", session_id=session.id, status=str(session.status))

    @staticmethod
    def _message(record_type: RecordType, summary: PersistenceSummary, total: int) -> str:
        if record_type is RecordType.FORECLOSURE_DATA:
            return (
                f"Processed {summary.group_count} loans with foreclosure data "
                f"({summary.inserted} history records, {summary.active_event_count} active events, "
                f"{summary.skipped} skipped, {summary.errored} errors"
                f"{_active_error_note(summary)})."
            )
        return (
            f"Imported {summary.inserted} of {total} daily metrics records "
            f"({summary.skipped} skipped, {summary.errored} errors)."
        )

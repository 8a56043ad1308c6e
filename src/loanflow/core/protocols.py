"""Protocol interfaces for all LoanFlow storage abstractions.

The ingestion pipeline only talks to storage through these Protocols:
structural typing, no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from loanflow.core.types import JsonDict


# ---------------------------------------------------------------------------
# Persistence: Loan Store
# ---------------------------------------------------------------------------

@runtime_checkable
class ILoanStore(Protocol):
    """History, current-state, active-event and session tables.

    Items are plain dicts. History items carry ``loan_id``, ``report_date``,
    ``session_id`` and ``row_number``; current and active-event items are
    keyed by ``loan_id``; session items by ``id``.
    """

    def append_history(self, record_type: str, item: JsonDict) -> None: ...

    def list_history(self, record_type: str, loan_id: str) -> list[JsonDict]: ...

    def upsert_current(self, record_type: str, item: JsonDict) -> None: ...

    def get_current(self, record_type: str, loan_id: str) -> JsonDict | None: ...

    def upsert_active_event(self, item: JsonDict) -> None: ...

    def get_active_event(self, loan_id: str) -> JsonDict | None: ...

    def get_loan_state(self, loan_id: str) -> str | None: ...

    def upsert_session(self, session: JsonDict) -> None: ...

    def get_session(self, session_id: str) -> JsonDict | None: ...

    def close(self) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: File Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """S3-compatible archive of raw uploads, keyed by session id."""

    def archive_upload(self, session_id: str, filename: str, data: bytes) -> str: ...

    def read(self, key: str) -> bytes: ...

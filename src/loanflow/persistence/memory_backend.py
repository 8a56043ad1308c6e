"""Dict-backed backends for unit tests and local runs."""

from __future__ import annotations

import copy
from typing import Any

from loanflow.core.exceptions import DuplicateHistoryError, FileStoreError, PersistenceError
from loanflow.models.schema_mapping import RecordType
from loanflow.persistence.upload_keys import session_prefix, upload_key


class MemoryLoanStore:
    """Dict-backed ILoanStore.

    Mirrors the DynamoDB semantics: history inserts are conditional on the
    composite key, upserts replace the whole item.
    """

    def __init__(self) -> None:
        self._history: dict[str, dict[tuple, dict[str, Any]]] = {}
        self._current: dict[str, dict[str, dict[str, Any]]] = {}
        self._active_events: dict[str, dict[str, Any]] = {}
        self._sessions: dict[str, dict[str, Any]] = {}
        self.closed = False

    def append_history(self, record_type: str, item: dict[str, Any]) -> None:
        key = (item["loan_id"], item["report_date"], item["session_id"], item["row_number"])
        table = self._history.setdefault(str(record_type), {})
        if key in table:
            raise DuplicateHistoryError(str(record_type), key)
        table[key] = copy.deepcopy(item)

    def list_history(self, record_type: str, loan_id: str) -> list[dict[str, Any]]:
        table = self._history.get(str(record_type), {})
        return [copy.deepcopy(v) for k, v in table.items() if k[0] == loan_id]

    def history_count(self, record_type: str) -> int:
        return len(self._history.get(str(record_type), {}))

    def upsert_current(self, record_type: str, item: dict[str, Any]) -> None:
        if record_type != RecordType.DAILY_METRICS:
            raise PersistenceError(f"No current table for record type {record_type!r}")
        self._current.setdefault(str(record_type), {})[item["loan_id"]] = copy.deepcopy(item)

    def get_current(self, record_type: str, loan_id: str) -> dict[str, Any] | None:
        item = self._current.get(str(record_type), {}).get(loan_id)
        return copy.deepcopy(item) if item is not None else None

    def get_loan_state(self, loan_id: str) -> str | None:
        current = self.get_current(RecordType.DAILY_METRICS, loan_id)
        return current.get("state") if current else None

    def upsert_active_event(self, item: dict[str, Any]) -> None:
        self._active_events[item["loan_id"]] = copy.deepcopy(item)

    def get_active_event(self, loan_id: str) -> dict[str, Any] | None:
        item = self._active_events.get(loan_id)
        return copy.deepcopy(item) if item is not None else None

    def active_event_count(self) -> int:
        return len(self._active_events)

    def upsert_session(self, session: dict[str, Any]) -> None:
        self._sessions[session["id"]] = copy.deepcopy(session)

    def get_session(self, session_id: str) -> dict[str, Any] | None:
        item = self._sessions.get(session_id)
        return copy.deepcopy(item) if item is not None else None

    def close(self) -> None:
        self.closed = True


class MemoryCacheBackend:
    """Dict-backed ICacheBackend for unit tests."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)


class MemoryFileStore:
    """Dict-backed IFileStore for unit tests."""

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}

    def archive_upload(self, session_id: str, filename: str, data: bytes) -> str:
        key = upload_key(session_id, filename)
        self._files[key] = data
        return key

    def read(self, key: str) -> bytes:
        try:
            return self._files[key]
        except KeyError:
            raise FileStoreError(f"No archived upload at {key!r}") from None

    def list_uploads(self, session_id: str) -> list[str]:
        return [k for k in self._files if k.startswith(session_prefix(session_id))]

"""DynamoDB backend implementing ILoanStore with optional Redis caching."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from loanflow.core.exceptions import DuplicateHistoryError, PersistenceError
from loanflow.core.logging import get_logger
from loanflow.core.protocols import ICacheBackend
from loanflow.models.schema_mapping import RecordType
from loanflow.persistence.dynamodb_tables import (
    ACTIVE_EVENTS_TABLE,
    CURRENT_TABLES,
    HISTORY_TABLES,
    SESSIONS_TABLE,
    history_sk,
    loan_pk,
    session_pk,
)

logger = get_logger(__name__)

_KEY_ATTRS = ("PK", "SK")


def _to_dynamodb(obj: Any) -> Any:
    """Convert floats to Decimal; DynamoDB rejects Python floats."""
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _to_dynamodb(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_to_dynamodb(i) for i in obj]
    return obj


def _from_dynamodb(obj: Any) -> Any:
    """Integral Decimals back to int; fractional amounts stay Decimal."""
    if isinstance(obj, Decimal):
        return int(obj) if obj == obj.to_integral_value() else obj
    if isinstance(obj, dict):
        return {k: _from_dynamodb(v) for k, v in obj.items() if k not in _KEY_ATTRS}
    if isinstance(obj, list):
        return [_from_dynamodb(i) for i in obj]
    return obj


def loan_state_cache_key(loan_id: str) -> str:
    return f"loan_state:{loan_id}"


class DynamoDBLoanStore:
    """Production ILoanStore backed by DynamoDB + optional Redis cache."""

    def __init__(self, table_suffix: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None, cache: ICacheBackend | None = None,
                 state_ttl_seconds: int = 300) -> None:
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        self._cache = cache
        self._state_ttl = state_ttl_seconds
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    def _table(self, base: str):
        return self._ddb.Table(f"{base}{self._table_suffix}")

    @staticmethod
    def _table_for(tables: dict[str, str], record_type: str, kind: str) -> str:
        try:
            return tables[record_type]
        except KeyError:
            raise PersistenceError(f"No {kind} table for record type {record_type!r}") from None

    def _put(self, base: str, item: dict[str, Any], **kwargs: Any) -> None:
        try:
            self._table(base).put_item(Item=_to_dynamodb(item), **kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise PersistenceError(f"DynamoDB put into {base!r} failed: {exc}") from exc

    def _get_item(self, base: str, pk: str, sk: str) -> dict[str, Any] | None:
        try:
            resp = self._table(base).get_item(Key={"PK": pk, "SK": sk})
        except (BotoCoreError, ClientError) as exc:
            raise PersistenceError(f"DynamoDB get from {base!r} failed: {exc}") from exc
        item = resp.get("Item")
        return _from_dynamodb(item) if item else None

    # ---- history ----

    def append_history(self, record_type: str, item: dict[str, Any]) -> None:
        base = self._table_for(HISTORY_TABLES, record_type, "history")
        key = (item["loan_id"], item["report_date"], item["session_id"], item["row_number"])
        row = {"PK": loan_pk(key[0]), "SK": history_sk(*key[1:]), **item}
        try:
            self._table(base).put_item(
                Item=_to_dynamodb(row),
                ConditionExpression="attribute_not_exists(PK)",
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise DuplicateHistoryError(record_type, key) from exc
            raise PersistenceError(f"DynamoDB history insert failed: {exc}") from exc
        except BotoCoreError as exc:
            raise PersistenceError(f"DynamoDB history insert failed: {exc}") from exc

    def list_history(self, record_type: str, loan_id: str) -> list[dict[str, Any]]:
        base = self._table_for(HISTORY_TABLES, record_type, "history")
        try:
            resp = self._table(base).query(
                KeyConditionExpression="PK = :pk",
                ExpressionAttributeValues={":pk": loan_pk(loan_id)},
            )
        except (BotoCoreError, ClientError) as exc:
            raise PersistenceError(f"DynamoDB history query failed: {exc}") from exc
        return [_from_dynamodb(item) for item in resp.get("Items", [])]

    # ---- current state ----

    def upsert_current(self, record_type: str, item: dict[str, Any]) -> None:
        base = self._table_for(CURRENT_TABLES, record_type, "current")
        self._put(base, {"PK": loan_pk(item["loan_id"]), "SK": "CURRENT", **item})
        if record_type == RecordType.DAILY_METRICS and self._cache is not None:
            self._cache.delete(loan_state_cache_key(item["loan_id"]))

    def get_current(self, record_type: str, loan_id: str) -> dict[str, Any] | None:
        base = self._table_for(CURRENT_TABLES, record_type, "current")
        return self._get_item(base, loan_pk(loan_id), "CURRENT")

    def get_loan_state(self, loan_id: str) -> str | None:
        """Property state from the loan's current daily metrics row (cached)."""
        cache_key = loan_state_cache_key(loan_id)
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached

        current = self.get_current(RecordType.DAILY_METRICS, loan_id)
        state = current.get("state") if current else None

        if state and self._cache is not None:
            self._cache.setex(cache_key, self._state_ttl, state)
        return state

    # ---- active foreclosure projection ----

    def upsert_active_event(self, item: dict[str, Any]) -> None:
        self._put(ACTIVE_EVENTS_TABLE, {"PK": loan_pk(item["loan_id"]), "SK": "ACTIVE", **item})

    def get_active_event(self, loan_id: str) -> dict[str, Any] | None:
        return self._get_item(ACTIVE_EVENTS_TABLE, loan_pk(loan_id), "ACTIVE")

    # ---- upload sessions ----

    def upsert_session(self, session: dict[str, Any]) -> None:
        self._put(SESSIONS_TABLE, {"PK": session_pk(session["id"]), "SK": "SESSION", **session})

    def get_session(self, session_id: str) -> dict[str, Any] | None:
        return self._get_item(SESSIONS_TABLE, session_pk(session_id), "SESSION")

    def close(self) -> None:
        self._ddb.meta.client.close()

"""DynamoDB table names, key layout and table bootstrap."""

from __future__ import annotations

from typing import Any

from loanflow.models.schema_mapping import RecordType

HISTORY_TABLES: dict[str, str] = {
    RecordType.DAILY_METRICS: "loanflow-daily-metrics-history",
    RecordType.FORECLOSURE_DATA: "loanflow-foreclosure-events-history",
}
CURRENT_TABLES: dict[str, str] = {
    RecordType.DAILY_METRICS: "loanflow-daily-metrics-current",
}
ACTIVE_EVENTS_TABLE = "loanflow-foreclosure-events-active"
SESSIONS_TABLE = "loanflow-upload-sessions"

TABLE_NAMES: list[str] = [
    *HISTORY_TABLES.values(),
    *CURRENT_TABLES.values(),
    ACTIVE_EVENTS_TABLE,
    SESSIONS_TABLE,
]


def loan_pk(loan_id: str) -> str:
    return f"LOAN#{loan_id}"


def history_sk(report_date: str, session_id: str, row_number: int) -> str:
    return f"REPORT#{report_date}#SESSION#{session_id}#ROW#{row_number:06d}"


def session_pk(session_id: str) -> str:
    return f"SESSION#{session_id}"


def create_tables(ddb: Any, suffix: str = "") -> list[str]:
    """Create all LoanFlow tables. Skips tables that already exist.

    Returns:
        Names of the tables created by this call.
    """
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])
    created: list[str] = []

    for base in TABLE_NAMES:
        table_name = f"{base}{suffix}"
        if table_name in existing:
            continue
        client.create_table(
            TableName=table_name,
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        created.append(table_name)
    return created

"""Versioned schemas for the recognized record types.

Each schema lists the canonical fields, the header aliases accepted for each
(first present alias wins), the cleaning type, and which fields count toward
classification confidence.
"""

from __future__ import annotations

from loanflow.models.schema_mapping import DataType, FieldSpec, RecordType, RecordTypeSchema

_MONTHS = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]

FORECLOSURE_MILESTONES: dict[str, str] = {
    "title_received": "Title Received",
    "first_legal": "First Legal",
    "service_perfected": "Service Perfected",
    "publication_started": "Publication Started",
    "order_of_reference": "Order of Reference",
    "judgment_entered": "Judgment Entered",
    "redemption_expires": "Redemption Expires",
    "sale_held": "Sale Held",
    "rrc": "RRC",
}


def _field(target: str, *aliases: str, data_type: DataType = DataType.TEXT) -> FieldSpec:
    return FieldSpec(target_field=target, aliases=[*aliases, target], data_type=data_type)


def _milestone_fields(key: str, label: str) -> list[FieldSpec]:
    parts = [
        ("expected_start", "Expected Start", DataType.DATE),
        ("actual_start", "Actual Start", DataType.DATE),
        ("expected_completion", "Expected Completion", DataType.DATE),
        ("actual_completion", "Actual Completion", DataType.DATE),
        ("completion_variance", "Completion Variance", DataType.INTEGER),
        ("delay_reason", "Delay Reason", DataType.TEXT),
    ]
    return [
        FieldSpec(
            target_field=f"milestones.{key}.{attr}",
            aliases=[f"{label} {suffix}", f"{key}_{attr}"],
            data_type=data_type,
        )
        for attr, suffix, data_type in parts
    ]


def _payment_history_fields(year: int) -> list[FieldSpec]:
    yy = f"{year % 100:02d}"
    specs = []
    for month in _MONTHS:
        title = month.capitalize()
        specs.append(FieldSpec(
            target_field=f"payment_history.{month}_{yy}",
            aliases=[f"{title}-{yy}", f"{title} {yy}", f"{title}_{yy}", f"{month}_{yy}"],
            data_type=DataType.CURRENCY,
        ))
    return specs


FORECLOSURE_SCHEMA = RecordTypeSchema(
    record_type=RecordType.FORECLOSURE_DATA,
    version=1,
    fields=[
        _field("loan_id", "Loan ID", "Loan Number"),
        _field("investor_id", "Investor ID"),
        _field("investor_loan_number", "Investor Loan Number", "Investor Loan #"),
        _field("fc_atty_poc", "FC Atty POC"),
        _field("fc_atty_poc_phone", "FC Atty POC Phone", data_type=DataType.PHONE),
        _field("fc_atty_poc_email", "FC Atty POC Email"),
        _field("fc_jurisdiction", "FC Jurisdiction"),
        _field("fc_status", "FC Status"),
        _field("fc_start_date", "FC Start Date", "FC Referral Date", data_type=DataType.DATE),
        _field("active_fc_days", "Active FC Days", data_type=DataType.INTEGER),
        _field("hold_fc_days", "Hold FC Days", data_type=DataType.INTEGER),
        _field("total_fc_days", "Total FC Days", data_type=DataType.INTEGER),
        _field("fc_closed_date", "FC Closed Date", data_type=DataType.DATE),
        _field("fc_closed_reason", "FC Closed Reason"),
        _field("contested_start_date", "Contested Start Date", data_type=DataType.DATE),
        _field("contested_reason", "Contested Reason"),
        _field("contested_summary", "Contested Summary"),
        _field("active_loss_mit", "Active Loss Mit"),
        _field("active_loss_mit_start_date", "Active Loss Mit Start Date", data_type=DataType.DATE),
        _field("active_loss_mit_reason", "Active Loss Mit Reason"),
        _field("last_note_date", "Last Note Date", data_type=DataType.DATE),
        _field("last_note", "Last Note"),
        *[spec for key, label in FORECLOSURE_MILESTONES.items() for spec in _milestone_fields(key, label)],
    ],
    expected_fields=[
        "loan_id",
        "investor_id",
        "investor_loan_number",
        "fc_atty_poc",
        "fc_jurisdiction",
        "fc_status",
        "active_fc_days",
        "hold_fc_days",
        "total_fc_days",
        "fc_closed_date",
        "fc_closed_reason",
        "contested_start_date",
        "active_loss_mit",
        "last_note_date",
        "milestones.first_legal.actual_start",
        "milestones.sale_held.expected_start",
    ],
    min_confidence=30.0,
)


DAILY_METRICS_SCHEMA = RecordTypeSchema(
    record_type=RecordType.DAILY_METRICS,
    version=1,
    fields=[
        _field("loan_id", "Loan ID", "Loan Number"),
        _field("investor", "Investor"),
        _field("investor_name", "Investor Name"),
        _field("inv_loan", "Inv Loan", "Investor Loan"),
        _field("first_name", "First Name", "Borrower First Name"),
        _field("last_name", "Last Name", "Borrower Last Name"),
        _field("address", "Address", "Property Address"),
        _field("city", "City"),
        _field("state", "State"),
        _field("zip", "Zip", "Zip Code"),
        _field("prin_bal", "Prin Bal", "Principal Balance", data_type=DataType.CURRENCY),
        _field("unapplied_bal", "Unapplied Bal", "Unapplied Balance", data_type=DataType.CURRENCY),
        _field("int_rate", "Int Rate", "Interest Rate", data_type=DataType.PERCENTAGE),
        _field("pi_pmt", "P&I Pmt", "PI Pmt", data_type=DataType.CURRENCY),
        _field("remg_term", "Remg Term", "Remaining Term", data_type=DataType.INTEGER),
        _field("origination_date", "Origination Date", data_type=DataType.DATE),
        _field("org_term", "Org Term", "Original Term", data_type=DataType.INTEGER),
        _field("org_amount", "Org Amount", "Original Amount", data_type=DataType.CURRENCY),
        _field("lien_pos", "Lien Pos", "Lien Position", data_type=DataType.INTEGER),
        _field("next_pymt_due", "Next Pymt Due", data_type=DataType.DATE),
        _field("last_pymt_received", "Last Pymt Received", data_type=DataType.DATE),
        _field("first_pymt_due", "First Pymt Due", data_type=DataType.DATE),
        _field("maturity_date", "Maturity Date", data_type=DataType.DATE),
        _field("loan_type", "Loan Type"),
        _field("legal_status", "Legal Status"),
        _field("warning", "Warning"),
        _field("pymt_method", "Pymt Method", "Payment Method"),
        _field("draft_day", "Draft Day", data_type=DataType.INTEGER),
        _field("spoc", "SPOC"),
        *_payment_history_fields(2025),
    ],
    expected_fields=[
        "loan_id",
        "investor",
        "investor_name",
        "first_name",
        "last_name",
        "prin_bal",
        "unapplied_bal",
        "int_rate",
        "pi_pmt",
        "remg_term",
        "next_pymt_due",
        "last_pymt_received",
        "maturity_date",
        "loan_type",
        "legal_status",
        "pymt_method",
    ],
    min_confidence=30.0,
)

# Declaration order is the classifier tie-break order.
RECORD_TYPE_SCHEMAS: dict[RecordType, RecordTypeSchema] = {
    RecordType.FORECLOSURE_DATA: FORECLOSURE_SCHEMA,
    RecordType.DAILY_METRICS: DAILY_METRICS_SCHEMA,
}


def get_schema(record_type: RecordType) -> RecordTypeSchema:
    return RECORD_TYPE_SCHEMAS[record_type]

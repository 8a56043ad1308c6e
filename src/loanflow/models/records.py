"""Cleaned loan records: the normalized structures persisted by the pipeline.

Every uploaded row, regardless of source format, is mapped into one of these
frozen models. All business fields are nullable; cleaning anomalies are
summarized in ``data_issues`` instead of failing the row.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import ClassVar, Optional

from pydantic import BaseModel, Field


class LoanRecord(BaseModel):
    """Fields shared by every cleaned record."""

    model_config = {"frozen": True}

    loan_id: str
    row_number: int
    source_filename: str = ""
    data_issues: Optional[str] = None

    # Cleaned field -> bool field recording whether its raw cell held any text.
    raw_presence_flags: ClassVar[dict[str, str]] = {}


class DailyMetricsRecord(LoanRecord):
    """One loan's servicing snapshot from a daily metrics report."""

    # --- Investor ---
    investor: Optional[str] = None
    investor_name: Optional[str] = None
    inv_loan: Optional[str] = None

    # --- Borrower ---
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

    # --- Balances & terms ---
    prin_bal: Optional[Decimal] = None
    unapplied_bal: Optional[Decimal] = None
    int_rate: Optional[Decimal] = None
    pi_pmt: Optional[Decimal] = None
    remg_term: Optional[int] = None
    origination_date: Optional[date] = None
    org_term: Optional[int] = None
    org_amount: Optional[Decimal] = None
    lien_pos: Optional[int] = None

    # --- Payment schedule ---
    next_pymt_due: Optional[date] = None
    last_pymt_received: Optional[date] = None
    first_pymt_due: Optional[date] = None
    maturity_date: Optional[date] = None

    # --- Status ---
    loan_type: Optional[str] = None
    legal_status: Optional[str] = None
    warning: Optional[str] = None
    pymt_method: Optional[str] = None
    draft_day: Optional[int] = None
    spoc: Optional[str] = None

    # Monthly payment columns keyed "jan_25" .. "dec_25"
    payment_history: dict[str, Optional[Decimal]] = Field(default_factory=dict)


class Milestone(BaseModel):
    """Expected/actual dates for one foreclosure milestone."""

    model_config = {"frozen": True}

    expected_start: Optional[date] = None
    actual_start: Optional[date] = None
    expected_completion: Optional[date] = None
    actual_completion: Optional[date] = None
    completion_variance: Optional[int] = None
    delay_reason: Optional[str] = None


class ForeclosureEventRecord(LoanRecord):
    """One foreclosure (or bankruptcy) event row for a loan."""

    raw_presence_flags: ClassVar[dict[str, str]] = {"fc_closed_date": "has_closed_date"}

    investor_id: Optional[str] = None
    investor_loan_number: Optional[str] = None

    # --- Attorney point of contact ---
    fc_atty_poc: Optional[str] = None
    fc_atty_poc_phone: Optional[str] = None  # E.164
    fc_atty_poc_email: Optional[str] = None

    # --- Foreclosure status ---
    fc_jurisdiction: Optional[str] = None
    fc_status: Optional[str] = None
    fc_start_date: Optional[date] = None
    active_fc_days: Optional[int] = None
    hold_fc_days: Optional[int] = None
    total_fc_days: Optional[int] = None
    fc_closed_date: Optional[date] = None
    fc_closed_reason: Optional[str] = None
    has_closed_date: bool = False

    # --- Contest / loss mitigation / notes ---
    contested_start_date: Optional[date] = None
    contested_reason: Optional[str] = None
    contested_summary: Optional[str] = None
    active_loss_mit: Optional[str] = None
    active_loss_mit_start_date: Optional[date] = None
    active_loss_mit_reason: Optional[str] = None
    last_note_date: Optional[date] = None
    last_note: Optional[str] = None

    milestones: dict[str, Milestone] = Field(default_factory=dict)

    @property
    def is_closed(self) -> bool:
        """Closed when the closed-date cell held anything, parseable or not."""
        return self.has_closed_date or self.fc_closed_date is not None


class ActiveForeclosureEvent(BaseModel):
    """Single in-progress foreclosure per loan (derived projection)."""

    model_config = {"frozen": True}

    loan_id: str
    fc_jurisdiction: Optional[str] = None
    fc_status: Optional[str] = None
    fc_start_date: Optional[date] = None
    fc_closed_date: Optional[date] = None
    fc_closed_reason: Optional[str] = None
    active_fc_days: Optional[int] = None
    hold_fc_days: Optional[int] = None
    total_fc_days: Optional[int] = None
    property_state: Optional[str] = None
    report_date: str
    session_id: str
    source_filename: str = ""

    @classmethod
    def from_event(
        cls,
        event: ForeclosureEventRecord,
        *,
        report_date: str,
        session_id: str,
        property_state: Optional[str] = None,
    ) -> ActiveForeclosureEvent:
        return cls(
            loan_id=event.loan_id,
            fc_jurisdiction=event.fc_jurisdiction,
            fc_status=event.fc_status,
            fc_start_date=event.fc_start_date,
            fc_closed_date=event.fc_closed_date,
            fc_closed_reason=event.fc_closed_reason,
            active_fc_days=event.active_fc_days,
            hold_fc_days=event.hold_fc_days,
            total_fc_days=event.total_fc_days,
            property_state=property_state,
            report_date=report_date,
            session_id=session_id,
            source_filename=event.source_filename,
        )


class LoanEventGroup(BaseModel):
    """All retained foreclosure events of one loan, in file order."""

    loan_id: str
    events: list[ForeclosureEventRecord] = Field(default_factory=list)
    active_event: Optional[ForeclosureEventRecord] = None

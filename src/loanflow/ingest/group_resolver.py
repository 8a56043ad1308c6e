"""GroupResolverService groups foreclosure events per loan.

Foreclosure files carry several historical event rows per loan. Only
judicial/non-judicial foreclosure rows are retained (bankruptcy rows are
skipped). Each loan's active event is the first event, in file order, that
has an empty closed-date cell.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from loanflow.core.logging import get_logger
from loanflow.models.pipeline import RowOutcome
from loanflow.models.records import ForeclosureEventRecord, LoanEventGroup

logger = get_logger(__name__)

ALLOWED_JURISDICTION_TERMS = ("judicial", "nonjudicial")


class GroupResolution(BaseModel):
    groups: list[LoanEventGroup] = Field(default_factory=list)
    outcomes: list[RowOutcome] = Field(default_factory=list)

    @property
    def retained_count(self) -> int:
        return sum(len(g.events) for g in self.groups)


def is_foreclosure_jurisdiction(jurisdiction: str | None) -> bool:
    if not jurisdiction:
        return False
    lowered = jurisdiction.lower()
    return any(term in lowered for term in ALLOWED_JURISDICTION_TERMS)


def select_active_event(events: list[ForeclosureEventRecord]) -> ForeclosureEventRecord | None:
    # File order decides when several events are open.
    return next((e for e in events if not e.is_closed), None)


class GroupResolverService:
    """Filters foreclosure records and groups them by loan id."""

    def resolve(self, records: list[ForeclosureEventRecord]) -> GroupResolution:
        resolution = GroupResolution()
        by_loan: dict[str, list[ForeclosureEventRecord]] = {}

        for record in records:
            if not is_foreclosure_jurisdiction(record.fc_jurisdiction):
                resolution.outcomes.append(RowOutcome.skipped(
                    record.row_number,
                    record.loan_id,
                    f"non-foreclosure jurisdiction {record.fc_jurisdiction!r}",
                ))
                continue
            by_loan.setdefault(record.loan_id, []).append(record)

        for loan_id, events in by_loan.items():
            resolution.groups.append(LoanEventGroup(
                loan_id=loan_id, events=events, active_event=select_active_event(events),
            ))

        logger.info(
            "foreclosure_groups_resolved",
            retained=resolution.retained_count,
            skipped=len(resolution.outcomes),
            loans=len(resolution.groups),
        )
        return resolution

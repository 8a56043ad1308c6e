"""FieldMapperService maps raw rows onto cleaned, typed loan records."""

from __future__ import annotations

from functools import partial
from typing import Any, Iterable

from pydantic import BaseModel, Field, ValidationError

from loanflow.core.logging import get_logger
from loanflow.core.types import RawRow
from loanflow.ingest.cleaners import CLEANERS, clean_phone, clean_text
from loanflow.ingest.schema_matcher import build_header_lookup, normalize_header
from loanflow.models.pipeline import RowOutcome
from loanflow.models.records import DailyMetricsRecord, ForeclosureEventRecord, LoanRecord
from loanflow.models.schema_mapping import DataType, RecordType, RecordTypeSchema

logger = get_logger(__name__)

RECORD_MODELS: dict[RecordType, type[LoanRecord]] = {
    RecordType.FORECLOSURE_DATA: ForeclosureEventRecord,
    RecordType.DAILY_METRICS: DailyMetricsRecord,
}


class MappingResult(BaseModel):
    """Cleaned records in file order plus the rows that could not be mapped."""

    records: list[LoanRecord] = Field(default_factory=list)
    outcomes: list[RowOutcome] = Field(default_factory=list)


def _assign(values: dict[str, Any], path: str, value: Any) -> None:
    """Set ``value`` at a dotted ``path``, creating nested dicts as needed."""
    *parents, leaf = path.split(".")
    target = values
    for key in parents:
        target = target.setdefault(key, {})
    target[leaf] = value


class FieldMapperService:
    """Resolves header aliases once per file and cleans every row."""

    def __init__(self, schema: RecordTypeSchema, phone_region: str = "US") -> None:
        self._schema = schema
        self._model = RECORD_MODELS[schema.record_type]
        self._cleaners = dict(CLEANERS)
        self._cleaners[DataType.PHONE] = partial(clean_phone, region=phone_region)

    @property
    def schema(self) -> RecordTypeSchema:
        return self._schema

    def resolve_columns(self, headers: Iterable[str]) -> dict[str, str | None]:
        """Canonical field -> header actually present (first alias wins)."""
        lookup = build_header_lookup(headers)
        columns: dict[str, str | None] = {}
        for spec in self._schema.fields:
            columns[spec.target_field] = next(
                (lookup[normalize_header(a)] for a in spec.aliases if normalize_header(a) in lookup),
                None,
            )
        return columns

    def map_row(
        self,
        row: RawRow,
        row_number: int,
        source_filename: str,
        columns: dict[str, str | None],
    ) -> LoanRecord | RowOutcome:
        """Clean one row, or return a skip/error outcome when it cannot be mapped."""
        id_header = columns.get(self._schema.id_field)
        loan_id, _ = clean_text(row.get(id_header, "") if id_header else "")
        if not loan_id:
            return RowOutcome.skipped(row_number, "", f"missing {self._schema.id_field}")

        values: dict[str, Any] = {
            "loan_id": loan_id,
            "row_number": row_number,
            "source_filename": source_filename,
        }
        issues: list[str] = []
        for spec in self._schema.fields:
            if spec.target_field == self._schema.id_field:
                continue
            header = columns.get(spec.target_field)
            if header is None:
                continue
            raw = row.get(header, "")
            value, issue = self._cleaners[spec.data_type](raw, spec.display_name)
            flag = self._model.raw_presence_flags.get(spec.target_field)
            if flag:
                values[flag] = clean_text(raw)[0] is not None
            if issue:
                issues.append(issue)
            _assign(values, spec.target_field, value)
        values["data_issues"] = "; ".join(issues) or None

        try:
            return self._model(**values)
        except ValidationError as exc:
            return RowOutcome.error(row_number, loan_id, f"invalid record: {exc.error_count()} field error(s)")

    def map_rows(self, rows: list[RawRow], source_filename: str) -> MappingResult:
        result = MappingResult()
        if not rows:
            return result
        columns = self.resolve_columns(rows[0].keys())
        for index, row in enumerate(rows, start=1):
            mapped = self.map_row(row, index, source_filename, columns)
            if isinstance(mapped, RowOutcome):
                logger.warning(
                    "row_not_mapped",
                    row_number=index,
                    loan_id=mapped.loan_id,
                    status=str(mapped.status),
                    reason=mapped.detail,
                )
                result.outcomes.append(mapped)
            else:
                result.records.append(mapped)
        return result

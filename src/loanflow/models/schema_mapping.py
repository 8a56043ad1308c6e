"""Record-type schema models: header aliases, cleaning types, classification."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class RecordType(StrEnum):
    # Declaration order is the classifier tie-break order.
    FORECLOSURE_DATA = "foreclosure_data"
    DAILY_METRICS = "daily_metrics"
    UNKNOWN = "unknown"


class DataType(StrEnum):
    TEXT = "text"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    DATE = "date"
    INTEGER = "integer"
    PHONE = "phone"


class FieldSpec(BaseModel):
    """Mapping from a list of accepted headers to one canonical field."""

    target_field: str  # dotted path for nested values, e.g. "milestones.sale_held.actual_start"
    aliases: list[str]
    data_type: DataType = DataType.TEXT
    label: str = ""

    @property
    def display_name(self) -> str:
        return self.label or self.aliases[0]


class RecordTypeSchema(BaseModel):
    """Complete schema for one recognized record type."""

    record_type: RecordType
    version: int = 1
    id_field: str = "loan_id"
    expected_fields: list[str] = Field(default_factory=list)
    fields: list[FieldSpec] = Field(default_factory=list)
    min_confidence: float = 30.0

    def field(self, target_field: str) -> FieldSpec:
        for spec in self.fields:
            if spec.target_field == target_field:
                return spec
        raise KeyError(target_field)


class ClassificationResult(BaseModel):
    """Outcome of header-based file type detection."""

    record_type: RecordType
    confidence: float = 0.0
    matched_headers: list[str] = Field(default_factory=list)

    @property
    def is_known(self) -> bool:
        return self.record_type is not RecordType.UNKNOWN

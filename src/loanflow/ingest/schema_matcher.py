"""SchemaMatcherService identifies the record type of a file from its headers."""

from __future__ import annotations

from typing import Iterable

from loanflow.core.logging import get_logger
from loanflow.ingest.record_types import RECORD_TYPE_SCHEMAS
from loanflow.models.schema_mapping import ClassificationResult, RecordType, RecordTypeSchema

logger = get_logger(__name__)


def normalize_header(header: str) -> str:
    """Case- and whitespace-insensitive header key."""
    return " ".join(str(header).split()).lower()


def build_header_lookup(headers: Iterable[str]) -> dict[str, str]:
    """Map normalized header -> first observed header text."""
    lookup: dict[str, str] = {}
    for header in headers:
        key = normalize_header(header)
        if key and key not in lookup:
            lookup[key] = header
    return lookup


class SchemaMatcherService:
    """Scores observed headers against each record type's expected fields."""

    def __init__(self, schemas: dict[RecordType, RecordTypeSchema] | None = None) -> None:
        self._schemas = schemas if schemas is not None else RECORD_TYPE_SCHEMAS

    @property
    def supported_types(self) -> list[str]:
        return [str(t) for t in self._schemas]

    def score(self, schema: RecordTypeSchema, lookup: dict[str, str]) -> ClassificationResult:
        """Confidence = matched expected fields / expected fields * 100."""
        matched: list[str] = []
        hits = 0
        for target in schema.expected_fields:
            for alias in schema.field(target).aliases:
                header = lookup.get(normalize_header(alias))
                if header is not None:
                    hits += 1
                    if header not in matched:
                        matched.append(header)
                    break
        confidence = (hits / len(schema.expected_fields) * 100) if schema.expected_fields else 0.0
        return ClassificationResult(
            record_type=schema.record_type, confidence=confidence, matched_headers=matched,
        )

    def classify(self, headers: Iterable[str]) -> ClassificationResult:
        lookup = build_header_lookup(headers)
        best: ClassificationResult | None = None
        best_schema: RecordTypeSchema | None = None
        for schema in self._schemas.values():
            result = self.score(schema, lookup)
            # Strict comparison keeps the earlier-declared type on ties.
            if best is None or result.confidence > best.confidence:
                best, best_schema = result, schema

        if best is None or best_schema is None:
            return ClassificationResult(record_type=RecordType.UNKNOWN)

        logger.info(
            "file_type_scored",
            record_type=str(best.record_type),
            confidence=round(best.confidence, 1),
            matched_headers=best.matched_headers,
        )
        if best.confidence < best_schema.min_confidence:
            return ClassificationResult(
                record_type=RecordType.UNKNOWN,
                confidence=best.confidence,
                matched_headers=best.matched_headers,
            )
        return best

"""LoanFlow exception hierarchy."""

from __future__ import annotations


class LoanFlowError(Exception):
    """Base exception for all LoanFlow errors."""


class IngestionError(LoanFlowError):
    """Whole-file error: the upload cannot be processed at all."""


class UnreadableFileError(IngestionError):
    """The uploaded bytes could not be decoded as a spreadsheet or text file."""


class EmptyFileError(IngestionError):
    """The file parsed to zero data rows."""


class UnknownFileTypeError(IngestionError):
    """Header classification fell below the confidence threshold."""

    def __init__(self, confidence: float, supported_types: list[str]) -> None:
        self.confidence = confidence
        self.supported_types = supported_types
        super().__init__(
            "Unable to identify file type. Please ensure your file contains the "
            f"expected column headers (best confidence {confidence:.1f}%)."
        )


class PersistenceError(LoanFlowError):
    """Loan store operation failed."""


class DuplicateHistoryError(PersistenceError):
    """A history row with the same composite key already exists."""

    def __init__(self, record_type: str, key: tuple) -> None:
        self.record_type = record_type
        self.key = key
        super().__init__(f"Duplicate {record_type} history row for key {key!r}")


class CacheError(LoanFlowError):
    """Redis cache operation failed."""


class FileStoreError(LoanFlowError):
    """Raw upload archive (S3) operation failed."""

"""Object keys and content types for archived raw uploads."""

from __future__ import annotations

from pathlib import PurePosixPath

from loanflow.ingest.format_sniffer import FileFormat, is_compound_file, sniff_format

UPLOAD_PREFIX = "uploads"

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_CONTENT_TYPE = "application/vnd.ms-excel"
CSV_CONTENT_TYPE = "text/csv"


def upload_key(session_id: str, filename: str) -> str:
    """``uploads/<session_id>/<basename>``; client-side directories are dropped."""
    name = PurePosixPath(filename.replace("\\", "/")).name or "upload"
    return f"{UPLOAD_PREFIX}/{session_id}/{name}"


def session_prefix(session_id: str) -> str:
    return f"{UPLOAD_PREFIX}/{session_id}/"


def content_type_for(data: bytes) -> str:
    """Content type from the sniffed container, never from the filename."""
    if sniff_format(data) is FileFormat.DELIMITED_TEXT:
        return CSV_CONTENT_TYPE
    return XLS_CONTENT_TYPE if is_compound_file(data) else XLSX_CONTENT_TYPE

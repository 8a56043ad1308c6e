"""Detect the real container format of an upload from its leading bytes."""

from __future__ import annotations

from enum import StrEnum

ZIP_MAGIC = b"\x50\x4b"  # OOXML workbooks are zip archives ("PK")
COMPOUND_FILE_MAGIC = b"\xd0\xcf"  # Excel 97-2003 (CFB/OLE2)


class FileFormat(StrEnum):
    SPREADSHEET = "spreadsheet"
    DELIMITED_TEXT = "delimited_text"


def sniff_format(data: bytes) -> FileFormat:
    """Return the container format; the filename extension is never consulted."""
    head = data[:2]
    if head in (ZIP_MAGIC, COMPOUND_FILE_MAGIC):
        return FileFormat.SPREADSHEET
    return FileFormat.DELIMITED_TEXT


def is_compound_file(data: bytes) -> bool:
    return data[:2] == COMPOUND_FILE_MAGIC

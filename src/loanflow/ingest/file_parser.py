"""FileParserService turns raw upload bytes into header-keyed rows."""

from __future__ import annotations

import io
import re
from datetime import date, datetime, time
from typing import Any, Iterable

import openpyxl
import xlrd

from loanflow.core.config import IngestConfig
from loanflow.core.exceptions import UnreadableFileError
from loanflow.core.logging import get_logger
from loanflow.core.types import RawRow
from loanflow.ingest.format_sniffer import FileFormat, is_compound_file, sniff_format

logger = get_logger(__name__)

BOM = "\ufeff"
_LINE_BREAK = re.compile(r"\r?\n")


def split_delimited_line(line: str) -> list[str]:
    """Split one comma-delimited line, honouring double-quote quoting.

    A doubled quote inside a quoted section is a literal quote. Every field
    is trimmed of surrounding whitespace.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1
    fields.append("".join(current).strip())
    return fields


def cell_to_text(value: Any) -> str:
    """Render a spreadsheet cell value as the raw string the mappers expect."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def _rows_from_grid(grid: Iterable[Iterable[Any]]) -> list[RawRow]:
    """Use the first grid row as headers and zip the rest against it."""
    rows: list[RawRow] = []
    headers: list[str] | None = None
    for values in grid:
        texts = [cell_to_text(v) for v in values]
        if headers is None:
            headers = [t.strip() for t in texts]
            continue
        row: RawRow = {}
        for index, header in enumerate(headers):
            if not header:
                continue
            row[header] = texts[index] if index < len(texts) else ""
        if any(v.strip() for v in row.values()):
            rows.append(row)
    return rows


class FileParserService:
    """Parses spreadsheet (xlsx/xls) or delimited-text uploads into RawRows."""

    def __init__(self, config: IngestConfig | None = None) -> None:
        self._config = config or IngestConfig()

    def parse(self, data: bytes) -> list[RawRow]:
        file_format = sniff_format(data)
        logger.debug("file_format_sniffed", file_format=str(file_format), size=len(data))
        if file_format is FileFormat.SPREADSHEET:
            if is_compound_file(data):
                return self.parse_legacy_workbook(data)
            return self.parse_workbook(data)
        return self.parse_delimited(data)

    # ---- spreadsheets ----

    def parse_workbook(self, data: bytes) -> list[RawRow]:
        """First worksheet of an OOXML workbook; empty cells become ``""``."""
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        except Exception as exc:
            raise UnreadableFileError(f"Could not open workbook: {exc}") from exc
        try:
            if not workbook.worksheets:
                return []
            # read_only sheets parse their XML lazily, while iterating.
            return _rows_from_grid(workbook.worksheets[0].iter_rows(values_only=True))
        except Exception as exc:
            raise UnreadableFileError(f"Could not read worksheet: {exc}") from exc
        finally:
            workbook.close()

    def parse_legacy_workbook(self, data: bytes) -> list[RawRow]:
        """First sheet of an Excel 97-2003 workbook."""
        try:
            book = xlrd.open_workbook(file_contents=data)
        except Exception as exc:
            raise UnreadableFileError(f"Could not open legacy workbook: {exc}") from exc
        if book.nsheets == 0:
            return []
        sheet = book.sheet_by_index(0)
        grid = (
            [self._legacy_cell_value(cell, book.datemode) for cell in sheet.row(r)]
            for r in range(sheet.nrows)
        )
        return _rows_from_grid(grid)

    @staticmethod
    def _legacy_cell_value(cell: Any, datemode: int) -> Any:
        if cell.ctype == xlrd.XL_CELL_DATE:
            return xlrd.xldate.xldate_as_datetime(cell.value, datemode)
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(cell.value)
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
            return None
        return cell.value

    # ---- delimited text ----

    def parse_delimited(self, data: bytes) -> list[RawRow]:
        """Comma-delimited text with header-row discovery.

        Returns an empty list when no line within the scan window carries
        every header sentinel.
        """
        text = data.decode("utf-8", errors="replace")
        if text.startswith(BOM):
            text = text[1:]
        lines = _LINE_BREAK.split(text)

        header_index = self.find_header_line(lines)
        if header_index is None:
            logger.info("header_row_not_found", scanned=min(len(lines), self._config.header_scan_lines))
            return []

        headers = split_delimited_line(lines[header_index])
        rows: list[RawRow] = []
        for line in lines[header_index + 1:]:
            if not line.strip():
                continue
            values = split_delimited_line(line)
            row: RawRow = {}
            for index, header in enumerate(headers):
                if not header:
                    continue
                row[header] = values[index] if index < len(values) else ""
            if any(v != "" for v in row.values()):
                rows.append(row)
        return rows

    def find_header_line(self, lines: list[str]) -> int | None:
        sentinels = self._config.header_sentinels
        for index, line in enumerate(lines[: self._config.header_scan_lines]):
            if all(sentinel in line for sentinel in sentinels):
                return index
        return None

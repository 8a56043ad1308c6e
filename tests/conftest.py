"""Shared fixtures: in-memory backends and upload file builders."""

from __future__ import annotations

import csv
import io
import zipfile
from datetime import date

import openpyxl
import pytest

from loanflow.core.config import AppSettings
from loanflow.persistence.memory_backend import MemoryLoanStore

DAILY_METRICS_HEADERS = [
    "Loan ID", "Investor", "Investor Name", "First Name", "Last Name", "State",
    "Prin Bal", "Unapplied Bal", "Int Rate", "P&I Pmt", "Remg Term",
    "Next Pymt Due", "Last Pymt Received", "Maturity Date", "Loan Type",
    "Legal Status", "Pymt Method",
]

FORECLOSURE_HEADERS = [
    "Loan ID", "Investor ID", "FC Jurisdiction", "FC Status", "FC Start Date",
    "FC Closed Date", "Active FC Days", "Total FC Days", "FC Atty POC Phone",
]


def daily_row(loan_id: str, prin_bal: str = "$125,000.50", state: str = "TX") -> list[str]:
    return [
        loan_id, "INV1", "Fannie Mae", "Ada", "Lovelace", state,
        prin_bal, "0", "5.25%", "$950.00", "300",
        "2024-02-01", "01/01/2024", "2049-01-01", "Conv",
        "Current", "ACH",
    ]


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings()


@pytest.fixture
def store() -> MemoryLoanStore:
    return MemoryLoanStore()


@pytest.fixture
def make_csv():
    """Build CSV bytes with optional preamble lines above the header row."""
    def _make(headers: list[str], rows: list[list[str]], preamble: tuple[str, ...] = ()) -> bytes:
        buf = io.StringIO()
        for line in preamble:
            buf.write(line + "\r\n")
        writer = csv.writer(buf, lineterminator="\r\n")
        writer.writerow(headers)
        writer.writerows(rows)
        return buf.getvalue().encode("utf-8")
    return _make


@pytest.fixture
def make_xlsx():
    """Build an in-memory OOXML workbook whose first sheet holds the rows."""
    def _make(headers: list[str], rows: list[list[object]]) -> bytes:
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.append(headers)
        for row in rows:
            sheet.append(row)
        buf = io.BytesIO()
        workbook.save(buf)
        return buf.getvalue()
    return _make


@pytest.fixture
def daily_metrics_csv(make_csv) -> bytes:
    return make_csv(DAILY_METRICS_HEADERS, [daily_row("1001"), daily_row("1002", state="FL")])


@pytest.fixture
def foreclosure_xlsx(make_xlsx) -> bytes:
    return make_xlsx(FORECLOSURE_HEADERS, [
        ["L1", "INV9", "Judicial", "Closed - Reinstated", date(2022, 3, 1), date(2023, 6, 1), 0, 450, None],
        ["L1", "INV9", "Judicial", "Sale Scheduled", date(2023, 9, 1), None, 120, 180, "(650) 253-0000"],
        ["L2", "INV9", "Bankruptcy Ch 13", "Active", date(2023, 1, 5), None, 30, 30, None],
        ["L3", "INV4", "NonJudicial", "Closed - Paid Off", date(2021, 1, 1), date(2021, 8, 1), 0, 212, None],
    ])


@pytest.fixture
def daily_metrics_headers() -> list[str]:
    return list(DAILY_METRICS_HEADERS)


@pytest.fixture
def foreclosure_headers() -> list[str]:
    return list(FORECLOSURE_HEADERS)


@pytest.fixture
def make_daily_csv(make_csv):
    """CSV bytes with the full daily metrics header; rows are (loan_id, prin_bal, state)."""
    def _make(*rows: tuple[str, str, str]) -> bytes:
        return make_csv(DAILY_METRICS_HEADERS, [daily_row(*row) for row in rows])
    return _make


@pytest.fixture
def truncate_first_sheet():
    """Rewrite an xlsx so its first worksheet's XML stops halfway through."""
    def _truncate(data: bytes) -> bytes:
        src = zipfile.ZipFile(io.BytesIO(data))
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as out:
            for info in src.infolist():
                content = src.read(info.filename)
                if info.filename == "xl/worksheets/sheet1.xml":
                    content = content[: len(content) // 2]
                out.writestr(info, content)
        return buf.getvalue()
    return _truncate

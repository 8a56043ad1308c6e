"""Type aliases used across LoanFlow."""

from __future__ import annotations

from typing import Any

JsonDict = dict[str, Any]
RawRow = dict[str, str]  # header text -> raw cell text

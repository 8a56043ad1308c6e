"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from loanflow.core.protocols import ICacheBackend, IFileStore, ILoanStore

__all__ = ["ICacheBackend", "IFileStore", "ILoanStore"]

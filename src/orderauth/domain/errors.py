"""Domain-specific exceptions."""

from __future__ import annotations

from typing import Optional


class LedgerRequestError(Exception):
    """Raised when a ledger call fails, for business or transport reasons.

    ``message`` is the human-readable text reported by the ledger (or by the
    transport layer); it is what error classification works on.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code


class OrderNotFoundError(LedgerRequestError):
    """Raised when an order token is unknown, expired, or already consumed."""


class WorkflowCancelledError(Exception):
    """Raised when a result arrives for a workflow that has been torn down."""


class NavigationAlreadyScheduledError(RuntimeError):
    """Raised when a navigation is scheduled while another one is pending."""

"""FastAPI dependencies for the sandbox ledger API."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Cookie, Depends

from ...application.sandbox.use_cases.ledger import SandboxLedgerService
from ...infrastructure.sandbox.order_book import SandboxOrderBook

SESSION_COOKIE_NAME = "ledger_session"


@lru_cache()
def get_order_book() -> SandboxOrderBook:
    """Get the process-wide sandbox order book."""
    return SandboxOrderBook.with_demo_data()


def get_sandbox_ledger_service(
    order_book: SandboxOrderBook = Depends(get_order_book),
) -> SandboxLedgerService:
    """Get sandbox ledger service."""
    return SandboxLedgerService(order_book)


def get_session_username(
    ledger_session: Optional[str] = Cookie(None, alias=SESSION_COOKIE_NAME),
) -> Optional[str]:
    """Return the logged-in username carried by the session cookie."""
    return ledger_session or None

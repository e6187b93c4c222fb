"""In-memory order book backing the sandbox ledger API."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncIterator, Dict, Optional

from ...domain.order.entities import Merchant
from ...domain.sandbox.entities import LedgerAccount, LedgerOrder


class SandboxOrderBook:
    """Keeps accounts and orders in process memory.

    Mutations that span several records go through ``transaction()``, which
    serializes them so two payments of the same order cannot interleave.
    """

    def __init__(self) -> None:
        self._orders: Dict[str, LedgerOrder] = {}
        self._accounts: Dict[str, LedgerAccount] = {}
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SandboxOrderBook"]:
        async with self._lock:
            yield self

    async def get_order(self, order_no: str) -> Optional[LedgerOrder]:
        return self._orders.get(order_no)

    async def save_order(self, order: LedgerOrder) -> LedgerOrder:
        self._orders[order.order_no] = order
        return order

    async def get_account(self, username: str) -> Optional[LedgerAccount]:
        return self._accounts.get(username)

    async def save_account(self, account: LedgerAccount) -> LedgerAccount:
        self._accounts[account.username] = account
        return account

    @classmethod
    def with_demo_data(cls) -> "SandboxOrderBook":
        """Build an order book with a payer, a merchant and a few orders."""
        book = cls()
        book._accounts["alice"] = LedgerAccount(
            username="alice",
            pay_key="123456",
            balance=Decimal("100.00"),
            daily_limit=Decimal("50.00"),
        )
        book._accounts["shop"] = LedgerAccount(username="shop", pay_key="654321")
        merchant = Merchant(app_name="Demo Shop", redirect_uri="https://shop.example/done")
        # Demo orders never expire, except the one that shows the expiry rule.
        expired_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        for order_no, amount, expires_at in (
            ("demo-order-1", "10.00", None),
            ("demo-order-2", "60.00", None),
            ("demo-order-expired", "5.00", expired_at),
        ):
            book._orders[order_no] = LedgerOrder(
                order_no=order_no,
                amount=Decimal(amount),
                payee_username="shop",
                order_name="Demo purchase",
                expires_at=expires_at,
                merchant=merchant,
            )
        return book

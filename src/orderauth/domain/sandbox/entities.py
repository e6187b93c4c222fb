"""Sandbox ledger entities: LedgerAccount and LedgerOrder."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..order.entities import Merchant, OrderStatus


class LedgerAccount(BaseModel):
    """A ledger account able to pay orders."""

    username: str = Field(..., min_length=1)
    pay_key: str = Field(..., min_length=6, max_length=6)
    balance: Decimal = Field(Decimal("0"), ge=0)
    daily_limit: Optional[Decimal] = Field(None, ge=0)
    spent_today: Decimal = Field(Decimal("0"), ge=0)

    def can_spend_today(self, amount: Decimal) -> bool:
        if self.daily_limit is None:
            return True
        return self.spent_today + amount <= self.daily_limit

    def debit(self, amount: Decimal) -> None:
        self.balance -= amount
        self.spent_today += amount

    def credit(self, amount: Decimal) -> None:
        self.balance += amount


class LedgerOrder(BaseModel):
    """An order as the ledger stores it."""

    order_no: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    payee_username: str = Field(..., min_length=1)
    status: OrderStatus = OrderStatus.PENDING
    payer_username: Optional[str] = None
    order_name: Optional[str] = None
    remark: Optional[str] = None
    expires_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    merchant: Optional[Merchant] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at

    def mark_paid(self, payer_username: str) -> None:
        self.status = OrderStatus.SUCCESS
        self.payer_username = payer_username
        self.paid_at = datetime.now(timezone.utc)

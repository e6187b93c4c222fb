"""Order domain entities: Order, Merchant and OrderStatus."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class OrderStatus(str, Enum):
    """Lifecycle status of an order as reported by the ledger."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


class Merchant(BaseModel):
    """Merchant that owns an order."""

    model_config = ConfigDict(extra="ignore")

    app_name: Optional[str] = None
    redirect_uri: Optional[str] = None

    @property
    def redirect_destination(self) -> Optional[str]:
        """Return the redirect URI when it is set and not blank."""
        if self.redirect_uri and self.redirect_uri.strip():
            return self.redirect_uri.strip()
        return None


class Order(BaseModel):
    """A single authorizable order, addressed by its opaque token."""

    model_config = ConfigDict(extra="ignore")

    order_no: str = Field(..., min_length=1)
    status: OrderStatus
    amount: Decimal = Field(..., ge=0)
    payer_name: str = ""
    payee_name: str = ""
    order_name: Optional[str] = None
    remark: Optional[str] = None
    expires_at: Optional[datetime] = None
    merchant: Optional[Merchant] = None

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return f"{value:.2f}"

    @property
    def is_pending(self) -> bool:
        return self.status is OrderStatus.PENDING

    def mark_succeeded(self) -> "Order":
        """Return a copy of this order with status ``success``."""
        return self.model_copy(update={"status": OrderStatus.SUCCESS})

    def reconcile(self, newer: "Order") -> "Order":
        """Merge a newer observation of the same order into this one.

        Status only moves forward: once a terminal status has been observed,
        a later ``pending`` observation (a stale response arriving out of
        order) does not bring the order back to ``pending``.
        """
        if self.status.is_terminal and not newer.status.is_terminal:
            return newer.model_copy(update={"status": self.status})
        return newer

"""Data Transfer Objects for the order authorization application layer."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ...domain.order.entities import Merchant, Order, OrderStatus


class LedgerEnvelopeDTO(BaseModel):
    """Common JSON envelope of every ledger response."""

    model_config = ConfigDict(extra="ignore")

    data: Any = None
    error_msg: str = ""
    error_code: Optional[str] = None


class GetOrderRequestDTO(BaseModel):
    """DTO for looking up an order by its opaque token."""

    order_no: str = Field(..., min_length=1)


class AuthorizeOrderRequestDTO(BaseModel):
    """DTO for authorizing an order with the user's secret."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"order_no": "b3JkZXItMDAx", "pay_key": "123456"}}
    )

    order_no: str = Field(..., min_length=1)
    pay_key: str = Field(..., min_length=1)


class OrderDTO(BaseModel):
    """Order part of the ledger's order lookup response."""

    model_config = ConfigDict(extra="ignore")

    status: OrderStatus
    amount: Decimal = Field(..., ge=0)
    payer_name: str = ""
    payee_name: str = ""
    order_name: Optional[str] = None
    remark: Optional[str] = None
    expires_at: Optional[datetime] = None

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return f"{value:.2f}"

    @field_serializer("expires_at")
    def serialize_expires_at(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None


class MerchantDTO(BaseModel):
    """Merchant part of the ledger's order lookup response."""

    model_config = ConfigDict(extra="ignore")

    app_name: Optional[str] = None
    redirect_uri: Optional[str] = None


class MerchantOrderResponseDTO(BaseModel):
    """DTO for the ledger's order lookup response."""

    order: OrderDTO
    merchant: Optional[MerchantDTO] = None

    def to_entity(self, order_no: str) -> Order:
        """Build the domain order, keyed by the token it was fetched with."""
        merchant = (
            Merchant(**self.merchant.model_dump()) if self.merchant is not None else None
        )
        return Order(
            order_no=order_no,
            status=self.order.status,
            amount=self.order.amount,
            payer_name=self.order.payer_name,
            payee_name=self.order.payee_name,
            order_name=self.order.order_name,
            remark=self.order.remark,
            expires_at=self.order.expires_at,
            merchant=merchant,
        )

"""Use cases for the sandbox ledger: order lookup and payment."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from ....domain.errors import LedgerRequestError, OrderNotFoundError
from ....domain.order.entities import OrderStatus
from ....domain.sandbox.entities import LedgerOrder
from ....infrastructure.sandbox.order_book import SandboxOrderBook
from ...order.dtos import (
    AuthorizeOrderRequestDTO,
    MerchantDTO,
    MerchantOrderResponseDTO,
    OrderDTO,
)

logger = logging.getLogger(__name__)

# Ledger error texts, as the production ledger words them.
ORDER_NOT_FOUND = "订单不存在"
ORDER_EXPIRED = "订单已过期"
ORDER_COMPLETED = "订单已完成"
ORDER_STATUS_INVALID = "订单状态不允许支付"
NOT_LOGGED_IN = "未登录"
INVALID_PAY_KEY = "安全密码错误"
CANNOT_PAY_OWN_ORDER = "不能支付自己的订单"
INSUFFICIENT_BALANCE = "余额不足"
DAILY_LIMIT_EXCEEDED = "超过当日支付限额"


class SandboxLedgerService:
    """Serves order lookups and payments from a ``SandboxOrderBook``."""

    def __init__(
        self,
        order_book: SandboxOrderBook,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.order_book = order_book
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get_order(self, order_no: str) -> MerchantOrderResponseDTO:
        order = await self.order_book.get_order(order_no)
        if order is None or order.is_expired(self._clock()):
            raise OrderNotFoundError(ORDER_NOT_FOUND, status_code=404)
        return _to_response(order)

    async def pay_order(
        self, payer_username: Optional[str], dto: AuthorizeOrderRequestDTO
    ) -> None:
        """Pay an order from the logged-in payer's account.

        Raises:
            LedgerRequestError: With the ledger's error text when a rule fails.
        """
        if not payer_username:
            raise LedgerRequestError(NOT_LOGGED_IN, status_code=401)

        async with self.order_book.transaction() as book:
            order = await book.get_order(dto.order_no)
            if order is None:
                raise OrderNotFoundError(ORDER_NOT_FOUND, status_code=404)
            if order.status is OrderStatus.SUCCESS:
                raise LedgerRequestError(ORDER_COMPLETED, status_code=400)
            if order.status is not OrderStatus.PENDING:
                raise LedgerRequestError(ORDER_STATUS_INVALID, status_code=400)
            if order.is_expired(self._clock()):
                raise LedgerRequestError(ORDER_EXPIRED, status_code=400)

            payer = await book.get_account(payer_username)
            if payer is None:
                raise LedgerRequestError(NOT_LOGGED_IN, status_code=401)
            if payer.username == order.payee_username:
                raise LedgerRequestError(CANNOT_PAY_OWN_ORDER, status_code=400)
            if payer.pay_key != dto.pay_key:
                raise LedgerRequestError(INVALID_PAY_KEY, status_code=400)
            if payer.balance < order.amount:
                raise LedgerRequestError(INSUFFICIENT_BALANCE, status_code=400)
            if not payer.can_spend_today(order.amount):
                raise LedgerRequestError(DAILY_LIMIT_EXCEEDED, status_code=400)

            payee = await book.get_account(order.payee_username)
            if payee is None:
                raise LedgerRequestError(ORDER_STATUS_INVALID, status_code=400)

            payer.debit(order.amount)
            payee.credit(order.amount)
            order.mark_paid(payer.username)
            await book.save_account(payer)
            await book.save_account(payee)
            await book.save_order(order)

        logger.info("Order paid by %s amount=%s", payer_username, order.amount)


def _to_response(order: LedgerOrder) -> MerchantOrderResponseDTO:
    merchant = (
        MerchantDTO(**order.merchant.model_dump()) if order.merchant is not None else None
    )
    return MerchantOrderResponseDTO(
        order=OrderDTO(
            status=order.status,
            amount=order.amount,
            payer_name=order.payer_username or "",
            payee_name=order.payee_username,
            order_name=order.order_name,
            remark=order.remark,
            expires_at=order.expires_at,
        ),
        merchant=merchant,
    )

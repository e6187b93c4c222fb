"""Freshness-checked order authorization."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ....domain.errors import LedgerRequestError
from ....domain.order.entities import Order
from ....domain.shared import CancellationToken, LedgerClientProtocol
from ..dtos import AuthorizeOrderRequestDTO
from .order_gateway import OrderGateway

logger = logging.getLogger(__name__)

SECRET_LENGTH = 6
SECRET_REQUIRED_MESSAGE = "请输入安全密码"
SECRET_LENGTH_MESSAGE = f"安全密码长度为{SECRET_LENGTH}位，请重新输入"


def validate_secret(secret: str) -> Optional[str]:
    """Return a validation message for ``secret``, or ``None`` when it is usable."""
    if not secret or not secret.strip():
        return SECRET_REQUIRED_MESSAGE
    if len(secret) != SECRET_LENGTH:
        return SECRET_LENGTH_MESSAGE
    return None


class OutcomeKind(str, Enum):
    SUCCEEDED = "succeeded"
    STATE_CHANGED = "state_changed"
    FAILED = "failed"
    INVALID_SECRET = "invalid_secret"


@dataclass(frozen=True)
class AuthorizationOutcome:
    """What happened to one authorization attempt.

    - ``STATE_CHANGED`` carries the freshly read order.
    - ``FAILED`` carries the raw ledger error, unclassified.
    - ``INVALID_SECRET`` carries the local validation message.
    """

    kind: OutcomeKind
    fresh_order: Optional[Order] = None
    error: Optional[LedgerRequestError] = None
    message: Optional[str] = None

    @classmethod
    def succeeded(cls) -> "AuthorizationOutcome":
        return cls(kind=OutcomeKind.SUCCEEDED)

    @classmethod
    def state_changed(cls, fresh_order: Order) -> "AuthorizationOutcome":
        return cls(kind=OutcomeKind.STATE_CHANGED, fresh_order=fresh_order)

    @classmethod
    def failed(cls, error: LedgerRequestError) -> "AuthorizationOutcome":
        return cls(kind=OutcomeKind.FAILED, error=error)

    @classmethod
    def invalid_secret(cls, message: str) -> "AuthorizationOutcome":
        return cls(kind=OutcomeKind.INVALID_SECRET, message=message)


class AuthorizationSubmitter:
    """Submits an authorization after re-reading the order.

    The order is fetched again right before the write, so an order that
    stopped being ``pending`` after it was displayed is never authorized.
    This narrows the window between display and submission; closing it is
    the ledger's job.
    """

    def __init__(
        self,
        gateway: OrderGateway,
        ledger_client: LedgerClientProtocol,
    ) -> None:
        self.gateway = gateway
        self.ledger_client = ledger_client

    async def submit(
        self,
        order_no: str,
        secret: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> AuthorizationOutcome:
        # 1) Local secret check, no network
        message = validate_secret(secret)
        if message is not None:
            return AuthorizationOutcome.invalid_secret(message)

        # 2) Fresh read
        try:
            fresh_order = await self.gateway.fetch(order_no, cancellation)
        except LedgerRequestError as e:
            return AuthorizationOutcome.failed(e)

        # 3) Abort when the order is no longer authorizable
        if not fresh_order.is_pending:
            logger.info(
                "Order changed to %s before authorization; not submitting",
                fresh_order.status.value,
            )
            return AuthorizationOutcome.state_changed(fresh_order)

        # 4) Write
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        try:
            await self.ledger_client.authorize_order(
                AuthorizeOrderRequestDTO(order_no=order_no, pay_key=secret)
            )
        except LedgerRequestError as e:
            return AuthorizationOutcome.failed(e)
        return AuthorizationOutcome.succeeded()

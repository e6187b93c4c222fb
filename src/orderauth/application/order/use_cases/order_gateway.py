"""Order lookup against the ledger."""

from __future__ import annotations

import logging
from typing import Optional

from ....domain.errors import OrderNotFoundError
from ....domain.order.entities import Order
from ....domain.shared import CancellationToken, LedgerClientProtocol
from ..dtos import GetOrderRequestDTO

logger = logging.getLogger(__name__)


class OrderGateway:
    """Fetches an order and its owning merchant by opaque token.

    Reads are idempotent and have no side effects beyond the network call, so
    the same token may be fetched any number of times.
    """

    def __init__(self, ledger_client: LedgerClientProtocol) -> None:
        self.ledger_client = ledger_client

    async def fetch(
        self,
        order_no: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> Order:
        """Fetch the current state of an order.

        Raises:
            OrderNotFoundError: If the token is empty, unknown, expired or consumed.
            LedgerRequestError: For any other ledger or transport failure.
            WorkflowCancelledError: If ``cancellation`` fires around the call.
        """
        if not order_no:
            raise OrderNotFoundError("订单不存在")
        if cancellation is not None:
            cancellation.raise_if_cancelled()

        response = await self.ledger_client.get_order(
            GetOrderRequestDTO(order_no=order_no)
        )

        if cancellation is not None:
            cancellation.raise_if_cancelled()
        order = response.to_entity(order_no)
        logger.debug("Fetched order status=%s", order.status.value)
        return order

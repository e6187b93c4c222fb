from __future__ import annotations

import logging
from typing import Dict, Optional, Type
from types import TracebackType

import httpx
from pydantic import ValidationError

from ...application.order.dtos import (
    AuthorizeOrderRequestDTO,
    GetOrderRequestDTO,
    MerchantOrderResponseDTO,
)
from ...domain.errors import LedgerRequestError, OrderNotFoundError
from ..http.http_client import INVALID_RESPONSE_MESSAGE, AsyncHttpClient

logger = logging.getLogger(__name__)

ORDER_PATH = "/merchant/payment/order"
PAY_PATH = "/merchant/payment/pay"


class AsyncLedgerClient:
    """Asynchronous client for talking to the ledger's payment HTTP API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        *,
        session_cookie: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        # base_url is expected to already contain any API prefix (e.g. /api/v1)
        cookies: Optional[Dict[str, str]] = None
        if session_cookie:
            name, _, value = session_cookie.partition("=")
            cookies = {name: value}
        self._http = AsyncHttpClient(
            base_url, timeout=timeout, cookies=cookies, transport=transport
        )

    async def get_order(self, dto: GetOrderRequestDTO) -> MerchantOrderResponseDTO:
        """Look up an order (and its merchant) by opaque token.

        A 404 answer is reported as ``OrderNotFoundError``; the ledger does not
        tell unknown, expired and consumed tokens apart.
        """
        try:
            data = await self._http.get(ORDER_PATH, params=dto.model_dump())
        except LedgerRequestError as e:
            if e.status_code == 404:
                raise OrderNotFoundError(
                    e.message, status_code=e.status_code, error_code=e.error_code
                ) from e
            raise
        if data is None:
            raise OrderNotFoundError("订单不存在")
        try:
            return MerchantOrderResponseDTO.model_validate(data)
        except ValidationError as e:
            logger.warning("Malformed order payload for %s: %s", ORDER_PATH, e)
            raise LedgerRequestError(INVALID_RESPONSE_MESSAGE) from e

    async def authorize_order(self, dto: AuthorizeOrderRequestDTO) -> None:
        """Authorize an order; the ledger answers with an empty payload."""
        await self._http.post(PAY_PATH, json=dto.model_dump())

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "AsyncLedgerClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()

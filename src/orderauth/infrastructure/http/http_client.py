from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type
from types import TracebackType

import httpx
from pydantic import ValidationError

from ...application.order.dtos import LedgerEnvelopeDTO
from ...domain.errors import LedgerRequestError

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "请求超时，请稍后重试"
NETWORK_MESSAGE = "网络连接失败，请检查您的网络"
SERVER_ERROR_MESSAGE = "服务器内部错误，请稍后重试"
INVALID_RESPONSE_MESSAGE = "服务器返回数据格式错误"

# Fallback texts used when an error response carries no readable message.
STATUS_MESSAGES: Dict[int, str] = {
    400: "请求参数验证失败",
    401: "未授权，请先登录",
    403: "权限不足",
    404: "请求的资源不存在",
}


class AsyncHttpClient:
    """Thin asynchronous HTTP client wrapper around httpx.AsyncClient.

    - Normalizes base URLs and paths.
    - Applies a default timeout.
    - Unwraps the ledger's ``{"data", "error_msg"}`` envelope.
    - Raises ``LedgerRequestError`` for error responses and transport failures
      alike, so callers see a single failure type with a readable message.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        *,
        cookies: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout, cookies=cookies, transport=transport
        )

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self._request("GET", path, **kwargs)

    async def post(
        self,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> Any:
        return await self._request("POST", path, json=json, **kwargs)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._url(path)
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out: %s", method, url, e)
            raise LedgerRequestError(TIMEOUT_MESSAGE) from e
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise LedgerRequestError(NETWORK_MESSAGE) from e

        envelope = _parse_envelope(resp)
        if resp.is_error or envelope.error_msg:
            message = envelope.error_msg or _fallback_message(resp.status_code)
            logger.info(
                "%s %s rejected with status %s: %s",
                method,
                url,
                resp.status_code,
                message,
            )
            raise LedgerRequestError(
                message,
                status_code=resp.status_code,
                error_code=envelope.error_code,
            )
        return envelope.data

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()


def _parse_envelope(resp: httpx.Response) -> LedgerEnvelopeDTO:
    try:
        return LedgerEnvelopeDTO.model_validate(resp.json())
    except (ValueError, ValidationError):
        # Non-JSON bodies (proxies, gateways) carry no envelope.
        return LedgerEnvelopeDTO()


def _fallback_message(status_code: int) -> str:
    if status_code >= 500:
        return SERVER_ERROR_MESSAGE
    return STATUS_MESSAGES.get(status_code, f"请求失败 ({status_code})")

"""Merchant order payment API routes (sandbox ledger)."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram

from ....application.order.dtos import AuthorizeOrderRequestDTO
from ....application.sandbox.use_cases.ledger import SandboxLedgerService
from ....domain.errors import LedgerRequestError
from ..dependencies import get_sandbox_ledger_service, get_session_username

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/merchant/payment", tags=["merchant", "payment"])

REQUEST_DURATION_BUCKETS = (
    [round(0.5 * i, 1) for i in range(1, 21)]
    + [float(x) for x in range(15, 55, 5)]
    + [float("inf")]
)

ledger_requests_total = Counter(
    "sandbox_ledger_requests_total",
    "Total sandbox ledger requests processed",
    ["operation", "status"],
)
ledger_request_duration_milliseconds = Histogram(
    "sandbox_ledger_request_duration_milliseconds",
    "Wall time to process a sandbox ledger request (ms)",
    ["operation", "status"],
    buckets=REQUEST_DURATION_BUCKETS,
)


def _envelope(data: Any = None, error_msg: str = "") -> dict[str, Any]:
    return {"data": data, "error_msg": error_msg}


def _observe(operation: str, status: str, start_time: float) -> None:
    ledger_requests_total.labels(operation=operation, status=status).inc()
    elapsed = (time.perf_counter() - start_time) * 1000
    ledger_request_duration_milliseconds.labels(
        operation=operation, status=status
    ).observe(elapsed)


@router.get("/order")
async def get_merchant_order(
    order_no: str = Query(..., min_length=1, description="Opaque order token"),
    ledger_service: SandboxLedgerService = Depends(get_sandbox_ledger_service),
) -> JSONResponse:
    """Look up an order and its merchant by token."""
    start_time = time.perf_counter()
    try:
        result = await ledger_service.get_order(order_no)
    except LedgerRequestError as e:
        _observe("get_order", "client_error", start_time)
        return JSONResponse(
            status_code=e.status_code or 400, content=_envelope(error_msg=e.message)
        )
    except Exception as e:
        logger.exception("Internal server error while reading order: %s", e)
        _observe("get_order", "server_error", start_time)
        return JSONResponse(
            status_code=500, content=_envelope(error_msg="服务器内部错误")
        )
    _observe("get_order", "success", start_time)
    return JSONResponse(content=_envelope(result.model_dump(mode="json")))


@router.post("/pay")
async def pay_merchant_order(
    pay_data: AuthorizeOrderRequestDTO,
    ledger_service: SandboxLedgerService = Depends(get_sandbox_ledger_service),
    session_username: Optional[str] = Depends(get_session_username),
) -> JSONResponse:
    """Pay an order from the logged-in account."""
    start_time = time.perf_counter()
    try:
        await ledger_service.pay_order(session_username, pay_data)
    except LedgerRequestError as e:
        _observe("pay_order", "client_error", start_time)
        return JSONResponse(
            status_code=e.status_code or 400, content=_envelope(error_msg=e.message)
        )
    except Exception as e:
        logger.exception("Internal server error while paying order: %s", e)
        _observe("pay_order", "server_error", start_time)
        return JSONResponse(
            status_code=500, content=_envelope(error_msg="服务器内部错误")
        )
    _observe("pay_order", "success", start_time)
    return JSONResponse(content=_envelope())

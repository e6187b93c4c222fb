"""Unit tests for AuthorizationSubmitter."""

from __future__ import annotations

import pytest

from orderauth.application.order.use_cases.authorization import (
    SECRET_LENGTH_MESSAGE,
    SECRET_REQUIRED_MESSAGE,
    AuthorizationSubmitter,
    OutcomeKind,
    validate_secret,
)
from orderauth.application.order.use_cases.order_gateway import OrderGateway
from orderauth.domain.errors import (
    LedgerRequestError,
    OrderNotFoundError,
    WorkflowCancelledError,
)
from orderauth.domain.order.entities import OrderStatus
from orderauth.domain.shared import CancellationToken
from tests.fixtures import InMemoryLedgerClient, make_order_response


class TestValidateSecret:
    def test_six_characters_is_valid(self) -> None:
        assert validate_secret("123456") is None

    def test_empty_is_required(self) -> None:
        assert validate_secret("") == SECRET_REQUIRED_MESSAGE
        assert validate_secret("   ") == SECRET_REQUIRED_MESSAGE

    @pytest.mark.parametrize("secret", ["1", "12345", "1234567", "abcdefgh"])
    def test_wrong_length(self, secret: str) -> None:
        assert validate_secret(secret) == SECRET_LENGTH_MESSAGE


@pytest.mark.asyncio
@pytest.mark.parametrize("secret", ["", "1", "12345", "1234567", "1234567890"])
async def test_bad_secret_makes_no_network_call(
    submitter: AuthorizationSubmitter,
    ledger_client: InMemoryLedgerClient,
    order_no: str,
    secret: str,
) -> None:
    outcome = await submitter.submit(order_no, secret)

    assert outcome.kind is OutcomeKind.INVALID_SECRET
    assert outcome.message in (SECRET_REQUIRED_MESSAGE, SECRET_LENGTH_MESSAGE)
    assert ledger_client.calls == []


@pytest.mark.asyncio
async def test_pending_order_is_authorized(
    submitter: AuthorizationSubmitter,
    ledger_client: InMemoryLedgerClient,
    order_no: str,
) -> None:
    outcome = await submitter.submit(order_no, "123456")

    assert outcome.kind is OutcomeKind.SUCCEEDED
    assert [name for name, _ in ledger_client.calls] == ["get_order", "authorize_order"]
    assert ledger_client.calls[1][1] == {"order_no": order_no, "pay_key": "123456"}


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [OrderStatus.SUCCESS, OrderStatus.FAILED])
async def test_non_pending_fresh_read_skips_write(
    order_no: str, status: OrderStatus
) -> None:
    ledger_client = InMemoryLedgerClient(make_order_response(status=status))

    submitter = AuthorizationSubmitter(OrderGateway(ledger_client), ledger_client)
    outcome = await submitter.submit(order_no, "123456")

    assert outcome.kind is OutcomeKind.STATE_CHANGED
    assert outcome.fresh_order is not None
    assert outcome.fresh_order.status is status
    assert ledger_client.get_order_calls == 1
    assert ledger_client.authorize_calls == 0


@pytest.mark.asyncio
async def test_authorize_failure_is_returned_raw(
    submitter: AuthorizationSubmitter,
    ledger_client: InMemoryLedgerClient,
    order_no: str,
) -> None:
    error = LedgerRequestError("余额不足", status_code=400)
    ledger_client.fail_authorize(error)

    outcome = await submitter.submit(order_no, "123456")

    assert outcome.kind is OutcomeKind.FAILED
    assert outcome.error is error


@pytest.mark.asyncio
async def test_fresh_read_failure_is_returned_raw(order_no: str) -> None:
    error = OrderNotFoundError("订单不存在", status_code=404)
    ledger_client = InMemoryLedgerClient(error)

    submitter = AuthorizationSubmitter(OrderGateway(ledger_client), ledger_client)
    outcome = await submitter.submit(order_no, "123456")

    assert outcome.kind is OutcomeKind.FAILED
    assert outcome.error is error
    assert ledger_client.authorize_calls == 0


@pytest.mark.asyncio
async def test_cancelled_token_stops_before_any_call(
    submitter: AuthorizationSubmitter,
    ledger_client: InMemoryLedgerClient,
    order_no: str,
) -> None:
    cancellation = CancellationToken()
    cancellation.cancel()

    with pytest.raises(WorkflowCancelledError):
        await submitter.submit(order_no, "123456", cancellation)
    assert ledger_client.calls == []

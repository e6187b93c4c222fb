"""Shared pytest fixtures for order authorization tests."""

from __future__ import annotations

from typing import Any, Callable, Optional

import pytest

from orderauth.application.order.use_cases.authorization import AuthorizationSubmitter
from orderauth.application.order.use_cases.error_classifier import ErrorClassifier
from orderauth.application.order.use_cases.navigation import NavigationScheduler
from orderauth.application.order.use_cases.order_gateway import OrderGateway
from orderauth.application.order.use_cases.workflow import WorkflowController
from tests.fixtures import (
    InMemoryLedgerClient,
    ManualLoop,
    RecordingListener,
    RecordingNavigator,
    make_order_response,
)

ORDER_NO = "b3JkZXItdG9rZW4tMDAx"


@pytest.fixture
def order_no() -> str:
    """Opaque order token used across tests."""
    return ORDER_NO


@pytest.fixture
def ledger_client() -> InMemoryLedgerClient:
    """Ledger whose order is pending by default."""
    return InMemoryLedgerClient(make_order_response())


@pytest.fixture
def gateway(ledger_client: InMemoryLedgerClient) -> OrderGateway:
    return OrderGateway(ledger_client)


@pytest.fixture
def submitter(
    gateway: OrderGateway, ledger_client: InMemoryLedgerClient
) -> AuthorizationSubmitter:
    return AuthorizationSubmitter(gateway, ledger_client)


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def manual_loop() -> ManualLoop:
    return ManualLoop()


@pytest.fixture
def scheduler(
    navigator: RecordingNavigator, manual_loop: ManualLoop
) -> NavigationScheduler:
    """Scheduler driven by ``manual_loop.advance`` instead of wall time."""
    return NavigationScheduler(navigator, loop=manual_loop)  # type: ignore[arg-type]


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def make_workflow(
    order_no: str,
    gateway: OrderGateway,
    submitter: AuthorizationSubmitter,
    scheduler: NavigationScheduler,
    listener: RecordingListener,
) -> Callable[..., WorkflowController]:
    """Factory for workflow controllers wired to the in-memory collaborators."""

    def _make(token: Optional[str] = order_no, **overrides: Any) -> WorkflowController:
        kwargs: dict[str, Any] = {
            "gateway": gateway,
            "submitter": submitter,
            "classifier": ErrorClassifier(),
            "scheduler": scheduler,
            "listeners": [listener],
        }
        kwargs.update(overrides)
        return WorkflowController(token, **kwargs)

    return _make

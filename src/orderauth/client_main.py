"""Interactive driver for the order authorization workflow."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
from typing import Optional, Sequence

import httpx

from .application.order.use_cases.authorization import AuthorizationSubmitter
from .application.order.use_cases.error_classifier import (
    Classification,
    ErrorClassifier,
)
from .application.order.use_cases.navigation import NavigationScheduler
from .application.order.use_cases.order_gateway import OrderGateway
from .application.order.use_cases.workflow import (
    NoticeLevel,
    Phase,
    WorkflowController,
    WorkflowListener,
)
from .domain.order.entities import Order
from .envs.workflow_env import Settings, get_settings
from .infrastructure.ledger.ledger_client import AsyncLedgerClient

logger = logging.getLogger(__name__)


class ConsoleNavigator:
    """Navigator that reports where the page would go and wakes the driver."""

    def __init__(self) -> None:
        self.destination: Optional[str] = None
        self.reload_requested = False
        self.done = asyncio.Event()

    def navigate(self, url: str) -> None:
        self.destination = url
        print(f"-> navigating to {url}")
        self.done.set()

    def reload(self) -> None:
        self.reload_requested = True
        print("-> reloading order view")
        self.done.set()


class ConsoleListener(WorkflowListener):
    def on_notice(self, level: NoticeLevel, message: str) -> None:
        print(f"[{level.value}] {message}")

    def on_classified_error(self, classification: Classification) -> None:
        logger.debug("classified as %s", classification.cause.value)


def _print_order(order: Order) -> None:
    print(f"Order: {order.order_name or order.order_no}")
    print(f"  amount: {order.amount:.2f}")
    print(f"  payee:  {order.payee_name}")
    print(f"  status: {order.status.value}")
    if order.merchant is not None and order.merchant.app_name:
        print(f"  merchant: {order.merchant.app_name}")


async def run_workflow(
    order_no: str,
    settings: Settings,
    secret: Optional[str] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Phase:
    """Run the workflow once for ``order_no`` and return the final phase."""
    navigator = ConsoleNavigator()
    async with AsyncLedgerClient(
        settings.ledger_base_url,
        timeout=settings.request_timeout,
        session_cookie=settings.session_cookie,
        transport=transport,
    ) as ledger_client:
        gateway = OrderGateway(ledger_client)
        workflow = WorkflowController(
            order_no,
            gateway=gateway,
            submitter=AuthorizationSubmitter(gateway, ledger_client),
            classifier=ErrorClassifier(),
            scheduler=NavigationScheduler(navigator),
            home_path=settings.home_path,
            success_redirect_delay_ms=settings.success_redirect_delay_ms,
            reload_delay_ms=settings.reload_delay_ms,
            listeners=[ConsoleListener()],
        )
        async with workflow:
            view = workflow.view()
            if view.phase is Phase.LOAD_FAILED:
                return view.phase
            if view.order is not None:
                _print_order(view.order)
            if view.order is None or not view.order.is_pending:
                return view.phase

            workflow.select_method("pay_key")
            if secret is None:
                secret = await asyncio.to_thread(getpass.getpass, "Security password: ")
            await workflow.submit(secret)

            if workflow.view().navigation_pending:
                await navigator.done.wait()
            if navigator.reload_requested:
                await workflow.retry()

            view = workflow.view()
            if view.order is not None and view.phase is not Phase.SUCCEEDED:
                _print_order(view.order)
            return view.phase


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Authorize a ledger order by token.")
    parser.add_argument("order_no", help="opaque order token")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    settings = get_settings()
    phase = asyncio.run(run_workflow(args.order_no, settings))
    return 0 if phase is Phase.SUCCEEDED else 1


if __name__ == "__main__":
    raise SystemExit(main())

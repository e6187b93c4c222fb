"""Order authorization workflow state machine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Type
from types import TracebackType

from pydantic import BaseModel, ConfigDict

from ....domain.errors import LedgerRequestError, WorkflowCancelledError
from ....domain.order.entities import Order
from ....domain.shared import CancellationToken
from .authorization import (
    AuthorizationOutcome,
    AuthorizationSubmitter,
    OutcomeKind,
    validate_secret,
)
from .error_classifier import Cause, Classification, ErrorClassifier
from .navigation import (
    NavigationHandle,
    NavigationScheduler,
    NavigationTarget,
    resolve_success_target,
)
from .order_gateway import OrderGateway

logger = logging.getLogger(__name__)

MISSING_ORDER_NO_MESSAGE = "缺少认证编号"
STATE_CHANGED_MESSAGE = "此积分流转服务状态已变更，无法认证"
SUCCESS_MESSAGE = "积分流转服务认证成功！"
LOAD_OPERATION = "查询认证信息"
AUTHORIZE_OPERATION = "认证"


class Phase(str, Enum):
    LOADING = "Loading"
    LOAD_FAILED = "LoadFailed"
    AWAITING_INPUT = "AwaitingInput"
    SUBMITTING = "Submitting"
    SUCCEEDED = "Succeeded"


class Step(str, Enum):
    METHOD = "method"
    PAY = "pay"


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class WorkflowListener:
    """Receives discrete workflow events. Override the hooks you need."""

    def on_phase_changed(self, phase: Phase) -> None:
        pass

    def on_notice(self, level: NoticeLevel, message: str) -> None:
        pass

    def on_classified_error(self, classification: Classification) -> None:
        pass


@dataclass
class WorkflowState:
    phase: Phase = Phase.LOADING
    order: Optional[Order] = None
    pending_navigation: Optional[NavigationHandle] = None
    error_message: Optional[str] = None
    step: Step = Step.METHOD
    selected_method: str = ""


class WorkflowView(BaseModel):
    """Read-only snapshot handed to the rendering layer."""

    model_config = ConfigDict(frozen=True)

    phase: Phase
    order: Optional[Order]
    error_message: Optional[str]
    step: Step
    selected_method: str
    navigation_pending: bool


class WorkflowController:
    """Drives one order token through load, submit and post-success navigation.

    The controller is the only writer of its ``WorkflowState``. Every
    asynchronous call receives the instance's ``CancellationToken``; after
    ``exit()`` late results are dropped instead of being written.

    Usage::

        async with WorkflowController(order_no, gateway=..., ...) as workflow:
            await workflow.submit("123456")
    """

    def __init__(
        self,
        order_no: Optional[str],
        *,
        gateway: OrderGateway,
        submitter: AuthorizationSubmitter,
        classifier: ErrorClassifier,
        scheduler: NavigationScheduler,
        home_path: str = "/home",
        success_redirect_delay_ms: int = 5000,
        reload_delay_ms: int = 500,
        listeners: Iterable[WorkflowListener] = (),
    ) -> None:
        self.order_no = order_no
        self.gateway = gateway
        self.submitter = submitter
        self.classifier = classifier
        self.scheduler = scheduler
        self.home_path = home_path
        self.success_redirect_delay_ms = success_redirect_delay_ms
        self.reload_delay_ms = reload_delay_ms
        self._listeners: List[WorkflowListener] = list(listeners)

        self._state = WorkflowState()
        self._cancellation = CancellationToken()
        self._load_seq = 0
        self._reload_scheduled = False

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def alive(self) -> bool:
        return not self._cancellation.cancelled

    def add_listener(self, listener: WorkflowListener) -> None:
        self._listeners.append(listener)

    def view(self) -> WorkflowView:
        handle = self._state.pending_navigation
        return WorkflowView(
            phase=self._state.phase,
            order=self._state.order,
            error_message=self._state.error_message,
            step=self._state.step,
            selected_method=self._state.selected_method,
            navigation_pending=handle is not None and handle.pending,
        )

    # Lifecycle

    async def enter(self) -> None:
        """Load the order for this instance's token."""
        await self._load()

    async def retry(self) -> None:
        """Reload the order, as re-entering the workflow would."""
        if self._state.phase in (Phase.SUBMITTING, Phase.SUCCEEDED):
            logger.debug("Ignoring retry in phase %s", self._state.phase.value)
            return
        await self._load()

    def exit(self) -> None:
        """Tear the instance down: cancel the pending navigation and drop late results."""
        if not self.alive:
            return
        self._cancellation.cancel()
        handle = self._state.pending_navigation
        if handle is not None:
            self.scheduler.cancel(handle)
            self._state.pending_navigation = None
        logger.debug("Workflow exited in phase %s", self._state.phase.value)

    async def __aenter__(self) -> "WorkflowController":
        await self.enter()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.exit()

    # Two-step surface

    def select_method(self, method: str) -> None:
        if not self.alive or self._state.phase is not Phase.AWAITING_INPUT:
            return
        self._state.selected_method = method
        self._state.step = Step.PAY

    def back_to_method(self) -> None:
        if not self.alive or self._state.phase is not Phase.AWAITING_INPUT:
            return
        self._state.step = Step.METHOD

    # Authorization

    async def submit(self, secret: str) -> None:
        """Authorize the order with ``secret``.

        Only accepted while awaiting input on a ``pending`` order with no
        navigation pending. A malformed secret is reported locally and never
        reaches the network.
        """
        state = self._state
        if not self.alive or state.phase is not Phase.AWAITING_INPUT:
            logger.debug("Ignoring submit in phase %s", state.phase.value)
            return
        if state.pending_navigation is not None and state.pending_navigation.pending:
            logger.debug("Ignoring submit while a navigation is pending")
            return
        if state.order is None or not state.order.is_pending:
            self._report_error(STATE_CHANGED_MESSAGE)
            return

        message = validate_secret(secret)
        if message is not None:
            self._report_error(message)
            return

        self._set_phase(Phase.SUBMITTING)
        try:
            outcome = await self.submitter.submit(
                self.order_no or "", secret, self._cancellation
            )
        except WorkflowCancelledError:
            return
        except Exception as e:
            logger.exception("Unexpected failure while authorizing order")
            outcome = AuthorizationOutcome.failed(LedgerRequestError(str(e)))

        if not self.alive:
            logger.debug("Dropping %s outcome for a torn-down workflow", outcome.kind.value)
            return
        self._apply_outcome(outcome)

    def _apply_outcome(self, outcome: AuthorizationOutcome) -> None:
        if outcome.kind is OutcomeKind.SUCCEEDED:
            self._on_succeeded()
        elif outcome.kind is OutcomeKind.STATE_CHANGED:
            if outcome.fresh_order is not None:
                self._store_order(outcome.fresh_order)
            self._set_phase(Phase.AWAITING_INPUT)
            self._report_error(STATE_CHANGED_MESSAGE)
        elif outcome.kind is OutcomeKind.INVALID_SECRET:
            self._set_phase(Phase.AWAITING_INPUT)
            self._report_error(outcome.message or AUTHORIZE_OPERATION + "失败")
        else:
            self._set_phase(Phase.AWAITING_INPUT)
            error = outcome.error or LedgerRequestError("")
            classification = self._classify(error, AUTHORIZE_OPERATION)
            if classification.cause is Cause.ALREADY_COMPLETED:
                self._schedule_reload()

    def _on_succeeded(self) -> None:
        if self._state.order is not None:
            self._state.order = self._state.order.mark_succeeded()
        self._state.error_message = None
        self._set_phase(Phase.SUCCEEDED)
        self._notify(NoticeLevel.SUCCESS, SUCCESS_MESSAGE)

        target = resolve_success_target(self._state.order, self.home_path)
        self._state.pending_navigation = self.scheduler.schedule_once(
            self.success_redirect_delay_ms, target
        )

    def _schedule_reload(self) -> None:
        # The cached view is stale; reload it once per instance.
        if self._reload_scheduled:
            return
        self._reload_scheduled = True
        self._state.pending_navigation = self.scheduler.schedule_once(
            self.reload_delay_ms, NavigationTarget.reload()
        )

    # Loading

    async def _load(self) -> None:
        if not self.alive:
            return
        if not self.order_no:
            self._state.order = None
            self._set_phase(Phase.LOAD_FAILED)
            self._report_error(MISSING_ORDER_NO_MESSAGE)
            return

        self._load_seq += 1
        seq = self._load_seq
        self._set_phase(Phase.LOADING)
        try:
            order = await self.gateway.fetch(self.order_no, self._cancellation)
        except WorkflowCancelledError:
            return
        except Exception as e:
            if not isinstance(e, LedgerRequestError):
                logger.exception("Unexpected failure while loading order")
                e = LedgerRequestError(str(e))
            if not self._is_current_load(seq):
                return
            self._state.order = None
            self._set_phase(Phase.LOAD_FAILED)
            self._classify(e, LOAD_OPERATION)
            return

        if not self._is_current_load(seq):
            logger.debug("Dropping superseded order read")
            return
        self._store_order(order)
        self._state.error_message = None
        self._set_phase(Phase.AWAITING_INPUT)

    def _is_current_load(self, seq: int) -> bool:
        return self.alive and seq == self._load_seq

    def _store_order(self, order: Order) -> None:
        cached = self._state.order
        if cached is not None and cached.order_no == order.order_no:
            order = cached.reconcile(order)
        self._state.order = order

    # State and events

    def _set_phase(self, phase: Phase) -> None:
        if self._state.phase is phase:
            return
        logger.debug("Workflow phase %s -> %s", self._state.phase.value, phase.value)
        self._state.phase = phase
        for listener in self._listeners:
            listener.on_phase_changed(phase)

    def _classify(self, error: LedgerRequestError, operation: str) -> Classification:
        classification = self.classifier.classify(
            error.message, error.error_code, operation=operation
        )
        logger.info(
            "%s failed: cause=%s message=%s",
            operation,
            classification.cause.value,
            classification.raw_message,
        )
        self._state.error_message = classification.message
        for listener in self._listeners:
            listener.on_classified_error(classification)
        self._notify(NoticeLevel.ERROR, classification.message)
        return classification

    def _report_error(self, message: str) -> None:
        self._state.error_message = message
        self._notify(NoticeLevel.ERROR, message)

    def _notify(self, level: NoticeLevel, message: str) -> None:
        for listener in self._listeners:
            listener.on_notice(level, message)

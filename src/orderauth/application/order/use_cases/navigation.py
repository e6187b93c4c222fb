"""Deferred, cancellable navigation after the workflow settles."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict

from ....domain.errors import NavigationAlreadyScheduledError
from ....domain.order.entities import Order

logger = logging.getLogger(__name__)


class NavigationKind(str, Enum):
    REDIRECT = "redirect"
    HOME = "home"
    RELOAD = "reload"


class NavigationTarget(BaseModel):
    """Where a scheduled navigation goes."""

    model_config = ConfigDict(frozen=True)

    kind: NavigationKind
    url: Optional[str] = None

    @classmethod
    def redirect(cls, url: str) -> "NavigationTarget":
        return cls(kind=NavigationKind.REDIRECT, url=url)

    @classmethod
    def home(cls, path: str) -> "NavigationTarget":
        return cls(kind=NavigationKind.HOME, url=path)

    @classmethod
    def reload(cls) -> "NavigationTarget":
        return cls(kind=NavigationKind.RELOAD)


def resolve_success_target(order: Optional[Order], home_path: str) -> NavigationTarget:
    """Pick the merchant's redirect URI when it is set, else the home path."""
    if order is not None and order.merchant is not None:
        destination = order.merchant.redirect_destination
        if destination:
            return NavigationTarget.redirect(destination)
    return NavigationTarget.home(home_path)


class Navigator(Protocol):
    """Performs navigations on behalf of the scheduler (the UI side)."""

    def navigate(self, url: str) -> None: ...

    def reload(self) -> None: ...


class HandleState(str, Enum):
    PENDING = "pending"
    FIRED = "fired"
    CANCELLED = "cancelled"


class NavigationHandle:
    """One scheduled navigation. Fired or cancelled handles stay that way."""

    def __init__(self, after_ms: int, target: NavigationTarget) -> None:
        self.after_ms = after_ms
        self.target = target
        self.state = HandleState.PENDING
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self.state is HandleState.PENDING

    def attach(self, timer: asyncio.TimerHandle) -> None:
        self._timer = timer

    def cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()

    def __repr__(self) -> str:
        return (
            f"NavigationHandle(after_ms={self.after_ms}, "
            f"target={self.target.kind.value}, state={self.state.value})"
        )


class NavigationScheduler:
    """Owns at most one pending navigation timer.

    Timers run on the asyncio event loop (``loop.call_later``); pass ``loop``
    to use something other than the running loop.
    """

    def __init__(
        self,
        navigator: Navigator,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.navigator = navigator
        self._loop = loop
        self._pending: Optional[NavigationHandle] = None

    @property
    def pending(self) -> Optional[NavigationHandle]:
        return self._pending

    def schedule_once(self, after_ms: int, target: NavigationTarget) -> NavigationHandle:
        if self._pending is not None:
            raise NavigationAlreadyScheduledError(
                f"a navigation is already pending: {self._pending!r}"
            )
        loop = self._loop or asyncio.get_running_loop()
        handle = NavigationHandle(after_ms, target)
        handle.attach(loop.call_later(after_ms / 1000.0, self._fire, handle))
        self._pending = handle
        logger.info("Scheduled %s navigation in %dms", target.kind.value, after_ms)
        return handle

    def cancel(self, handle: NavigationHandle) -> None:
        if handle.state is not HandleState.PENDING:
            return
        handle.state = HandleState.CANCELLED
        handle.cancel_timer()
        if self._pending is handle:
            self._pending = None
        logger.info("Cancelled pending %s navigation", handle.target.kind.value)

    def _fire(self, handle: NavigationHandle) -> None:
        if handle.state is not HandleState.PENDING:
            return
        handle.state = HandleState.FIRED
        if self._pending is handle:
            self._pending = None

        target = handle.target
        logger.info("Navigating: %s %s", target.kind.value, target.url or "")
        if target.kind is NavigationKind.RELOAD:
            self.navigator.reload()
        else:
            self.navigator.navigate(target.url or "/")

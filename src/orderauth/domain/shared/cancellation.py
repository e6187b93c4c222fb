"""Cancellation token threaded through workflow calls."""

from __future__ import annotations

from ..errors import WorkflowCancelledError


class CancellationToken:
    """Liveness flag for one workflow instance.

    Every asynchronous call made on behalf of a workflow receives the token
    and checks it before handing a result back; once cancelled, the token
    stays cancelled.
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise WorkflowCancelledError("workflow has been torn down")

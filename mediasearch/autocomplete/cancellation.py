from __future__ import annotations

from collections.abc import Callable

from .exceptions import LookupCancelledError

CancelCallback = Callable[[], object]


class CancellationToken:
    """Cooperative cancellation shared by a lookup cycle and its requests.

    Cancelling a token is idempotent, runs every registered callback once and
    cascades to tokens created with :meth:`child`. Callbacks registered after
    cancellation run immediately.
    """

    def __init__(self, *, reason: str | None = None) -> None:
        self._cancelled = False
        self._reason = reason
        self._callbacks: list[CancelCallback] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if reason is not None:
            self._reason = reason
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: CancelCallback) -> None:
        if self._cancelled:
            callback()
            return
        self._callbacks.append(callback)

    def child(self) -> CancellationToken:
        token = CancellationToken()
        self.on_cancel(lambda: token.cancel(self._reason))
        return token

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise LookupCancelledError(self._reason or "lookup cancelled")

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"CancellationToken({state})"

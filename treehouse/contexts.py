"""Cancellation contexts shared between threads."""

from __future__ import annotations

import signal
import threading
from collections.abc import Callable


class Context:
    """A cancellation flag that can be waited on and that follows its parent."""

    def __init__(self, parent: Context | None = None) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        if parent is not None:
            parent._on_cancel(self.cancel)

    def _on_cancel(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def cancel(self) -> None:
        """Cancel this context and every context derived from it."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def is_cancelled(self) -> bool:
        """Return True once the context has been cancelled."""
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return whether cancelled."""
        return self._event.wait(timeout)

    def __enter__(self) -> Context:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


def with_signal_cancel(parent: Context | None = None) -> Context:
    """Return a child context that is cancelled when SIGINT arrives.

    Outside the main thread no handler can be installed and the child is plain.
    """
    ctx = Context(parent)
    if threading.current_thread() is not threading.main_thread():
        return ctx

    previous = signal.getsignal(signal.SIGINT)

    def handler(signum: int, frame: object) -> None:
        ctx.cancel()

    def restore() -> None:
        if (
            threading.current_thread() is threading.main_thread()
            and signal.getsignal(signal.SIGINT) is handler
        ):
            signal.signal(signal.SIGINT, previous if previous is not None else signal.SIG_DFL)

    signal.signal(signal.SIGINT, handler)
    ctx._on_cancel(restore)
    return ctx
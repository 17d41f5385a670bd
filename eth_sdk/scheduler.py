"""
Cooperative scheduling seam for component-owned deferred work.

Everything in this package runs on one logical thread: the asyncio event loop.
Components that defer work (the syncing debounce timer, the zero-delay "data"
follow-up) only need `call_soon` / `call_later` returning a cancellable handle,
which an asyncio loop already provides. Tests substitute a virtual-time
scheduler with the same two methods.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Protocol


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    def call_soon(self, callback: Callable[..., Any], *args: Any) -> Cancellable: ...

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Cancellable: ...


def current_scheduler() -> Scheduler:
    """The running asyncio loop. Raises RuntimeError outside a coroutine."""
    return asyncio.get_running_loop()


def cancel(handle: Any) -> None:
    """Cancel a pending handle; None and already-fired handles are fine."""
    if handle is not None:
        handle.cancel()


__all__ = ["Cancellable", "Scheduler", "current_scheduler", "cancel"]

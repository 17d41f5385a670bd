"""
Per-notification handlers for push subscriptions.

A handler decides which derived events a decoded notification produces. It is
invoked as `handler(output, subscription, state)`, where `state` is the record
returned by `handler.new_state()` when the subscription was established; the
registry owns that record and passes it to `handler.close(state)` on teardown.

Two standard event kinds are emitted through `subscription.deliver()`:
  - "data"     a new item
  - "changed"  a state transition, or an item invalidated by a reorg
"""

from __future__ import annotations

from typing import Any, Mapping


class NotificationHandler:
    def new_state(self) -> Any:
        return None

    def close(self, state: Any) -> None:
        """Release handler-local resources (timers) for one subscription."""

    def __call__(self, output: Any, subscription: Any, state: Any) -> None:
        raise NotImplementedError


class DataHandler(NotificationHandler):
    """Every notification is a new item."""

    def __call__(self, output: Any, subscription: Any, state: Any) -> None:
        subscription.deliver("data", output)


class LogsHandler(NotificationHandler):
    """
    Log notifications carry a `removed` flag. A removed log was dropped by a
    chain reorganization, so it is reported as "changed" instead of "data".
    """

    def __call__(self, output: Any, subscription: Any, state: Any) -> None:
        removed = isinstance(output, Mapping) and bool(output.get("removed"))
        subscription.deliver("changed" if removed else "data", output)


__all__ = ["NotificationHandler", "DataHandler", "LogsHandler"]

"""
Debounced "is syncing" state machine for the `syncing` subscription.

Raw syncing notifications flap near the chain tip. The machine turns them into
stable transitions:

    NOT_SYNCING --(syncing notification)--> SYNCING
        emit "changed"(True) now, and "data"(notification) on the next loop turn

    SYNCING --(syncing notification)--> SYNCING
        emit "data"(notification); restart the stop timer

    SYNCING --(not-syncing notification)--> SYNCING
        no event; restart the stop timer

    SYNCING --(stop timer fires)--> NOT_SYNCING
        only if the most recent notification is near the tip
        (currentBlock > highestBlock - near_tip, or not syncing at all);
        emit "changed"(False)

The stop transition therefore lags by up to one debounce window and fires at
most once per sustained stop condition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .config import DEFAULT_SYNCING_DEBOUNCE, DEFAULT_SYNCING_NEAR_TIP
from .handlers import NotificationHandler
from .scheduler import Cancellable, cancel

log = logging.getLogger(__name__)


class SyncState(Enum):
    NOT_SYNCING = "not_syncing"
    SYNCING = "syncing"


@dataclass
class SyncingState:
    """Per-subscription record owned by the SubscriptionRegistry."""

    status: SyncState = SyncState.NOT_SYNCING
    latest: Any = None
    stop_timer: Optional[Cancellable] = None
    deferred_data: Optional[Cancellable] = None
    deferred_output: Any = None

    @property
    def is_syncing(self) -> bool:
        return self.status is SyncState.SYNCING

    def cancel_pending(self) -> None:
        """Idempotent; safe when nothing is pending."""
        cancel(self.stop_timer)
        cancel(self.deferred_data)
        self.stop_timer = None
        self.deferred_data = None
        self.deferred_output = None


def is_syncing_output(output: Any) -> bool:
    if output is None or output is False:
        return False
    if isinstance(output, Mapping) and output.get("syncing") is False:
        return False
    return True


class SyncingStateMachine(NotificationHandler):
    def __init__(
        self,
        *,
        debounce: float = DEFAULT_SYNCING_DEBOUNCE,
        near_tip: int = DEFAULT_SYNCING_NEAR_TIP,
    ) -> None:
        self.debounce = float(debounce)
        self.near_tip = int(near_tip)

    def new_state(self) -> SyncingState:
        return SyncingState()

    def close(self, state: SyncingState) -> None:
        state.cancel_pending()

    def is_near_tip(self, output: Any) -> bool:
        if not is_syncing_output(output):
            return True
        try:
            return output["currentBlock"] > output["highestBlock"] - self.near_tip
        except (KeyError, TypeError):
            return False

    def __call__(self, output: Any, subscription: Any, state: SyncingState) -> None:
        state.latest = output

        if not is_syncing_output(output):
            if state.is_syncing:
                self._restart_stop_timer(subscription, state)
            return

        if not state.is_syncing:
            state.status = SyncState.SYNCING
            log.debug("syncing subscription %s: started", subscription.id)
            subscription.deliver("changed", True)
            state.deferred_output = output
            state.deferred_data = subscription.scheduler.call_soon(
                self._deferred_data, subscription, state, output
            )
            return

        # Keep "data" in arrival order if the first one has not gone out yet.
        if state.deferred_data is not None:
            state.deferred_data.cancel()
            state.deferred_data = None
            subscription.deliver("data", state.deferred_output)
        state.deferred_output = None
        subscription.deliver("data", output)
        self._restart_stop_timer(subscription, state)

    def _deferred_data(self, subscription: Any, state: SyncingState, output: Any) -> None:
        state.deferred_data = None
        state.deferred_output = None
        subscription.deliver("data", output)

    def _restart_stop_timer(self, subscription: Any, state: SyncingState) -> None:
        cancel(state.stop_timer)
        state.stop_timer = subscription.scheduler.call_later(
            self.debounce, self._on_stop_timer, subscription, state
        )

    def _on_stop_timer(self, subscription: Any, state: SyncingState) -> None:
        state.stop_timer = None
        if not state.is_syncing or not self.is_near_tip(state.latest):
            return
        state.status = SyncState.NOT_SYNCING
        log.debug("syncing subscription %s: stopped", subscription.id)
        subscription.deliver("changed", False)


__all__ = ["SyncState", "SyncingState", "SyncingStateMachine", "is_syncing_output"]

"""
eth_sdk.subscriptions
=====================

Push subscriptions: logical name -> wire channel, per-notification decoding,
and derived "data" / "changed" / "error" events.

    sub = await eth.subscribe("logs", {"address": "0x..."}, callback=cb)
    sub.on("data", lambda log: ...)
    sub.on("changed", lambda log: ...)       # removed by a reorg
    await sub.unsubscribe()

The SubscriptionRegistry owns every active Subscription and the handler state
attached to it (e.g. the syncing debounce timer). Tearing a subscription down
cancels that state before the wire-level unsubscribe is sent, so no event is
delivered after `unsubscribe()` is called.

A notification that fails to decode, or whose handler raises, is logged and
reported on that subscription as an "error" event; other subscriptions and the
transport's reader are unaffected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from . import formatters as fmt
from .config import DEFAULT_SYNCING_DEBOUNCE, DEFAULT_SYNCING_NEAR_TIP, SDKConfig
from .errors import ResolutionError, TransportError
from .formatters import FormatterPipeline
from .handlers import DataHandler, LogsHandler, NotificationHandler
from .rpc import Transport
from .scheduler import Scheduler, current_scheduler
from .syncing import SyncingStateMachine

log = logging.getLogger(__name__)

Listener = Callable[[Any], Any]
SubscriptionCallback = Callable[[Optional[BaseException], Any, "Subscription"], Any]

EVENTS = ("data", "changed", "error")


@dataclass(frozen=True)
class SubscriptionDescriptor:
    name: str
    wire_name: str
    pipeline: FormatterPipeline
    handler: NotificationHandler

    @property
    def arity(self) -> int:
        return self.pipeline.arity


def build_subscriptions(
    *,
    syncing_debounce: float = DEFAULT_SYNCING_DEBOUNCE,
    syncing_near_tip: int = DEFAULT_SYNCING_NEAR_TIP,
) -> Mapping[str, SubscriptionDescriptor]:
    descriptors = (
        SubscriptionDescriptor(
            "newBlockHeaders", "newHeads", FormatterPipeline((), fmt.output_block), DataHandler()
        ),
        SubscriptionDescriptor(
            "pendingTransactions", "newPendingTransactions", FormatterPipeline(), DataHandler()
        ),
        SubscriptionDescriptor(
            "logs", "logs", FormatterPipeline((fmt.input_log,), fmt.output_log), LogsHandler()
        ),
        SubscriptionDescriptor(
            "syncing",
            "syncing",
            FormatterPipeline((), fmt.output_syncing),
            SyncingStateMachine(debounce=syncing_debounce, near_tip=syncing_near_tip),
        ),
    )
    return MappingProxyType({d.name: d for d in descriptors})


SUBSCRIPTIONS: Mapping[str, SubscriptionDescriptor] = build_subscriptions()


class Subscription:
    """Handle for one active push subscription."""

    def __init__(
        self,
        descriptor: SubscriptionDescriptor,
        registry: "SubscriptionRegistry",
        scheduler: Scheduler,
        callback: Optional[SubscriptionCallback] = None,
    ) -> None:
        self.descriptor = descriptor
        self.registry = registry
        self.scheduler = scheduler
        self.callback = callback
        self.id: Optional[str] = None
        self.active = True
        self.state: Any = descriptor.handler.new_state()
        self._listeners: Dict[str, List[Listener]] = {}

    @property
    def name(self) -> str:
        return self.descriptor.name

    def __repr__(self) -> str:
        return f"Subscription(name={self.name!r}, id={self.id!r}, active={self.active})"

    # --- listeners ------------------------------------------------------

    def on(self, event: str, listener: Listener) -> "Subscription":
        if event not in EVENTS:
            raise ValueError(f"unknown subscription event {event!r}; expected one of {EVENTS}")
        self._listeners.setdefault(event, []).append(listener)
        return self

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event: str, payload: Any) -> None:
        if not self.active:
            return
        for listener in list(self._listeners.get(event, ())):
            try:
                listener(payload)
            except Exception:
                log.exception("listener for %r on subscription %s raised", event, self.id)

    # --- delivery used by handlers -------------------------------------

    def deliver(self, event: str, payload: Any) -> None:
        """Emit `event` and report `payload` to the subscription callback."""
        if not self.active:
            return
        self.emit(event, payload)
        if self.callback is not None:
            self.callback(None, payload, self)

    def fail(self, exc: BaseException) -> None:
        if not self.active:
            return
        self.emit("error", exc)
        if self.callback is not None:
            self.callback(exc, None, self)

    async def unsubscribe(self) -> bool:
        return await self.registry.unsubscribe(self)


class SubscriptionRegistry:
    def __init__(
        self,
        transport: Transport,
        descriptors: Optional[Mapping[str, SubscriptionDescriptor]] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        config: Optional[SDKConfig] = None,
    ) -> None:
        if descriptors is None:
            descriptors = (
                build_subscriptions(
                    syncing_debounce=config.syncing_debounce,
                    syncing_near_tip=config.syncing_near_tip,
                )
                if config is not None
                else SUBSCRIPTIONS
            )
        self.transport = transport
        self.descriptors = descriptors
        self.scheduler = scheduler
        self._active: Dict[str, Subscription] = {}

    def set_provider(self, transport: Transport) -> None:
        self.transport = transport

    @property
    def active(self) -> List[Subscription]:
        return list(self._active.values())

    def names(self) -> List[str]:
        return sorted(self.descriptors.keys())

    def descriptor(self, name: str) -> SubscriptionDescriptor:
        desc = self.descriptors.get(name)
        if desc is None:
            raise ResolutionError(name, "subscription")
        return desc

    async def subscribe(
        self,
        name: str,
        *args: Any,
        callback: Optional[SubscriptionCallback] = None,
        listeners: Optional[Mapping[str, Listener]] = None,
    ) -> Subscription:
        """
        Establish the wire subscription for logical `name`.

        A node may push notifications before its subscribe reply has been
        awaited here. Those reach `callback` and the `listeners` mapping
        (event -> listener), which is attached before anything is sent;
        listeners added later with `.on()` only see what follows.

        Raises ResolutionError for unknown names and ArityError / FormatError
        for bad arguments before anything is sent. TransportError propagates
        from the transport.
        """
        desc = self.descriptor(name)
        try:
            params = desc.pipeline.encode(list(args), method=name)
        except Exception as exc:
            if callback is not None:
                callback(exc, None, None)
            raise

        sub = Subscription(desc, self, self.scheduler or current_scheduler(), callback)
        for event, listener in (listeners or {}).items():
            sub.on(event, listener)
        sub.id = await self.transport.subscribe(
            desc.wire_name, params, partial(self._on_notification, sub)
        )
        self._active[sub.id] = sub
        log.debug("subscribed %s -> %s (id=%s)", name, desc.wire_name, sub.id)
        return sub

    def _on_notification(self, sub: Subscription, raw: Any) -> None:
        if not sub.active:
            return
        desc = sub.descriptor
        try:
            output = desc.pipeline.decode(raw, method=desc.name)
            desc.handler(output, sub, sub.state)
        except Exception as exc:
            log.exception("notification for %s subscription %s failed", desc.name, sub.id)
            sub.fail(exc)

    async def unsubscribe(self, sub: Subscription) -> bool:
        """
        Stop delivery, release handler state, then tear down the wire channel.
        Returns the server's acknowledgement; False when already inactive.
        """
        if not sub.active:
            return False
        sub.active = False
        sub.descriptor.handler.close(sub.state)
        if sub.id is not None:
            self._active.pop(sub.id, None)
        try:
            ok = await self.transport.unsubscribe(sub.id)
        except TransportError as exc:
            log.warning("unsubscribe of %s (id=%s) failed: %s", sub.name, sub.id, exc)
            ok = False
        log.debug("unsubscribed %s (id=%s, ack=%s)", sub.name, sub.id, ok)
        return bool(ok)

    async def clear(self) -> int:
        """Unsubscribe everything; returns how many subscriptions were torn down."""
        subs: Iterable[Subscription] = list(self._active.values())
        n = 0
        for sub in subs:
            await self.unsubscribe(sub)
            n += 1
        return n


__all__ = [
    "SubscriptionDescriptor",
    "Subscription",
    "SubscriptionRegistry",
    "SUBSCRIPTIONS",
    "build_subscriptions",
    "EVENTS",
]

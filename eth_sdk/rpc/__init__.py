"""
eth_sdk.rpc
-----------

Transport boundary consumed by the call-resolution layer.

A transport sends `(wire_method, params)` and returns the JSON-RPC `result`,
and, when it can carry push notifications, registers a callback for a wire
subscription channel:

- HttpTransport: request/response only (see .http)
- WsTransport:   request/response plus eth_subscribe channels (see .ws)

    from eth_sdk.rpc.http import HttpTransport
    rpc = HttpTransport("http://localhost:8545")
    head = await rpc.call("eth_blockNumber", [])
"""

from __future__ import annotations

from typing import Any, Callable, List, Protocol, runtime_checkable

OnNotification = Callable[[Any], None]


@runtime_checkable
class Transport(Protocol):
    async def call(self, method: str, params: List[Any]) -> Any: ...

    async def subscribe(self, channel: str, params: List[Any], on_notification: OnNotification) -> str: ...

    async def unsubscribe(self, subscription_id: str) -> bool: ...


__all__ = ["Transport", "OnNotification"]

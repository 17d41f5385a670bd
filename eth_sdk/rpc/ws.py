from __future__ import annotations

"""
WebSocket JSON-RPC transport (async) with reconnect and eth_subscribe channels.

- Uses the `websockets` package.
- Correlates responses to requests by `id`.
- `subscribe(channel, params, cb)` sends `eth_subscribe [channel, *params]`
  and routes `eth_subscription` notifications for the returned id to `cb`.
- After a reconnect every live channel is re-established; callers keep using
  the id they were first given.

Example:
    from eth_sdk.rpc.ws import WsTransport

    async with WsTransport("ws://localhost:8546") as ws:
        sub_id = await ws.subscribe("newHeads", [], print)
        await asyncio.sleep(10)
        await ws.unsubscribe(sub_id)
"""

import asyncio
import contextlib
import json
import logging
import random
import time
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed

from ..config import SDKConfig
from ..errors import JsonRpcCode, TransportError, from_jsonrpc_error
from ..version import user_agent
from . import OnNotification

log = logging.getLogger(__name__)

SUBSCRIBE = "eth_subscribe"
UNSUBSCRIBE = "eth_unsubscribe"
NOTIFICATION = "eth_subscription"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _jitter_backoff(base: float, factor: float, attempt: int, jitter: float) -> float:
    return base * (factor ** max(attempt - 1, 0)) + random.random() * jitter


@dataclass
class WsTransport:
    url: str
    headers: Optional[Mapping[str, str]] = None
    connect_timeout: float = 15.0
    request_timeout: float = 30.0
    ping_interval: Optional[float] = 20.0
    max_retries: int = 10
    backoff_base: float = 0.25
    backoff_factor: float = 1.8
    backoff_jitter: float = 0.25
    # Coroutine factory `(url, headers) -> connection`; replaced in tests
    connector: Optional[Callable[..., Any]] = None
    _id_counter: Any = field(default_factory=lambda: count(start=_now_ms()))
    _ws: Any = field(init=False, default=None)
    _reader_task: Optional[asyncio.Task] = field(init=False, default=None)
    _pending: Dict[int, asyncio.Future] = field(init=False, default_factory=dict)
    # caller-visible id -> (channel, params, callback)
    _channels: Dict[str, Tuple[str, List[Any], OnNotification]] = field(init=False, default_factory=dict)
    # caller-visible id <-> id currently assigned by the node
    _wire_ids: Dict[str, str] = field(init=False, default_factory=dict)
    _handlers: Dict[str, OnNotification] = field(init=False, default_factory=dict)
    # request id -> hook run on the reader task as the result is dispatched
    _result_hooks: Dict[int, Callable[[Any], None]] = field(init=False, default_factory=dict)
    _closing: bool = field(init=False, default=False)

    @classmethod
    def from_config(cls, config: SDKConfig, **kw: Any) -> "WsTransport":
        return cls(
            config.effective_ws_url,
            headers={"User-Agent": config.user_agent},
            request_timeout=config.request_timeout,
            backoff_base=config.backoff_base,
            **kw,
        )

    # ------------- context manager -------------

    async def __aenter__(self) -> "WsTransport":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.close()

    # ------------- lifecycle -------------------

    async def _open(self) -> Any:
        hdrs = {"User-Agent": user_agent()}
        if self.headers:
            hdrs.update(dict(self.headers))
        if self.connector is not None:
            return await self.connector(self.url, hdrs)
        return await ws_connect(self.url, additional_headers=hdrs, ping_interval=self.ping_interval)

    async def connect(self) -> None:
        """Establish the connection and start the reader loop."""
        self._closing = False
        attempt = 0
        while True:
            attempt += 1
            try:
                self._ws = await asyncio.wait_for(self._open(), timeout=self.connect_timeout)
                break
            except (OSError, asyncio.TimeoutError, ConnectionClosed) as e:
                if attempt > self.max_retries:
                    raise TransportError(
                        method=None,
                        code=JsonRpcCode.TRANSPORT_FAILURE,
                        message="WS connect failed",
                        data=str(e),
                    ) from e
                delay = _jitter_backoff(self.backoff_base, self.backoff_factor, attempt, self.backoff_jitter)
                log.debug("ws connect to %s failed (%s); retrying in %.2fs", self.url, e, delay)
                await asyncio.sleep(delay)

        log.debug("ws connected to %s", self.url)
        self._reader_task = asyncio.create_task(self._reader_loop(), name="WsTransport.reader")
        if self._channels:
            await self._restore_subscriptions()

    async def close(self) -> None:
        """Close the socket, stop the reader and fail pending requests."""
        self._closing = True
        if self._reader_task and not self._reader_task.done():
            self._reader_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader_task
        if self._ws is not None:
            with contextlib.suppress(ConnectionClosed, OSError):
                await self._ws.close()
            self._ws = None
        self._fail_pending("WS closed")

    def _fail_pending(self, reason: str) -> None:
        for rid, fut in list(self._pending.items()):
            if not fut.done():
                fut.set_exception(
                    TransportError(method=None, code=JsonRpcCode.TRANSPORT_FAILURE, message=reason, request_id=rid)
                )
        self._pending.clear()
        self._result_hooks.clear()

    # ------------- Transport -------------------

    async def call(
        self, method: str, params: List[Any], *, on_result: Optional[Callable[[Any], None]] = None
    ) -> Any:
        """
        Send a JSON-RPC request and await its result.

        `on_result` runs on the reader task when a successful reply is
        dispatched, before any frame that follows it is read.
        """
        if self._ws is None:
            await self.connect()

        rid = next(self._id_counter)
        payload = {"jsonrpc": "2.0", "id": rid, "method": method, "params": list(params)}
        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[rid] = fut
        if on_result is not None:
            self._result_hooks[rid] = on_result

        try:
            await asyncio.wait_for(
                self._ws.send(json.dumps(payload, separators=(",", ":"))),
                timeout=self.request_timeout,
            )
        except (ConnectionClosed, OSError, asyncio.TimeoutError) as e:
            self._pending.pop(rid, None)
            self._result_hooks.pop(rid, None)
            raise TransportError(
                method=method, code=JsonRpcCode.TRANSPORT_FAILURE, message="WS send failed", data=str(e), request_id=rid
            ) from e

        try:
            return await asyncio.wait_for(fut, timeout=self.request_timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(
                method=method, code=JsonRpcCode.TRANSPORT_FAILURE, message="WS request timed out", request_id=rid
            ) from e
        except TransportError as e:
            if e.method is None:
                e.method = method
            raise
        finally:
            self._pending.pop(rid, None)
            self._result_hooks.pop(rid, None)

    async def subscribe(self, channel: str, params: List[Any], on_notification: OnNotification) -> str:
        """Open `channel`; returns the subscription id used for later unsubscribe."""
        wire_id = await self._open_channel(channel, params, on_notification)
        self._channels[wire_id] = (channel, list(params), on_notification)
        self._wire_ids[wire_id] = wire_id
        return wire_id

    async def unsubscribe(self, subscription_id: str) -> bool:
        wire_id = self._wire_ids.pop(subscription_id, subscription_id)
        self._channels.pop(subscription_id, None)
        self._handlers.pop(wire_id, None)
        ok = await self.call(UNSUBSCRIBE, [wire_id])
        return bool(ok)

    # ------------- internals --------------------

    async def _open_channel(self, channel: str, params: List[Any], on_notification: OnNotification) -> str:
        def register(res: Any) -> None:
            # notifications may follow the reply in the same read burst
            self._handlers[str(res)] = on_notification

        res = await self.call(SUBSCRIBE, [channel, *params], on_result=register)
        wire_id = str(res)
        log.debug("ws channel %s opened (id=%s)", channel, wire_id)
        return wire_id

    def _dispatch(self, data: Any) -> None:
        if not isinstance(data, dict):
            return

        if "id" in data and data.get("method") is None:
            rid = data.get("id")
            if rid not in self._pending and isinstance(rid, str) and rid.isdigit():
                rid = int(rid)
            fut = self._pending.get(rid)
            if fut is None or fut.done():
                return
            if data.get("error") is not None:
                fut.set_exception(from_jsonrpc_error(data["error"], request_id=rid))
                return
            hook = self._result_hooks.pop(rid, None)
            if hook is not None:
                hook(data.get("result"))
            fut.set_result(data.get("result"))
            return

        if data.get("method") == NOTIFICATION:
            params = data.get("params")
            if not isinstance(params, dict) or "subscription" not in params:
                log.debug("ignoring malformed notification: %r", data)
                return
            handler = self._handlers.get(str(params["subscription"]))
            if handler is None:
                return
            try:
                handler(params.get("result"))
            except Exception:
                log.exception("notification handler for %s raised", params["subscription"])

    async def _reader_loop(self) -> None:
        """Read frames until closed; reconnect on unexpected disconnects."""
        ws = self._ws
        while True:
            try:
                msg = await ws.recv()
            except asyncio.CancelledError:
                raise
            except (ConnectionClosed, OSError) as e:
                if self._closing:
                    return
                log.warning("ws connection to %s lost: %s", self.url, e)
                asyncio.create_task(self._handle_reconnect(), name="WsTransport.reconnect")
                return

            try:
                data = json.loads(msg)
            except ValueError:
                log.debug("ignoring non-JSON frame")
                continue
            self._dispatch(data)

    async def _handle_reconnect(self) -> None:
        self._fail_pending("WS disconnected")
        self._ws = None
        self._handlers.clear()
        try:
            await self.connect()
        except TransportError:
            log.error("ws reconnect to %s gave up after %d attempts", self.url, self.max_retries)

    async def _restore_subscriptions(self) -> None:
        """Re-open every live channel and remap caller ids to the new node ids."""
        for sub_id, (channel, params, handler) in list(self._channels.items()):
            try:
                self._wire_ids[sub_id] = await self._open_channel(channel, params, handler)
            except TransportError as e:
                log.warning("could not restore %s subscription %s: %s", channel, sub_id, e)


__all__ = ["WsTransport", "SUBSCRIBE", "UNSUBSCRIBE", "NOTIFICATION"]

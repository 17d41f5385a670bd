"""
In-memory fakes shared by the tests: a transport that records every request
and a scheduler driven by virtual time.
"""
from __future__ import annotations

import heapq
import itertools
from typing import Any, Callable, Dict, List, Tuple


class RecordingTransport:
    """
    Records `(method, params)` for every call and answers from `responses`:
    a value, or a callable `(params) -> value`, or an exception to raise.
    Subscriptions get ids "0x1", "0x2", ...; tests push notifications with
    `notify(sub_id, result)`.
    """

    def __init__(self, responses: Dict[str, Any] | None = None) -> None:
        self.responses: Dict[str, Any] = dict(responses or {})
        self.calls: List[Tuple[str, List[Any]]] = []
        self.subscribed: List[Tuple[str, List[Any]]] = []
        self.unsubscribed: List[str] = []
        self.handlers: Dict[str, Callable[[Any], None]] = {}
        self._ids = itertools.count(1)

    async def call(self, method: str, params: List[Any]) -> Any:
        self.calls.append((method, list(params)))
        resp = self.responses.get(method)
        if isinstance(resp, BaseException):
            raise resp
        if callable(resp):
            return resp(params)
        return resp

    async def subscribe(self, channel: str, params: List[Any], on_notification: Callable[[Any], None]) -> str:
        sub_id = hex(next(self._ids))
        self.subscribed.append((channel, list(params)))
        self.handlers[sub_id] = on_notification
        return sub_id

    async def unsubscribe(self, subscription_id: str) -> bool:
        self.unsubscribed.append(subscription_id)
        self.handlers.pop(subscription_id, None)
        return True

    def notify(self, subscription_id: str, result: Any) -> None:
        handler = self.handlers.get(subscription_id)
        if handler is not None:
            handler(result)


class _Handle:
    def __init__(self, when: float, callback: Callable[..., Any], args: Tuple[Any, ...]) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """`call_soon` / `call_later` against a clock that only moves on `advance()`."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, _Handle]] = []
        self._seq = itertools.count()

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> _Handle:
        return self.call_later(0, callback, *args)

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> _Handle:
        handle = _Handle(self.now + delay, callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def run_ready(self) -> None:
        self.advance(0)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            self.now = max(self.now, when)
            if not handle.cancelled:
                handle.callback(*handle.args)
        self.now = target

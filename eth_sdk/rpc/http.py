from __future__ import annotations

"""
HTTP JSON-RPC transport (async, httpx).

- Request/response only: `subscribe()` raises TransportError, push
  subscriptions need WsTransport.
- Retries on transient transport failures and HTTP 429/502/503/504 with
  jittered exponential backoff. JSON-RPC error objects are never retried.

Example:
    from eth_sdk.rpc.http import HttpTransport

    async with HttpTransport("http://localhost:8545") as rpc:
        head = await rpc.call("eth_blockNumber", [])
"""

import asyncio
import json
import logging
import random
import time
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import httpx

from ..config import SDKConfig
from ..errors import JsonRpcCode, TransportError, from_jsonrpc_error
from ..version import user_agent
from . import OnNotification

log = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _is_retriable_http(status: int) -> bool:
    return status in (429, 502, 503, 504)


def _jitter_backoff(base: float, factor: float, attempt: int, jitter: float) -> float:
    return base * (factor ** max(attempt - 1, 0)) + random.random() * jitter


class _Retry(Exception):
    """Transient failure; carries the HTTP status when there was one."""

    def __init__(self, reason: str, http_status: Optional[int] = None) -> None:
        super().__init__(reason)
        self.http_status = http_status


@dataclass
class HttpTransport:
    url: str
    timeout: float = 10.0
    max_retries: int = 3
    backoff_base: float = 0.25
    backoff_factor: float = 1.8
    backoff_jitter: float = 0.2
    headers: Optional[Mapping[str, str]] = None
    # Injected httpx transport (e.g. httpx.MockTransport in tests)
    transport: Optional[httpx.AsyncBaseTransport] = None
    _id_counter: Iterable[int] = field(default_factory=lambda: count(start=_now_ms()))
    _client: Optional[httpx.AsyncClient] = field(init=False, default=None)

    @classmethod
    def from_config(cls, config: SDKConfig, **kw: Any) -> "HttpTransport":
        return cls(
            config.rpc_url,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            backoff_base=config.backoff_base,
            headers=config.http_headers(),
            **kw,
        )

    def _merged_headers(self) -> Dict[str, str]:
        merged = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }
        if self.headers:
            merged.update(dict(self.headers))
        return merged

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._merged_headers(),
                transport=self.transport,
            )
        return self._client

    # --- context manager -------------------------------------------------

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.close()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # --- Transport -------------------------------------------------------

    async def call(self, method: str, params: Sequence[Any]) -> Any:
        """Perform one JSON-RPC request and return `result` or raise TransportError."""
        rid = next(self._id_counter)  # type: ignore[call-overload]
        payload = {"jsonrpc": "2.0", "id": rid, "method": method, "params": list(params)}
        return await self._send_with_retries(method, rid, payload)

    async def subscribe(self, channel: str, params: List[Any], on_notification: OnNotification) -> str:
        raise TransportError(
            method="eth_subscribe",
            code=JsonRpcCode.METHOD_NOT_FOUND,
            message="HTTP transport does not support subscriptions; use a WebSocket endpoint",
            data=channel,
        )

    async def unsubscribe(self, subscription_id: str) -> bool:
        raise TransportError(
            method="eth_unsubscribe",
            code=JsonRpcCode.METHOD_NOT_FOUND,
            message="HTTP transport does not support subscriptions",
            data=subscription_id,
        )

    # --- internals -------------------------------------------------------

    async def _send_with_retries(self, method: str, rid: int, payload: Dict[str, Any]) -> Any:
        last: Optional[_Retry] = None
        for attempt in range(1, self.max_retries + 2):  # N retries -> N+1 attempts
            try:
                return await self._send_once(method, rid, payload)
            except _Retry as e:
                last = e
                if attempt > self.max_retries:
                    break
                delay = _jitter_backoff(self.backoff_base, self.backoff_factor, attempt, self.backoff_jitter)
                log.debug("%s attempt %d failed (%s); retrying in %.2fs", method, attempt, e, delay)
                await asyncio.sleep(delay)
        log.warning("%s failed after %d attempt(s): %s", method, self.max_retries + 1, last)
        raise TransportError(
            method=method,
            code=JsonRpcCode.TRANSPORT_FAILURE,
            message="RPC transport failed",
            data=str(last),
            request_id=rid,
            http_status=last.http_status if last is not None else None,
        )

    async def _send_once(self, method: str, rid: int, payload: Dict[str, Any]) -> Any:
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        try:
            r = await self.client.post(self.url, content=body)
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            raise _Retry(f"network error: {e}") from e
        if _is_retriable_http(r.status_code):
            raise _Retry(f"HTTP {r.status_code}", r.status_code)

        try:
            resp = r.json()
        except ValueError as e:
            raise TransportError(
                method=method,
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Non-JSON response from RPC",
                data=f"HTTP {r.status_code}: {r.text[:256]}",
                request_id=rid,
                http_status=r.status_code,
            ) from e

        if not isinstance(resp, dict):
            raise TransportError(
                method=method,
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Invalid JSON-RPC response type",
                data=type(resp).__name__,
                request_id=rid,
                http_status=r.status_code,
            )
        if resp.get("error") is not None:
            raise from_jsonrpc_error(resp["error"], method=method, request_id=rid, http_status=r.status_code)
        if "result" not in resp:
            raise TransportError(
                method=method,
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Malformed JSON-RPC response",
                data=resp,
                request_id=rid,
                http_status=r.status_code,
            )
        return resp["result"]


__all__ = ["HttpTransport"]

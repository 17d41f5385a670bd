import json

import httpx
import pytest

from eth_sdk.errors import JsonRpcCode, TransportError
from eth_sdk.rpc import Transport
from eth_sdk.rpc.http import HttpTransport


def _transport(handler, **kw):
    kw.setdefault("backoff_base", 0.0)
    kw.setdefault("backoff_jitter", 0.0)
    return HttpTransport("http://node.test", transport=httpx.MockTransport(handler), **kw)


def test_satisfies_transport_protocol():
    assert isinstance(HttpTransport("http://node.test"), Transport)


@pytest.mark.asyncio
async def test_call_posts_jsonrpc_and_returns_result():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append((body, request.headers["user-agent"]))
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": "0x10"})

    async with _transport(handler) as rpc:
        assert await rpc.call("eth_blockNumber", []) == "0x10"

    body, ua = seen[0]
    assert body["method"] == "eth_blockNumber" and body["params"] == [] and body["jsonrpc"] == "2.0"
    assert ua.startswith("eth-sdk-python/")


@pytest.mark.asyncio
async def test_jsonrpc_error_is_not_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "nope"}})

    async with _transport(handler) as rpc:
        with pytest.raises(TransportError) as ei:
            await rpc.call("eth_call", [{}, "latest"])
    assert len(attempts) == 1
    assert ei.value.code == -32000 and ei.value.method == "eth_call"


@pytest.mark.asyncio
async def test_transient_status_is_retried_then_succeeds():
    statuses = [503, 429]

    def handler(request: httpx.Request) -> httpx.Response:
        if statuses:
            return httpx.Response(statuses.pop(0))
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": True})

    async with _transport(handler) as rpc:
        assert await rpc.call("net_listening", []) is True


@pytest.mark.asyncio
async def test_retries_exhausted_raise_transport_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _transport(handler, max_retries=2) as rpc:
        with pytest.raises(TransportError) as ei:
            await rpc.call("eth_blockNumber", [])
    assert ei.value.code_enum is JsonRpcCode.TRANSPORT_FAILURE


@pytest.mark.asyncio
async def test_non_json_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="<html>oops</html>")

    async with _transport(handler) as rpc:
        with pytest.raises(TransportError) as ei:
            await rpc.call("eth_blockNumber", [])
    assert ei.value.http_status == 500


@pytest.mark.asyncio
async def test_http_cannot_subscribe():
    rpc = HttpTransport("http://node.test")
    with pytest.raises(TransportError):
        await rpc.subscribe("newHeads", [], print)

"""
MethodInvoker: logical call -> wire request -> transport -> decoded result.

`invoke(name, *args)` does all of the deterministic work eagerly, when it is
called: descriptor lookup, arity check, wire-name resolution, input encoding
with the current defaults snapshot and the payload transform. It then returns
a coroutine that performs the dispatch and decodes the result. A defaults
change made after `invoke()` returns therefore never reaches a call that was
already issued.

Errors propagate unchanged: ResolutionError / ArityError / FormatError are
raised by `invoke()` itself, TransportError and DecodeError by the awaited
coroutine. When a `callback` is given it receives `(error, None)` or
`(None, result)` before the error is raised or the result returned.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Sequence, Tuple

from .defaults import CallDefaults
from .errors import ArityError, EthSdkError
from .methods import REGISTRY, MethodDescriptor, resolve
from .rpc import Transport

log = logging.getLogger(__name__)

Payload = Dict[str, Any]
Callback = Callable[[Optional[BaseException], Any], Any]


class MethodInvoker:
    def __init__(
        self,
        transport: Transport,
        registry: Mapping[str, MethodDescriptor] = REGISTRY,
    ) -> None:
        self.transport = transport
        self.registry = registry
        self._defaults = CallDefaults()

    # --- broadcast targets (DefaultContext / provider changes) -----------

    @property
    def defaults(self) -> CallDefaults:
        return self._defaults

    def set_default_account(self, account: Optional[str]) -> None:
        self._defaults = replace(self._defaults, account=account)

    def set_default_block(self, block: Any) -> None:
        self._defaults = replace(self._defaults, block=block)

    def set_provider(self, transport: Transport) -> None:
        self.transport = transport

    # --- calls ------------------------------------------------------------

    def build_request(self, name: str, args: Sequence[Any]) -> Tuple[MethodDescriptor, Payload]:
        """Return the descriptor and the wire payload `{"method", "params"}` for a logical call."""
        desc = resolve(name, self.registry)
        args = list(args)
        if len(args) != desc.arity:
            raise ArityError(name, desc.arity, len(args))
        wire_method = desc.resolve(args)
        params = desc.pipeline.encode(args, self._defaults, method=name)
        payload: Payload = {"method": wire_method, "params": params}
        if desc.transform_payload is not None:
            payload = desc.transform_payload(payload)
        return desc, payload

    def invoke(self, name: str, *args: Any, callback: Optional[Callback] = None) -> Awaitable[Any]:
        try:
            desc, payload = self.build_request(name, args)
        except EthSdkError as exc:
            if callback is not None:
                callback(exc, None)
            raise
        return self._dispatch(desc, payload, callback)

    async def _dispatch(self, desc: MethodDescriptor, payload: Payload, callback: Optional[Callback]) -> Any:
        log.debug("dispatch %s -> %s (%d params)", desc.name, payload["method"], len(payload["params"]))
        try:
            raw = await self.transport.call(payload["method"], payload["params"])
            result = desc.pipeline.decode(raw, method=desc.name)
        except Exception as exc:
            if callback is not None:
                callback(exc, None)
            raise
        if callback is not None:
            callback(None, result)
        return result


__all__ = ["MethodInvoker"]

"""
eth_sdk.methods
===============

Immutable registry that binds logical operation names (e.g. "getBalance") to
MethodDescriptors: the wire method (static name or ByBlockRef resolver), the
FormatterPipeline, and an optional payload transform.

Design
------
- A descriptor's arity is the length of its input formatter tuple, so the two
  can never disagree; `method()` rejects declarations where they would.
- The registry is a read-only mapping built once at import time, before any
  call is dispatched. Duplicate names are a declaration error.
- Wire names are fixed Ethereum JSON-RPC vocabulary and must match exactly.

Lookup
------
    from eth_sdk.methods import resolve

    desc = resolve("getBlock")
    desc.resolve(["0xabc...", False])   # -> "eth_getBlockByHash"
    desc.resolve([12, False])           # -> "eth_getBlockByNumber"
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from . import formatters as fmt
from . import resolver as rs
from .errors import ResolutionError
from .formatters import FormatterPipeline, InputFormatter, OutputFormatter
from .resolver import Resolver

log = logging.getLogger(__name__)

Payload = Dict[str, Any]
PayloadTransform = Callable[[Payload], Payload]

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


def attr_name(logical_name: str) -> str:
    """'getBlockTransactionCount' -> 'get_block_transaction_count'; dots become underscores."""
    return _CAMEL_RE.sub(r"_\1", logical_name).replace(".", "_").lower()


@dataclass(frozen=True)
class MethodDescriptor:
    """Bound configuration of one logical operation."""

    name: str
    call: Resolver
    pipeline: FormatterPipeline = field(default_factory=FormatterPipeline)
    transform_payload: Optional[PayloadTransform] = None

    @property
    def arity(self) -> int:
        return self.pipeline.arity

    @property
    def attr_name(self) -> str:
        return attr_name(self.name)

    @property
    def wire_names(self) -> tuple[str, ...]:
        if isinstance(self.call, str):
            return (self.call,)
        return tuple(getattr(self.call, "wire_names", ()))

    def resolve(self, args: Sequence[Any]) -> str:
        return rs.resolve_wire_name(self.call, args)


def method(
    name: str,
    call: Resolver,
    params: int = 0,
    *,
    inputs: Optional[Sequence[InputFormatter]] = None,
    output: OutputFormatter = None,
    transform_payload: Optional[PayloadTransform] = None,
) -> MethodDescriptor:
    """Declare a MethodDescriptor; `inputs` defaults to pass-through for every param."""
    if inputs is None:
        inputs = (None,) * params
    if len(inputs) != params:
        raise ValueError(f"{name}: {len(inputs)} input formatter(s) declared for {params} param(s)")
    return MethodDescriptor(
        name=name,
        call=call,
        pipeline=FormatterPipeline(tuple(inputs), output),
        transform_payload=transform_payload,
    )


def reverse_params(payload: Payload) -> Payload:
    """eth_sign takes (address, message) on the wire; callers pass (message, address)."""
    payload["params"] = list(reversed(payload["params"]))
    return payload


def build_registry(descriptors: Iterable[MethodDescriptor]) -> Mapping[str, MethodDescriptor]:
    reg: Dict[str, MethodDescriptor] = {}
    for desc in descriptors:
        if desc.name in reg:
            raise ValueError(f"Method {desc.name!r} is already registered")
        reg[desc.name] = desc
    log.debug("built method registry with %d descriptors", len(reg))
    return MappingProxyType(reg)


ETH_METHODS: tuple[MethodDescriptor, ...] = (
    method("getProtocolVersion", "eth_protocolVersion"),
    method("getCoinbase", "eth_coinbase"),
    method("isMining", "eth_mining"),
    method("getHashrate", "eth_hashrate", output=fmt.hex_to_number),
    method("isSyncing", "eth_syncing", output=fmt.output_syncing),
    method("getGasPrice", "eth_gasPrice", output=fmt.output_big_number),
    method("getAccounts", "eth_accounts", output=fmt.output_checksum_address),
    method("getBlockNumber", "eth_blockNumber", output=fmt.hex_to_number),
    method(
        "getBalance", "eth_getBalance", 2,
        inputs=[fmt.input_address, fmt.input_default_block_number],
        output=fmt.output_big_number,
    ),
    method(
        "getStorageAt", "eth_getStorageAt", 3,
        inputs=[fmt.input_address, fmt.number_to_hex, fmt.input_default_block_number],
    ),
    method(
        "getCode", "eth_getCode", 2,
        inputs=[fmt.input_address, fmt.input_default_block_number],
    ),
    method(
        "getBlock", rs.BLOCK, 2,
        inputs=[fmt.input_block_number, fmt.to_bool],
        output=fmt.output_block,
    ),
    method(
        "getUncle", rs.UNCLE, 2,
        inputs=[fmt.input_block_number, fmt.number_to_hex],
        output=fmt.output_block,
    ),
    method(
        "getBlockTransactionCount", rs.BLOCK_TRANSACTION_COUNT, 1,
        inputs=[fmt.input_block_number],
        output=fmt.hex_to_number,
    ),
    method(
        "getBlockUncleCount", rs.UNCLE_COUNT, 1,
        inputs=[fmt.input_block_number],
        output=fmt.hex_to_number,
    ),
    method(
        "getTransaction", "eth_getTransactionByHash", 1,
        inputs=[None],
        output=fmt.output_transaction,
    ),
    method(
        "getTransactionFromBlock", rs.TRANSACTION_FROM_BLOCK, 2,
        inputs=[fmt.input_block_number, fmt.number_to_hex],
        output=fmt.output_transaction,
    ),
    method(
        "getTransactionReceipt", "eth_getTransactionReceipt", 1,
        inputs=[None],
        output=fmt.output_receipt,
    ),
    method(
        "getTransactionCount", "eth_getTransactionCount", 2,
        inputs=[fmt.input_address, fmt.input_default_block_number],
        output=fmt.hex_to_number,
    ),
    method("sendSignedTransaction", "eth_sendRawTransaction", 1, inputs=[None]),
    method("signTransaction", "eth_signTransaction", 1, inputs=[fmt.input_transaction]),
    method("sendTransaction", "eth_sendTransaction", 1, inputs=[fmt.input_transaction]),
    method(
        "sign", "eth_sign", 2,
        inputs=[fmt.input_sign, fmt.input_address],
        transform_payload=reverse_params,
    ),
    method("call", "eth_call", 2, inputs=[fmt.input_call, fmt.input_default_block_number]),
    method("estimateGas", "eth_estimateGas", 1, inputs=[fmt.input_call], output=fmt.hex_to_number),
    method("getCompilers", "eth_getCompilers"),
    method("compile.solidity", "eth_compileSolidity", 1),
    method("compile.lll", "eth_compileLLL", 1),
    method("compile.serpent", "eth_compileSerpent", 1),
    method("submitWork", "eth_submitWork", 3),
    method("getWork", "eth_getWork"),
    method("getPastLogs", "eth_getLogs", 1, inputs=[fmt.input_log], output=fmt.output_log),
)

REGISTRY: Mapping[str, MethodDescriptor] = build_registry(ETH_METHODS)


def resolve(name: str, registry: Mapping[str, MethodDescriptor] = REGISTRY) -> MethodDescriptor:
    desc = registry.get(name)
    if desc is None:
        raise ResolutionError(name, "method")
    return desc


def list_methods(registry: Mapping[str, MethodDescriptor] = REGISTRY) -> List[str]:
    return sorted(registry.keys())


__all__ = [
    "MethodDescriptor",
    "method",
    "reverse_params",
    "attr_name",
    "build_registry",
    "ETH_METHODS",
    "REGISTRY",
    "resolve",
    "list_methods",
]

"""
eth_sdk.formatters
==================

Argument/result conversion between caller-facing Python values and the
Ethereum JSON-RPC wire format.

A FormatterPipeline pairs:
  - one input formatter per argument position (or None: pass through), and
  - one optional output formatter for the wire result.

Input formatters are plain callables `f(value) -> wire_value`. The few that
need the call's default account/block are wrapped with `uses_defaults` and are
called as `f(value, defaults)`; `defaults` is the snapshot taken when the call
was encoded (see eth_sdk.defaults.CallDefaults).

Results that arrive as JSON arrays are decoded element by element, and a null
result (e.g. "block not found") is returned untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from . import address as _address
from .config import DEFAULT_BLOCK
from .errors import ArityError, DecodeError, FormatError
from .utils.bytes import from_quantity, is_hex_strict, to_hex, to_quantity
from .utils.hash import keccak256_text

BLOCK_TAGS = frozenset({"latest", "pending", "earliest"})


@dataclass(frozen=True)
class DefaultsFormatter:
    """An input formatter that also receives the call's default account/block."""

    func: Callable[[Any, Any], Any]

    def __call__(self, value: Any, defaults: Any) -> Any:
        return self.func(value, defaults)


def uses_defaults(func: Callable[[Any, Any], Any]) -> DefaultsFormatter:
    return DefaultsFormatter(func)


InputFormatter = Union[None, Callable[[Any], Any], DefaultsFormatter]
OutputFormatter = Optional[Callable[[Any], Any]]


# --------------------------------------------------------------------------------------
# Pipeline
# --------------------------------------------------------------------------------------


def encode(
    args: Sequence[Any],
    formatters: Sequence[InputFormatter],
    defaults: Any = None,
    *,
    method: Optional[str] = None,
) -> List[Any]:
    """
    Apply `formatters` positionally to `args`.

    Raises ArityError before any formatter runs when the lengths differ, and
    FormatError (tagged with the argument position) when one input is invalid.
    """
    if len(args) != len(formatters):
        raise ArityError(method, len(formatters), len(args))

    out: List[Any] = []
    for position, (arg, fmt) in enumerate(zip(args, formatters)):
        if fmt is None:
            out.append(arg)
            continue
        try:
            if isinstance(fmt, DefaultsFormatter):
                out.append(fmt(arg, defaults))
            else:
                out.append(fmt(arg))
        except FormatError as e:
            if e.position is None:
                e.position = position
            raise
        except (ValueError, TypeError) as e:
            raise FormatError(str(e), arg, position) from e
    return out


def decode(result: Any, formatter: OutputFormatter = None, *, method: Optional[str] = None) -> Any:
    """Apply `formatter` to a wire result; None results and missing formatters are identity."""
    if formatter is None or result is None:
        return result
    try:
        if isinstance(result, list):
            return [formatter(item) if item is not None else item for item in result]
        return formatter(result)
    except DecodeError as e:
        if e.method is None:
            e.method = method
        raise
    except Exception as e:
        raise DecodeError(str(e), method, result) from e


@dataclass(frozen=True)
class FormatterPipeline:
    inputs: tuple = ()
    output: OutputFormatter = None

    @property
    def arity(self) -> int:
        return len(self.inputs)

    def encode(self, args: Sequence[Any], defaults: Any = None, *, method: Optional[str] = None) -> List[Any]:
        return encode(args, self.inputs, defaults, method=method)

    def decode(self, result: Any, *, method: Optional[str] = None) -> Any:
        return decode(result, self.output, method=method)


# --------------------------------------------------------------------------------------
# Input formatters
# --------------------------------------------------------------------------------------


def input_address(value: Any) -> str:
    return _address.normalize(value)


def input_block_number(value: Any) -> Any:
    """Block tag / number / hash -> wire form. None passes through."""
    if value is None:
        return None
    if isinstance(value, str):
        if value in BLOCK_TAGS:
            return value
        if value == "genesis":
            return "0x0"
        if is_hex_strict(value) and len(value) > 2:
            return value.lower()
    try:
        return to_quantity(value)
    except ValueError as e:
        raise FormatError(f"invalid block number: {e}", value) from e


@uses_defaults
def input_default_block_number(value: Any, defaults: Any) -> Any:
    if value is None:
        value = getattr(defaults, "block", None)
    if value is None:
        value = DEFAULT_BLOCK
    return input_block_number(value)


def number_to_hex(value: Any) -> str:
    try:
        return to_quantity(value)
    except ValueError as e:
        raise FormatError(str(e), value) from e


def to_bool(value: Any) -> bool:
    return bool(value)


def _tx_input(options: Any, defaults: Any) -> Dict[str, Any]:
    if not isinstance(options, Mapping):
        raise FormatError("transaction/call options must be an object", options)
    tx = dict(options)

    if not tx.get("from") and getattr(defaults, "account", None):
        tx["from"] = defaults.account
    if tx.get("from"):
        tx["from"] = _address.normalize(tx["from"])
    if tx.get("to"):
        tx["to"] = _address.normalize(tx["to"])

    if "gasLimit" in tx:
        gas_limit = tx.pop("gasLimit")
        tx.setdefault("gas", gas_limit)
    data = tx.get("data")
    if data is not None and not is_hex_strict(data):
        raise FormatError("the data field must be hex encoded", data)

    for key in ("gasPrice", "gas", "value", "nonce"):
        if tx.get(key) is not None:
            tx[key] = number_to_hex(tx[key])
    return tx


@uses_defaults
def input_call(options: Any, defaults: Any) -> Dict[str, Any]:
    return _tx_input(options, defaults)


@uses_defaults
def input_transaction(options: Any, defaults: Any) -> Dict[str, Any]:
    tx = _tx_input(options, defaults)
    if not tx.get("from"):
        raise FormatError('the "from" field must be defined', options)
    return tx


def input_sign(data: Any) -> str:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return to_hex(data)
    if is_hex_strict(data):
        return data
    if isinstance(data, str):
        return to_hex(data.encode("utf-8"))
    raise FormatError("sign data must be str or bytes", data)


def _topic(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [_topic(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    s = str(value)
    if s.startswith("0x"):
        return s.lower()
    return to_hex(s.encode("utf-8"))


def input_log(options: Any) -> Dict[str, Any]:
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        raise FormatError("log filter must be an object", options)
    flt = dict(options)

    for key in ("fromBlock", "toBlock"):
        if flt.get(key) is not None:
            flt[key] = input_block_number(flt[key])
    if flt.get("topics") is not None:
        flt["topics"] = [_topic(t) for t in flt["topics"]]
    addr = flt.get("address")
    if isinstance(addr, (list, tuple)):
        flt["address"] = [_address.normalize(a) for a in addr]
    elif addr:
        flt["address"] = _address.normalize(addr)
    return flt


# --------------------------------------------------------------------------------------
# Output formatters
# --------------------------------------------------------------------------------------


def hex_to_number(value: Any) -> int:
    return from_quantity(value)


# Python ints are arbitrary precision, so "big number" is just an int.
output_big_number = hex_to_number


def _ints(obj: Dict[str, Any], keys: Sequence[str]) -> None:
    for key in keys:
        if obj.get(key) is not None:
            obj[key] = from_quantity(obj[key])


def output_checksum_address(value: Any) -> str:
    return _address.to_checksum_address(value)


def output_syncing(value: Any) -> Any:
    """
    eth_syncing result / syncing notification -> False or a status dict with ints.

    Accepts both the flat `{"currentBlock": ...}` status and the subscription
    envelope `{"syncing": bool, "status": {...}}`.
    """
    if isinstance(value, bool):
        return value
    if not isinstance(value, Mapping):
        raise DecodeError("syncing status must be false or an object", value=value)
    status = dict(value)
    if "syncing" in status:
        if not status["syncing"]:
            return False
        status = dict(status.get("status") or {})
    _ints(status, ("startingBlock", "currentBlock", "highestBlock", "knownStates", "pulledStates"))
    return status


def output_log(log: Any) -> Dict[str, Any]:
    out = dict(log)
    block_hash = out.get("blockHash")
    tx_hash = out.get("transactionHash")
    log_index = out.get("logIndex")
    if isinstance(block_hash, str) and isinstance(tx_hash, str) and isinstance(log_index, str):
        seed = block_hash.replace("0x", "") + tx_hash.replace("0x", "") + log_index.replace("0x", "")
        out["id"] = "log_" + keccak256_text(seed).hex()[:8]
    _ints(out, ("blockNumber", "transactionIndex", "logIndex"))
    if out.get("address"):
        out["address"] = _address.to_checksum_address(out["address"])
    return out


def output_transaction(tx: Any) -> Dict[str, Any]:
    out = dict(tx)
    _ints(out, ("blockNumber", "transactionIndex", "nonce", "gas", "gasPrice", "value",
                "maxFeePerGas", "maxPriorityFeePerGas", "type", "chainId"))
    to = out.get("to")
    out["to"] = _address.to_checksum_address(to) if to and _address.is_address(to) else None
    if out.get("from"):
        out["from"] = _address.to_checksum_address(out["from"])
    return out


def output_receipt(receipt: Any) -> Dict[str, Any]:
    out = dict(receipt)
    _ints(out, ("blockNumber", "transactionIndex", "cumulativeGasUsed", "gasUsed", "effectiveGasPrice"))
    if isinstance(out.get("logs"), list):
        out["logs"] = [output_log(log) for log in out["logs"]]
    if out.get("contractAddress"):
        out["contractAddress"] = _address.to_checksum_address(out["contractAddress"])
    if out.get("status") is not None:
        out["status"] = bool(from_quantity(out["status"]))
    return out


def output_block(block: Any) -> Dict[str, Any]:
    out = dict(block)
    _ints(out, ("gasLimit", "gasUsed", "size", "timestamp", "number",
                "difficulty", "totalDifficulty", "baseFeePerGas"))
    txs = out.get("transactions")
    if isinstance(txs, list):
        out["transactions"] = [output_transaction(t) if isinstance(t, Mapping) else t for t in txs]
    if out.get("miner"):
        out["miner"] = _address.to_checksum_address(out["miner"])
    return out


__all__ = [
    "BLOCK_TAGS",
    "DefaultsFormatter",
    "FormatterPipeline",
    "uses_defaults",
    "encode",
    "decode",
    # inputs
    "input_address",
    "input_block_number",
    "input_default_block_number",
    "number_to_hex",
    "to_bool",
    "input_call",
    "input_transaction",
    "input_sign",
    "input_log",
    # outputs
    "hex_to_number",
    "output_big_number",
    "output_checksum_address",
    "output_syncing",
    "output_log",
    "output_transaction",
    "output_receipt",
    "output_block",
]

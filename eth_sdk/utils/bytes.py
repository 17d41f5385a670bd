from __future__ import annotations

import re
from typing import Any, Union

BytesLike = Union[bytes, bytearray, memoryview]

_HEX_STRICT_RE = re.compile(r"^0x[0-9a-fA-F]*$")


def is_hex_strict(value: Any) -> bool:
    """True for '0x'-prefixed strings made only of hex digits (empty body allowed)."""
    return isinstance(value, str) and bool(_HEX_STRICT_RE.match(value))


def ensure_bytes(data: Union[BytesLike, str]) -> bytes:
    """
    Ensure input is bytes.

    Accepts:
      - bytes / bytearray / memoryview  -> bytes(data)
      - str: treated as hex; optional '0x' prefix; even-length enforced

    Raises:
      ValueError on invalid hex strings.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return from_hex(data)
    raise TypeError(f"Unsupported type for ensure_bytes: {type(data)!r}")


def to_hex(b: BytesLike, prefix: bool = True) -> str:
    """
    Bytes -> hex string (lowercase). Prefix with '0x' by default.
    """
    s = bytes(b).hex()
    return f"0x{s}" if prefix else s


def from_hex(s: str) -> bytes:
    """
    Hex string (optionally '0x' prefixed) -> bytes. Odd lengths are rejected.
    """
    if not isinstance(s, str):
        raise TypeError("from_hex expects a string")
    if s.startswith(("0x", "0X")):
        s = s[2:]
    if len(s) % 2 != 0:
        raise ValueError("hex string must have even length")
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise ValueError(f"invalid hex string: {e}") from e


# --- Ethereum quantities ------------------------------------------------------


def to_quantity(value: Any) -> str:
    """
    Encode a non-negative integer as a JSON-RPC quantity ('0x'-prefixed, no
    leading zeros). Accepts ints, decimal strings and hex strings.

    Raises:
      ValueError for negatives, booleans and unparseable strings.
    """
    if isinstance(value, bool):
        raise ValueError("quantity cannot be boolean")
    if isinstance(value, int):
        n = value
    elif isinstance(value, str):
        raw = value.strip()
        if is_hex_strict(raw) and len(raw) > 2:
            n = int(raw, 16)
        elif raw.isdigit():
            n = int(raw, 10)
        else:
            raise ValueError(f"not a number: {value!r}")
    else:
        raise ValueError(f"unsupported quantity type: {type(value).__name__}")
    if n < 0:
        raise ValueError("quantity must be non-negative")
    return hex(n)


def from_quantity(value: Any) -> int:
    """
    Decode a JSON-RPC quantity into an int. Ints pass through, '0x' strings are
    parsed as hex, other digit strings as decimal.
    """
    if isinstance(value, bool):
        raise ValueError("quantity cannot be boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if raw.startswith(("0x", "0X")):
            return int(raw, 16) if len(raw) > 2 else 0
        if raw.isdigit():
            return int(raw, 10)
    raise ValueError(f"not a quantity: {value!r}")


__all__ = [
    "BytesLike",
    "is_hex_strict",
    "ensure_bytes",
    "to_hex",
    "from_hex",
    "to_quantity",
    "from_quantity",
]

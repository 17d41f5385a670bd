"""
eth_sdk.address
===============

Ethereum account address validation and EIP-55 checksum encoding.

Format
------
An address is 20 bytes rendered as 40 hex digits with a '0x' prefix. Mixed-case
renderings carry an EIP-55 checksum: the i-th letter is upper-cased when the
i-th nibble of keccak256(lowercase_hex_digits) is >= 8. All-lower and all-upper
renderings carry no checksum and are accepted as-is.

This module provides:
- is_address(value) -> bool
- is_checksum_address(value) -> bool
- normalize(value) -> str            lowercase '0x' form (wire format)
- to_checksum_address(value) -> str  EIP-55 form (caller-facing format)
"""

from __future__ import annotations

import re
from typing import Any

from .errors import FormatError
from .utils.hash import keccak256_text

__all__ = [
    "AddressError",
    "is_address",
    "is_checksum_address",
    "normalize",
    "to_checksum_address",
]

_BODY_RE = re.compile(r"^[0-9a-fA-F]{40}$")


class AddressError(FormatError):
    """Raised for malformed addresses or addresses with a bad checksum."""


def _body(value: Any) -> str:
    """Return the 40 hex digits of *value* or raise AddressError."""
    if not isinstance(value, str):
        raise AddressError("address must be a string", value)
    body = value[2:] if value.startswith(("0x", "0X")) else value
    if not _BODY_RE.match(body):
        raise AddressError("address must be 20 bytes of hex", value)
    return body


def _checksum_body(lower_body: str) -> str:
    digest = keccak256_text(lower_body).hex()
    return "".join(
        ch.upper() if ch.isalpha() and int(digest[i], 16) >= 8 else ch
        for i, ch in enumerate(lower_body)
    )


def is_checksum_address(value: Any) -> bool:
    try:
        body = _body(value)
    except AddressError:
        return False
    return body == _checksum_body(body.lower())


def is_address(value: Any) -> bool:
    try:
        body = _body(value)
    except AddressError:
        return False
    if body == body.lower() or body == body.upper():
        return True
    return body == _checksum_body(body.lower())


def normalize(value: Any) -> str:
    """
    Validate *value* and return its lowercase '0x' form.

    Raises AddressError when the value is not 40 hex digits, or when it is
    mixed-case and the EIP-55 checksum does not match.
    """
    body = _body(value)
    if body != body.lower() and body != body.upper():
        if body != _checksum_body(body.lower()):
            raise AddressError("address checksum mismatch", value)
    return "0x" + body.lower()


def to_checksum_address(value: Any) -> str:
    """Validate *value* and return its EIP-55 checksummed form."""
    return "0x" + _checksum_body(normalize(value)[2:])

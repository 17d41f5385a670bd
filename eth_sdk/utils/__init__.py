"""
Utility helpers for the eth_sdk package.

Re-exports:
- bytes: hex helpers and JSON-RPC quantity encode/decode
- hash: Keccak-256 convenience wrappers
"""

from .bytes import (ensure_bytes, from_hex, from_quantity, is_hex_strict,
                    to_hex, to_quantity)
from .hash import keccak256, keccak256_hex, keccak256_text

__all__ = [
    # bytes
    "to_hex",
    "from_hex",
    "ensure_bytes",
    "is_hex_strict",
    "to_quantity",
    "from_quantity",
    # hash
    "keccak256",
    "keccak256_hex",
    "keccak256_text",
]

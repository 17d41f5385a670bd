from __future__ import annotations

from Crypto.Hash import keccak as _keccak

from .bytes import BytesLike, ensure_bytes, to_hex

# Ethereum uses the original Keccak-256 padding, not NIST SHA3-256, so hashlib's
# sha3_256 gives different digests. pycryptodome exposes the Keccak variant.


def keccak256(data: BytesLike) -> bytes:
    """Return Keccak-256 digest of *data* (bytes)."""
    h = _keccak.new(digest_bits=256)
    h.update(ensure_bytes(data))
    return h.digest()


def keccak256_hex(data: BytesLike, *, prefix: bool = True) -> str:
    """Return hex string of Keccak-256 digest (0x-prefixed by default)."""
    return to_hex(keccak256(data), prefix=prefix)


def keccak256_text(text: str) -> bytes:
    """Keccak-256 of the UTF-8 encoding of *text*."""
    return keccak256(text.encode("utf-8"))


__all__ = ["keccak256", "keccak256_hex", "keccak256_text"]

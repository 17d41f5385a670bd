"""
Wire-method resolution for logical operations that map to more than one RPC
method depending on the shape of their first argument.

The first argument of a block-addressed call is classified as one of:

    IDENTIFIER  a string starting with "0x" (a block hash)  -> "by hash" variant
    NUMBER      an int                                      -> "by number" variant
    TAG         any other string ("latest", "", "pending")  -> "by number" variant

Resolution never raises: a missing or unrecognised first argument selects the
"by number" branch.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Sequence, Union

HASH_PREFIX = "0x"


class BlockRefKind(Enum):
    IDENTIFIER = "identifier"
    NUMBER = "number"
    TAG = "tag"


def classify_block_ref(value: Any) -> BlockRefKind:
    if isinstance(value, str):
        return BlockRefKind.IDENTIFIER if value.startswith(HASH_PREFIX) else BlockRefKind.TAG
    return BlockRefKind.NUMBER


@dataclass(frozen=True)
class ByBlockRef:
    """Pick `by_hash` when the first argument is a hash identifier, else `by_number`."""

    by_hash: str
    by_number: str

    def __call__(self, args: Sequence[Any]) -> str:
        first = args[0] if args else None
        if classify_block_ref(first) is BlockRefKind.IDENTIFIER:
            return self.by_hash
        return self.by_number

    @property
    def wire_names(self) -> tuple[str, str]:
        return (self.by_hash, self.by_number)


Resolver = Union[str, Callable[[Sequence[Any]], str]]


def resolve_wire_name(resolver: Resolver, args: Sequence[Any]) -> str:
    if isinstance(resolver, str):
        return resolver
    return resolver(args)


BLOCK = ByBlockRef("eth_getBlockByHash", "eth_getBlockByNumber")
TRANSACTION_FROM_BLOCK = ByBlockRef(
    "eth_getTransactionByBlockHashAndIndex", "eth_getTransactionByBlockNumberAndIndex"
)
UNCLE = ByBlockRef("eth_getUncleByBlockHashAndIndex", "eth_getUncleByBlockNumberAndIndex")
BLOCK_TRANSACTION_COUNT = ByBlockRef(
    "eth_getBlockTransactionCountByHash", "eth_getBlockTransactionCountByNumber"
)
UNCLE_COUNT = ByBlockRef("eth_getUncleCountByBlockHash", "eth_getUncleCountByBlockNumber")


__all__ = [
    "HASH_PREFIX",
    "BlockRefKind",
    "classify_block_ref",
    "ByBlockRef",
    "Resolver",
    "resolve_wire_name",
    "BLOCK",
    "TRANSACTION_FROM_BLOCK",
    "UNCLE",
    "BLOCK_TRANSACTION_COUNT",
    "UNCLE_COUNT",
]

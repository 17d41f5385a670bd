import pytest

from eth_sdk import resolver as rs
from eth_sdk.resolver import BlockRefKind, ByBlockRef, classify_block_ref, resolve_wire_name


@pytest.mark.parametrize(
    "value,kind",
    [
        ("0xabc", BlockRefKind.IDENTIFIER),
        ("0x", BlockRefKind.IDENTIFIER),
        (12, BlockRefKind.NUMBER),
        ("latest", BlockRefKind.TAG),
        ("", BlockRefKind.TAG),
        (None, BlockRefKind.NUMBER),
    ],
)
def test_classify_block_ref(value, kind):
    assert classify_block_ref(value) is kind


def test_block_resolver_picks_variant_from_first_argument():
    assert rs.BLOCK(["0xabc", False]) == "eth_getBlockByHash"
    assert rs.BLOCK([12, False]) == "eth_getBlockByNumber"
    assert rs.BLOCK(["latest", False]) == "eth_getBlockByNumber"


def test_missing_first_argument_selects_by_number():
    assert rs.UNCLE_COUNT([]) == "eth_getUncleCountByBlockNumber"


def test_static_names_resolve_to_themselves():
    assert resolve_wire_name("eth_call", [1, 2]) == "eth_call"


def test_custom_resolver_and_wire_names():
    r = ByBlockRef("a_byHash", "a_byNumber")
    assert r.wire_names == ("a_byHash", "a_byNumber")
    assert resolve_wire_name(r, ["0x01"]) == "a_byHash"
    assert resolve_wire_name(r, [1]) == "a_byNumber"


HASH = "0x" + "ab" * 32

BY_BLOCK_REF = [
    (rs.BLOCK, "eth_getBlockByHash", "eth_getBlockByNumber"),
    (rs.TRANSACTION_FROM_BLOCK, "eth_getTransactionByBlockHashAndIndex", "eth_getTransactionByBlockNumberAndIndex"),
    (rs.UNCLE, "eth_getUncleByBlockHashAndIndex", "eth_getUncleByBlockNumberAndIndex"),
    (rs.BLOCK_TRANSACTION_COUNT, "eth_getBlockTransactionCountByHash", "eth_getBlockTransactionCountByNumber"),
    (rs.UNCLE_COUNT, "eth_getUncleCountByBlockHash", "eth_getUncleCountByBlockNumber"),
]


@pytest.mark.parametrize("resolver,by_hash,by_number", BY_BLOCK_REF)
def test_every_block_ref_resolver_dispatches_on_first_argument(resolver, by_hash, by_number):
    assert resolver.wire_names == (by_hash, by_number)
    assert resolver([HASH, 0]) == by_hash
    assert resolver([12, 0]) == by_number
    assert resolver(["latest", 0]) == by_number
    assert resolver(["", 0]) == by_number

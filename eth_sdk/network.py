"""
Network identity: the `net_*` operations and well-known network detection.

`get_network_type` combines the node's network id with the hash of block 0,
since several test networks have reused ids over the years:

    >>> await get_network_type(eth)
    'main'
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Tuple

from . import formatters as fmt
from .invoker import MethodInvoker
from .methods import MethodDescriptor, build_registry, method
from .rpc import Transport

log = logging.getLogger(__name__)

# network id -> (name, genesis block hash)
KNOWN_NETWORKS: Mapping[int, Tuple[str, str]] = {
    1: ("main", "0xd4e56740f876aef8c010b86a40d5f56745a118d0906a34e69aec8c0db1cb8fa3"),
    2: ("morden", "0x0cd786a2425d16f152c658316c423e6ce1181e15c3295826d7c9904cba9ce303"),
    3: ("ropsten", "0x41941023680923e0fe4d74a34bdac8141f2540e3ae90623718e47d66d1ca4a2d"),
    4: ("rinkeby", "0x6341fd3daf94b748c72ced5a5b26028f2474f5f00d824504e4fa37a75767e177"),
    42: ("kovan", "0xa3c565fc15c7478862d50ccd6561e3c06b24cc509bf388941c25ea985ce32cb9"),
}

PRIVATE = "private"

NET_METHODS = (
    method("getId", "net_version", output=fmt.hex_to_number),
    method("isListening", "net_listening"),
    method("getPeerCount", "net_peerCount", output=fmt.hex_to_number),
)

NET_REGISTRY: Mapping[str, MethodDescriptor] = build_registry(NET_METHODS)


class Net:
    """`net_*` operations; registered with Eth as a provider-forwarding collaborator."""

    def __init__(self, transport: Transport) -> None:
        self._invoker = MethodInvoker(transport, NET_REGISTRY)

    @property
    def transport(self) -> Transport:
        return self._invoker.transport

    def set_provider(self, transport: Transport) -> None:
        self._invoker.set_provider(transport)

    async def get_id(self) -> int:
        return await self._invoker.invoke("getId")

    async def is_listening(self) -> bool:
        return bool(await self._invoker.invoke("isListening"))

    async def get_peer_count(self) -> int:
        return await self._invoker.invoke("getPeerCount")


def classify_network(network_id: int, genesis_hash: Any) -> str:
    known = KNOWN_NETWORKS.get(network_id)
    if known is None:
        return PRIVATE
    name, genesis = known
    if isinstance(genesis_hash, str) and genesis_hash.lower() == genesis:
        return name
    return PRIVATE


async def get_network_type(eth: Any) -> str:
    """One of main / morden / ropsten / rinkeby / kovan / private."""
    network_id = await eth.net.get_id()
    genesis = await eth.invoke("getBlock", 0, False)
    genesis_hash = genesis.get("hash") if isinstance(genesis, Mapping) else None
    kind = classify_network(network_id, genesis_hash)
    log.debug("network id=%s genesis=%s -> %s", network_id, genesis_hash, kind)
    return kind


__all__ = ["Net", "KNOWN_NETWORKS", "NET_METHODS", "NET_REGISTRY", "classify_network", "get_network_type"]

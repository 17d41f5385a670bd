import pytest

from eth_sdk.config import SDKConfig
from eth_sdk.errors import ArityError
from eth_sdk.eth import Eth
from eth_sdk.network import classify_network

from helpers import ManualScheduler, RecordingTransport

ADDR = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
MAIN_GENESIS = "0xd4e56740f876aef8c010b86a40d5f56745a118d0906a34e69aec8c0db1cb8fa3"


class Collaborator:
    """Stands in for a contract factory / personal-account subsystem."""

    def __init__(self):
        self.accounts = []
        self.blocks = []
        self.providers = []

    def set_default_account(self, account):
        self.accounts.append(account)

    def set_default_block(self, block):
        self.blocks.append(block)

    def set_provider(self, transport):
        self.providers.append(transport)


@pytest.mark.asyncio
async def test_snake_case_operations():
    transport = RecordingTransport({"eth_blockNumber": "0x2", "eth_compileSolidity": {"code": "0x"}})
    eth = Eth(transport)
    assert await eth.get_block_number() == 2
    assert await eth.compile_solidity("contract C {}") == {"code": "0x"}
    assert transport.calls[-1] == ("eth_compileSolidity", ["contract C {}"])
    with pytest.raises(ArityError):
        eth.get_block_number(1)
    with pytest.raises(AttributeError):
        eth.get_nothing
    assert "get_balance" in dir(eth)


def test_defaults_broadcast_to_collaborators():
    helper = Collaborator()
    eth = Eth(RecordingTransport(), collaborators=[helper])
    eth.set_default_account(ADDR.lower())
    eth.set_default_block("pending")

    assert eth.default_account == ADDR
    assert eth.default_block == "pending"
    assert helper.accounts[-1] == ADDR and helper.blocks[-1] == "pending"
    assert eth.invoker.defaults.account == ADDR


def test_config_seeds_defaults():
    cfg = SDKConfig(default_block=5, default_account=ADDR.lower())
    eth = Eth(RecordingTransport(), config=cfg)
    assert eth.default_block == 5 and eth.default_account == ADDR


@pytest.mark.asyncio
async def test_set_provider_reaches_every_consumer():
    helper = Collaborator()
    old, new = RecordingTransport(), RecordingTransport({"net_version": "1"})
    eth = Eth(old, collaborators=[helper], scheduler=ManualScheduler())
    eth.set_provider(new)

    assert helper.providers == [new]
    assert eth.invoker.transport is new
    assert eth.subscriptions.transport is new
    assert eth.net.transport is new
    assert await eth.net.get_id() == 1
    await eth.subscribe("pendingTransactions")
    assert new.subscribed == [("newPendingTransactions", [])] and old.subscribed == []
    assert await eth.clear_subscriptions() == 1


@pytest.mark.asyncio
async def test_network_type_main_and_private():
    eth = Eth(RecordingTransport({"net_version": "1", "eth_getBlockByNumber": {"hash": MAIN_GENESIS}}))
    assert await eth.get_network_type() == "main"

    eth = Eth(RecordingTransport({"net_version": "1", "eth_getBlockByNumber": {"hash": "0x" + "00" * 32}}))
    assert await eth.get_network_type() == "private"


def test_classify_network():
    assert classify_network(1, MAIN_GENESIS.upper().replace("0X", "0x")) == "main"
    assert classify_network(1337, MAIN_GENESIS) == "private"
    assert classify_network(42, None) == "private"

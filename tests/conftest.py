"""
Shared fixtures: in-memory collaborators and encoding helpers.
"""
import asyncio
import os
import sys

import pytest
from eth_abi import encode

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tx_annotator.config.network_config import DEPOSIT_TOPIC, TRANSFER_TOPIC, WITHDRAWAL_TOPIC
from tx_annotator.services.enrichment.base import (
    AddressOnNetwork,
    AssetAmount,
    EVMBlock,
    EVMLog,
    NameResolution,
    NonFungibleAsset,
    SmartContractFungibleAsset,
    get_network,
    normalize_address,
)
from tx_annotator.services.enrichment.collaborators import ChainService, IndexingService, NameService


ETHEREUM = get_network("ethereum")

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
CAROL = "0x3333333333333333333333333333333333333333"
STRANGER = "0x4444444444444444444444444444444444444444"
DEX_ROUTER = "0x7a250d5630b4cf539739df2c5dacb4c659f2488d"

USDC = SmartContractFungibleAsset(
    symbol="USDC",
    name="USD Coin",
    decimals=6,
    contract_address="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    logo_url="https://example.com/usdc.png",
)
WETH = SmartContractFungibleAsset(
    symbol="WETH",
    name="Wrapped Ether",
    decimals=18,
    contract_address="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
)
PUNKS = NonFungibleAsset(
    name="CryptoPunks",
    symbol="PUNK",
    contract_address="0xb47e3cd837dDF8e4c57F05d70Ab865de6e193BBB",
)
UNKNOWN_TOKEN = "0x9999999999999999999999999999999999999999"

CATALOG = [ETHEREUM.base_asset, PUNKS, USDC, WETH]


# ============================================================================
# ENCODING HELPERS
# ============================================================================

def call_data(selector: str, types, args) -> str:
    return selector + encode(list(types), list(args)).hex()


def transfer_call(to: str, amount: int) -> str:
    return call_data("0xa9059cbb", ["address", "uint256"], [to, amount])


def transfer_from_call(sender: str, to: str, amount: int) -> str:
    return call_data("0x23b872dd", ["address", "address", "uint256"], [sender, to, amount])


def approve_call(spender: str, value: int) -> str:
    return call_data("0x095ea7b3", ["address", "uint256"], [spender, value])


def address_topic(address: str) -> str:
    return "0x" + "0" * 24 + normalize_address(address)[2:]


def amount_data(amount: int) -> str:
    return "0x" + encode(["uint256"], [amount]).hex()


def transfer_log(contract: str, sender: str, recipient: str, amount: int) -> EVMLog:
    return EVMLog(
        contract_address=contract,
        topics=(TRANSFER_TOPIC, address_topic(sender), address_topic(recipient)),
        data=amount_data(amount),
    )


def deposit_log(contract: str, dst: str, amount: int) -> EVMLog:
    return EVMLog(contract_address=contract, topics=(DEPOSIT_TOPIC, address_topic(dst)), data=amount_data(amount))


def withdrawal_log(contract: str, src: str, amount: int) -> EVMLog:
    return EVMLog(contract_address=contract, topics=(WITHDRAWAL_TOPIC, address_topic(src)), data=amount_data(amount))


# ============================================================================
# IN-MEMORY COLLABORATORS
# ============================================================================

class FakeChainService(ChainService):
    def __init__(self, tracked=(), balance=0, block=None, balance_error=None, block_error=None, tracked_error=None):
        self.tracked = list(tracked)
        self.balance = balance
        self.block = block
        self.balance_error = balance_error
        self.block_error = block_error
        self.tracked_error = tracked_error
        self.balance_calls = []
        self.block_calls = []

    async def get_accounts_to_track(self):
        if self.tracked_error:
            raise self.tracked_error
        return [AddressOnNetwork(address=address, network=ETHEREUM) for address in self.tracked]

    async def get_latest_base_account_balance(self, address, network):
        self.balance_calls.append(address)
        if self.balance_error:
            raise self.balance_error
        return AssetAmount(asset=network.base_asset, amount=self.balance)

    async def get_block_data(self, network, block_hash):
        self.block_calls.append(block_hash)
        if self.block_error:
            raise self.block_error
        return self.block


class FakeIndexingService(IndexingService):
    def __init__(self, assets=None, error=None):
        self.assets = list(CATALOG if assets is None else assets)
        self.error = error

    async def get_cached_assets(self, network):
        if self.error:
            raise self.error
        return list(self.assets)


class FakeNameService(NameService):
    """Names keyed by normalized address; `failing` raise, `hanging` never answer."""

    def __init__(self, names=None, failing=(), hanging=()):
        self.names = {normalize_address(a): n for a, n in (names or {}).items()}
        self.failing = {normalize_address(a) for a in failing}
        self.hanging = {normalize_address(a) for a in hanging}
        self.calls = []

    async def lookup_name(self, address, network):
        key = normalize_address(address)
        self.calls.append(key)
        if key in self.failing:
            raise ConnectionError(f"resolver unavailable for {address}")
        if key in self.hanging:
            await asyncio.sleep(60)
        name = self.names.get(key)
        return NameResolution(name=name, address=address) if name else None


@pytest.fixture
def ethereum():
    return ETHEREUM


@pytest.fixture
def mined_block():
    return EVMBlock(hash="0x" + "ab" * 32, number=17_000_000, timestamp=1_680_000_000)


@pytest.fixture
def name_service():
    return FakeNameService(names={BOB: "bob.eth", DEX_ROUTER: "Uniswap V2 Router", USDC.contract_address: "USDC"})


@pytest.fixture
def indexing_service():
    return FakeIndexingService()


@pytest.fixture
def chain_service(mined_block):
    return FakeChainService(tracked=[ALICE], balance=10 ** 18, block=mined_block)

"""
Web3-backed chain data source.

Implements ChainService on top of an AsyncWeb3 instance and converts web3
transaction / receipt mappings into the engine's Transaction and EVMLog values.
"""

from typing import Any, Mapping, Optional, Sequence
import logging

from web3 import AsyncHTTPProvider, AsyncWeb3
from eth_utils import to_checksum_address

from ...config.network_config import Settings
from .base import (
    AddressOnNetwork,
    AssetAmount,
    EVMBlock,
    EVMLog,
    Network,
    Transaction,
    hex_string,
)
from .collaborators import ChainService

logger = logging.getLogger(__name__)


class Web3ChainService(ChainService):
    """ChainService reading balances and blocks through web3's async API."""

    def __init__(self, w3: AsyncWeb3, tracked_accounts: Sequence[AddressOnNetwork] = ()):
        self.w3 = w3
        self.tracked_accounts = list(tracked_accounts)

    @classmethod
    def from_settings(cls, settings: Settings, network: Network) -> "Web3ChainService":
        """Connect to `settings.web3_provider_url`, tracking the configured addresses on `network`."""
        if not settings.web3_provider_url:
            logger.warning("No WEB3_PROVIDER_URL configured; chain lookups will fail")
        w3 = AsyncWeb3(AsyncHTTPProvider(settings.web3_provider_url))
        tracked = [AddressOnNetwork(address=address, network=network) for address in settings.tracked_addresses]
        logger.info(f"Web3 chain service tracking {len(tracked)} account(s) on {network.name}")
        return cls(w3, tracked)

    async def get_accounts_to_track(self) -> Sequence[AddressOnNetwork]:
        return list(self.tracked_accounts)

    async def get_latest_base_account_balance(self, address: str, network: Network) -> AssetAmount:
        balance = await self.w3.eth.get_balance(to_checksum_address(address))
        return AssetAmount(asset=network.base_asset, amount=int(balance))

    async def get_block_data(self, network: Network, block_hash: str) -> EVMBlock:
        block = await self.w3.eth.get_block(block_hash)
        return EVMBlock(
            hash=hex_string(block['hash']),
            number=int(block['number']),
            timestamp=int(block['timestamp']),
        )


def _optional_hex(value: Any) -> Optional[str]:
    return hex_string(value) if value is not None else None


def log_from_web3(log: Mapping[str, Any]) -> EVMLog:
    """Convert a web3 receipt log (HexBytes topics/data) into an EVMLog."""
    return EVMLog(
        contract_address=log['address'],
        topics=tuple(hex_string(topic) for topic in log.get('topics', [])),
        data=hex_string(log.get('data') or "0x"),
    )


def transaction_from_web3(tx: Mapping[str, Any], receipt: Optional[Mapping[str, Any]] = None) -> Transaction:
    """
    Convert a web3 transaction (and optionally its receipt) into a Transaction.

    Gas limit and fee fields are only carried for transactions without a block
    hash; a mined transaction is not a request and gets no affordability check.
    """
    block_hash = _optional_hex(tx.get('blockHash'))
    pending = block_hash is None

    logs = None
    if receipt is not None:
        logs = tuple(log_from_web3(log) for log in receipt.get('logs', []))

    return Transaction(
        from_address=tx['from'],
        to=tx.get('to') or None,
        input=_optional_hex(tx.get('input')),
        value=tx.get('value'),
        gas_limit=tx.get('gas') if pending else None,
        max_fee_per_gas=tx.get('maxFeePerGas') if pending else None,
        max_priority_fee_per_gas=tx.get('maxPriorityFeePerGas') if pending else None,
        block_hash=block_hash,
        tx_hash=_optional_hex(tx.get('hash')),
        logs=logs,
    )

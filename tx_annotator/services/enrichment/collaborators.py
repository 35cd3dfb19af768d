"""
Abstract collaborator interfaces consumed by the annotation engine.

Implementations own retrieval, caching and retries; the engine only calls
these methods and tolerates their failures.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Union

from .base import AddressOnNetwork, AnyAsset, AssetAmount, EVMBlock, NameResolution, Network


class ChainService(ABC):
    """Chain state: tracked accounts, balances and blocks."""

    @abstractmethod
    async def get_accounts_to_track(self) -> Sequence[Union[str, AddressOnNetwork]]:
        """
        Accounts whose token transfers are worth annotating.

        Entries may be plain addresses or AddressOnNetwork values.
        """
        pass

    @abstractmethod
    async def get_latest_base_account_balance(self, address: str, network: Network) -> AssetAmount:
        """Latest base-asset balance of `address` on `network`."""
        pass

    @abstractmethod
    async def get_block_data(self, network: Network, block_hash: str) -> EVMBlock:
        """
        Block with the given hash.

        Raises:
            Any exception when the block can't be fetched
        """
        pass


class IndexingService(ABC):
    """Cached asset registry."""

    @abstractmethod
    async def get_cached_assets(self, network: Network) -> Sequence[AnyAsset]:
        """Every cached asset on `network` (base, fungible and non-fungible)."""
        pass


class NameService(ABC):
    """Name resolution (ENS, address book, ...)."""

    @abstractmethod
    async def lookup_name(self, address: str, network: Network) -> Optional[NameResolution]:
        """
        Resolve a human-readable name for `address`.

        Must be safe to call concurrently and repeatedly. Returns None when no
        name is known.
        """
        pass

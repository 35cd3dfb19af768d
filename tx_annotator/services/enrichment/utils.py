"""
Helpers shared by the annotation steps: transfer log parsing and filtering,
asset catalog matching, and best-effort concurrent gathering.
"""

import asyncio
from typing import Awaitable, Iterable, List, Optional, Sequence, TypeVar, Union

from .base import (
    AnyAsset,
    EVMLog,
    SmartContractFungibleAsset,
    TokenTransferLog,
    normalize_address,
    same_address,
)
from .erc20 import parse_erc20_transfer_log
from .wrapped_asset import parse_wrapped_asset_log

T = TypeVar("T")


def parse_transfer_logs(logs: Sequence[EVMLog]) -> List[TokenTransferLog]:
    """
    Token transfers from ERC-20 Transfer and wrapped-asset Deposit/Withdrawal
    logs, in the order the logs were emitted. Unrecognized logs are skipped.
    """
    transfers = []
    for log in logs:
        transfer = parse_erc20_transfer_log(log) or parse_wrapped_asset_log(log)
        if transfer is not None:
            transfers.append(transfer)
    return transfers


def filter_by_tracked_addresses(
    transfers: Sequence[TokenTransferLog],
    addresses: Iterable[str],
) -> List[TokenTransferLog]:
    """Transfers whose sender or recipient is one of `addresses` (case-insensitive)."""
    tracked = {normalize_address(address) for address in addresses}
    return [
        transfer for transfer in transfers
        if normalize_address(transfer.sender_address) in tracked
        or normalize_address(transfer.recipient_address) in tracked
    ]


def distinct_recipient_addresses(transfers: Sequence[TokenTransferLog]) -> List[str]:
    """Normalized recipient addresses, first-seen order, no duplicates."""
    return list(dict.fromkeys(normalize_address(t.recipient_address) for t in transfers))


def match_asset(catalog: Sequence[AnyAsset], contract_address: str) -> Optional[SmartContractFungibleAsset]:
    """First contract-backed fungible asset in `catalog` deployed at `contract_address`."""
    for asset in catalog:
        if isinstance(asset, SmartContractFungibleAsset) and same_address(asset.contract_address, contract_address):
            return asset
    return None


async def settle_all(awaitables: Iterable[Awaitable[T]]) -> List[Union[T, BaseException]]:
    """
    Wait for every awaitable to finish, successfully or not.

    Never short-circuits on a failure: each slot holds either the result or the
    exception it raised, in input order.
    """
    return list(await asyncio.gather(*awaitables, return_exceptions=True))


def successful_results(results: Iterable[Union[T, BaseException]]) -> List[T]:
    return [result for result in results if not isinstance(result, BaseException)]

"""
Transaction Annotation

Resolves an annotation for a transaction request, or a pending or mined
transaction:
- contract deployments (no recipient)
- base asset sends (no call data, value present)
- ERC-20 transfers and approvals on cataloged tokens
- everything else as a generic contract interaction
plus sub-annotations for token transfers found in the logs that touch tracked
accounts.

Collaborator failures never escape; they leave the corresponding field or
warning unset.
"""

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence
import logging

from ...config.network_config import DEFAULT_NAME_LOOKUP_TIMEOUT
from .base import (
    AnyAsset,
    Annotation,
    AnnotationWarning,
    AssetAmount,
    AssetApprovalAnnotation,
    AssetTransferAnnotation,
    ContractDeploymentAnnotation,
    ContractInteractionAnnotation,
    EVMLog,
    Network,
    Transaction,
    enrich_asset_amount,
    normalize_address,
    same_address,
)
from .collaborators import ChainService, IndexingService, NameService
from .erc20 import ERC20ApproveCall, ERC20TransferCall, ERC20TransferFromCall, decode_erc20_call
from .names import resolve_name, resolve_names
from .utils import (
    distinct_recipient_addresses,
    filter_by_tracked_addresses,
    match_asset,
    parse_transfer_logs,
)

logger = logging.getLogger(__name__)


async def _lacks_funds_for_request(
    chain_service: ChainService,
    network: Network,
    transaction: Transaction,
) -> bool:
    """True when a request's max gas fee plus value exceeds the sender's balance."""
    if not transaction.is_request:
        return False

    max_cost = transaction.gas_limit * transaction.max_fee_per_gas + (transaction.value or 0)
    try:
        balance = await chain_service.get_latest_base_account_balance(transaction.from_address, network)
        return max_cost > balance.amount
    except Exception as e:
        logger.warning(f"Could not fetch base asset balance for {transaction.from_address}: {e}")
        return False


async def _block_timestamp(
    chain_service: ChainService,
    network: Network,
    block_hash: Optional[str],
) -> Optional[datetime]:
    if block_hash is None:
        return None
    try:
        block = await chain_service.get_block_data(network, block_hash)
        return datetime.fromtimestamp(block.timestamp, tz=timezone.utc)
    except Exception as e:
        logger.warning(f"Could not fetch block {block_hash} on {network.name}: {e}")
        return None


async def _cached_assets(indexing_service: IndexingService, network: Network) -> Sequence[AnyAsset]:
    try:
        return await indexing_service.get_cached_assets(network)
    except Exception as e:
        logger.warning(f"Could not load cached assets for {network.name}: {e}")
        return []


async def _tracked_addresses(chain_service: ChainService) -> List[str]:
    try:
        accounts = await chain_service.get_accounts_to_track()
        # Plain addresses and AddressOnNetwork entries are both accepted
        return [normalize_address(getattr(account, 'address', account)) for account in accounts]
    except Exception as e:
        logger.warning(f"Could not load tracked accounts: {e}")
        return []


async def annotations_from_logs(
    chain_service: ChainService,
    indexing_service: IndexingService,
    name_service: NameService,
    logs: Sequence[EVMLog],
    network: Network,
    desired_decimals: int,
    timestamp: datetime,
    block_timestamp: Optional[datetime],
    name_lookup_timeout: Optional[float] = DEFAULT_NAME_LOOKUP_TIMEOUT,
) -> List[AssetTransferAnnotation]:
    """
    One asset-transfer annotation per cataloged token transfer in `logs` that
    touches a tracked account, in log order.
    """
    transfers = parse_transfer_logs(logs)
    if not transfers:
        return []

    assets, tracked = await asyncio.gather(
        _cached_assets(indexing_service, network),
        _tracked_addresses(chain_service),
    )

    relevant_transfers = filter_by_tracked_addresses(transfers, tracked)
    if not relevant_transfers:
        return []

    names_by_address = await resolve_names(
        name_service,
        distinct_recipient_addresses(relevant_transfers),
        network,
        name_lookup_timeout,
    )

    subannotations = []
    for transfer in relevant_transfers:
        matching_asset = match_asset(assets, transfer.contract_address)
        if matching_asset is None:
            continue

        subannotations.append(AssetTransferAnnotation(
            timestamp=timestamp,
            block_timestamp=block_timestamp,
            sender_address=transfer.sender_address,
            recipient_address=transfer.recipient_address,
            # TODO resolve sender names too
            recipient_name=names_by_address.get(normalize_address(transfer.recipient_address)),
            asset_amount=enrich_asset_amount(AssetAmount(matching_asset, transfer.amount), desired_decimals),
        ))

    logger.debug(f"{len(subannotations)} of {len(transfers)} logged transfers annotated")
    return subannotations


async def _classify(
    annotation: Annotation,
    indexing_service: IndexingService,
    name_service: NameService,
    network: Network,
    transaction: Transaction,
    desired_decimals: int,
    name_lookup_timeout: Optional[float],
) -> Annotation:
    """Primary classification; returns a new annotation carrying the shared fields over."""
    shared = annotation.shared_fields()

    if transaction.to is None:
        return ContractDeploymentAnnotation(**shared)

    if not transaction.has_call_data:
        # Either a plain base asset send, or a call into a payable fallback
        to_name = await resolve_name(name_service, transaction.to, network, name_lookup_timeout)

        if transaction.value is not None:
            return AssetTransferAnnotation(
                **shared,
                sender_address=transaction.from_address,
                recipient_address=transaction.to,
                recipient_name=to_name,
                asset_amount=enrich_asset_amount(
                    AssetAmount(network.base_asset, transaction.value),
                    desired_decimals,
                ),
            )
        return ContractInteractionAnnotation(**shared, contract_name=to_name)

    assets = await _cached_assets(indexing_service, network)
    matching_asset = match_asset(assets, transaction.to)
    logo_url = matching_asset.logo_url if matching_asset else None
    call = decode_erc20_call(transaction.input)

    if matching_asset is not None and isinstance(call, (ERC20TransferCall, ERC20TransferFromCall)):
        to_name = await resolve_name(name_service, call.to, network, name_lookup_timeout)
        sender = call.from_address if isinstance(call, ERC20TransferFromCall) else transaction.from_address

        transfer = AssetTransferAnnotation(
            **shared,
            transaction_logo_url=logo_url,
            sender_address=sender,
            recipient_address=call.to,
            recipient_name=to_name,
            asset_amount=enrich_asset_amount(AssetAmount(matching_asset, call.amount), desired_decimals),
        )
        if same_address(call.to, transaction.to):
            transfer = transfer.with_warning(AnnotationWarning.SEND_TO_TOKEN)
        return transfer

    if matching_asset is not None and isinstance(call, ERC20ApproveCall):
        spender_name = await resolve_name(name_service, call.spender, network, name_lookup_timeout)
        return AssetApprovalAnnotation(
            **shared,
            transaction_logo_url=logo_url,
            spender_address=call.spender,
            spender_name=spender_name,
            asset_amount=enrich_asset_amount(AssetAmount(matching_asset, call.value), desired_decimals),
        )

    # Logo is kept for a non-specific interaction too
    to_name = await resolve_name(name_service, transaction.to, network, name_lookup_timeout)
    return ContractInteractionAnnotation(**shared, transaction_logo_url=logo_url, contract_name=to_name)


async def resolve_transaction_annotation(
    chain_service: ChainService,
    indexing_service: IndexingService,
    name_service: NameService,
    network: Network,
    transaction: Transaction,
    desired_decimals: int,
    name_lookup_timeout: Optional[float] = DEFAULT_NAME_LOOKUP_TIMEOUT,
) -> Annotation:
    """
    Resolve an annotation for a transaction request, or a pending or mined transaction.

    Args:
        chain_service: Balances, blocks and tracked accounts
        indexing_service: Cached asset catalog
        name_service: Name lookups
        network: Network the transaction lives on
        transaction: The transaction to annotate
        desired_decimals: Decimal places kept in enriched amounts
        name_lookup_timeout: Per-lookup bound in seconds, None for no bound

    Returns:
        The annotation; never raises for unclassifiable or partial input
    """
    # By default, annotate everything as a contract interaction
    annotation: Annotation = ContractInteractionAnnotation(timestamp=datetime.now(timezone.utc))

    insufficient_funds, block_timestamp = await asyncio.gather(
        _lacks_funds_for_request(chain_service, network, transaction),
        _block_timestamp(chain_service, network, transaction.block_hash),
    )

    if insufficient_funds:
        annotation = annotation.with_warning(AnnotationWarning.INSUFFICIENT_FUNDS)
    if block_timestamp is not None:
        annotation = replace(annotation, block_timestamp=block_timestamp)

    annotation = await _classify(
        annotation,
        indexing_service,
        name_service,
        network,
        transaction,
        desired_decimals,
        name_lookup_timeout,
    )

    if transaction.logs is not None:
        subannotations = await annotations_from_logs(
            chain_service,
            indexing_service,
            name_service,
            transaction.logs,
            network,
            desired_decimals,
            annotation.timestamp,
            annotation.block_timestamp,
            name_lookup_timeout,
        )
        if subannotations:
            annotation = replace(annotation, subannotations=tuple(subannotations))

    logger.debug(f"Annotated {transaction.tx_hash or 'request'} as {annotation.type.value}")
    return annotation

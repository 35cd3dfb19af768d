"""
Transaction enrichment: turns raw EVM transactions into annotations.

Modules:
- base: assets, amounts, logs, transactions and annotation variants
- erc20 / wrapped_asset: call data and event log decoding
- utils: log filtering, asset matching, settle-all gathering
- names: tolerant concurrent name resolution
- collaborators: abstract chain, indexing and name services
- web3_chain_service: web3-backed chain service
- transactions: the classifier (resolve_transaction_annotation)
"""

from .base import (
    # Enums
    AnnotationType,
    AnnotationWarning,
    # Assets
    NetworkBaseAsset,
    SmartContractFungibleAsset,
    NonFungibleAsset,
    FungibleAsset,
    AnyAsset,
    AssetAmount,
    EnrichedAssetAmount,
    # Chain data
    Network,
    AddressOnNetwork,
    NameResolution,
    EVMLog,
    EVMBlock,
    Transaction,
    TokenTransferLog,
    # Annotations
    BaseAnnotation,
    ContractInteractionAnnotation,
    ContractDeploymentAnnotation,
    AssetTransferAnnotation,
    AssetApprovalAnnotation,
    Annotation,
    # Helpers
    enrich_asset_amount,
    get_network,
    normalize_address,
    same_address,
)

from .erc20 import (
    ERC20TransferCall,
    ERC20TransferFromCall,
    ERC20ApproveCall,
    DecodedERC20Call,
    decode_erc20_call,
    parse_logs_for_erc20_transfers,
)
from .wrapped_asset import parse_logs_for_wrapped_deposits_and_withdrawals
from .utils import (
    parse_transfer_logs,
    filter_by_tracked_addresses,
    distinct_recipient_addresses,
    match_asset,
    settle_all,
    successful_results,
)
from .names import resolve_names, resolve_name
from .collaborators import ChainService, IndexingService, NameService
from .web3_chain_service import Web3ChainService, transaction_from_web3
from .transactions import resolve_transaction_annotation, annotations_from_logs

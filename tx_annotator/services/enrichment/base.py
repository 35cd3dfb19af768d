"""
Data model for transaction annotation.

Assets, amounts, logs, transactions and the annotation variants produced by
the classifier. Every value is a frozen dataclass; the classifier builds a new
annotation at each step instead of mutating one in place.
"""

from dataclasses import dataclass, fields, replace
from datetime import datetime
from decimal import Decimal, ROUND_DOWN, localcontext
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from eth_utils import to_checksum_address, to_hex

from ...config.network_config import BASE_ASSET_DECIMALS, KNOWN_NETWORKS


# ============================================================================
# ENUMS
# ============================================================================

class AnnotationType(Enum):
    """What a transaction does, as far as the classifier can tell"""
    CONTRACT_INTERACTION = "contract-interaction"
    CONTRACT_DEPLOYMENT = "contract-deployment"
    ASSET_TRANSFER = "asset-transfer"
    ASSET_APPROVAL = "asset-approval"


class AnnotationWarning(Enum):
    """Risk warnings attached to an annotation"""
    INSUFFICIENT_FUNDS = "insufficient-funds"  # Sender can't cover gas + value
    SEND_TO_TOKEN = "send-to-token"            # Tokens sent to the token contract itself


# ============================================================================
# ADDRESS HELPERS
# ============================================================================

def normalize_address(address: str) -> str:
    """Lowercase, 0x-prefixed form used for every address comparison."""
    address = address.strip().lower()
    return address if address.startswith('0x') else f"0x{address}"


def same_address(a: str, b: str) -> bool:
    """Case-insensitive address equality (checksummed == lowercase)."""
    return normalize_address(a) == normalize_address(b)


def hex_string(value: Union[str, bytes]) -> str:
    """Lowercase 0x-prefixed hex for str, bytes or HexBytes input."""
    if isinstance(value, (bytes, bytearray)):
        return to_hex(bytes(value))
    value = value.strip().lower()
    return value if value.startswith('0x') else f"0x{value}"


def address_from_topic(topic: Union[str, bytes]) -> str:
    """
    Extract the checksummed address held in an indexed event topic.

    Raises:
        ValueError: topic is not a 32-byte word with a zero-padded address
    """
    topic_hex = hex_string(topic)[2:]
    if len(topic_hex) != 64 or topic_hex[:24] != "0" * 24:
        raise ValueError(f"Topic does not hold an address: 0x{topic_hex}")
    return to_checksum_address(f"0x{topic_hex[24:]}")


# ============================================================================
# ASSETS
# ============================================================================

@dataclass(frozen=True)
class NetworkBaseAsset:
    """A network's native, gas-paying currency"""
    symbol: str
    name: str
    decimals: int = BASE_ASSET_DECIMALS
    logo_url: Optional[str] = None


@dataclass(frozen=True)
class SmartContractFungibleAsset:
    """A contract-backed fungible token (ERC-20 and friends)"""
    symbol: str
    name: str
    decimals: int
    contract_address: str
    logo_url: Optional[str] = None


@dataclass(frozen=True)
class NonFungibleAsset:
    """An NFT collection; present in catalogs but never matched as a fungible asset"""
    name: str
    symbol: str
    contract_address: str


FungibleAsset = Union[NetworkBaseAsset, SmartContractFungibleAsset]
AnyAsset = Union[NetworkBaseAsset, SmartContractFungibleAsset, NonFungibleAsset]


@dataclass(frozen=True)
class AssetAmount:
    """A fungible asset paired with a raw amount in base units"""
    asset: FungibleAsset
    amount: int


@dataclass(frozen=True)
class EnrichedAssetAmount:
    """AssetAmount plus its decimal display values"""
    asset: FungibleAsset
    amount: int
    decimal_amount: Decimal
    localized_decimal_amount: str

    def to_dict(self) -> dict:
        asset = {
            'symbol': self.asset.symbol,
            'name': self.asset.name,
            'decimals': self.asset.decimals,
        }
        if isinstance(self.asset, SmartContractFungibleAsset):
            asset['contract_address'] = self.asset.contract_address
        if self.asset.logo_url is not None:
            asset['logo_url'] = self.asset.logo_url
        return {
            'asset': asset,
            'amount': str(self.amount),
            'decimal_amount': str(self.decimal_amount),
            'localized_decimal_amount': self.localized_decimal_amount,
        }


def enrich_asset_amount(asset_amount: AssetAmount, desired_decimals: int) -> EnrichedAssetAmount:
    """
    Divide the raw amount by 10^decimals, keeping `desired_decimals` places.

    The division runs in a decimal context wide enough for the full amount, so
    nothing beyond the requested places is lost (uint256 values included).
    Extra places are truncated, never rounded up.
    """
    desired_decimals = max(desired_decimals, 0)
    digits = len(str(abs(asset_amount.amount)))

    with localcontext() as ctx:
        ctx.prec = digits + desired_decimals + 1
        raw = Decimal(asset_amount.amount).scaleb(-asset_amount.asset.decimals)
        decimal_amount = raw.quantize(Decimal(1).scaleb(-desired_decimals), rounding=ROUND_DOWN)

    return EnrichedAssetAmount(
        asset=asset_amount.asset,
        amount=asset_amount.amount,
        decimal_amount=decimal_amount,
        localized_decimal_amount=f"{decimal_amount:,f}",
    )


# ============================================================================
# NETWORKS
# ============================================================================

@dataclass(frozen=True)
class Network:
    """An EVM network and its base asset"""
    name: str
    chain_id: int
    base_asset: NetworkBaseAsset


def get_network(name: str) -> Network:
    """Build a Network from the known network table."""
    chain_id, symbol, asset_name = KNOWN_NETWORKS[name.lower()]
    return Network(
        name=name.lower(),
        chain_id=chain_id,
        base_asset=NetworkBaseAsset(symbol=symbol, name=asset_name),
    )


@dataclass(frozen=True)
class AddressOnNetwork:
    address: str
    network: Network


@dataclass(frozen=True)
class NameResolution:
    """Result of a name lookup (ENS, address book, ...)"""
    name: str
    address: Optional[str] = None


# ============================================================================
# CHAIN DATA
# ============================================================================

@dataclass(frozen=True)
class EVMLog:
    """An event log emitted by a contract"""
    contract_address: str
    topics: Tuple[str, ...]
    data: str = "0x"


@dataclass(frozen=True)
class EVMBlock:
    hash: str
    number: int
    timestamp: int  # unix seconds


@dataclass(frozen=True)
class Transaction:
    """
    A transaction request, pending transaction or mined transaction.

    `value` is tri-state: None means the field is absent, 0 means present but
    zero. Gas limit and fee fields are only set on not-yet-submitted requests;
    `block_hash` only once mined.
    """
    from_address: str
    to: Optional[str] = None
    input: Optional[Union[str, bytes]] = None
    value: Optional[int] = None
    gas_limit: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    block_hash: Optional[str] = None
    tx_hash: Optional[str] = None
    logs: Optional[Tuple[EVMLog, ...]] = None

    @property
    def is_request(self) -> bool:
        return (
            self.gas_limit is not None
            and self.max_fee_per_gas is not None
            and self.max_priority_fee_per_gas is not None
        )

    @property
    def has_call_data(self) -> bool:
        if self.input is None:
            return False
        if isinstance(self.input, (bytes, bytearray)):
            return len(self.input) > 0
        return hex_string(self.input) != "0x"


@dataclass(frozen=True)
class TokenTransferLog:
    """A token movement recovered from an event log"""
    contract_address: str
    sender_address: str
    recipient_address: str
    amount: int


# ============================================================================
# ANNOTATIONS
# ============================================================================

def _json_safe(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (BaseAnnotation, EnrichedAssetAmount)):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_json_safe(v) for v in value]
    return value


@dataclass(frozen=True, kw_only=True)
class BaseAnnotation:
    """
    Fields shared by every annotation variant.

    The concrete class fixes `type`; fields belonging to other variants do not
    exist on it.
    """
    type: ClassVar[AnnotationType]

    timestamp: datetime
    block_timestamp: Optional[datetime] = None
    subannotations: Optional[Tuple["AssetTransferAnnotation", ...]] = None
    warnings: Optional[Tuple[AnnotationWarning, ...]] = None

    def shared_fields(self) -> Dict[str, Any]:
        """The fields carried over when the annotation changes variant."""
        return {
            'timestamp': self.timestamp,
            'block_timestamp': self.block_timestamp,
            'subannotations': self.subannotations,
            'warnings': self.warnings,
        }

    def with_warning(self, warning: AnnotationWarning):
        return replace(self, warnings=(self.warnings or ()) + (warning,))

    def to_dict(self) -> dict:
        """Serialize to a JSON-safe dict; absent optional fields are omitted."""
        result = {'type': self.type.value}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[f.name] = _json_safe(value)
        return result


@dataclass(frozen=True, kw_only=True)
class ContractInteractionAnnotation(BaseAnnotation):
    type: ClassVar[AnnotationType] = AnnotationType.CONTRACT_INTERACTION

    contract_name: Optional[str] = None
    transaction_logo_url: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class ContractDeploymentAnnotation(BaseAnnotation):
    type: ClassVar[AnnotationType] = AnnotationType.CONTRACT_DEPLOYMENT


@dataclass(frozen=True, kw_only=True)
class AssetTransferAnnotation(BaseAnnotation):
    type: ClassVar[AnnotationType] = AnnotationType.ASSET_TRANSFER

    sender_address: str
    recipient_address: str
    asset_amount: EnrichedAssetAmount
    recipient_name: Optional[str] = None
    transaction_logo_url: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class AssetApprovalAnnotation(BaseAnnotation):
    type: ClassVar[AnnotationType] = AnnotationType.ASSET_APPROVAL

    spender_address: str
    asset_amount: EnrichedAssetAmount
    spender_name: Optional[str] = None
    transaction_logo_url: Optional[str] = None


Annotation = Union[
    ContractInteractionAnnotation,
    ContractDeploymentAnnotation,
    AssetTransferAnnotation,
    AssetApprovalAnnotation,
]

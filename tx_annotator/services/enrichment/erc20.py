"""
ERC-20 call data and event log decoding.

Handles:
- transfer / transferFrom / approve call data (by 4-byte selector)
- Transfer(address,address,uint256) event logs
"""

from dataclasses import dataclass
from typing import ClassVar, List, Optional, Sequence, Union
import logging

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import to_bytes, to_checksum_address

from ...config.network_config import (
    ERC20_SELECTORS,
    SELECTOR_LENGTH,
    TRANSFER_TOPIC,
    WORD_SIZE,
)
from .base import EVMLog, TokenTransferLog, address_from_topic, hex_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ERC20TransferCall:
    name: ClassVar[str] = "transfer"

    to: str
    amount: int


@dataclass(frozen=True)
class ERC20TransferFromCall:
    name: ClassVar[str] = "transferFrom"

    from_address: str
    to: str
    amount: int


@dataclass(frozen=True)
class ERC20ApproveCall:
    name: ClassVar[str] = "approve"

    spender: str
    value: int


DecodedERC20Call = Union[ERC20TransferCall, ERC20TransferFromCall, ERC20ApproveCall]


def _input_bytes(input_data: Optional[Union[str, bytes]]) -> Optional[bytes]:
    if input_data is None:
        return None
    if isinstance(input_data, (bytes, bytearray)):
        return bytes(input_data)
    hex_data = hex_string(input_data)
    if len(hex_data) % 2:
        return None
    try:
        return to_bytes(hexstr=hex_data)
    except ValueError:
        return None


def decode_erc20_call(input_data: Optional[Union[str, bytes]]) -> Optional[DecodedERC20Call]:
    """
    Decode call data against transfer, transferFrom and approve.

    Args:
        input_data: Transaction input as hex string or bytes

    Returns:
        The decoded call, or None for unknown selectors and malformed input
    """
    if input_data is None:
        return None

    data = _input_bytes(input_data)
    if data is None or len(data) < SELECTOR_LENGTH:
        return None

    selector = hex_string(data[:SELECTOR_LENGTH])
    if selector not in ERC20_SELECTORS:
        return None

    function_name, arg_types = ERC20_SELECTORS[selector]
    try:
        args = decode(list(arg_types), data[SELECTOR_LENGTH:])
    except DecodingError as e:
        logger.debug(f"Could not decode {function_name} call data: {e}")
        return None

    if function_name == "transfer":
        to, amount = args
        return ERC20TransferCall(to=to_checksum_address(to), amount=amount)
    if function_name == "transferFrom":
        from_address, to, amount = args
        return ERC20TransferFromCall(
            from_address=to_checksum_address(from_address),
            to=to_checksum_address(to),
            amount=amount,
        )
    spender, value = args
    return ERC20ApproveCall(spender=to_checksum_address(spender), value=value)


def decode_uint256(data: Optional[Union[str, bytes]]) -> int:
    """
    Read the leading uint256 word of log data.

    Raises:
        ValueError: data is not hex or shorter than one word
    """
    raw = _input_bytes(data)
    if raw is None or len(raw) < WORD_SIZE:
        raise ValueError("Log data does not hold a uint256")
    (amount,) = decode(["uint256"], raw[:WORD_SIZE])
    return amount


def parse_erc20_transfer_log(log: EVMLog) -> Optional[TokenTransferLog]:
    """
    Parse one ERC-20 Transfer log.

    Logs with four topics are ERC-721 transfers (token id indexed) and are not
    reported. Anything else unrecognized returns None.
    """
    if len(log.topics) != 3 or hex_string(log.topics[0]) != TRANSFER_TOPIC:
        return None

    try:
        sender = address_from_topic(log.topics[1])
        recipient = address_from_topic(log.topics[2])
        amount = decode_uint256(log.data)
    except (ValueError, DecodingError) as e:
        logger.debug(f"Skipping malformed Transfer log from {log.contract_address}: {e}")
        return None

    return TokenTransferLog(
        contract_address=log.contract_address,
        sender_address=sender,
        recipient_address=recipient,
        amount=amount,
    )


def parse_logs_for_erc20_transfers(logs: Sequence[EVMLog]) -> List[TokenTransferLog]:
    """All ERC-20 transfers in `logs`, in log order."""
    transfers = []
    for log in logs:
        transfer = parse_erc20_transfer_log(log)
        if transfer is not None:
            transfers.append(transfer)
    return transfers

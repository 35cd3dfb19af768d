"""
Wrapped base asset (WETH-style) event parsing.

Deposit(address indexed dst, uint256 wad) mints wrapped tokens to `dst`, so it
is reported as a transfer from the wrapping contract to `dst`.
Withdrawal(address indexed src, uint256 wad) burns them, reported as a transfer
from `src` to the wrapping contract.
"""

from typing import List, Optional, Sequence
import logging

from eth_abi.exceptions import DecodingError

from ...config.network_config import DEPOSIT_TOPIC, WITHDRAWAL_TOPIC
from .base import EVMLog, TokenTransferLog, address_from_topic, hex_string
from .erc20 import decode_uint256

logger = logging.getLogger(__name__)


def parse_wrapped_asset_log(log: EVMLog) -> Optional[TokenTransferLog]:
    """Parse one Deposit or Withdrawal log; None for anything else."""
    if len(log.topics) != 2:
        return None

    topic0 = hex_string(log.topics[0])
    if topic0 not in (DEPOSIT_TOPIC, WITHDRAWAL_TOPIC):
        return None

    try:
        account = address_from_topic(log.topics[1])
        amount = decode_uint256(log.data)
    except (ValueError, DecodingError) as e:
        logger.debug(f"Skipping malformed wrap/unwrap log from {log.contract_address}: {e}")
        return None

    if topic0 == DEPOSIT_TOPIC:
        sender, recipient = log.contract_address, account
    else:
        sender, recipient = account, log.contract_address

    return TokenTransferLog(
        contract_address=log.contract_address,
        sender_address=sender,
        recipient_address=recipient,
        amount=amount,
    )


def parse_logs_for_wrapped_deposits_and_withdrawals(logs: Sequence[EVMLog]) -> List[TokenTransferLog]:
    """All wrap/unwrap transfers in `logs`, in log order."""
    transfers = []
    for log in logs:
        transfer = parse_wrapped_asset_log(log)
        if transfer is not None:
            transfers.append(transfer)
    return transfers

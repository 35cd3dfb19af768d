"""
Network Configuration Module

Contains the EVM constants the annotation engine matches against (event topics,
function selectors and known networks) plus the
runtime settings read from the environment.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

# Event topic0 hashes
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
DEPOSIT_TOPIC = "0xe1fffcc4923d04b559f4d29a8bfc6cda04eb5b0d3c460751c2402c5c5cc9109c"
WITHDRAWAL_TOPIC = "0x7fcf532c15f0a6db0bd6d0e038bea71d30d808c7d98cb3bf7268a95bf5081b65"

# ERC-20 function selectors -> (name, argument types)
ERC20_SELECTORS = {
    "0xa9059cbb": ("transfer", ("address", "uint256")),
    "0x23b872dd": ("transferFrom", ("address", "address", "uint256")),
    "0x095ea7b3": ("approve", ("address", "uint256")),
}

SELECTOR_LENGTH = 4  # bytes
WORD_SIZE = 32  # bytes

# Base asset decimals for every supported network
BASE_ASSET_DECIMALS = 18

# Known networks: name -> (chain id, base asset symbol, base asset name)
KNOWN_NETWORKS = {
    "ethereum": (1, "ETH", "Ether"),
    "optimism": (10, "ETH", "Ether"),
    "polygon": (137, "MATIC", "Matic Token"),
    "arbitrum": (42161, "ETH", "Ether"),
    "goerli": (5, "ETH", "Goerli Ether"),
}

# Display defaults
DEFAULT_DESIRED_DECIMALS = 2
DEFAULT_NAME_LOOKUP_TIMEOUT = 5.0  # seconds


@dataclass(frozen=True)
class Settings:
    """Runtime settings loaded from the environment (and .env, if present)."""
    web3_provider_url: str = ""
    tracked_addresses: Tuple[str, ...] = field(default_factory=tuple)
    name_lookup_timeout: Optional[float] = DEFAULT_NAME_LOOKUP_TIMEOUT
    desired_decimals: int = DEFAULT_DESIRED_DECIMALS


def _parse_timeout(raw: str) -> Optional[float]:
    if not raw.strip():
        return DEFAULT_NAME_LOOKUP_TIMEOUT
    timeout = float(raw)
    # 0 or negative disables the per-lookup bound
    return timeout if timeout > 0 else None


def get_settings() -> Settings:
    """
    Build Settings from environment variables.

    Variables:
        WEB3_PROVIDER_URL: HTTP(S) JSON-RPC endpoint for the web3 chain adapter
        ANNOTATOR_TRACKED_ADDRESSES: comma-separated accounts whose transfers get sub-annotations
        ANNOTATOR_NAME_LOOKUP_TIMEOUT: per-lookup timeout in seconds (0 disables)
        ANNOTATOR_DESIRED_DECIMALS: decimal places kept in display amounts
    """
    load_dotenv()

    tracked = tuple(
        address.strip()
        for address in os.getenv('ANNOTATOR_TRACKED_ADDRESSES', '').split(',')
        if address.strip()
    )

    return Settings(
        web3_provider_url=os.getenv('WEB3_PROVIDER_URL', ''),
        tracked_addresses=tracked,
        name_lookup_timeout=_parse_timeout(os.getenv('ANNOTATOR_NAME_LOOKUP_TIMEOUT', '')),
        desired_decimals=int(os.getenv('ANNOTATOR_DESIRED_DECIMALS', '') or DEFAULT_DESIRED_DECIMALS),
    )

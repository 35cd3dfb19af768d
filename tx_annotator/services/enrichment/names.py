"""
Name resolution adapter.

Fans out one lookup per distinct address and keeps whatever resolves. A lookup
that fails, times out or finds nothing is simply missing from the result.
"""

import asyncio
from typing import Dict, Iterable, Optional, Tuple
import logging

from .base import Network, normalize_address
from .collaborators import NameService
from .utils import settle_all, successful_results

logger = logging.getLogger(__name__)


async def _lookup(
    name_service: NameService,
    address: str,
    network: Network,
    timeout: Optional[float],
) -> Tuple[str, Optional[str]]:
    lookup = name_service.lookup_name(address, network)
    if timeout is not None:
        resolution = await asyncio.wait_for(lookup, timeout)
    else:
        resolution = await lookup
    return normalize_address(address), resolution.name if resolution else None


async def resolve_names(
    name_service: NameService,
    addresses: Iterable[str],
    network: Network,
    timeout: Optional[float] = None,
) -> Dict[str, str]:
    """
    Resolve names for `addresses` concurrently.

    Args:
        name_service: Name lookup backend
        addresses: Addresses in any case; duplicates are looked up once
        network: Network the addresses live on
        timeout: Per-lookup bound in seconds, or None for no bound

    Returns:
        Normalized address -> name, for the lookups that produced a name
    """
    # normalized -> first-seen original form
    distinct = {}
    for address in addresses:
        distinct.setdefault(normalize_address(address), address)

    results = await settle_all(
        _lookup(name_service, address, network, timeout) for address in distinct.values()
    )

    for address, result in zip(distinct, results):
        if isinstance(result, asyncio.TimeoutError):
            logger.debug(f"Name lookup timed out for {address}")
        elif isinstance(result, BaseException):
            logger.debug(f"Name lookup failed for {address}: {result!r}")

    return {address: name for address, name in successful_results(results) if name}


async def resolve_name(
    name_service: NameService,
    address: str,
    network: Network,
    timeout: Optional[float] = None,
) -> Optional[str]:
    """Single-address form of resolve_names; None when nothing resolved."""
    names = await resolve_names(name_service, [address], network, timeout)
    return names.get(normalize_address(address))

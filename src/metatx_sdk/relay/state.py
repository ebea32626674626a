"""Contract state reads: the nonce source and the state refresher.

Both are plain reads, safe to repeat, and never cached.
"""

import logging
from dataclasses import dataclass

from eth_utils import is_address, to_checksum_address

from ..errors import EmptyState
from .session import ClientSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuoteState:
    """Name/value pair stored by the contract."""

    quote: str
    owner: str


async def get_nonce(session: ClientSession, address: str) -> int:
    """Read the current replay counter for an account.

    Must be called right before building a message; a stale nonce yields a
    signature the contract rejects.

    Raises:
        ValueError: If address is invalid
    """
    if not is_address(address):
        raise ValueError(f"Invalid address: {address}")

    nonce = await session.contract.functions.getNonce(to_checksum_address(address)).call()
    logger.debug("Nonce for %s is %s", address, nonce)
    return int(nonce)


async def refresh_state(session: ClientSession) -> QuoteState:
    """Read the current quote and its owner from the contract.

    Raises:
        EmptyState: If no quote has been set yet
    """
    current_quote, current_owner = await session.contract.functions.getQuote().call()
    if current_quote == "":
        raise EmptyState("No quotes set on blockchain yet")

    return QuoteState(quote=current_quote, owner=to_checksum_address(current_owner))

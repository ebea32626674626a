"""Account-change subscription."""

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, List, Optional

from eth_utils import to_checksum_address

logger = logging.getLogger(__name__)


class AccountWatcher:
    """Turns a wallet's account list into a stream of current-sender changes.

    Each ``watch()`` call starts a fresh sequence, so the stream can be
    restarted after the consumer stops iterating.
    """

    def __init__(
        self,
        fetch_accounts: Callable[[], Awaitable[List[str]]],
        poll_interval: float = 1.0,
    ):
        self._fetch_accounts = fetch_accounts
        self._poll_interval = poll_interval

    async def watch(self) -> AsyncIterator[Optional[str]]:
        """Yield the current account, then every change to it.

        Yields None when the wallet exposes no account.
        """
        current: Optional[str] = None
        first = True
        while True:
            accounts = await self._fetch_accounts()
            address = to_checksum_address(accounts[0]) if accounts else None
            if first or address != current:
                if not first:
                    logger.info("Account changed from %s to %s", current, address)
                current = address
                first = False
                yield address
            await asyncio.sleep(self._poll_interval)

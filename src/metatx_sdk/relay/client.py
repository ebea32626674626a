"""Meta-Transaction Client.

Runs the full gasless flow for one user action:

1. Read the sender's current nonce from the contract
2. Build the EIP-712 MetaTransaction message
3. Have the user's wallet sign it
4. Decode the signature into r, s, v and check it recovers to the sender
5. Relay ``executeMetaTransaction`` from the relayer's account
6. Re-read contract state once the transaction is confirmed
"""

import logging
from typing import AsyncIterator, Optional

from eth_utils import is_address, to_checksum_address

from ..config import ResolvedMetaTxConfig
from ..errors import MalformedSignature
from ..meta_tx import (
    TypedDataSigner,
    TypedMessage,
    build_typed_message,
    decode_signature,
    recover_signer,
    sign_typed_message,
)
from .session import ClientSession
from .state import QuoteState, get_nonce, refresh_state
from .submitter import RelayEvent, RelaySubmitter

logger = logging.getLogger(__name__)


class MetaTxClient:
    """Gasless quote updates through a relayer.

    Example:
        ```python
        config = load_config_from_env()
        wallet = JsonRpcWallet("http://localhost:8545")
        client = await MetaTxClient.connect(config, relayer_key, wallet)

        sender = await wallet.get_address()
        async for event in client.submit_quote(sender, "hello"):
            print(event.state, event.submission.tx_hash)
        ```
    """

    def __init__(
        self,
        session: ClientSession,
        signer: TypedDataSigner,
        verify_signatures: bool = True,
    ):
        """Initialize the client.

        Args:
            session: Connected session
            signer: Wallet that signs on behalf of the user
            verify_signatures: Recover the signer locally before relaying
        """
        self.session = session
        self._signer = signer
        self._verify_signatures = verify_signatures
        self._submitter = RelaySubmitter(
            session, state_refresher=lambda: refresh_state(session)
        )

    @classmethod
    async def connect(
        cls,
        config: ResolvedMetaTxConfig,
        relayer_key: str,
        signer: TypedDataSigner,
        web3=None,
        verify_signatures: bool = True,
    ) -> "MetaTxClient":
        session = await ClientSession.connect(config, relayer_key, web3=web3)
        return cls(session, signer, verify_signatures=verify_signatures)

    async def refresh_state(self) -> QuoteState:
        """Current quote and owner. Raises EmptyState if none is set."""
        return await refresh_state(self.session)

    async def prepare_message(self, sender: str, function_signature: str) -> TypedMessage:
        """Build a message for ``sender`` with a freshly read nonce."""
        nonce = await get_nonce(self.session, sender)
        return build_typed_message(self.session.domain, nonce, sender, function_signature)

    async def submit_call(
        self, sender: str, function_signature: str
    ) -> AsyncIterator[RelayEvent]:
        """Sign and relay an arbitrary encoded call on behalf of ``sender``.

        Raises before any gas is spent if signing fails or the signature is
        malformed or does not recover to ``sender``.
        """
        if not is_address(sender):
            raise ValueError(f"Invalid sender address: {sender}")
        sender = to_checksum_address(sender)

        message = await self.prepare_message(sender, function_signature)
        signature = await sign_typed_message(self._signer, sender, message)
        components = decode_signature(signature)
        logger.debug(
            "User signature %s... decoded (v=%s)", signature[:20], components.v
        )

        if self._verify_signatures:
            recovered = recover_signer(message, signature)
            if recovered != sender:
                raise MalformedSignature(
                    f"Signature recovers to {recovered}, expected {sender}"
                )

        async for event in self._submitter.submit(
            sender, message.message.function_signature, components
        ):
            yield event

    async def submit_quote(
        self, sender: str, new_quote: str
    ) -> AsyncIterator[RelayEvent]:
        """Set a new quote on behalf of ``sender`` without them paying gas.

        Raises:
            ValueError: If the quote is empty
        """
        if not new_quote:
            raise ValueError("Please enter the quote")

        function_signature = self.session.encode_call("setQuote", new_quote)
        async for event in self.submit_call(sender, function_signature):
            yield event

    async def submit_quote_and_wait(self, sender: str, new_quote: str) -> Optional[RelayEvent]:
        """Run ``submit_quote`` to completion and return the terminal event."""
        last = None
        async for event in self.submit_quote(sender, new_quote):
            last = event
        return last

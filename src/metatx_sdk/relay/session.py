"""Client session holding the provider connection and contract binding."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3

from ..config import ResolvedMetaTxConfig
from ..errors import WrongNetwork
from ..meta_tx import DomainDescriptor, create_domain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientSession:
    """Connection, contract binding and relayer account for one application.

    Passed explicitly to every relay component. Build it with ``connect()``.
    """

    web3: AsyncWeb3
    contract: Any
    relayer: LocalAccount
    domain: DomainDescriptor
    config: ResolvedMetaTxConfig
    chain_id: int

    @classmethod
    async def connect(
        cls,
        config: ResolvedMetaTxConfig,
        relayer_key: str,
        web3: Optional[AsyncWeb3] = None,
    ) -> "ClientSession":
        """Connect to the provider and bind the contract.

        The domain salt is derived here from the provider's chain id and is
        fixed for the lifetime of the session.

        Args:
            config: Resolved configuration
            relayer_key: Private key of the account that pays for gas
            web3: Optional pre-built AsyncWeb3 instance

        Returns:
            ClientSession

        Raises:
            WrongNetwork: If the provider is on a different chain than configured
        """
        w3 = web3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(config.rpc_url))

        chain_id = await w3.eth.chain_id
        if chain_id != config.expected_chain_id:
            raise WrongNetwork(config.expected_chain_id, chain_id)

        contract = w3.eth.contract(
            address=config.contract_address, abi=config.contract_abi
        )
        domain = create_domain(
            config.domain_name,
            config.domain_version,
            chain_id,
            config.contract_address,
        )
        relayer = Account.from_key(relayer_key)

        logger.info(
            "Connected to chain %s: contract=%s relayer=%s",
            chain_id,
            config.contract_address,
            relayer.address,
        )

        return cls(
            web3=w3,
            contract=contract,
            relayer=relayer,
            domain=domain,
            config=config,
            chain_id=chain_id,
        )

    @property
    def relayer_address(self) -> str:
        return self.relayer.address

    def encode_call(self, fn_name: str, *args: Any) -> str:
        """ABI-encode a contract call, e.g. ``encode_call("setQuote", "hello")``."""
        return self.contract.encode_abi(fn_name, args=list(args))

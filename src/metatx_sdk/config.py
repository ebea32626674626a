"""Configuration for the meta-transaction client.

Configuration is loaded once at process start and is read-only afterwards.
"""

import copy
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TypedDict

from dotenv import load_dotenv
from eth_utils import is_address, to_checksum_address


# Goerli
DEFAULT_CHAIN_ID = 5

DEFAULT_DOMAIN_NAME = "TestContract"
DEFAULT_DOMAIN_VERSION = "1"

DEFAULT_RECEIPT_POLL_INTERVAL = 1.0  # seconds

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Quote contract with EIP-712 meta-transaction support
QUOTE_CONTRACT_ABI: List[Dict[str, Any]] = [
    {
        "inputs": [],
        "name": "getQuote",
        "outputs": [
            {"name": "currentQuote", "type": "string"},
            {"name": "currentOwner", "type": "address"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "newQuote", "type": "string"}],
        "name": "setQuote",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"name": "user", "type": "address"}],
        "name": "getNonce",
        "outputs": [{"name": "nonce", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "userAddress", "type": "address"},
            {"name": "functionSignature", "type": "bytes"},
            {"name": "sigR", "type": "bytes32"},
            {"name": "sigS", "type": "bytes32"},
            {"name": "sigV", "type": "uint8"},
        ],
        "name": "executeMetaTransaction",
        "outputs": [{"name": "", "type": "bytes"}],
        "stateMutability": "payable",
        "type": "function",
    },
]


class MetaTxConfig(TypedDict, total=False):
    """User supplied configuration."""

    rpc_url: str
    """JSON-RPC endpoint of the chain the contract lives on."""

    contract_address: str
    """Address of the contract that verifies and executes meta-transactions."""

    domain_name: str
    """EIP-712 domain name. Default: "TestContract" """

    domain_version: str
    """EIP-712 domain version. Default: "1" """

    expected_chain_id: int
    """Chain the contract is deployed on. Default: 5 (Goerli)"""

    contract_abi: List[Dict[str, Any]]
    """Contract interface. Default: QUOTE_CONTRACT_ABI"""

    receipt_poll_interval: float
    """Seconds between receipt polls. Default: 1.0"""

    gas_limit_multiplier: float
    """Headroom applied to the gas estimate. Default: 1.0"""


@dataclass(frozen=True)
class ResolvedMetaTxConfig:
    """Resolved configuration with all defaults applied."""

    rpc_url: str
    contract_address: str
    domain_name: str = DEFAULT_DOMAIN_NAME
    domain_version: str = DEFAULT_DOMAIN_VERSION
    expected_chain_id: int = DEFAULT_CHAIN_ID
    contract_abi: List[Dict[str, Any]] = field(
        default_factory=lambda: copy.deepcopy(QUOTE_CONTRACT_ABI)
    )
    receipt_poll_interval: float = DEFAULT_RECEIPT_POLL_INTERVAL
    gas_limit_multiplier: float = 1.0


def resolve_config(config: MetaTxConfig) -> ResolvedMetaTxConfig:
    """Apply defaults and validate a user supplied configuration.

    Args:
        config: Partial configuration

    Returns:
        ResolvedMetaTxConfig

    Raises:
        ValueError: If the RPC URL is missing or the contract address is invalid
    """
    rpc_url = config.get("rpc_url")
    if not rpc_url:
        raise ValueError("rpc_url is required")

    contract_address = config.get("contract_address", "")
    if not is_address(contract_address):
        raise ValueError(f"Invalid contract address: {contract_address}")

    multiplier = config.get("gas_limit_multiplier", 1.0)
    if multiplier < 1.0:
        raise ValueError(f"gas_limit_multiplier must be >= 1.0, got {multiplier}")

    return ResolvedMetaTxConfig(
        rpc_url=rpc_url,
        contract_address=to_checksum_address(contract_address),
        domain_name=config.get("domain_name", DEFAULT_DOMAIN_NAME),
        domain_version=config.get("domain_version", DEFAULT_DOMAIN_VERSION),
        expected_chain_id=config.get("expected_chain_id", DEFAULT_CHAIN_ID),
        contract_abi=copy.deepcopy(config.get("contract_abi", QUOTE_CONTRACT_ABI)),
        receipt_poll_interval=config.get(
            "receipt_poll_interval", DEFAULT_RECEIPT_POLL_INTERVAL
        ),
        gas_limit_multiplier=multiplier,
    )


def load_config_from_env(dotenv_path: Optional[str] = None) -> ResolvedMetaTxConfig:
    """Load configuration from environment variables (and a .env file).

    Reads METATX_RPC_URL, METATX_CONTRACT_ADDRESS, METATX_DOMAIN_NAME,
    METATX_DOMAIN_VERSION and METATX_CHAIN_ID.
    """
    load_dotenv(dotenv_path)

    config: MetaTxConfig = {
        "rpc_url": os.environ.get("METATX_RPC_URL", ""),
        "contract_address": os.environ.get("METATX_CONTRACT_ADDRESS", ""),
    }
    if os.environ.get("METATX_DOMAIN_NAME"):
        config["domain_name"] = os.environ["METATX_DOMAIN_NAME"]
    if os.environ.get("METATX_DOMAIN_VERSION"):
        config["domain_version"] = os.environ["METATX_DOMAIN_VERSION"]
    if os.environ.get("METATX_CHAIN_ID"):
        config["expected_chain_id"] = int(os.environ["METATX_CHAIN_ID"])

    return resolve_config(config)


__all__ = [
    "DEFAULT_CHAIN_ID",
    "DEFAULT_DOMAIN_NAME",
    "DEFAULT_DOMAIN_VERSION",
    "QUOTE_CONTRACT_ABI",
    "ZERO_ADDRESS",
    "MetaTxConfig",
    "ResolvedMetaTxConfig",
    "resolve_config",
    "load_config_from_env",
]

"""Utility functions for meta-transactions."""

import re

from eth_abi import decode, encode
from eth_utils import keccak, to_hex


SIGNATURE_LENGTH = 65  # r (32) || s (32) || v (1)

_STRICT_HEX = re.compile(r"^0x[0-9a-fA-F]*$")


def chain_id_to_salt(chain_id: int) -> str:
    """Encode a chain id as the 32-byte domain salt.

    Args:
        chain_id: Chain ID (e.g., 5 for Goerli)

    Returns:
        bytes32 hex string (e.g., "0x00...05")

    Raises:
        ValueError: If chain_id is negative
    """
    if chain_id < 0:
        raise ValueError(f"Invalid chain_id: {chain_id}")
    return to_hex(encode(["uint256"], [chain_id]))


def salt_to_chain_id(salt: str) -> int:
    """Decode the chain id from a domain salt."""
    return decode(["uint256"], hex_to_bytes(salt))[0]


def is_strict_hex(value: str) -> bool:
    """True if value is a 0x-prefixed string of hex digits with even length."""
    return (
        isinstance(value, str)
        and bool(_STRICT_HEX.match(value))
        and len(value) % 2 == 0
    )


def hex_to_bytes(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def function_selector(signature: str) -> bytes:
    """4-byte selector for a function signature such as "setQuote(string)"."""
    return keccak(text=signature)[:4]


def encode_set_quote_call(new_quote: str) -> str:
    """ABI-encode ``setQuote(string)`` without a contract binding.

    Args:
        new_quote: Quote to store on-chain

    Returns:
        Call data as 0x-prefixed hex
    """
    return to_hex(function_selector("setQuote(string)") + encode(["string"], [new_quote]))

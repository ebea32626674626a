"""Meta-Transaction Signing.

Provides the signing gateway, signature decoding and local verification:
- TypedDataSigner protocol for external wallets (JSON-RPC, MetaMask, etc.)
- LocalAccountSigner backed by eth_account.Account
- decode_signature to split a 65-byte signature into r, s, v
- recover_signer / verify_signature as a sanity check before relaying
"""

from typing import Any, Dict, Optional, Protocol

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import is_address, to_checksum_address, to_hex

from ..errors import MalformedSignature, SignerUnavailable, UserRejected, WrongNetwork
from .typed_message import encode_typed_message, encode_typed_params
from .types import SignatureComponents, TypedMessage
from .utils import SIGNATURE_LENGTH, hex_to_bytes, is_strict_hex, salt_to_chain_id


class TypedDataSigner(Protocol):
    """Protocol for signers that can sign EIP-712 typed data."""

    async def get_address(self) -> str:
        """Get the signer's current address."""
        ...

    async def get_chain_id(self) -> int:
        """Get the chain the signer is connected to."""
        ...

    async def sign_typed_data(self, address: str, params: Dict[str, Any]) -> str:
        """Sign EIP-712 typed data.

        Args:
            address: Account to sign with
            params: Dict with domain, types, primaryType, and message

        Returns:
            Signature as 0x-prefixed hex string
        """
        ...


class LocalAccountSigner:
    """TypedDataSigner backed by a local eth_account key."""

    def __init__(self, account: LocalAccount, chain_id: int):
        self._account = account
        self._chain_id = chain_id

    @classmethod
    def from_key(cls, private_key: str, chain_id: int) -> "LocalAccountSigner":
        return cls(Account.from_key(private_key), chain_id)

    @property
    def address(self) -> str:
        return self._account.address

    async def get_address(self) -> str:
        return self._account.address

    async def get_chain_id(self) -> int:
        return self._chain_id

    async def sign_typed_data(self, address: str, params: Dict[str, Any]) -> str:
        if to_checksum_address(address) != self._account.address:
            raise SignerUnavailable(f"No key available for account {address}")

        signed = self._account.sign_message(encode_typed_params(params))
        return to_hex(signed.signature)


async def sign_typed_message(
    signer: TypedDataSigner,
    address: str,
    message: TypedMessage,
) -> str:
    """Have an external signer sign a meta-transaction message.

    May wait indefinitely for the user; no timeout is applied here.

    Args:
        signer: Signer that implements TypedDataSigner protocol
        address: Account to sign with (must be the message sender)
        message: Message built by build_typed_message

    Returns:
        Raw signature as 0x-prefixed hex string

    Raises:
        WrongNetwork: If the signer's chain differs from the domain's chain
        UserRejected: If the signer returned no signature
        ValueError: If address is not the message sender
    """
    if not is_address(address):
        raise ValueError(f"Invalid signer address: {address}")
    if to_checksum_address(address) != message.message.from_address:
        raise ValueError(
            f"Signer {address} is not the message sender {message.message.from_address}"
        )

    expected_chain_id = salt_to_chain_id(message.domain.salt)
    actual_chain_id = await signer.get_chain_id()
    if actual_chain_id != expected_chain_id:
        raise WrongNetwork(expected_chain_id, actual_chain_id)

    signature = await signer.sign_typed_data(address, message.to_dict())
    if not signature:
        raise UserRejected("Could not get user signature")
    if isinstance(signature, bytes):
        signature = to_hex(signature)
    return signature if signature.startswith("0x") else "0x" + signature


def normalize_v(v: int) -> int:
    """Normalize a recovery identifier to 27 or 28.

    Raises:
        MalformedSignature: If v is neither a raw recovery bit nor 27/28
    """
    if v in (27, 28):
        return v
    if v in (0, 1):
        return v + 27
    raise MalformedSignature(f"Invalid recovery identifier: {v}")


def decode_signature(raw_signature: str) -> SignatureComponents:
    """Split a 65-byte signature into r, s and v.

    Args:
        raw_signature: 0x-prefixed hex string, r || s || v

    Returns:
        SignatureComponents with v normalized to 27 or 28

    Raises:
        MalformedSignature: If the input is not strict hex, not 65 bytes,
            or carries an invalid recovery identifier
    """
    if not is_strict_hex(raw_signature):
        raise MalformedSignature(
            f'Given value "{raw_signature}" is not a valid hex string.'
        )

    data = hex_to_bytes(raw_signature)
    if len(data) != SIGNATURE_LENGTH:
        raise MalformedSignature(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(data)}"
        )

    return SignatureComponents(
        r=to_hex(data[:32]),
        s=to_hex(data[32:64]),
        v=normalize_v(data[64]),
    )


def recover_signer(message: TypedMessage, raw_signature: str) -> str:
    """Recover the address that signed a meta-transaction message.

    This is a local check only. The contract still verifies on execution.

    Raises:
        MalformedSignature: If the signature cannot be decoded or recovered
    """
    components = decode_signature(raw_signature)
    try:
        return Account.recover_message(
            encode_typed_message(message),
            signature=components.to_bytes(),
        )
    except Exception as e:
        raise MalformedSignature(f"Could not recover signer: {e}") from e


def verify_signature(
    message: TypedMessage,
    raw_signature: str,
    expected_signer: Optional[str] = None,
) -> bool:
    """Verify a signature was produced by the expected signer.

    Args:
        message: Signed message
        raw_signature: Signature as 0x-prefixed hex
        expected_signer: Expected address (default: the message sender)

    Returns:
        True if the recovered address matches
    """
    expected = expected_signer or message.message.from_address
    try:
        recovered = recover_signer(message, raw_signature)
    except MalformedSignature:
        return False
    return recovered.lower() == expected.lower()

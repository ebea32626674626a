"""Meta-Transaction Types.

Types for the domain-separated message a user signs off-chain, and for the
signature components the relayer submits on-chain.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict


PRIMARY_TYPE = "MetaTransaction"

# Field order and type tags are part of the signed hash input
DOMAIN_TYPE = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "salt", "type": "bytes32"},
    {"name": "verifyingContract", "type": "address"},
]

META_TRANSACTION_TYPE = [
    {"name": "nonce", "type": "uint256"},
    {"name": "from", "type": "address"},
    {"name": "functionSignature", "type": "bytes"},
]

META_TRANSACTION_TYPES = {
    "EIP712Domain": DOMAIN_TYPE,
    PRIMARY_TYPE: META_TRANSACTION_TYPE,
}


@dataclass(frozen=True)
class DomainDescriptor:
    """EIP-712 domain binding signatures to one contract on one chain."""

    name: str
    """Domain name as stored in the verifying contract."""

    version: str
    """Domain version string."""

    salt: str
    """Chain id as a 32-byte big-endian hex value."""

    verifying_contract: str
    """Contract the signature will be submitted to (checksummed)."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "salt": self.salt,
            "verifyingContract": self.verifying_contract,
        }


@dataclass(frozen=True)
class MetaTransactionPayload:
    """The call a user authorizes."""

    nonce: int
    """Replay counter currently stored on-chain for ``from_address``."""

    from_address: str
    """Address of the user authorizing the call (checksummed)."""

    function_signature: str
    """ABI-encoded call the contract will execute (0x-prefixed hex)."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nonce": self.nonce,
            "from": self.from_address,
            "functionSignature": self.function_signature,
        }


@dataclass(frozen=True)
class TypedMessage:
    """Full EIP-712 message: domain, schema, primary type and payload."""

    domain: DomainDescriptor
    message: MetaTransactionPayload

    @property
    def primary_type(self) -> str:
        return PRIMARY_TYPE

    @property
    def types(self) -> Dict[str, Any]:
        return META_TRANSACTION_TYPES

    def to_dict(self) -> Dict[str, Any]:
        """Return the ``eth_signTypedData_v4`` payload."""
        return {
            "types": {name: list(fields) for name, fields in self.types.items()},
            "primaryType": self.primary_type,
            "domain": self.domain.to_dict(),
            "message": self.message.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass(frozen=True)
class SignatureComponents:
    """Signature split into r, s and a normalized v."""

    r: str
    """First 32 bytes (0x-prefixed hex)."""

    s: str
    """Next 32 bytes (0x-prefixed hex)."""

    v: int
    """Recovery identifier, 27 or 28."""

    def to_bytes(self) -> bytes:
        """Re-pack as r || s || v."""
        return bytes.fromhex(self.r[2:]) + bytes.fromhex(self.s[2:]) + bytes([self.v])

    def to_hex(self) -> str:
        return "0x" + self.to_bytes().hex()

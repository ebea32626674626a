"""Typed-Message Builder.

Assembles the EIP-712 ``MetaTransaction`` message a user signs to authorize
a call the relayer pays for.
"""

from typing import Any, Dict, List, Tuple

from eth_abi import encode
from eth_account.messages import SignableMessage
from eth_utils import is_address, keccak, to_checksum_address

from .types import DomainDescriptor, MetaTransactionPayload, TypedMessage
from .utils import chain_id_to_salt, hex_to_bytes, is_strict_hex


def create_domain(
    name: str,
    version: str,
    chain_id: int,
    verifying_contract: str,
) -> DomainDescriptor:
    """Create the EIP-712 domain for the verifying contract.

    The chain is bound through ``salt`` rather than ``chainId``.

    Args:
        name: Domain name as stored in the contract
        version: Domain version
        chain_id: Chain the contract is deployed on
        verifying_contract: Address of the contract

    Returns:
        DomainDescriptor

    Raises:
        ValueError: If the contract address is invalid
    """
    if not is_address(verifying_contract):
        raise ValueError(f"Invalid verifying contract address: {verifying_contract}")

    return DomainDescriptor(
        name=name,
        version=version,
        salt=chain_id_to_salt(chain_id),
        verifying_contract=to_checksum_address(verifying_contract),
    )


def build_typed_message(
    domain: DomainDescriptor,
    nonce: int,
    from_address: str,
    function_signature: str,
) -> TypedMessage:
    """Build the message for a meta-transaction.

    Args:
        domain: Domain of the verifying contract
        nonce: Current on-chain nonce of ``from_address``
        from_address: Address of the user authorizing the call
        function_signature: ABI-encoded call data (0x-prefixed hex)

    Returns:
        TypedMessage

    Raises:
        ValueError: If the address, nonce or call data is invalid
    """
    if not is_address(from_address):
        raise ValueError(f"Invalid from address: {from_address}")
    if nonce < 0:
        raise ValueError(f"Invalid nonce: {nonce}")
    if not is_strict_hex(function_signature):
        raise ValueError(f"Invalid function signature: {function_signature}")

    return TypedMessage(
        domain=domain,
        message=MetaTransactionPayload(
            nonce=int(nonce),
            from_address=to_checksum_address(from_address),
            function_signature=function_signature.lower(),
        ),
    )


def encode_type(type_name: str, fields: List[Dict[str, str]]) -> str:
    """EIP-712 type string, e.g. "MetaTransaction(uint256 nonce,...)"."""
    return f"{type_name}({','.join(f['type'] + ' ' + f['name'] for f in fields)})"


def _encode_value(type_: str, value: Any) -> Tuple[str, Any]:
    if type_ in ("string", "bytes"):
        if isinstance(value, str):
            value = value.encode("utf-8") if type_ == "string" else hex_to_bytes(value)
        return "bytes32", keccak(value)
    if type_.startswith("bytes") and isinstance(value, str):
        return type_, hex_to_bytes(value)
    if type_.startswith(("uint", "int")) and isinstance(value, str):
        return type_, int(value, 0)
    return type_, value


def hash_struct(type_name: str, fields: List[Dict[str, str]], values: Dict[str, Any]) -> bytes:
    """EIP-712 ``hashStruct`` for a flat struct, keeping the given field order.

    Raises:
        ValueError: If a field value is missing
    """
    abi_types = ["bytes32"]
    abi_values: List[Any] = [keccak(text=encode_type(type_name, fields))]
    for field in fields:
        if field["name"] not in values:
            raise ValueError(f"Missing value for {type_name}.{field['name']}")
        abi_type, abi_value = _encode_value(field["type"], values[field["name"]])
        abi_types.append(abi_type)
        abi_values.append(abi_value)
    return keccak(encode(abi_types, abi_values))


def encode_typed_params(params: Dict[str, Any]) -> SignableMessage:
    """Encode an ``eth_signTypedData_v4`` payload into the EIP-712 signable form.

    Domain fields are hashed in the order the payload declares them.
    Only flat structs of atomic, string and bytes fields are supported.
    """
    types = params["types"]
    primary_type = params["primaryType"]
    return SignableMessage(
        version=b"\x01",
        header=hash_struct("EIP712Domain", types["EIP712Domain"], params["domain"]),
        body=hash_struct(primary_type, types[primary_type], params["message"]),
    )


def encode_typed_message(message: TypedMessage) -> SignableMessage:
    """Encode a message into the EIP-712 signable form.

    Signer and verifier both go through this, so the digest is the same.
    """
    return encode_typed_params(message.to_dict())

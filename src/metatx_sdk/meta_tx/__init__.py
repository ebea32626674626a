"""Meta-Transaction Message Module.

This module builds, signs, decodes and verifies the EIP-712 message a user
signs so that a relayer can execute a call on their behalf.

Key components:
- Domain and message construction (salt-bound EIP-712 domain)
- Signing gateway for external wallets and local keys
- Signature decoding into r, s, v and local signer recovery

Example usage:
    ```python
    from metatx_sdk.meta_tx import (
        create_domain,
        build_typed_message,
        encode_set_quote_call,
        sign_typed_message,
        decode_signature,
        LocalAccountSigner,
    )

    domain = create_domain("TestContract", "1", 5, "0x...")
    message = build_typed_message(
        domain,
        nonce=5,
        from_address="0x...",
        function_signature=encode_set_quote_call("hello"),
    )

    signer = LocalAccountSigner.from_key("0x...", chain_id=5)
    signature = await sign_typed_message(signer, signer.address, message)
    components = decode_signature(signature)  # r, s, v (27 or 28)
    ```
"""

from .types import (
    DomainDescriptor,
    MetaTransactionPayload,
    TypedMessage,
    SignatureComponents,
    DOMAIN_TYPE,
    META_TRANSACTION_TYPE,
    META_TRANSACTION_TYPES,
    PRIMARY_TYPE,
)
from .typed_message import (
    create_domain,
    build_typed_message,
    encode_typed_message,
    encode_typed_params,
)
from .signing import (
    TypedDataSigner,
    LocalAccountSigner,
    sign_typed_message,
    normalize_v,
    decode_signature,
    recover_signer,
    verify_signature,
)
from .utils import (
    SIGNATURE_LENGTH,
    chain_id_to_salt,
    salt_to_chain_id,
    is_strict_hex,
    encode_set_quote_call,
)

__all__ = [
    # Types
    "DomainDescriptor",
    "MetaTransactionPayload",
    "TypedMessage",
    "SignatureComponents",
    "DOMAIN_TYPE",
    "META_TRANSACTION_TYPE",
    "META_TRANSACTION_TYPES",
    "PRIMARY_TYPE",
    # Builder
    "create_domain",
    "build_typed_message",
    "encode_typed_message",
    "encode_typed_params",
    # Signing
    "TypedDataSigner",
    "LocalAccountSigner",
    "sign_typed_message",
    "normalize_v",
    "decode_signature",
    "recover_signer",
    "verify_signature",
    # Utils
    "SIGNATURE_LENGTH",
    "chain_id_to_salt",
    "salt_to_chain_id",
    "is_strict_hex",
    "encode_set_quote_call",
]

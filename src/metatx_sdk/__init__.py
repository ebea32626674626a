"""Gasless meta-transactions: sign off-chain, relay on-chain."""

from .config import (
    QUOTE_CONTRACT_ABI,
    MetaTxConfig,
    ResolvedMetaTxConfig,
    load_config_from_env,
    resolve_config,
)
from .errors import (
    EmptyState,
    GasEstimationFailed,
    MalformedSignature,
    MetaTxError,
    NonceMismatch,
    SignerUnavailable,
    SubmissionReverted,
    UserRejected,
    WrongNetwork,
)
from .meta_tx import (
    LocalAccountSigner,
    SignatureComponents,
    TypedDataSigner,
    TypedMessage,
    build_typed_message,
    create_domain,
    decode_signature,
    recover_signer,
    sign_typed_message,
    verify_signature,
)
from .relay import (
    ClientSession,
    JsonRpcWallet,
    MetaTxClient,
    QuoteState,
    RelayEvent,
    RelaySubmission,
    RelaySubmitter,
    SubmissionState,
)

__version__ = "0.1.0"

__all__ = [
    "QUOTE_CONTRACT_ABI",
    "MetaTxConfig",
    "ResolvedMetaTxConfig",
    "load_config_from_env",
    "resolve_config",
    "EmptyState",
    "GasEstimationFailed",
    "MalformedSignature",
    "MetaTxError",
    "NonceMismatch",
    "SignerUnavailable",
    "SubmissionReverted",
    "UserRejected",
    "WrongNetwork",
    "LocalAccountSigner",
    "SignatureComponents",
    "TypedDataSigner",
    "TypedMessage",
    "build_typed_message",
    "create_domain",
    "decode_signature",
    "recover_signer",
    "sign_typed_message",
    "verify_signature",
    "ClientSession",
    "JsonRpcWallet",
    "MetaTxClient",
    "QuoteState",
    "RelayEvent",
    "RelaySubmission",
    "RelaySubmitter",
    "SubmissionState",
]

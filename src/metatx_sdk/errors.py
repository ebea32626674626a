"""Error types for the meta-transaction SDK.

Wallet and network failures surface as ``MetaTxError`` subclasses so callers
can report them to the user without crashing. Contract-side rejections keep
the provider's message verbatim on ``reason``.
"""

from typing import Optional


class MetaTxError(Exception):
    """Base class for all meta-transaction errors."""

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason if reason is not None else message


class SignerUnavailable(MetaTxError):
    """No compatible signing capability is present."""


class WrongNetwork(MetaTxError):
    """The active chain does not match the chain encoded in the domain salt."""

    def __init__(self, expected_chain_id: int, actual_chain_id: int):
        super().__init__(
            f"Wrong network: expected chain {expected_chain_id}, "
            f"got chain {actual_chain_id}"
        )
        self.expected_chain_id = expected_chain_id
        self.actual_chain_id = actual_chain_id


class UserRejected(MetaTxError):
    """The external signer declined the request."""


class MalformedSignature(MetaTxError):
    """The signature is not strict hex, not 65 bytes, or has an invalid v."""


class NonceMismatch(MetaTxError):
    """The contract rejected the call because the nonce was already consumed."""


class GasEstimationFailed(MetaTxError):
    """Gas estimation for the relayed call failed."""


class SubmissionReverted(MetaTxError):
    """The relayed call was rejected or reverted on-chain."""


class EmptyState(MetaTxError):
    """The contract has no state set yet."""


def classify_rejection(reason: str, default: type = SubmissionReverted) -> MetaTxError:
    """Map a raw contract rejection to an error type without rewording it."""
    if "nonce" in reason.lower():
        return NonceMismatch(reason, reason=reason)
    return default(reason, reason=reason)


__all__ = [
    "MetaTxError",
    "SignerUnavailable",
    "WrongNetwork",
    "UserRejected",
    "MalformedSignature",
    "NonceMismatch",
    "GasEstimationFailed",
    "SubmissionReverted",
    "EmptyState",
    "classify_rejection",
]

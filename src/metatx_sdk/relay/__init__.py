"""Relay modules for the meta-transaction SDK."""

from .session import ClientSession
from .state import QuoteState, get_nonce, refresh_state
from .submitter import (
    RelayEvent,
    RelaySubmission,
    RelaySubmitter,
    SubmissionState,
)
from .accounts import AccountWatcher
from .wallet import JsonRpcWallet
from .client import MetaTxClient

__all__ = [
    "ClientSession",
    "QuoteState",
    "get_nonce",
    "refresh_state",
    "RelayEvent",
    "RelaySubmission",
    "RelaySubmitter",
    "SubmissionState",
    "AccountWatcher",
    "JsonRpcWallet",
    "MetaTxClient",
]

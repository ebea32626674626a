"""JSON-RPC wallet gateway.

Talks EIP-1193 methods (``eth_requestAccounts``, ``eth_chainId``,
``eth_signTypedData_v4``) to a wallet endpoint over HTTP, and implements the
TypedDataSigner protocol on top of them.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from eth_utils import to_checksum_address

from ..errors import MetaTxError, SignerUnavailable, UserRejected
from .accounts import AccountWatcher

logger = logging.getLogger(__name__)

# EIP-1193 provider error codes
USER_REJECTED_REQUEST = 4001
UNAUTHORIZED = 4100
UNSUPPORTED_METHOD = 4200
DISCONNECTED = 4900
CHAIN_DISCONNECTED = 4901
METHOD_NOT_FOUND = -32601

_UNAVAILABLE_CODES = {
    UNAUTHORIZED,
    UNSUPPORTED_METHOD,
    DISCONNECTED,
    CHAIN_DISCONNECTED,
    METHOD_NOT_FOUND,
}


class JsonRpcWallet:
    """Wallet reachable over JSON-RPC.

    Example:
        ```python
        wallet = JsonRpcWallet("http://localhost:8545")
        address = await wallet.get_address()
        signature = await wallet.sign_typed_data(address, message.to_dict())
        ```
    """

    def __init__(
        self,
        url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """Initialize the wallet gateway.

        Args:
            url: Wallet JSON-RPC endpoint
            http_client: Optional client (signing may wait on the user, so the
                default client has no timeout)
            headers: Extra headers sent with each request
        """
        self._url = url
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._http_client = http_client or httpx.AsyncClient(timeout=None)
        self._request_id = 0

    async def _request(self, method: str, params: List[Any]) -> Any:
        self._request_id += 1
        request = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        try:
            response = await self._http_client.post(
                self._url, headers=self._headers, json=request
            )
        except httpx.HTTPError as e:
            raise SignerUnavailable(f"Wallet endpoint unreachable: {e}") from e

        try:
            body = response.json()
        except ValueError:
            raise SignerUnavailable(
                f"Wallet request failed: {response.status_code} {response.text}"
            )

        if isinstance(body, dict) and "error" in body:
            error = body["error"]
            if isinstance(error, str):
                raise MetaTxError(f"Wallet error: {error}")
            code = error.get("code")
            message = error.get("message", "")
            if code == USER_REJECTED_REQUEST:
                raise UserRejected(f"User rejected {method}: {message}", reason=message)
            if code in _UNAVAILABLE_CODES:
                raise SignerUnavailable(
                    f"Wallet cannot serve {method}: {message} (code: {code})",
                    reason=message,
                )
            raise MetaTxError(f"Wallet error: {message} (code: {code})", reason=message)

        if not response.is_success:
            raise SignerUnavailable(
                f"Wallet request failed: {response.status_code} {response.text}"
            )

        return body.get("result")

    async def request_accounts(self) -> List[str]:
        """Ask the wallet to expose its accounts."""
        accounts = await self._request("eth_requestAccounts", [])
        return [to_checksum_address(a) for a in accounts or []]

    async def accounts(self) -> List[str]:
        """Accounts currently exposed, without prompting the user."""
        accounts = await self._request("eth_accounts", [])
        return [to_checksum_address(a) for a in accounts or []]

    async def get_address(self) -> str:
        accounts = await self.request_accounts()
        if not accounts:
            raise SignerUnavailable("Wallet exposed no accounts")
        return accounts[0]

    async def get_chain_id(self) -> int:
        result = await self._request("eth_chainId", [])
        return int(result, 16) if isinstance(result, str) else int(result)

    async def sign_typed_data(self, address: str, params: Dict[str, Any]) -> str:
        logger.debug("Requesting typed data signature from %s", address)
        signature = await self._request(
            "eth_signTypedData_v4", [address, json.dumps(params)]
        )
        if not signature:
            raise UserRejected("Could not get user signature")
        return signature

    def watch_accounts(self, poll_interval: float = 1.0) -> AccountWatcher:
        """Subscription to account changes, polled over ``eth_accounts``."""
        return AccountWatcher(self.accounts, poll_interval=poll_interval)

    async def close(self) -> None:
        await self._http_client.aclose()

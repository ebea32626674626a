"""Tests for the JSON-RPC wallet gateway and account subscription."""

import json

import httpx
import pytest
from eth_account import Account
from eth_utils import to_checksum_address, to_hex

from metatx_sdk.errors import MetaTxError, SignerUnavailable, UserRejected
from metatx_sdk.meta_tx import (
    build_typed_message,
    create_domain,
    encode_set_quote_call,
    encode_typed_params,
    recover_signer,
    sign_typed_message,
)
from metatx_sdk.relay import AccountWatcher, JsonRpcWallet


# Test wallet (DO NOT use in production)
TEST_PRIVATE_KEY = "0x" + "ab" * 32
TEST_ACCOUNT = Account.from_key(TEST_PRIVATE_KEY)
TEST_ADDRESS = TEST_ACCOUNT.address
OTHER_ADDRESS = to_checksum_address("0x" + "34" * 20)

CONTRACT_ADDRESS = to_checksum_address("0x" + "12" * 20)
WALLET_URL = "http://wallet.test/rpc"


def rpc_result(request, result):
    body = json.loads(request.content)
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


def rpc_error(request, code, message):
    body = json.loads(request.content)
    return httpx.Response(
        200,
        json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": code, "message": message}},
    )


def make_wallet(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return JsonRpcWallet(WALLET_URL, http_client=client)


class MetaMaskLike:
    """In-memory wallet endpoint holding one key."""

    def __init__(self, chain_id="0x5"):
        self.chain_id = chain_id
        self.requests = []

    def __call__(self, request):
        body = json.loads(request.content)
        self.requests.append(body)
        method = body["method"]
        if method in ("eth_requestAccounts", "eth_accounts"):
            return rpc_result(request, [TEST_ADDRESS.lower()])
        if method == "eth_chainId":
            return rpc_result(request, self.chain_id)
        if method == "eth_signTypedData_v4":
            address, data = body["params"]
            assert to_checksum_address(address) == TEST_ADDRESS
            signed = TEST_ACCOUNT.sign_message(encode_typed_params(json.loads(data)))
            return rpc_result(request, to_hex(signed.signature))
        return rpc_error(request, -32601, f"Method {method} not found")


class TestJsonRpcWallet:
    """Tests for the EIP-1193 gateway."""

    @pytest.mark.asyncio
    async def test_request_accounts(self):
        """Test that accounts come back checksummed."""
        wallet = make_wallet(MetaMaskLike())

        assert await wallet.request_accounts() == [TEST_ADDRESS]
        assert await wallet.get_address() == TEST_ADDRESS

    @pytest.mark.asyncio
    async def test_get_chain_id(self):
        """Test hex chain id parsing."""
        wallet = make_wallet(MetaMaskLike(chain_id="0x5"))
        assert await wallet.get_chain_id() == 5

    @pytest.mark.asyncio
    async def test_sign_typed_message(self):
        """Test signing a meta-transaction through the wallet endpoint."""
        endpoint = MetaMaskLike()
        wallet = make_wallet(endpoint)
        domain = create_domain("TestContract", "1", 5, CONTRACT_ADDRESS)
        message = build_typed_message(domain, 5, TEST_ADDRESS, encode_set_quote_call("hello"))

        signature = await sign_typed_message(wallet, TEST_ADDRESS, message)

        assert recover_signer(message, signature) == TEST_ADDRESS
        sign_request = endpoint.requests[-1]
        assert sign_request["method"] == "eth_signTypedData_v4"
        assert json.loads(sign_request["params"][1]) == message.to_dict()

    @pytest.mark.asyncio
    async def test_user_rejected(self):
        """Test that code 4001 maps to UserRejected."""

        def handler(request):
            return rpc_error(request, 4001, "User denied message signature.")

        wallet = make_wallet(handler)
        with pytest.raises(UserRejected) as exc_info:
            await wallet.sign_typed_data(TEST_ADDRESS, {})

        assert exc_info.value.reason == "User denied message signature."

    @pytest.mark.asyncio
    async def test_method_not_found(self):
        """Test that an unsupported method maps to SignerUnavailable."""
        wallet = make_wallet(MetaMaskLike())
        with pytest.raises(SignerUnavailable):
            await wallet._request("wallet_unknownMethod", [])

    @pytest.mark.asyncio
    async def test_other_wallet_error(self):
        """Test that other wallet errors keep their message."""

        def handler(request):
            return rpc_error(request, -32000, "internal wallet failure")

        wallet = make_wallet(handler)
        with pytest.raises(MetaTxError) as exc_info:
            await wallet.get_chain_id()

        assert exc_info.value.reason == "internal wallet failure"

    @pytest.mark.asyncio
    async def test_endpoint_unreachable(self):
        """Test that transport failures map to SignerUnavailable."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        wallet = make_wallet(handler)
        with pytest.raises(SignerUnavailable, match="unreachable"):
            await wallet.get_chain_id()

    @pytest.mark.asyncio
    async def test_non_json_response(self):
        """Test that a non-JSON response maps to SignerUnavailable."""

        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        wallet = make_wallet(handler)
        with pytest.raises(SignerUnavailable, match="502"):
            await wallet.get_chain_id()

    @pytest.mark.asyncio
    async def test_no_accounts(self):
        """Test that a wallet without accounts is unavailable."""

        def handler(request):
            return rpc_result(request, [])

        wallet = make_wallet(handler)
        with pytest.raises(SignerUnavailable, match="no accounts"):
            await wallet.get_address()

    @pytest.mark.asyncio
    async def test_empty_signature(self):
        """Test that a null signature is treated as a rejection."""

        def handler(request):
            return rpc_result(request, None)

        wallet = make_wallet(handler)
        with pytest.raises(UserRejected):
            await wallet.sign_typed_data(TEST_ADDRESS, {})


class TestAccountWatcher:
    """Tests for the account-change subscription."""

    @pytest.mark.asyncio
    async def test_yields_changes_only(self):
        """Test that repeated accounts are not re-emitted."""
        responses = iter(
            [[TEST_ADDRESS], [TEST_ADDRESS], [OTHER_ADDRESS.lower()], [], [TEST_ADDRESS]]
        )

        async def fetch():
            return next(responses)

        watcher = AccountWatcher(fetch, poll_interval=0)
        seen = []
        async for address in watcher.watch():
            seen.append(address)
            if len(seen) == 4:
                break

        assert seen == [TEST_ADDRESS, OTHER_ADDRESS, None, TEST_ADDRESS]

    @pytest.mark.asyncio
    async def test_restartable(self):
        """Test that each watch() starts a fresh sequence."""
        wallet = make_wallet(MetaMaskLike())
        watcher = wallet.watch_accounts(poll_interval=0)

        for _ in range(2):
            async for address in watcher.watch():
                assert address == TEST_ADDRESS
                break

"""Gasless Quote Update Example.

This example sets a new quote on the quote contract without the user paying
gas. The user signs an EIP-712 MetaTransaction with their wallet and a
relayer account submits it and pays for execution.

Prerequisites:
1. pip install metatx-sdk
2. Set environment variables (see below)
3. Fund the relayer account with ETH on the target chain

Environment:
    METATX_RPC_URL            Chain RPC endpoint
    METATX_CONTRACT_ADDRESS   Quote contract address
    METATX_RELAYER_KEY        Private key of the relayer (pays gas)
    METATX_WALLET_URL         Wallet JSON-RPC endpoint (optional)
    METATX_USER_KEY           User key, used when no wallet URL is set

Usage:
    python gasless_quote.py "my new quote"
"""

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()


async def main(new_quote: str):
    from metatx_sdk import (
        EmptyState,
        JsonRpcWallet,
        LocalAccountSigner,
        MetaTxClient,
        MetaTxError,
        SubmissionState,
        load_config_from_env,
    )

    required = ["METATX_RPC_URL", "METATX_CONTRACT_ADDRESS", "METATX_RELAYER_KEY"]
    missing = [var for var in required if not os.environ.get(var)]
    if missing:
        print(f"Missing required environment variables: {', '.join(missing)}")
        return
    if not os.environ.get("METATX_WALLET_URL") and not os.environ.get("METATX_USER_KEY"):
        print("Set METATX_WALLET_URL or METATX_USER_KEY.")
        return

    config = load_config_from_env()

    if os.environ.get("METATX_WALLET_URL"):
        signer = JsonRpcWallet(os.environ["METATX_WALLET_URL"])
    else:
        signer = LocalAccountSigner.from_key(
            os.environ["METATX_USER_KEY"], chain_id=config.expected_chain_id
        )

    print("=" * 60)
    print("  GASLESS QUOTE UPDATE")
    print("=" * 60)

    try:
        client = await MetaTxClient.connect(
            config, os.environ["METATX_RELAYER_KEY"], signer
        )
        sender = await signer.get_address()
        print(f"\n[1] User:    {sender}")
        print(f"    Relayer: {client.session.relayer_address}")

        try:
            current = await client.refresh_state()
            print(f"\n[2] Current quote: {current.quote!r} by {current.owner}")
        except EmptyState:
            print("\n[2] No quotes set on blockchain yet")

        print(f"\n[3] Signing and relaying {new_quote!r}...")
        async for event in client.submit_quote(sender, new_quote):
            submission = event.submission
            if event.state == SubmissionState.SUBMITTED:
                print(f"    Transaction sent by relayer with hash {submission.tx_hash}")
            elif event.state == SubmissionState.CONFIRMED:
                print("    Transaction confirmed on chain")
                if event.quote_state:
                    print(
                        f"    Quote is now {event.quote_state.quote!r} "
                        f"by {event.quote_state.owner}"
                    )
            else:
                print(f"    Relay failed: {submission.reason}")

    except MetaTxError as e:
        print(f"\nError: {e}")

    finally:
        if isinstance(signer, JsonRpcWallet):
            await signer.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "Hello from a relayer"))

#!/usr/bin/env python3
"""
Simple example of leasing a model with the ModelLease SDK.
"""
import os
import sys

from web3 import Web3

from modellease_sdk import LocalKeyProvider, ModelLeaseError, NodeProvider, Settings, bootstrap


def main():
    """
    Demonstrate basic usage of a leasing session.

    This example shows how to:
    1. Connect a wallet and load the registry
    2. List the models with their prices
    3. Lease a model
    """
    # Read configuration from environment
    settings = Settings.from_env()
    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    MODEL_ID = int(sys.argv[1]) if len(sys.argv) > 1 else 0

    if not settings.registry_address:
        print("ERROR: MODEL_REGISTRY_ADDRESS environment variable is required")
        return

    w3 = Web3(Web3.HTTPProvider(settings.rpc_url))
    if PRIVATE_KEY:
        provider = LocalKeyProvider(w3, PRIVATE_KEY, chain_id=settings.chain_id)
    else:
        # Use the accounts unlocked on the node (e.g. a local dev chain)
        provider = NodeProvider(w3)

    try:
        with bootstrap(settings, provider, w3=w3) as session:
            print(f"Connected Account: {session.address}")
            print("Available Models:")
            if len(session.models) == 0:
                print("  No models available.")
            for model, price in session.describe_models():
                print(f"  [{model.id}] {model.description} - {price} - Available: {'Yes' if model.available else 'No'}")

            receipt = session.lease(MODEL_ID)
            print("Model leased successfully!")
            print(f"Transaction hash: {receipt.tx_hash}")
            print(f"Block number: {receipt.block_number}")

    except ModelLeaseError as e:
        print(f"Error leasing model: {e}")


if __name__ == "__main__":
    main()

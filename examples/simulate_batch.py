#!/usr/bin/env python3
"""
Example of simulating an Euler batch before sending it.
"""
import asyncio
import logging
import os

from euler_sdk import BatchItem, ContractRef, Euler, LocalSigner, NetworkConfig

logging.basicConfig(level=logging.INFO)

# USDC on mainnet
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


async def main():
    """
    Demonstrate batch simulation against a bundled network.

    This example shows how to:
    1. Initialize the client from a network configuration
    2. Describe a deposit, enter-market and borrow batch
    3. Simulate it together with a gas estimate
    4. Build the calldata for the real dispatch
    """
    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    if not PRIVATE_KEY:
        print("ERROR: PRIVATE_KEY environment variable is required")
        return

    print("Available networks:")
    for network_name in NetworkConfig.load_networks().keys():
        print(f"  - {network_name}")
    print()

    signer = LocalSigner(PRIVATE_KEY)
    print(f"Signer address: {signer.address}")

    euler = Euler.from_network("mainnet", rpc_url=os.environ.get("RPC_URL"), signer=signer)

    items = [
        BatchItem(contract=ContractRef.for_underlying("eToken", USDC), method="deposit", args=[0, 10**6]),
        BatchItem(contract="markets", method="enterMarket", args=[0, USDC]),
        BatchItem(contract=ContractRef.for_underlying("dToken", USDC), method="borrow", args=[0, 10**5]),
        BatchItem.static(
            BatchItem(contract=ContractRef.for_underlying("eToken", USDC), method="balanceOf", args=[signer.address])
        ),
    ]

    result = await euler.simulate_batch([signer.address], items, exclude_static_calls=True)

    if result.simulation_error:
        print(f"Simulation failed: {result.simulation_error}")
    else:
        for item, item_result in zip(items, result.simulation):
            name = item.effective.method
            if item_result.success:
                print(f"  {name}: {item_result.values}")
            else:
                print(f"  {name}: failed ({item_result.error.message})")

    if result.liquidity_check_error:
        print(f"Batch would fail its liquidity check: {result.liquidity_check_error}")
    elif result.gas_error:
        print(f"Gas estimation failed: {result.gas_error}")
    else:
        print(f"Estimated gas: {result.gas}")

    to, data = await euler.batch_dispatch_call(items[:3], [signer.address])
    print(f"\nDispatch to {to} with {len(data)} bytes of calldata")


if __name__ == "__main__":
    asyncio.run(main())

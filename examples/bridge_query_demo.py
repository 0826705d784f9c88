#!/usr/bin/env python3
"""
Token Bridge Query Demo

Connects read-only web3 providers to the EVM chains that have an RPC
endpoint configured and shows:
- where a token lives on another chain (foreign asset lookup)
- the token's decimals and symbol on its home chain
- the transfers published by a source transaction, if a hash is given

Usage:
    TOKENBRIDGE_CONFIG=bridge.json python examples/bridge_query_demo.py [tx_hash]

The JSON file needs at least ``{"rpcs": {"ethereum": "https://..."}}``.
"""

import asyncio
import sys
from typing import Optional

from web3 import AsyncHTTPProvider, AsyncWeb3

from tokenbridge import BridgeRegistry, ContextKind, TokenId, load_config
from tokenbridge.chains.evm import Web3Provider
from tokenbridge.errors import TokenBridgeError
from tokenbridge.logging import LogConfig, LogLevel, get_logger, setup_logging

logger = get_logger(__name__)

USDC = TokenId("ethereum", "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48")


class BridgeQueryDemo:
    """Read-only tour of the bridge registry."""

    def __init__(self):
        self.config = load_config()
        self.registry = BridgeRegistry(self.config)

    def connect(self) -> None:
        for chain in self.registry.chains_of_kind(ContextKind.EVM):
            url = self.config.rpcs.get(chain)
            if not url:
                continue
            w3 = AsyncWeb3(AsyncHTTPProvider(url))
            self.registry.register_provider(chain, Web3Provider(w3, chain))
            logger.info(f"Connected {chain} via {url}")

    async def show_token(self, token: TokenId) -> None:
        details = await self.registry.get_token_details(token)
        logger.info(f"{token}: {details.symbol}, {details.decimals} decimals")

        for chain in self.registry.chains_of_kind(ContextKind.EVM):
            if self.registry.get_provider(chain) is None or chain == token.chain:
                continue
            address = await self.registry.get_foreign_asset(token, chain)
            logger.info(f"  on {chain}: {address or 'not attested'}")

    async def show_transaction(self, tx_hash: str, chain: str = "ethereum") -> None:
        context = self.registry.get_context(chain)
        for message in await context.parse_message_from_tx(tx_hash, chain):
            logger.info(
                f"  seq {message.sequence}: {message.amount} of {message.token_id} "
                f"{message.from_chain} -> {message.to_chain} ({message.recipient})"
            )

    async def run(self, tx_hash: Optional[str] = None) -> None:
        self.connect()
        if self.registry.get_provider(USDC.chain) is None:
            logger.error(f"No RPC configured for {USDC.chain}")
            return
        await self.show_token(USDC)
        if tx_hash:
            await self.show_transaction(tx_hash)


async def main():
    setup_logging(LogConfig(level=LogLevel.INFO, format_type="text"))
    demo = BridgeQueryDemo()
    try:
        await demo.run(sys.argv[1] if len(sys.argv) > 1 else None)
    except TokenBridgeError as e:
        logger.error(f"Demo failed: {e}")
        raise


if __name__ == "__main__":
    asyncio.run(main())

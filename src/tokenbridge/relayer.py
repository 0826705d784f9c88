"""
Relayer fee and swap queries.

The token bridge relayer charges a fee in the transferred token, quoted by
the source chain's relayer contract, and can swap part of the transfer into
the destination chain's gas token, quoted by the destination relayer.
Nothing is cached; every call queries the chain.
"""

from typing import TYPE_CHECKING, Optional

from .bridge_types import ChainRef, TokenId
from .logging import LogContext, get_logger

if TYPE_CHECKING:
    from .registry import BridgeRegistry

logger = get_logger(__name__)


class RelayerFeeEngine:
    """Queries against the token bridge relayer contracts."""

    def __init__(self, registry: "BridgeRegistry"):
        self.registry = registry

    async def get_relayer_fee(
        self, source_chain: ChainRef, dest_chain: ChainRef, token_id: TokenId
    ) -> int:
        """Fee the source relayer charges to deliver ``token_id`` to ``dest_chain``."""
        registry = self.registry
        source = registry.to_chain_name(source_chain)
        context = registry.get_context(source)

        token_address = await context.must_get_foreign_asset(token_id, source)
        decimals = await context.fetch_token_decimals(token_address, source)
        call = context.relayer_fee_call(
            source, registry.to_chain_id(dest_chain), token_address, decimals
        )
        fee = int(await registry.must_get_provider(source).query(call))
        logger.debug(
            f"Relayer fee {source} -> {registry.to_chain_name(dest_chain)}: {fee}",
            context=LogContext(
                component="relayer",
                operation="get_relayer_fee",
                chain=source,
                token=str(token_id),
            ),
        )
        return fee

    async def calculate_max_swap_amount(
        self, dest_chain: ChainRef, token_id: TokenId, wallet_address: Optional[str] = None
    ) -> int:
        """Largest amount of ``token_id`` the destination relayer swaps to gas."""
        dest = self.registry.to_chain_name(dest_chain)
        context = self.registry.get_context(dest)
        token_address = await context.must_get_foreign_asset(token_id, dest)
        call = context.max_swap_call(dest, token_address)
        if wallet_address:
            call = call.with_sender(wallet_address)
        return int(await self.registry.must_get_provider(dest).query(call))

    async def calculate_native_token_amt(
        self,
        dest_chain: ChainRef,
        token_id: TokenId,
        amount: int,
        wallet_address: Optional[str] = None,
    ) -> int:
        """Gas token received on ``dest_chain`` for swapping ``amount`` of the token."""
        dest = self.registry.to_chain_name(dest_chain)
        context = self.registry.get_context(dest)
        token_address = await context.must_get_foreign_asset(token_id, dest)
        call = context.native_swap_call(dest, token_address, amount)
        if wallet_address:
            call = call.with_sender(wallet_address)
        return int(await self.registry.must_get_provider(dest).query(call))

"""
Bridge registry.

The registry is the single lookup point of the bridge core: it resolves
chain names and ids, hands out the chain context serving a chain, holds the
per-chain providers and signers, and owns the shared pipeline, message codec
and relayer fee engine.

Contexts are created once per ecosystem and shared by every chain of that
kind. Everything but the signer map is read-only after construction.
"""

from typing import Dict, List, Optional

from .bridge_types import ChainConfig, ChainRef, ContextKind, Contracts, TokenDetails, TokenId
from .chains import CONTEXT_CLASSES, ChainContext
from .codec.message import MessageCodec
from .config import BridgeConfig
from .errors import (
    ChainNotSupported,
    ContractNotConfigured,
    NoSignerConfigured,
    ProviderNotConfigured,
)
from .logging import LogContext, get_logger
from .pipeline import TransferPipeline
from .providers import Provider, Signer
from .relayer import RelayerFeeEngine

logger = get_logger(__name__)


class BridgeRegistry:
    """Chain lookup, collaborators and shared components of one bridge."""

    def __init__(
        self,
        config: BridgeConfig,
        providers: Optional[Dict[str, Provider]] = None,
        signers: Optional[Dict[str, Signer]] = None,
    ):
        self.config = config
        self._chains: Dict[str, ChainConfig] = dict(config.chains)
        self._ids: Dict[int, str] = {}
        for key, chain in self._chains.items():
            # first key wins when two entries share an id
            self._ids.setdefault(chain.id, key)

        kinds = {chain.context for chain in self._chains.values()}
        self._contexts: Dict[ContextKind, ChainContext] = {
            kind: CONTEXT_CLASSES[kind](self) for kind in kinds
        }
        self._providers: Dict[str, Provider] = {}
        self._signers: Dict[str, Signer] = {}

        self.pipeline = TransferPipeline(self)
        self.message_codec = MessageCodec(self)
        self.relayer_fees = RelayerFeeEngine(self)

        for chain, provider in (providers or {}).items():
            self.register_provider(chain, provider)
        for chain, signer in (signers or {}).items():
            self.register_signer(chain, signer)

        logger.debug(
            f"Registry for {config.network.value} with {len(self._chains)} chains",
            context=LogContext(component="registry", operation="init"),
        )

    # chain resolution

    def to_chain_name(self, chain: ChainRef) -> str:
        if isinstance(chain, str) and chain in self._chains:
            return chain
        if isinstance(chain, int) and not isinstance(chain, bool) and chain in self._ids:
            return self._ids[chain]
        raise ChainNotSupported(chain)

    def to_chain_id(self, chain: ChainRef) -> int:
        return self._chains[self.to_chain_name(chain)].id

    def get_chain_config(self, chain: ChainRef) -> ChainConfig:
        return self._chains[self.to_chain_name(chain)]

    def get_context_kind(self, chain: ChainRef) -> ContextKind:
        return self.get_chain_config(chain).context

    def get_context(self, chain: ChainRef) -> ChainContext:
        return self._contexts[self.get_context_kind(chain)]

    def supported_chains(self) -> List[str]:
        return list(self._chains)

    def chains_of_kind(self, kind: ContextKind) -> List[str]:
        return [key for key, chain in self._chains.items() if chain.context == kind]

    def contracts(self, chain: ChainRef) -> Contracts:
        return self.get_chain_config(chain).contracts

    def must_get_contract(self, chain: ChainRef, contract: str) -> str:
        chain_name = self.to_chain_name(chain)
        address = getattr(self._chains[chain_name].contracts, contract, None)
        if not address:
            raise ContractNotConfigured(chain_name, contract)
        return address

    # collaborators

    def register_provider(self, chain: ChainRef, provider: Provider) -> None:
        self._providers[self.to_chain_name(chain)] = provider

    def get_provider(self, chain: ChainRef) -> Optional[Provider]:
        return self._providers.get(self.to_chain_name(chain))

    def must_get_provider(self, chain: ChainRef) -> Provider:
        chain_name = self.to_chain_name(chain)
        provider = self._providers.get(chain_name)
        if provider is None:
            raise ProviderNotConfigured(chain_name)
        return provider

    def register_signer(self, chain: ChainRef, signer: Signer) -> None:
        self._signers[self.to_chain_name(chain)] = signer

    def remove_signer(self, chain: ChainRef) -> None:
        self._signers.pop(self.to_chain_name(chain), None)

    def get_signer(self, chain: ChainRef) -> Optional[Signer]:
        return self._signers.get(self.to_chain_name(chain))

    def must_get_signer(self, chain: ChainRef) -> Signer:
        chain_name = self.to_chain_name(chain)
        signer = self._signers.get(chain_name)
        if signer is None:
            raise NoSignerConfigured(chain_name)
        return signer

    # token lookups

    async def get_token_decimals(self, token_id: TokenId) -> int:
        """Decimals of a token on its home chain."""
        context = self.get_context(token_id.chain)
        return await context.fetch_token_decimals(token_id.address, token_id.chain)

    async def get_token_details(self, token_id: TokenId) -> TokenDetails:
        """Symbol and decimals of a token, read on its home chain."""
        context = self.get_context(token_id.chain)
        symbol = await context.fetch_token_symbol(token_id.address, token_id.chain)
        decimals = await context.fetch_token_decimals(token_id.address, token_id.chain)
        return TokenDetails(symbol=symbol, decimals=decimals)

    async def get_foreign_asset(self, token_id: TokenId, chain: ChainRef) -> Optional[str]:
        return await self.get_context(chain).get_foreign_asset(token_id, chain)

"""
Chain backends.

One ``ChainContext`` subclass per ecosystem; ``CONTEXT_CLASSES`` maps each
``ContextKind`` to its implementation.
"""

from ..bridge_types import ContextKind
from .aptos import AptosContext
from .base import ChainContext, TransferTarget
from .evm import EvmContext, Web3Provider, Web3Signer
from .sei import SeiContext
from .solana import SolanaContext
from .sui import SuiContext

CONTEXT_CLASSES = {
    ContextKind.EVM: EvmContext,
    ContextKind.SOLANA: SolanaContext,
    ContextKind.SUI: SuiContext,
    ContextKind.APTOS: AptosContext,
    ContextKind.SEI: SeiContext,
}

__all__ = [
    "ChainContext",
    "TransferTarget",
    "CONTEXT_CLASSES",
    "EvmContext",
    "SolanaContext",
    "SuiContext",
    "AptosContext",
    "SeiContext",
    "Web3Provider",
    "Web3Signer",
]

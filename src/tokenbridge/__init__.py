"""
tokenbridge: cross-chain token bridge core.

Moves fungible tokens between EVM, Solana, Sui, Aptos and Sei chains through
a lock/mint token bridge whose messages are attested by guardian-signed
VAAs.
"""

from .bridge_types import (
    NATIVE,
    ChainConfig,
    ContextKind,
    Contracts,
    Network,
    ParsedMessage,
    ParsedRelayerMessage,
    ParsedRelayerPayload,
    TokenDetails,
    TokenId,
)
from .chains import (
    AptosContext,
    ChainContext,
    EvmContext,
    SeiContext,
    SolanaContext,
    SuiContext,
    TransferTarget,
    Web3Provider,
    Web3Signer,
)
from .codec import MessageCodec
from .config import BridgeConfig, load_config
from .pipeline import TransferPipeline
from .providers import (
    ContractCall,
    PreparedTransaction,
    Provider,
    PublishedMessage,
    ReceiptLog,
    Signer,
    TransactionReceipt,
)
from .registry import BridgeRegistry
from .relayer import RelayerFeeEngine

__version__ = "0.1.0"

__all__ = [
    # Types
    "NATIVE",
    "TokenId",
    "ChainConfig",
    "Contracts",
    "ContextKind",
    "Network",
    "TokenDetails",
    "ParsedMessage",
    "ParsedRelayerMessage",
    "ParsedRelayerPayload",
    # Collaborators
    "ContractCall",
    "PreparedTransaction",
    "Provider",
    "Signer",
    "PublishedMessage",
    "ReceiptLog",
    "TransactionReceipt",
    # Components
    "BridgeConfig",
    "load_config",
    "BridgeRegistry",
    "TransferPipeline",
    "RelayerFeeEngine",
    "MessageCodec",
    # Chains
    "ChainContext",
    "TransferTarget",
    "EvmContext",
    "SolanaContext",
    "SuiContext",
    "AptosContext",
    "SeiContext",
    "Web3Provider",
    "Web3Signer",
]

"""
Cross-chain bridge types and data structures for tokenbridge.

This module defines the core types shared by the codecs, the chain contexts
and the transfer pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

NATIVE = "native"


class ContextKind(Enum):
    """Chain backend families with distinct transaction models."""

    EVM = "Ethereum"
    SOLANA = "Solana"
    SUI = "Sui"
    APTOS = "Aptos"
    SEI = "Sei"


class Network(Enum):
    """Deployment environments."""

    MAINNET = "MAINNET"
    TESTNET = "TESTNET"
    DEVNET = "DEVNET"


ChainRef = Union[str, int]


@dataclass(frozen=True)
class TokenId:
    """A token identified by its home chain and home-chain native address."""

    chain: str
    address: str

    def to_dict(self) -> Dict[str, Any]:
        return {"chain": self.chain, "address": self.address}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenId":
        return cls(chain=data["chain"], address=data["address"])

    def __str__(self) -> str:
        return f"{self.chain}:{self.address}"


TokenRef = Union[TokenId, str]


@dataclass(frozen=True)
class Contracts:
    """Addresses of the bridge contracts deployed on one chain."""

    core: Optional[str] = None
    token_bridge: Optional[str] = None
    nft_bridge: Optional[str] = None
    relayer: Optional[str] = None
    sui_original_token_bridge_package_id: Optional[str] = None
    sui_relayer_package_id: Optional[str] = None
    sei_token_translator: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, leaving out unset contracts."""
        return {
            name: value
            for name, value in (
                ("core", self.core),
                ("token_bridge", self.token_bridge),
                ("nft_bridge", self.nft_bridge),
                ("relayer", self.relayer),
                (
                    "sui_original_token_bridge_package_id",
                    self.sui_original_token_bridge_package_id,
                ),
                ("sui_relayer_package_id", self.sui_relayer_package_id),
                ("sei_token_translator", self.sei_token_translator),
            )
            if value is not None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Contracts":
        """Create from dictionary."""
        return cls(
            core=data.get("core"),
            token_bridge=data.get("token_bridge"),
            nft_bridge=data.get("nft_bridge"),
            relayer=data.get("relayer"),
            sui_original_token_bridge_package_id=data.get(
                "sui_original_token_bridge_package_id"
            ),
            sui_relayer_package_id=data.get("sui_relayer_package_id"),
            sei_token_translator=data.get("sei_token_translator"),
        )


@dataclass(frozen=True)
class ChainConfig:
    """Static configuration of one supported chain."""

    key: str
    id: int
    context: ContextKind
    contracts: Contracts = field(default_factory=Contracts)
    finality_threshold: int = 0
    native_token_decimals: int = 18

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "key": self.key,
            "id": self.id,
            "context": self.context.value,
            "contracts": self.contracts.to_dict(),
            "finality_threshold": self.finality_threshold,
            "native_token_decimals": self.native_token_decimals,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChainConfig":
        """Create from dictionary."""
        return cls(
            key=data["key"],
            id=int(data["id"]),
            context=ContextKind(data["context"]),
            contracts=Contracts.from_dict(data.get("contracts", {})),
            finality_threshold=int(data.get("finality_threshold", 0)),
            native_token_decimals=int(data.get("native_token_decimals", 18)),
        )


@dataclass(frozen=True)
class TokenDetails:
    """Display metadata of a token."""

    symbol: str
    decimals: int


@dataclass(frozen=True)
class ParsedRelayerPayload:
    """Relayer instructions carried inside a transfer-with-payload."""

    relayer_payload_id: int
    to: str
    relayer_fee: int
    to_native_token_amount: int


@dataclass(frozen=True)
class ParsedMessage:
    """A decoded token bridge transfer."""

    send_tx: str
    sender: str
    amount: int
    payload_id: int
    recipient: str
    to_chain: str
    from_chain: str
    token_address: str
    token_chain: str
    token_id: TokenId
    sequence: int
    emitter_address: str
    block: int
    gas_fee: Optional[int] = None
    payload: Optional[bytes] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "send_tx": self.send_tx,
            "sender": self.sender,
            "amount": self.amount,
            "payload_id": self.payload_id,
            "recipient": self.recipient,
            "to_chain": self.to_chain,
            "from_chain": self.from_chain,
            "token_address": self.token_address,
            "token_chain": self.token_chain,
            "token_id": self.token_id.to_dict(),
            "sequence": self.sequence,
            "emitter_address": self.emitter_address,
            "block": self.block,
            "gas_fee": self.gas_fee,
            "payload": "0x" + self.payload.hex() if self.payload is not None else None,
        }


@dataclass(frozen=True)
class ParsedRelayerMessage(ParsedMessage):
    """A decoded transfer-with-payload addressed to a relayer.

    ``to`` is the pass-through recipient of the transfer (the relayer
    contract); ``recipient`` is the final recipient named by the relayer
    payload.
    """

    to: str = ""
    relayer_payload_id: int = 0
    relayer_fee: int = 0
    to_native_token_amount: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "to": self.to,
                "relayer_payload_id": self.relayer_payload_id,
                "relayer_fee": self.relayer_fee,
                "to_native_token_amount": self.to_native_token_amount,
            }
        )
        return data

"""EVM chain backend and web3.py adapters."""

from .client import Web3Provider, Web3Signer, receipt_from_web3
from .context import EvmContext

__all__ = ["EvmContext", "Web3Provider", "Web3Signer", "receipt_from_web3"]

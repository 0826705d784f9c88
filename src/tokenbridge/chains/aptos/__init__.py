"""Aptos chain backend."""

from .context import APTOS_COIN_TYPE, AptosContext, coin_type_hash

__all__ = ["AptosContext", "APTOS_COIN_TYPE", "coin_type_hash"]

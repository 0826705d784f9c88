"""Sui chain backend."""

from .context import SUI_COIN_TYPE, SuiContext, normalize_coin_type

__all__ = ["SuiContext", "SUI_COIN_TYPE", "normalize_coin_type"]

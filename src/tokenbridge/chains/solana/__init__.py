"""Solana chain backend."""

from .context import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    WRAPPED_SOL_MINT,
    SolanaContext,
    associated_token_address,
    wrapped_mint_address,
)

__all__ = [
    "SolanaContext",
    "TOKEN_PROGRAM_ID",
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "WRAPPED_SOL_MINT",
    "associated_token_address",
    "wrapped_mint_address",
]

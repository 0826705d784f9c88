"""
Solana chain context.

Accounts and mints are 32-byte ed25519 public keys rendered in base58, so
the canonical form is the key itself. Tokens are held in associated token
accounts; bridged tokens live in wrapped mints at a program-derived address
of the token bridge, which exist only once the asset has been attested.
"""

from typing import Optional

from solders.pubkey import Pubkey

from ...bridge_types import ChainRef, ContextKind, TokenId
from ...codec.address import BytesLike, canonical
from ...errors import AddressFormatError
from ...logging import LogContext, get_logger
from ..base import ChainContext, TransferTarget

logger = get_logger(__name__)

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
WRAPPED_SOL_MINT = "So11111111111111111111111111111111111111112"


def to_pubkey(address: str) -> Pubkey:
    try:
        return Pubkey.from_string(address)
    except (ValueError, TypeError) as e:
        raise AddressFormatError(f"Invalid Solana address {address!r}", address=address) from e


def associated_token_address(owner: str, mint: str) -> str:
    """Derive the associated token account of ``owner`` for ``mint``."""
    address, _ = Pubkey.find_program_address(
        [bytes(to_pubkey(owner)), bytes(TOKEN_PROGRAM_ID), bytes(to_pubkey(mint))],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return str(address)


def wrapped_mint_address(token_bridge: str, origin_chain_id: int, origin_address: bytes) -> str:
    """Derive the token bridge's wrapped mint for a foreign token."""
    address, _ = Pubkey.find_program_address(
        [b"wrapped", origin_chain_id.to_bytes(2, "big"), canonical(origin_address)],
        to_pubkey(token_bridge),
    )
    return str(address)


class SolanaContext(ChainContext):
    """Backend for Solana."""

    kind = ContextKind.SOLANA
    token_interface = "SplToken"
    message_event = "PostMessage"

    def format_address(self, address: str) -> bytes:
        if not isinstance(address, str):
            raise AddressFormatError(f"Invalid Solana address {address!r}", address=address)
        return bytes(to_pubkey(address))

    def parse_address(self, address: BytesLike) -> str:
        return str(Pubkey(canonical(address)))

    async def lookup_wrapped_asset(
        self, chain: str, origin_chain_id: int, origin_address: bytes
    ) -> Optional[str]:
        mint = wrapped_mint_address(self.must_get_bridge(chain), origin_chain_id, origin_address)
        account = await self.provider(chain).get_account_info(mint)
        return mint if account else None

    async def get_wrapped_native(self, chain: ChainRef) -> str:
        return WRAPPED_SOL_MINT

    async def resolve_transfer_target(
        self, token_id: TokenId, recipient: str, chain: ChainRef
    ) -> TransferTarget:
        """Tokens are credited to the recipient's associated token account."""
        chain_name = self.registry.to_chain_name(chain)
        mint = await self.must_get_foreign_asset(token_id, chain_name)
        account = associated_token_address(recipient, mint)
        logger.debug(
            f"Associated token account of {recipient} for {mint}: {account}",
            context=LogContext(
                component="solana_context",
                operation="resolve_transfer_target",
                chain=chain_name,
                token=str(token_id),
            ),
        )
        return TransferTarget(recipient=account)

"""
Sui chain context.

Accounts and objects are 32-byte ids written as ``0x`` hex. Tokens are coin
types (``0x2::sui::SUI``); their 32-byte bridge address is assigned by the
token bridge's registry at attestation, so converting between the two is a
query against the bridge.
"""

from ...bridge_types import ChainRef, ContextKind
from ...codec.address import BytesLike, canonical, hex_account, to_hex
from ...errors import AddressFormatError, AssetNotRegistered
from ...logging import LogContext, get_logger
from ..base import ChainContext

logger = get_logger(__name__)

SUI_COIN_TYPE = "0x2::sui::SUI"


def normalize_coin_type(coin_type: str) -> str:
    """Expand the address part of a coin type to its full 32-byte form."""
    address, sep, rest = coin_type.partition("::")
    if not sep or not rest:
        raise AddressFormatError(f"Invalid Sui coin type {coin_type!r}", address=coin_type)
    return f"{to_hex(hex_account(address))}::{rest}"


class SuiContext(ChainContext):
    """Backend for Sui."""

    kind = ContextKind.SUI
    token_interface = "Coin"

    def format_address(self, address: str) -> bytes:
        return hex_account(address)

    def parse_address(self, address: BytesLike) -> str:
        return to_hex(canonical(address))

    async def format_asset_address(self, address: str) -> bytes:
        chain = self.home_chain()
        coin_type = normalize_coin_type(address)
        result = await self.provider(chain).query(
            self.bridge_call(chain, "getTokenAddress", coin_type)
        )
        if not result:
            raise AssetNotRegistered(coin_type, chain)
        return canonical(result)

    async def parse_asset_address(self, address: BytesLike) -> str:
        chain = self.home_chain()
        token_address = canonical(address)
        coin_type = await self.provider(chain).query(
            self.bridge_call(chain, "getCoinType", token_address)
        )
        if not coin_type:
            raise AssetNotRegistered(to_hex(token_address), chain)
        logger.debug(
            f"Coin type of {to_hex(token_address)}: {coin_type}",
            context=LogContext(
                component="sui_context", operation="parse_asset_address", chain=chain
            ),
        )
        return str(coin_type)

    def is_same_address(self, left: str, right: str) -> bool:
        return hex_account(left) == hex_account(right)

    async def get_wrapped_native(self, chain: ChainRef) -> str:
        return SUI_COIN_TYPE

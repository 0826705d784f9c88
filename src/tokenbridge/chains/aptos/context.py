"""
Aptos chain context.

Accounts are 32-byte ``0x`` hex addresses. A coin native to Aptos is
identified on the bridge by the SHA3-256 hash of its fully qualified type
(``0x1::aptos_coin::AptosCoin``); the hash cannot be inverted, so the type of
a bridge address is looked up in the token bridge.
"""

import hashlib

from ...bridge_types import ChainRef, ContextKind
from ...codec.address import BytesLike, canonical, hex_account, to_hex
from ...errors import AddressFormatError, AssetNotRegistered
from ..base import ChainContext

APTOS_COIN_TYPE = "0x1::aptos_coin::AptosCoin"


def coin_type_hash(coin_type: str) -> bytes:
    """Bridge address of an Aptos-native coin type."""
    if "::" not in coin_type:
        raise AddressFormatError(f"Invalid Aptos coin type {coin_type!r}", address=coin_type)
    return hashlib.sha3_256(coin_type.encode()).digest()


class AptosContext(ChainContext):
    """Backend for Aptos."""

    kind = ContextKind.APTOS
    token_interface = "Coin"

    def format_address(self, address: str) -> bytes:
        return hex_account(address)

    def parse_address(self, address: BytesLike) -> str:
        return to_hex(canonical(address))

    async def format_asset_address(self, address: str) -> bytes:
        return coin_type_hash(address)

    async def parse_asset_address(self, address: BytesLike) -> str:
        chain = self.home_chain()
        token_address = canonical(address)
        coin_type = await self.provider(chain).query(
            self.bridge_call(chain, "getTypeInfo", token_address)
        )
        if not coin_type:
            raise AssetNotRegistered(to_hex(token_address), chain)
        return str(coin_type)

    def is_same_address(self, left: str, right: str) -> bool:
        return hex_account(left) == hex_account(right)

    async def get_wrapped_native(self, chain: ChainRef) -> str:
        return APTOS_COIN_TYPE

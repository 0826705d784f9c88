"""Unit tests for the Solana chain context."""

import pytest
from solders.pubkey import Pubkey
from web3 import Web3

from tokenbridge.bridge_types import TokenId
from tokenbridge.chains.solana import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    WRAPPED_SOL_MINT,
    associated_token_address,
    wrapped_mint_address,
)
from tokenbridge.codec.address import zero_pad
from tokenbridge.errors import AddressFormatError, AssetNotRegistered

from bridge_fakes import SOLANA_BRIDGE, SOLANA_WALLET, USDC

USDC_ORIGIN = zero_pad(Web3.to_bytes(hexstr=USDC))


@pytest.fixture
def solana(registry):
    return registry.get_context("solana")


class TestAddressCodec:
    """Test base58 public key conversion."""

    def test_format_is_raw_key(self, solana):
        assert solana.format_address(SOLANA_WALLET) == bytes([5] * 32)

    def test_round_trip(self, solana):
        assert solana.parse_address(solana.format_address(SOLANA_WALLET)) == SOLANA_WALLET

    @pytest.mark.parametrize("address", ["", "0OIl", "not-base58!"])
    def test_format_rejects_invalid(self, solana, address):
        with pytest.raises(AddressFormatError):
            solana.format_address(address)

    def test_parse_rejects_wrong_length(self, solana):
        with pytest.raises(AddressFormatError):
            solana.parse_address(b"\x01" * 33)


class TestDerivedAddresses:
    """Test program-derived addresses."""

    def test_associated_token_address(self):
        mint = str(Pubkey(bytes([9] * 32)))
        expected, _ = Pubkey.find_program_address(
            [bytes([5] * 32), bytes(TOKEN_PROGRAM_ID), bytes([9] * 32)],
            ASSOCIATED_TOKEN_PROGRAM_ID,
        )
        assert associated_token_address(SOLANA_WALLET, mint) == str(expected)

    def test_wrapped_mint_depends_on_origin(self):
        first = wrapped_mint_address(SOLANA_BRIDGE, 2, USDC_ORIGIN)
        again = wrapped_mint_address(SOLANA_BRIDGE, 2, USDC_ORIGIN)
        other_chain = wrapped_mint_address(SOLANA_BRIDGE, 5, USDC_ORIGIN)
        assert first == again
        assert first != other_chain


class TestForeignAsset:
    """Test wrapped mint resolution."""

    @pytest.mark.asyncio
    async def test_existing_mint(self, solana, providers):
        mint = wrapped_mint_address(SOLANA_BRIDGE, 2, USDC_ORIGIN)
        providers["solana"].accounts[mint] = {"owner": str(TOKEN_PROGRAM_ID)}

        assert await solana.get_foreign_asset(TokenId("ethereum", USDC), "solana") == mint

    @pytest.mark.asyncio
    async def test_missing_mint(self, solana, journal):
        assert await solana.get_foreign_asset(TokenId("ethereum", USDC), "solana") is None
        assert journal == [("account", wrapped_mint_address(SOLANA_BRIDGE, 2, USDC_ORIGIN))]

    @pytest.mark.asyncio
    async def test_wrapped_native(self, solana):
        assert await solana.get_wrapped_native("solana") == WRAPPED_SOL_MINT


class TestTransferTarget:
    """Test recipient resolution for inbound transfers."""

    @pytest.mark.asyncio
    async def test_recipient_is_associated_token_account(self, solana, providers):
        mint = wrapped_mint_address(SOLANA_BRIDGE, 2, USDC_ORIGIN)
        providers["solana"].accounts[mint] = {"owner": str(TOKEN_PROGRAM_ID)}

        target = await solana.resolve_transfer_target(
            TokenId("ethereum", USDC), SOLANA_WALLET, "solana"
        )

        assert target.recipient == associated_token_address(SOLANA_WALLET, mint)
        assert target.payload is None

    @pytest.mark.asyncio
    async def test_unattested_token(self, solana):
        with pytest.raises(AssetNotRegistered):
            await solana.resolve_transfer_target(
                TokenId("ethereum", USDC), SOLANA_WALLET, "solana"
            )

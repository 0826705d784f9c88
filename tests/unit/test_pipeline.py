"""Unit tests for the transfer pipeline."""

import pytest
from web3 import Web3

from tokenbridge.bridge_types import NATIVE, TokenId
from tokenbridge.chains.sei import translator_payload
from tokenbridge.chains.solana import associated_token_address, wrapped_mint_address
from tokenbridge.codec.address import zero_pad
from tokenbridge.codec.amount import MAX_UINT128, MAX_UINT256
from tokenbridge.codec.vaa import parse_vaa
from tokenbridge.errors import (
    InsufficientAllowance,
    NoSignerConfigured,
    SimulationFailed,
    ValidationError,
)
from tokenbridge.pipeline import create_nonce, to_amount

from bridge_fakes import (
    ALICE,
    BOB,
    ETH_BRIDGE,
    ETH_RELAYER,
    POLYGON_BRIDGE,
    SEI_BRIDGE,
    SEI_CORE,
    SEI_TRANSLATOR,
    SEI_WALLET,
    SOLANA_BRIDGE,
    SOLANA_WALLET,
    USDC,
    WETH,
    FakeSigner,
    build_vaa,
)

USDC_TOKEN = TokenId("ethereum", USDC)


class AllowanceLedger:
    """ERC-20 allowance state shared by the fake provider and signer."""

    def __init__(self, allowance: int = 0):
        self.allowance = allowance

    def query(self, call):
        return self.allowance

    def on_send(self, call):
        if call.method == "approve":
            self.allowance = call.args[1]


@pytest.fixture
def ledger():
    return AllowanceLedger()


@pytest.fixture
def signer(journal, ledger):
    return FakeSigner(ALICE, journal=journal, on_send=ledger.on_send)


@pytest.fixture
def eth(registry, providers, signer, ledger):
    providers["ethereum"].responses.update(
        {"decimals": 6, "allowance": ledger.query, "WETH": WETH}
    )
    registry.register_signer("ethereum", signer)
    return registry.get_context("ethereum")


class TestHelpers:
    """Test amount and nonce helpers."""

    def test_nonce_is_uint32(self):
        nonces = {create_nonce() for _ in range(20)}
        assert all(0 <= nonce < 2**32 for nonce in nonces)
        assert len(nonces) > 1

    @pytest.mark.parametrize("value,expected", [(500, 500), ("500", 500), (" 42 ", 42), (0, 0)])
    def test_to_amount(self, value, expected):
        assert to_amount(value) == expected

    @pytest.mark.parametrize("value", ["5e2", "-1", "1.5", "", -1, 2**256])
    def test_to_amount_rejects(self, value):
        with pytest.raises(ValidationError):
            to_amount(value)


class TestApprove:
    """Test approval handling."""

    @pytest.mark.asyncio
    async def test_approves_when_allowance_is_short(self, eth, signer):
        receipt = await eth.approve("ethereum", ETH_BRIDGE, USDC, 500)

        assert receipt is not None
        approval = signer.sent[0]
        assert approval.contract == USDC
        assert approval.method == "approve"
        assert approval.args == (ETH_BRIDGE, 500)
        assert approval.sender == ALICE

    @pytest.mark.asyncio
    async def test_skips_when_allowance_covers(self, eth, signer, ledger):
        ledger.allowance = 500
        assert await eth.approve("ethereum", ETH_BRIDGE, USDC, 500) is None
        assert signer.sent == []

    @pytest.mark.asyncio
    async def test_default_amount_is_unbounded(self, eth, signer):
        await eth.approve("ethereum", ETH_BRIDGE, USDC)
        assert signer.sent[0].args == (ETH_BRIDGE, MAX_UINT256)

    @pytest.mark.asyncio
    async def test_unbounded_approvals_setting(self, config, eth, signer):
        config.unbounded_approvals = True
        await eth.approve("ethereum", ETH_BRIDGE, USDC, 500)
        assert signer.sent[0].args == (ETH_BRIDGE, MAX_UINT256)

    @pytest.mark.asyncio
    async def test_native_denom_needs_no_approval(self, registry, providers, journal):
        sei = registry.get_context("sei")
        registry.register_signer("sei", FakeSigner(SEI_WALLET, journal=journal))
        assert await sei.approve("sei", SEI_TRANSLATOR, "usei", 5) is None
        assert journal == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount,expected", [(500, 400), (None, MAX_UINT128 - 100)])
    async def test_cw20_increase_tops_up_existing_allowance(
        self, registry, providers, journal, amount, expected
    ):
        providers["sei"].responses["allowance"] = 100
        signer = FakeSigner(SEI_WALLET, journal=journal)
        registry.register_signer("sei", signer)

        await registry.get_context("sei").approve("sei", SEI_BRIDGE, SEI_CORE, amount)

        increase = signer.sent[0]
        assert increase.method == "increase_allowance"
        assert increase.args == (SEI_BRIDGE, expected)
        assert 100 + increase.args[1] <= MAX_UINT128

    @pytest.mark.asyncio
    async def test_cw20_covered_allowance_is_not_increased(self, registry, providers, journal):
        providers["sei"].responses["allowance"] = 500
        signer = FakeSigner(SEI_WALLET, journal=journal)
        registry.register_signer("sei", signer)

        assert await registry.get_context("sei").approve("sei", SEI_BRIDGE, SEI_CORE, 500) is None
        assert signer.sent == []

    @pytest.mark.asyncio
    async def test_requires_signer(self, registry, journal):
        with pytest.raises(NoSignerConfigured):
            await registry.get_context("ethereum").approve("ethereum", ETH_BRIDGE, USDC, 500)
        assert journal == []


class TestSend:
    """Test token bridge transfers."""

    @pytest.mark.asyncio
    async def test_approval_precedes_transfer(self, eth, signer, journal):
        receipt = await eth.send(USDC_TOKEN, 500, "ethereum", ALICE, "polygon", BOB)

        sends = [entry for entry in journal if entry[0] == "send"]
        assert sends == [("send", "approve"), ("send", "transferTokens")]
        assert journal.index(("send", "approve")) < journal.index(("simulate", "transferTokens"))
        assert signer.sent[0].args == (ETH_BRIDGE, 500)
        assert receipt.tx_hash == "0x" + f"{2:064x}"

        transfer = signer.sent[1]
        assert transfer.contract == ETH_BRIDGE
        assert transfer.sender == ALICE
        assert transfer.args[:5] == (USDC, 500, 5, zero_pad(Web3.to_bytes(hexstr=BOB)), 0)
        assert 0 <= transfer.args[5] < 2**32

    @pytest.mark.asyncio
    async def test_existing_allowance_sends_only_transfer(self, eth, signer, ledger):
        ledger.allowance = 500
        await eth.send(USDC_TOKEN, "500", "ethereum", ALICE, "polygon", BOB)
        assert [call.method for call in signer.sent] == ["transferTokens"]

    @pytest.mark.asyncio
    async def test_requires_signer_before_network(self, registry, journal):
        context = registry.get_context("ethereum")
        with pytest.raises(NoSignerConfigured) as exc_info:
            await context.send(USDC_TOKEN, 500, "ethereum", ALICE, "polygon", BOB)
        assert exc_info.value.context.chain == "ethereum"
        assert journal == []

    @pytest.mark.asyncio
    async def test_invalid_amount_before_network(self, eth, journal):
        with pytest.raises(ValidationError):
            await eth.send(USDC_TOKEN, "5e2", "ethereum", ALICE, "polygon", BOB)
        assert journal == []

    @pytest.mark.asyncio
    async def test_token_must_be_token_id(self, eth):
        with pytest.raises(ValidationError):
            await eth.send(USDC, 500, "ethereum", ALICE, "polygon", BOB)

    @pytest.mark.asyncio
    async def test_amount_is_truncated_to_wire_precision(self, eth, providers, signer, ledger):
        providers["ethereum"].responses["decimals"] = 18
        ledger.allowance = MAX_UINT256

        await eth.send(USDC_TOKEN, 123_456_789_123_456_789, "ethereum", ALICE, "polygon", BOB)

        assert signer.sent[0].args[1] == 123_456_780_000_000_000

    @pytest.mark.asyncio
    async def test_native_transfer(self, eth, signer, journal):
        await eth.send(NATIVE, 10**18, "ethereum", ALICE, "polygon", BOB)

        transfer = signer.sent[0]
        assert transfer.method == "wrapAndTransferETH"
        assert transfer.value == 10**18
        assert ("query", "allowance") not in journal
        assert ("query", "decimals") not in journal

    @pytest.mark.asyncio
    async def test_chain_ids_are_accepted(self, eth, signer, ledger):
        ledger.allowance = 500
        await eth.send(USDC_TOKEN, 500, 2, ALICE, 5, BOB)
        assert signer.sent[0].args[2] == 5


class TestPrepareSend:
    """Test transfer preparation."""

    @pytest.mark.asyncio
    async def test_simulated_transaction(self, eth, ledger, signer):
        ledger.allowance = 500
        prepared = await eth.prepare_send(USDC_TOKEN, 500, "ethereum", ALICE, "polygon", BOB)

        assert prepared.simulated
        assert prepared.chain == "ethereum"
        assert prepared.call.method == "transferTokens"
        assert signer.sent == []

    @pytest.mark.asyncio
    async def test_insufficient_allowance(self, eth, ledger, journal):
        ledger.allowance = 499
        with pytest.raises(InsufficientAllowance) as exc_info:
            await eth.prepare_send(USDC_TOKEN, 500, "ethereum", ALICE, "polygon", BOB)

        error = exc_info.value
        assert (error.allowance, error.required, error.spender) == (499, 500, ETH_BRIDGE)
        assert not any(entry[0] == "simulate" for entry in journal)

    @pytest.mark.asyncio
    async def test_simulation_failure_carries_reason(self, eth, providers, ledger, signer):
        ledger.allowance = 500
        revert = ValueError("execution reverted: TokenBridge: transfer amount too small")
        providers["ethereum"].simulate_error = revert

        with pytest.raises(SimulationFailed) as exc_info:
            await eth.send(USDC_TOKEN, 500, "ethereum", ALICE, "polygon", BOB)

        assert "transfer amount too small" in exc_info.value.revert_reason
        assert exc_info.value.__cause__ is revert
        assert exc_info.value.context.chain == "ethereum"
        assert signer.sent == []

    @pytest.mark.asyncio
    async def test_sei_recipient_goes_through_translator(self, eth, ledger):
        ledger.allowance = 500
        prepared = await eth.prepare_send(USDC_TOKEN, 500, "ethereum", ALICE, "sei", SEI_WALLET)

        call = prepared.call
        assert call.method == "transferTokensWithPayload"
        assert call.args[2] == 32
        assert call.args[3] == bytes([3] * 32)
        assert call.args[5] == translator_payload(SEI_WALLET)

    @pytest.mark.asyncio
    async def test_solana_recipient_is_token_account(self, eth, providers, ledger):
        ledger.allowance = 500
        origin = zero_pad(Web3.to_bytes(hexstr=USDC))
        mint = wrapped_mint_address(SOLANA_BRIDGE, 2, origin)
        providers["solana"].accounts[mint] = {"lamports": 1}

        prepared = await eth.prepare_send(
            USDC_TOKEN, 500, "ethereum", ALICE, "solana", SOLANA_WALLET
        )

        registry_solana = eth.registry.get_context("solana")
        expected = registry_solana.format_address(associated_token_address(SOLANA_WALLET, mint))
        assert prepared.call.args[3] == expected
        assert prepared.call.method == "transferTokens"


class TestSendWithPayload:
    """Test transfers carrying an application payload."""

    @pytest.mark.asyncio
    async def test_submitted_without_simulation(self, eth, signer, journal):
        await eth.send_with_payload(USDC_TOKEN, 500, "ethereum", ALICE, "polygon", BOB, b"hello")

        assert not any(entry[0] == "simulate" for entry in journal)
        transfer = signer.sent[-1]
        assert transfer.method == "transferTokensWithPayload"
        assert transfer.args[-1] == b"hello"
        assert [call.method for call in signer.sent] == ["approve", "transferTokensWithPayload"]

    @pytest.mark.asyncio
    async def test_native_with_payload(self, eth, signer):
        await eth.send_with_payload(NATIVE, 5, "ethereum", ALICE, "polygon", BOB, "0x0102")
        assert signer.sent[0].method == "wrapAndTransferETHWithPayload"
        assert signer.sent[0].args[-1] == b"\x01\x02"

    @pytest.mark.asyncio
    async def test_requires_signer(self, registry, journal):
        with pytest.raises(NoSignerConfigured):
            await registry.get_context("ethereum").send_with_payload(
                USDC_TOKEN, 500, "ethereum", ALICE, "polygon", BOB, b""
            )
        assert journal == []


class TestSendWithRelay:
    """Test transfers through the token bridge relayer."""

    @pytest.mark.asyncio
    async def test_relayer_is_approved_and_called(self, eth, signer):
        await eth.send_with_relay(USDC_TOKEN, 500, 10, "ethereum", ALICE, "polygon", BOB)

        approval, transfer = signer.sent
        assert approval.args == (ETH_RELAYER, 500)
        assert transfer.contract == ETH_RELAYER
        assert transfer.method == "transferTokensWithRelay"
        assert transfer.args == (USDC, 500, 10, 5, zero_pad(Web3.to_bytes(hexstr=BOB)), 0)

    @pytest.mark.asyncio
    async def test_prepare_checks_relayer_allowance(self, eth, ledger):
        with pytest.raises(InsufficientAllowance) as exc_info:
            await eth.prepare_send_with_relay(
                USDC_TOKEN, 500, 0, "ethereum", ALICE, "polygon", BOB
            )
        assert exc_info.value.spender == ETH_RELAYER

    @pytest.mark.asyncio
    async def test_native_relay(self, eth, signer):
        await eth.send_with_relay(NATIVE, 10**18, 0, "ethereum", ALICE, "polygon", BOB)
        assert signer.sent[0].method == "wrapAndTransferEthWithRelay"
        assert signer.sent[0].value == 10**18


class TestRedeem:
    """Test redemption of signed transfers."""

    @pytest.mark.asyncio
    async def test_prepare_redeem(self, registry, providers):
        vaa = build_vaa()
        context = registry.get_context("polygon")

        prepared = await context.prepare_redeem("polygon", "0x" + vaa.hex(), BOB)

        assert prepared.call.contract == POLYGON_BRIDGE
        assert prepared.call.method == "completeTransfer"
        assert prepared.call.args == (vaa,)
        assert prepared.call.sender == BOB
        assert providers["polygon"].simulations == [prepared.call]

    @pytest.mark.asyncio
    async def test_redeem_uses_signer_address(self, registry, journal):
        signer = FakeSigner(BOB, journal=journal)
        registry.register_signer("polygon", signer)

        await registry.get_context("polygon").redeem("polygon", build_vaa())

        assert journal == [("simulate", "completeTransfer"), ("send", "completeTransfer")]
        assert signer.sent[0].sender == BOB

    @pytest.mark.asyncio
    async def test_redeem_requires_signer(self, registry, journal):
        with pytest.raises(NoSignerConfigured):
            await registry.get_context("polygon").redeem("polygon", build_vaa())
        assert journal == []

    @pytest.mark.asyncio
    async def test_is_transfer_completed(self, registry, providers):
        vaa = build_vaa()
        providers["polygon"].responses["isTransferCompleted"] = True

        assert await registry.get_context("polygon").is_transfer_completed("polygon", vaa)
        assert providers["polygon"].queries[0].args == (parse_vaa(vaa).digest,)

"""Tests for the tokenbridge error hierarchy."""

import pytest

from tokenbridge.bridge_types import TokenId
from tokenbridge.errors import (
    AddressFormatError,
    AmountOverflowError,
    AssetNotRegistered,
    BridgeError,
    ChainNotSupported,
    ConfigurationError,
    ContractNotConfigured,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    FatalError,
    InsufficientAllowance,
    MalformedPayloadError,
    NoSignerConfigured,
    ProviderNotConfigured,
    ReceiptNotFound,
    RetryableError,
    SimulationFailed,
    TokenBridgeError,
    TransactionError,
    UnrecognizedPayloadDiscriminant,
    ValidationError,
    create_configuration_error,
    create_validation_error,
)


class TestTokenBridgeError:
    """Test base error functionality."""

    def test_base_error_creation(self):
        """Test base error creation."""
        error = TokenBridgeError("Test error message")

        assert error.message == "Test error message"
        assert error.error_code is None
        assert error.severity == ErrorSeverity.MEDIUM
        assert error.category == ErrorCategory.SYSTEM
        assert not error.retryable

    def test_string_includes_context(self):
        """Test string rendering with chain and token."""
        error = TokenBridgeError(
            "failed",
            error_code="E1",
            context=ErrorContext(chain="solana", token="ethereum:0xabc"),
        )
        text = str(error)
        assert text.startswith("TokenBridgeError: failed")
        assert "Code: E1" in text
        assert "Chain: solana" in text
        assert "Token: ethereum:0xabc" in text

    def test_to_dict(self):
        """Test dictionary conversion."""
        cause = ValueError("root")
        data = TokenBridgeError("wrapped", cause=cause).to_dict()
        assert data["type"] == "TokenBridgeError"
        assert data["cause"] == "root"
        assert data["context"]["chain"] is None


class TestHierarchy:
    """Test where each error sits in the hierarchy."""

    @pytest.mark.parametrize(
        "error,parent",
        [
            (AddressFormatError("bad"), ValidationError),
            (AmountOverflowError("big", amount=2**256), ValidationError),
            (MalformedPayloadError("short"), ValidationError),
            (UnrecognizedPayloadDiscriminant(9), ValidationError),
            (ChainNotSupported("dogechain"), ConfigurationError),
            (ContractNotConfigured("polygon", "core"), ConfigurationError),
            (ProviderNotConfigured("sui"), ConfigurationError),
            (AssetNotRegistered(TokenId("ethereum", "0xabc"), "solana"), BridgeError),
            (SimulationFailed("reverted"), TransactionError),
            (InsufficientAllowance(0, 500, "0xbridge"), TransactionError),
            (ReceiptNotFound("0x01", "ethereum"), RetryableError),
            (NoSignerConfigured("ethereum"), FatalError),
        ],
    )
    def test_parents(self, error, parent):
        assert isinstance(error, parent)
        assert isinstance(error, TokenBridgeError)

    def test_unrecognized_discriminant(self):
        error = UnrecognizedPayloadDiscriminant(9)
        assert error.discriminant == 9

    def test_chain_context_defaults(self):
        assert NoSignerConfigured("sei").context.chain == "sei"
        assert ChainNotSupported(999).context.chain == "999"
        asset_error = AssetNotRegistered(TokenId("ethereum", "0xabc"), "solana")
        assert asset_error.context.token == "ethereum:0xabc"

    def test_fatal_and_retryable_flags(self):
        assert NoSignerConfigured("ethereum").severity == ErrorSeverity.CRITICAL
        assert not NoSignerConfigured("ethereum").retryable
        assert ReceiptNotFound("0x01", "ethereum").retryable


class TestTransactionErrors:
    """Test transaction error details."""

    def test_simulation_failed(self):
        error = SimulationFailed("execution reverted", transaction_type="send")
        assert error.revert_reason == "execution reverted"
        assert error.error_code == "SIMULATION_FAILED"
        assert error.to_dict()["transaction_type"] == "send"

    def test_insufficient_allowance(self):
        error = InsufficientAllowance(10, 500, "0xbridge")
        assert (error.allowance, error.required, error.spender) == (10, 500, "0xbridge")
        assert "below 500" in error.message


class TestErrorFactories:
    """Test error factory helpers."""

    def test_create_validation_error(self):
        error = create_validation_error("amount", -1, "uint256")
        assert isinstance(error, ValidationError)
        assert "amount" in error.message

    def test_create_configuration_error(self):
        error = create_configuration_error("network", "MOONNET")
        assert isinstance(error, ConfigurationError)

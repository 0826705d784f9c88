"""tokenbridge error handling.

Exception hierarchy shared by the codecs, chain contexts and the transfer
pipeline.
"""

from .exceptions import (
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

__all__ = [
    # Base
    "TokenBridgeError",
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorContext",
    # Validation / codec
    "ValidationError",
    "AddressFormatError",
    "AmountOverflowError",
    "MalformedPayloadError",
    "UnrecognizedPayloadDiscriminant",
    # Configuration
    "ConfigurationError",
    "ChainNotSupported",
    "ContractNotConfigured",
    "ProviderNotConfigured",
    # Bridge / transactions
    "BridgeError",
    "AssetNotRegistered",
    "TransactionError",
    "SimulationFailed",
    "InsufficientAllowance",
    "RetryableError",
    "ReceiptNotFound",
    "FatalError",
    "NoSignerConfigured",
    # Helpers
    "create_validation_error",
    "create_configuration_error",
]

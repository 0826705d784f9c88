"""Exception hierarchy for tokenbridge.

This module defines the exception hierarchy used across the bridge core,
providing structured error handling and categorization. Every error carries
an ``ErrorContext`` naming the chain and token the failing operation was
working on.
"""

import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories."""

    VALIDATION = "validation"
    CODEC = "codec"
    NETWORK = "network"
    TRANSACTION = "transaction"
    CHAIN = "chain"
    BRIDGE = "bridge"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Context information for an error."""

    timestamp: float = field(default_factory=time.time)
    chain: Optional[str] = None
    token: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "timestamp": self.timestamp,
            "chain": self.chain,
            "token": self.token,
            "component": self.component,
            "operation": self.operation,
            "metadata": self.metadata,
        }


class TokenBridgeError(Exception):
    """Base exception for all tokenbridge errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        retryable: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.context = context or ErrorContext()
        self.cause = cause
        self.retryable = retryable
        self.metadata = metadata or {}
        self.timestamp = time.time()
        self.traceback = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "severity": self.severity.value,
            "category": self.category.value,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
            "retryable": self.retryable,
            "metadata": self.metadata,
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"{self.__class__.__name__}: {self.message}"]

        if self.error_code:
            parts.append(f"Code: {self.error_code}")

        if self.context.chain:
            parts.append(f"Chain: {self.context.chain}")

        if self.context.token:
            parts.append(f"Token: {self.context.token}")

        if self.retryable:
            parts.append("Retryable: Yes")

        return " | ".join(parts)


class ValidationError(TokenBridgeError):
    """Validation error."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[Any] = None,
        **kwargs,
    ):
        kwargs.setdefault("category", ErrorCategory.VALIDATION)
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.expected = expected

    def to_dict(self) -> Dict[str, Any]:
        """Convert validation error to dictionary."""
        data = super().to_dict()
        data.update(
            {
                "field": self.field,
                "value": str(self.value) if self.value is not None else None,
                "expected": str(self.expected) if self.expected is not None else None,
            }
        )
        return data


class AddressFormatError(ValidationError):
    """An address could not be converted to or from its canonical form."""

    def __init__(self, message: str, address: Any = None, **kwargs):
        kwargs.setdefault("error_code", "ADDRESS_FORMAT")
        super().__init__(message, field="address", value=address, **kwargs)
        self.address = address


class AmountOverflowError(ValidationError):
    """An amount does not fit the fixed-width integer it must be encoded in."""

    def __init__(self, message: str, amount: Any = None, bits: int = 256, **kwargs):
        kwargs.setdefault("error_code", "AMOUNT_OVERFLOW")
        super().__init__(
            message, field="amount", value=amount, expected=f"uint{bits}", **kwargs
        )
        self.amount = amount
        self.bits = bits


class MalformedPayloadError(ValidationError):
    """A payload or attestation is shorter than its declared layout."""

    def __init__(
        self,
        message: str,
        expected_length: Optional[int] = None,
        actual_length: Optional[int] = None,
        **kwargs,
    ):
        kwargs.setdefault("error_code", "MALFORMED_PAYLOAD")
        kwargs.setdefault("category", ErrorCategory.CODEC)
        super().__init__(
            message,
            field="payload",
            value=actual_length,
            expected=expected_length,
            **kwargs,
        )
        self.expected_length = expected_length
        self.actual_length = actual_length


class UnrecognizedPayloadDiscriminant(ValidationError):
    """The leading payload byte names no known payload shape."""

    def __init__(self, discriminant: int, message: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", "UNRECOGNIZED_PAYLOAD")
        kwargs.setdefault("category", ErrorCategory.CODEC)
        super().__init__(
            message or f"Unrecognized payload discriminant {discriminant}",
            field="payload_id",
            value=discriminant,
            expected="1 or 3",
            **kwargs,
        )
        self.discriminant = discriminant


class ConfigurationError(TokenBridgeError):
    """Configuration error."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs,
    ):
        kwargs.setdefault("category", ErrorCategory.CONFIGURATION)
        super().__init__(message, **kwargs)
        self.config_key = config_key
        self.config_value = config_value

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration error to dictionary."""
        data = super().to_dict()
        data.update(
            {
                "config_key": self.config_key,
                "config_value": str(self.config_value)
                if self.config_value is not None
                else None,
            }
        )
        return data


class ChainNotSupported(ConfigurationError):
    """The chain name or id is not part of the loaded configuration."""

    def __init__(self, chain: Any, **kwargs):
        kwargs.setdefault("error_code", "CHAIN_NOT_SUPPORTED")
        kwargs.setdefault("context", ErrorContext(chain=str(chain)))
        super().__init__(
            f"Chain {chain!r} is not configured", config_key="chains", config_value=chain, **kwargs
        )
        self.chain = chain


class ContractNotConfigured(ConfigurationError):
    """A chain has no address for a contract the operation needs."""

    def __init__(self, chain: str, contract: str, **kwargs):
        kwargs.setdefault("error_code", "CONTRACT_NOT_CONFIGURED")
        kwargs.setdefault("context", ErrorContext(chain=chain))
        super().__init__(
            f"No {contract} contract configured for {chain}",
            config_key=f"chains.{chain}.contracts.{contract}",
            **kwargs,
        )
        self.chain = chain
        self.contract = contract


class ProviderNotConfigured(ConfigurationError):
    """No RPC provider was registered for a chain."""

    def __init__(self, chain: str, **kwargs):
        kwargs.setdefault("error_code", "PROVIDER_NOT_CONFIGURED")
        kwargs.setdefault("context", ErrorContext(chain=chain))
        super().__init__(
            f"No provider for {chain}", config_key=f"rpcs.{chain}", **kwargs
        )
        self.chain = chain


class BridgeError(TokenBridgeError):
    """Bridge-level error."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.BRIDGE)
        super().__init__(message, **kwargs)


class AssetNotRegistered(BridgeError):
    """The token was never bridged to the requested chain."""

    def __init__(self, token: Any, chain: str, **kwargs):
        kwargs.setdefault("error_code", "ASSET_NOT_REGISTERED")
        kwargs.setdefault("context", ErrorContext(chain=chain, token=str(token)))
        super().__init__(f"Token {token} is not registered on {chain}", **kwargs)
        self.token = token
        self.chain = chain


class TransactionError(TokenBridgeError):
    """Transaction error."""

    def __init__(
        self,
        message: str,
        transaction_id: Optional[str] = None,
        transaction_type: Optional[str] = None,
        **kwargs,
    ):
        kwargs.setdefault("category", ErrorCategory.TRANSACTION)
        super().__init__(message, **kwargs)
        self.transaction_id = transaction_id
        self.transaction_type = transaction_type

    def to_dict(self) -> Dict[str, Any]:
        """Convert transaction error to dictionary."""
        data = super().to_dict()
        data.update(
            {
                "transaction_id": self.transaction_id,
                "transaction_type": self.transaction_type,
            }
        )
        return data


class SimulationFailed(TransactionError):
    """The dry-run of a transaction reverted."""

    def __init__(self, revert_reason: str, transaction_type: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", "SIMULATION_FAILED")
        super().__init__(revert_reason, transaction_type=transaction_type, **kwargs)
        self.revert_reason = revert_reason


class InsufficientAllowance(TransactionError):
    """The spender's allowance is below the transfer amount."""

    def __init__(self, allowance: int, required: int, spender: str, **kwargs):
        kwargs.setdefault("error_code", "INSUFFICIENT_ALLOWANCE")
        super().__init__(
            f"Allowance {allowance} for {spender} is below {required}",
            transaction_type="approve",
            **kwargs,
        )
        self.allowance = allowance
        self.required = required
        self.spender = spender


class RetryableError(TokenBridgeError):
    """Retryable error."""

    def __init__(
        self,
        message: str,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        **kwargs,
    ):
        super().__init__(message, retryable=True, **kwargs)
        self.max_retries = max_retries
        self.retry_delay = retry_delay


class ReceiptNotFound(RetryableError):
    """The queried chain does not know the transaction (yet)."""

    def __init__(self, tx_hash: str, chain: str, **kwargs):
        kwargs.setdefault("error_code", "RECEIPT_NOT_FOUND")
        kwargs.setdefault("category", ErrorCategory.CHAIN)
        kwargs.setdefault("context", ErrorContext(chain=chain))
        super().__init__(f"No receipt for {tx_hash} on {chain}", **kwargs)
        self.tx_hash = tx_hash
        self.chain = chain


class FatalError(TokenBridgeError):
    """Fatal error that cannot be recovered from."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message, severity=ErrorSeverity.CRITICAL, retryable=False, **kwargs
        )


class NoSignerConfigured(FatalError):
    """A state-changing operation was requested for a chain without a signer."""

    def __init__(self, chain: str, **kwargs):
        kwargs.setdefault("error_code", "NO_SIGNER")
        kwargs.setdefault("context", ErrorContext(chain=chain))
        super().__init__(f"No signer for {chain}", **kwargs)
        self.chain = chain


def create_validation_error(
    field: str, value: Any, expected: Any, message: Optional[str] = None
) -> ValidationError:
    """Create a validation error."""
    if message is None:
        message = f"Invalid value for field '{field}': expected {expected}, got {value}"

    return ValidationError(message=message, field=field, value=value, expected=expected)


def create_configuration_error(
    config_key: str, config_value: Any = None, message: Optional[str] = None
) -> ConfigurationError:
    """Create a configuration error."""
    if message is None:
        message = f"Invalid configuration for '{config_key}': {config_value!r}"

    return ConfigurationError(
        message=message, config_key=config_key, config_value=config_value
    )

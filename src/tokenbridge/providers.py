"""
Collaborator interfaces for chain access.

The bridge core never talks to a node directly. Each chain is served by a
``Provider`` (read-only queries, dry-runs and receipt lookup) and, for
state-changing operations, a ``Signer``. Contract invocations are described
by a chain-neutral ``ContractCall`` which the provider or signer translates
into its ecosystem's transaction format.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ContractCall:
    """A contract invocation described independently of any chain SDK.

    ``interface`` names the contract interface the method belongs to
    (``"TokenBridge"``, ``"TokenBridgeRelayer"``, ``"ERC20"``, ...), so an
    adapter can pick the matching ABI or module. ``value`` is the amount of
    gas currency attached to the call.
    """

    chain: str
    contract: str
    interface: str
    method: str
    args: Tuple[Any, ...] = ()
    value: int = 0
    sender: Optional[str] = None

    def with_sender(self, sender: str) -> "ContractCall":
        return replace(self, sender=sender)


@dataclass(frozen=True)
class PreparedTransaction:
    """A contract call ready for submission."""

    chain: str
    call: ContractCall
    simulated: bool = False
    simulation_result: Any = None


@dataclass(frozen=True)
class ReceiptLog:
    """An event emitted during a transaction.

    EVM adapters fill ``topics`` and ``data`` with raw bytes; adapters for
    chains with structured events fill ``event`` and ``fields`` instead.
    """

    address: str
    topics: Tuple[bytes, ...] = ()
    data: bytes = b""
    event: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TransactionReceipt:
    """The outcome of an included transaction."""

    tx_hash: str
    chain: str
    sender: str
    block_number: int
    status: bool = True
    logs: Tuple[ReceiptLog, ...] = ()
    gas_used: Optional[int] = None
    effective_gas_price: Optional[int] = None

    @property
    def gas_fee(self) -> Optional[int]:
        """Gas actually paid, when the backend reports both factors."""
        if self.gas_used is None or self.effective_gas_price is None:
            return None
        return self.gas_used * self.effective_gas_price


@dataclass(frozen=True)
class PublishedMessage:
    """A message published through the core messaging contract."""

    emitter_address: bytes
    sequence: int
    payload: bytes
    nonce: int = 0
    consistency_level: int = 0


class Provider(ABC):
    """Read-only access to one chain."""

    @abstractmethod
    async def query(self, call: ContractCall) -> Any:
        """Execute a read-only contract call and return its decoded result."""

    @abstractmethod
    async def simulate(self, call: ContractCall) -> Any:
        """Dry-run a state-changing call as ``call.sender``.

        Must raise when the call would revert, with the revert reason in the
        exception message.
        """

    @abstractmethod
    async def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        """Return the receipt, or None when the chain does not know the hash."""

    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """Return the gas currency balance of an address in base units."""

    @abstractmethod
    async def get_block_number(self) -> int:
        """Return the latest block (slot, checkpoint) height."""

    async def get_account_info(self, address: str) -> Optional[Dict[str, Any]]:
        """Return account data, or None when the account does not exist.

        Only account-model chains need this.
        """
        raise NotImplementedError(f"{type(self).__name__} does not expose accounts")


class Signer(ABC):
    """A connected wallet able to submit transactions on one chain."""

    @abstractmethod
    async def get_address(self) -> str:
        """Return the signer's native address."""

    @abstractmethod
    async def send_transaction(self, call: ContractCall) -> TransactionReceipt:
        """Sign and submit the call, then wait for inclusion."""

"""
Transfer pipeline.

Orchestrates the state-changing bridge operations for every chain context:

1. the signer is checked before any network call,
2. tokens with an allowance model are approved for the spender first,
3. the transfer is dry-run through the provider,
4. only a successful dry-run is signed and submitted.

An approval that lands before a failed or cancelled transfer is harmless:
``approve`` re-reads the allowance and skips the approval next time.
"""

import secrets
from typing import TYPE_CHECKING, Optional, Union

from .bridge_types import NATIVE, ChainRef, TokenId, TokenRef
from .codec.address import to_bytes
from .codec.amount import check_uint, truncate_amount
from .errors import (
    ErrorContext,
    InsufficientAllowance,
    SimulationFailed,
    TokenBridgeError,
    ValidationError,
)
from .logging import LogContext, get_logger
from .providers import ContractCall, PreparedTransaction, TransactionReceipt

if TYPE_CHECKING:
    from .chains.base import ChainContext
    from .registry import BridgeRegistry

logger = get_logger(__name__)

Amount = Union[int, str]


def create_nonce() -> int:
    """Random uint32 message nonce."""
    return secrets.randbits(32)


def to_amount(value: Amount, name: str = "amount") -> int:
    """Accept base units as an int or a string of digits."""
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise ValidationError(
                f"{name} must be an integer number of base units, got {value!r}",
                field=name,
                value=value,
                expected="digits",
            )
        value = int(text)
    return check_uint(value, name=name)


class TransferPipeline:
    """Approve, simulate and submit bridge transactions."""

    def __init__(self, registry: "BridgeRegistry"):
        self.registry = registry

    def _log_context(self, operation: str, chain: str, token=None, **metadata) -> LogContext:
        return LogContext(
            component="pipeline",
            operation=operation,
            chain=chain,
            token=str(token) if token is not None else None,
            metadata=metadata,
        )

    # ------------------------------------------------------------------
    # primitives

    async def simulate(self, call: ContractCall, operation: str) -> PreparedTransaction:
        """Dry-run ``call``; a revert raises SimulationFailed with its reason."""
        provider = self.registry.must_get_provider(call.chain)
        try:
            result = await provider.simulate(call)
        except TokenBridgeError:
            raise
        except Exception as e:
            logger.warning(
                f"Simulation of {call.interface}.{call.method} failed: {e}",
                context=self._log_context(operation, call.chain, method=call.method),
            )
            raise SimulationFailed(
                str(e),
                transaction_type=operation,
                context=ErrorContext(
                    chain=call.chain, component="pipeline", operation=operation
                ),
                cause=e,
            ) from e
        return PreparedTransaction(
            chain=call.chain, call=call, simulated=True, simulation_result=result
        )

    async def submit(self, prepared: PreparedTransaction, operation: str) -> TransactionReceipt:
        signer = self.registry.must_get_signer(prepared.chain)
        receipt = await signer.send_transaction(prepared.call)
        logger.info(
            f"{operation} submitted on {prepared.chain}: {receipt.tx_hash}",
            context=LogContext(
                component="pipeline",
                operation=operation,
                chain=prepared.chain,
                tx_hash=receipt.tx_hash,
            ),
        )
        return receipt

    async def _allowance(
        self, context: "ChainContext", chain: str, token_address: str, owner: str, spender: str
    ) -> int:
        call = context.allowance_call(chain, token_address, owner, spender)
        return int(await self.registry.must_get_provider(chain).query(call))

    async def _require_allowance(
        self,
        context: "ChainContext",
        chain: str,
        token_address: str,
        owner: str,
        spender: str,
        amount: int,
    ) -> None:
        allowance = await self._allowance(context, chain, token_address, owner, spender)
        if allowance < amount:
            raise InsufficientAllowance(
                allowance,
                amount,
                spender,
                context=ErrorContext(
                    chain=chain,
                    token=token_address,
                    component="pipeline",
                    operation="prepare",
                ),
            )

    async def _resolve_token(
        self, context: "ChainContext", token: TokenRef, chain: str
    ) -> Optional[str]:
        """Local token address, or None for the gas token."""
        if token == NATIVE:
            return None
        if not isinstance(token, TokenId):
            raise ValidationError(
                f"Token must be a TokenId or \"{NATIVE}\", got {token!r}",
                field="token",
                value=token,
                expected="TokenId",
            )
        return await context.must_get_foreign_asset(token, chain)

    async def _truncate(
        self, context: "ChainContext", token_address: Optional[str], amount: int, chain: str
    ) -> int:
        decimals = await context.fetch_token_decimals(token_address or NATIVE, chain)
        return truncate_amount(amount, decimals)

    # ------------------------------------------------------------------
    # operations

    async def approve(
        self,
        context: "ChainContext",
        chain: ChainRef,
        spender: str,
        token_address: str,
        amount: Optional[int] = None,
    ) -> Optional[TransactionReceipt]:
        """Approve ``spender`` unless the current allowance already covers ``amount``.

        Returns the approval receipt, or None when nothing was submitted.
        """
        chain_name = self.registry.to_chain_name(chain)
        signer = self.registry.must_get_signer(chain_name)
        if not context.requires_allowance(token_address):
            return None

        required = context.max_allowance if amount is None else to_amount(amount)
        target = required
        if self.registry.config.unbounded_approvals:
            target = context.max_allowance

        owner = await signer.get_address()
        allowance = await self._allowance(context, chain_name, token_address, owner, spender)
        if allowance >= required:
            logger.debug(
                f"Allowance {allowance} of {spender} covers {required}",
                context=self._log_context("approve", chain_name, token_address),
            )
            return None

        increase = context.approval_amount(target, allowance)
        call = context.approve_call(chain_name, token_address, spender, increase)
        call = call.with_sender(owner)
        receipt = await signer.send_transaction(call)
        logger.info(
            f"Approved {target} of {token_address} for {spender}",
            context=LogContext(
                component="pipeline",
                operation="approve",
                chain=chain_name,
                token=token_address,
                tx_hash=receipt.tx_hash,
            ),
        )
        return receipt

    async def prepare_send(
        self,
        context: "ChainContext",
        token: TokenRef,
        amount: Amount,
        sending_chain: ChainRef,
        sender_address: str,
        recipient_chain: ChainRef,
        recipient_address: str,
        relayer_fee: Amount = 0,
    ) -> PreparedTransaction:
        """Build and dry-run a token bridge transfer."""
        registry = self.registry
        chain = registry.to_chain_name(sending_chain)
        dest_chain = registry.to_chain_name(recipient_chain)
        dest_context = registry.get_context(dest_chain)
        amount = to_amount(amount)
        relayer_fee = to_amount(relayer_fee, "relayer_fee")

        token_address = await self._resolve_token(context, token, chain)
        amount = await self._truncate(context, token_address, amount, chain)

        token_id = token
        if token_address is None:
            token_id = TokenId(chain, await context.get_wrapped_native(chain))
        target = await dest_context.resolve_transfer_target(
            token_id, recipient_address, dest_chain
        )

        if token_address is not None and context.requires_allowance(token_address):
            await self._require_allowance(
                context,
                chain,
                token_address,
                sender_address,
                context.must_get_bridge(chain),
                amount,
            )

        call = context.transfer_call(
            chain,
            token_address,
            amount,
            registry.to_chain_id(dest_chain),
            dest_context.format_address(target.recipient),
            relayer_fee,
            create_nonce(),
            target.payload,
        ).with_sender(sender_address)
        logger.debug(
            f"Prepared transfer of {amount} to {dest_chain}",
            context=self._log_context("prepare_send", chain, token, recipient=recipient_address),
        )
        return await self.simulate(call, "send")

    async def send(
        self,
        context: "ChainContext",
        token: TokenRef,
        amount: Amount,
        sending_chain: ChainRef,
        sender_address: str,
        recipient_chain: ChainRef,
        recipient_address: str,
        relayer_fee: Amount = 0,
    ) -> TransactionReceipt:
        chain = self.registry.to_chain_name(sending_chain)
        self.registry.must_get_signer(chain)
        token_address = await self._resolve_token(context, token, chain)
        if token_address is not None:
            await self.approve(
                context, chain, context.must_get_bridge(chain), token_address, to_amount(amount)
            )
        prepared = await self.prepare_send(
            context,
            token,
            amount,
            chain,
            sender_address,
            recipient_chain,
            recipient_address,
            relayer_fee,
        )
        return await self.submit(prepared, "send")

    async def send_with_payload(
        self,
        context: "ChainContext",
        token: TokenRef,
        amount: Amount,
        sending_chain: ChainRef,
        sender_address: str,
        recipient_chain: ChainRef,
        recipient_address: str,
        payload: bytes,
    ) -> TransactionReceipt:
        """Transfer with opaque payload; submitted without a dry-run."""
        registry = self.registry
        chain = registry.to_chain_name(sending_chain)
        registry.must_get_signer(chain)
        dest_chain = registry.to_chain_name(recipient_chain)
        dest_context = registry.get_context(dest_chain)
        amount = to_amount(amount)

        token_address = await self._resolve_token(context, token, chain)
        if token_address is not None:
            await self.approve(
                context, chain, context.must_get_bridge(chain), token_address, amount
            )
        amount = await self._truncate(context, token_address, amount, chain)

        call = context.transfer_call(
            chain,
            token_address,
            amount,
            registry.to_chain_id(dest_chain),
            dest_context.format_address(recipient_address),
            0,
            create_nonce(),
            to_bytes(payload),
        ).with_sender(sender_address)
        return await self.submit(PreparedTransaction(chain=chain, call=call), "send_with_payload")

    async def prepare_send_with_relay(
        self,
        context: "ChainContext",
        token: TokenRef,
        amount: Amount,
        to_native_token: Amount,
        sending_chain: ChainRef,
        sender_address: str,
        recipient_chain: ChainRef,
        recipient_address: str,
    ) -> PreparedTransaction:
        """Build and dry-run a transfer through the token bridge relayer."""
        registry = self.registry
        chain = registry.to_chain_name(sending_chain)
        dest_chain = registry.to_chain_name(recipient_chain)
        dest_context = registry.get_context(dest_chain)
        amount = to_amount(amount)
        to_native_token = to_amount(to_native_token, "to_native_token_amount")

        token_address = await self._resolve_token(context, token, chain)
        amount = await self._truncate(context, token_address, amount, chain)
        if token_address is not None and context.requires_allowance(token_address):
            await self._require_allowance(
                context,
                chain,
                token_address,
                sender_address,
                context.must_get_relayer(chain),
                amount,
            )

        call = context.relay_transfer_call(
            chain,
            token_address,
            amount,
            to_native_token,
            registry.to_chain_id(dest_chain),
            dest_context.format_address(recipient_address),
        ).with_sender(sender_address)
        return await self.simulate(call, "send_with_relay")

    async def send_with_relay(
        self,
        context: "ChainContext",
        token: TokenRef,
        amount: Amount,
        to_native_token: Amount,
        sending_chain: ChainRef,
        sender_address: str,
        recipient_chain: ChainRef,
        recipient_address: str,
    ) -> TransactionReceipt:
        chain = self.registry.to_chain_name(sending_chain)
        self.registry.must_get_signer(chain)
        token_address = await self._resolve_token(context, token, chain)
        if token_address is not None:
            await self.approve(
                context, chain, context.must_get_relayer(chain), token_address, to_amount(amount)
            )
        prepared = await self.prepare_send_with_relay(
            context,
            token,
            amount,
            to_native_token,
            chain,
            sender_address,
            recipient_chain,
            recipient_address,
        )
        return await self.submit(prepared, "send_with_relay")

    async def prepare_redeem(
        self,
        context: "ChainContext",
        dest_chain: ChainRef,
        signed_vaa: Union[bytes, str],
        sender_address: Optional[str] = None,
    ) -> PreparedTransaction:
        chain = self.registry.to_chain_name(dest_chain)
        call = context.redeem_call(chain, to_bytes(signed_vaa))
        if sender_address:
            call = call.with_sender(sender_address)
        return await self.simulate(call, "redeem")

    async def redeem(
        self, context: "ChainContext", dest_chain: ChainRef, signed_vaa: Union[bytes, str]
    ) -> TransactionReceipt:
        chain = self.registry.to_chain_name(dest_chain)
        signer = self.registry.must_get_signer(chain)
        sender = await signer.get_address()
        prepared = await self.prepare_redeem(context, chain, signed_vaa, sender)
        return await self.submit(prepared, "redeem")

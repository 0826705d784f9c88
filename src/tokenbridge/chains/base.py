"""
Chain context capability contract.

Every chain backend implements the same public operations (asset lookup,
transfer construction and submission, redemption, fee queries and address
conversion). The variants only supply the chain-specific primitives: address
codecs, contract call builders, the allowance model and the extraction of
published messages from receipts. Orchestration (approve before transfer,
simulate before submit) lives in ``TransferPipeline``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional, Union

from ..bridge_types import (
    NATIVE,
    ChainRef,
    ContextKind,
    Contracts,
    ParsedRelayerPayload,
    TokenId,
    TokenRef,
)
from ..codec.address import BytesLike, canonical, to_bytes
from ..codec.amount import MAX_UINT256
from ..codec.payload import decode_relayer_payload
from ..codec.vaa import parse_vaa
from ..errors import AssetNotRegistered, ChainNotSupported, ContractNotConfigured, ErrorContext
from ..logging import LogContext, get_logger
from ..providers import (
    ContractCall,
    PreparedTransaction,
    Provider,
    PublishedMessage,
    TransactionReceipt,
)

if TYPE_CHECKING:
    from ..codec.message import AnyMessage
    from ..registry import BridgeRegistry

logger = get_logger(__name__)

# relayer transfers are never batched
RELAY_BATCH_ID = 0


@dataclass(frozen=True)
class TransferTarget:
    """Where a transfer is actually addressed on the destination chain.

    ``payload`` is set when the destination needs the real recipient passed
    through a transfer-with-payload (e.g. via a token translator contract).
    """

    recipient: str
    payload: Optional[bytes] = None


class ChainContext(ABC):
    """Base class of the per-ecosystem chain backends."""

    kind: ContextKind
    supports_allowance: bool = False
    max_allowance: int = MAX_UINT256
    message_event: str = "WormholeMessage"

    def __init__(self, registry: "BridgeRegistry"):
        self.registry = registry

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.name})"

    # ------------------------------------------------------------------
    # configuration helpers

    def contracts(self, chain: ChainRef) -> Contracts:
        return self.registry.contracts(chain)

    def must_get_core(self, chain: ChainRef) -> str:
        return self.registry.must_get_contract(chain, "core")

    def must_get_bridge(self, chain: ChainRef) -> str:
        return self.registry.must_get_contract(chain, "token_bridge")

    def must_get_relayer(self, chain: ChainRef) -> str:
        return self.registry.must_get_contract(chain, "relayer")

    def provider(self, chain: ChainRef) -> Provider:
        return self.registry.must_get_provider(chain)

    def home_chain(self) -> str:
        """The single configured chain served by this context.

        Non-EVM ecosystems have one chain per network; lookups that take no
        chain argument (asset address translation) use it.
        """
        chains = self.registry.chains_of_kind(self.kind)
        if not chains:
            raise ContractNotConfigured(self.kind.value, "chain")
        return chains[0]

    # ------------------------------------------------------------------
    # address codec

    @abstractmethod
    def format_address(self, address: str) -> bytes:
        """Native address -> canonical 32 bytes."""

    @abstractmethod
    def parse_address(self, address: BytesLike) -> str:
        """Canonical 32 bytes -> native address."""

    async def format_asset_address(self, address: str) -> bytes:
        """Native token address -> canonical 32 bytes."""
        return self.format_address(address)

    async def parse_asset_address(self, address: BytesLike) -> str:
        """Canonical 32-byte token address -> native token address."""
        return self.parse_address(address)

    def is_same_address(self, left: str, right: str) -> bool:
        return self.format_address(left) == self.format_address(right)

    # ------------------------------------------------------------------
    # contract call builders
    #
    # The defaults describe calls in the chain-neutral naming understood by
    # the caller-supplied Provider/Signer adapters of non-EVM chains:
    # "TokenBridge" (bridge contract or package), "TokenBridgeRelayer" and
    # "Token" (the token contract, mint or coin type).

    token_interface: str = "Token"

    def _call(
        self, chain: str, contract: str, interface: str, method: str, *args, value: int = 0
    ) -> ContractCall:
        return ContractCall(
            chain=chain,
            contract=contract,
            interface=interface,
            method=method,
            args=args,
            value=value,
        )

    def bridge_call(self, chain: str, method: str, *args, value: int = 0) -> ContractCall:
        return self._call(
            chain, self.must_get_bridge(chain), "TokenBridge", method, *args, value=value
        )

    def relayer_call(self, chain: str, method: str, *args, value: int = 0) -> ContractCall:
        return self._call(
            chain, self.must_get_relayer(chain), "TokenBridgeRelayer", method, *args, value=value
        )

    def wrapped_asset_call(
        self, chain: str, origin_chain_id: int, origin_address: bytes
    ) -> ContractCall:
        """Query for the local representation of a foreign token."""
        return self.bridge_call(chain, "wrappedAsset", origin_chain_id, canonical(origin_address))

    def interpret_wrapped_asset(self, result: Any) -> Optional[str]:
        """Map a wrapped-asset query result to an address, None if unregistered."""
        return str(result) if result else None

    async def lookup_wrapped_asset(
        self, chain: str, origin_chain_id: int, origin_address: bytes
    ) -> Optional[str]:
        call = self.wrapped_asset_call(chain, origin_chain_id, origin_address)
        return self.interpret_wrapped_asset(await self.provider(chain).query(call))

    def decimals_call(self, chain: str, token_address: str) -> ContractCall:
        return self._call(chain, token_address, self.token_interface, "decimals")

    def balance_call(self, chain: str, wallet_address: str, token_address: str) -> ContractCall:
        return self._call(
            chain, token_address, self.token_interface, "balanceOf", wallet_address
        )

    def transfer_call(
        self,
        chain: str,
        token_address: Optional[str],
        amount: int,
        recipient_chain_id: int,
        recipient: bytes,
        relayer_fee: int,
        nonce: int,
        payload: Optional[bytes] = None,
    ) -> ContractCall:
        """Token bridge transfer; ``token_address`` None sends the gas token."""
        recipient = canonical(recipient)
        if token_address is None:
            if payload is None:
                return self.bridge_call(
                    chain,
                    "transferNative",
                    amount,
                    recipient_chain_id,
                    recipient,
                    relayer_fee,
                    nonce,
                    value=amount,
                )
            return self.bridge_call(
                chain,
                "transferNativeWithPayload",
                amount,
                recipient_chain_id,
                recipient,
                nonce,
                payload,
                value=amount,
            )
        if payload is None:
            return self.bridge_call(
                chain,
                "transferTokens",
                token_address,
                amount,
                recipient_chain_id,
                recipient,
                relayer_fee,
                nonce,
            )
        return self.bridge_call(
            chain,
            "transferTokensWithPayload",
            token_address,
            amount,
            recipient_chain_id,
            recipient,
            nonce,
            payload,
        )

    def relay_transfer_call(
        self,
        chain: str,
        token_address: Optional[str],
        amount: int,
        to_native_token_amount: int,
        recipient_chain_id: int,
        recipient: bytes,
    ) -> ContractCall:
        """Relayer transfer; ``token_address`` None sends the gas token."""
        recipient = canonical(recipient)
        if token_address is None:
            return self.relayer_call(
                chain,
                "transferNativeWithRelay",
                amount,
                to_native_token_amount,
                recipient_chain_id,
                recipient,
                RELAY_BATCH_ID,
                value=amount,
            )
        return self.relayer_call(
            chain,
            "transferTokensWithRelay",
            token_address,
            amount,
            to_native_token_amount,
            recipient_chain_id,
            recipient,
            RELAY_BATCH_ID,
        )

    def redeem_call(self, chain: str, signed_vaa: bytes) -> ContractCall:
        return self.bridge_call(chain, "completeTransfer", bytes(signed_vaa))

    def transfer_completed_call(self, chain: str, vaa_hash: bytes) -> ContractCall:
        return self.bridge_call(chain, "isTransferCompleted", bytes(vaa_hash))

    def requires_allowance(self, token_address: str) -> bool:
        """Whether moving this token needs a prior approval of the spender."""
        return self.supports_allowance

    def allowance_call(
        self, chain: str, token_address: str, owner: str, spender: str
    ) -> ContractCall:
        raise NotImplementedError(f"{self.kind.value} has no token allowances")

    def approve_call(
        self, chain: str, token_address: str, spender: str, amount: int
    ) -> ContractCall:
        raise NotImplementedError(f"{self.kind.value} has no token allowances")

    def approval_amount(self, target: int, allowance: int) -> int:
        """Argument for ``approve_call`` that leaves the allowance at ``target``."""
        return target

    def max_swap_call(self, chain: str, token_address: str) -> ContractCall:
        return self.relayer_call(chain, "calculateMaxSwapAmountIn", token_address)

    def native_swap_call(self, chain: str, token_address: str, amount: int) -> ContractCall:
        return self.relayer_call(chain, "calculateNativeSwapAmountOut", token_address, amount)

    def relayer_fee_call(
        self, chain: str, dest_chain_id: int, token_address: str, decimals: int
    ) -> ContractCall:
        return self.relayer_call(
            chain, "calculateRelayerFee", dest_chain_id, token_address, decimals
        )

    @abstractmethod
    async def get_wrapped_native(self, chain: ChainRef) -> str:
        """Address of the wrapped gas token on ``chain``."""

    async def resolve_transfer_target(
        self, token_id: TokenId, recipient: str, chain: ChainRef
    ) -> TransferTarget:
        """Destination-side hook deciding the on-chain recipient of a transfer."""
        return TransferTarget(recipient=recipient)

    # ------------------------------------------------------------------
    # message extraction

    def published_messages(
        self, receipt: TransactionReceipt, chain: str
    ) -> List[PublishedMessage]:
        """Messages the core contract published in ``receipt``, in log order."""
        core = self.must_get_core(chain)
        sender_key, sequence_key, payload_key = self.message_fields()
        messages = []
        for log in receipt.logs:
            if log.event != self.message_event or not self.is_same_address(log.address, core):
                continue
            fields = log.fields
            messages.append(
                PublishedMessage(
                    emitter_address=self.emitter_bytes(fields[sender_key]),
                    sequence=int(fields[sequence_key]),
                    payload=to_bytes(fields[payload_key]),
                    nonce=int(fields.get("nonce", 0)),
                    consistency_level=int(fields.get("consistency_level", 0)),
                )
            )
        return messages

    def message_fields(self):
        """Field names of (emitter, sequence, payload) in core message events."""
        return ("sender", "sequence", "payload")

    def emitter_bytes(self, value: Union[str, bytes]) -> bytes:
        if isinstance(value, (bytes, bytearray)):
            return canonical(value)
        return self.format_address(value)

    def parse_relayer_payload(self, payload: bytes) -> ParsedRelayerPayload:
        """Decode relayer instructions addressed to this chain."""
        decoded = decode_relayer_payload(payload)
        return ParsedRelayerPayload(
            relayer_payload_id=decoded.relayer_payload_id,
            to=self.parse_address(decoded.recipient),
            relayer_fee=decoded.relayer_fee,
            to_native_token_amount=decoded.to_native_token_amount,
        )

    # ------------------------------------------------------------------
    # asset queries

    async def get_foreign_asset(self, token_id: TokenId, chain: ChainRef) -> Optional[str]:
        """The token's address on ``chain``, or None if never bridged there."""
        registry = self.registry
        chain_name = registry.to_chain_name(chain)
        if registry.get_context_kind(chain_name) != self.kind:
            raise ChainNotSupported(
                chain_name,
                context=ErrorContext(
                    chain=chain_name,
                    component="chain_context",
                    operation="get_foreign_asset",
                ),
            )
        home_chain_id = registry.to_chain_id(token_id.chain)
        if registry.to_chain_id(chain_name) == home_chain_id:
            return token_id.address

        token_context = registry.get_context(token_id.chain)
        origin_address = await token_context.format_asset_address(token_id.address)
        foreign = await self.lookup_wrapped_asset(chain_name, home_chain_id, origin_address)
        logger.debug(
            f"Foreign asset of {token_id} on {chain_name}: {foreign}",
            context=LogContext(
                component="chain_context",
                operation="get_foreign_asset",
                chain=chain_name,
                token=str(token_id),
            ),
        )
        return foreign

    async def must_get_foreign_asset(self, token_id: TokenId, chain: ChainRef) -> str:
        address = await self.get_foreign_asset(token_id, chain)
        if not address:
            chain_name = self.registry.to_chain_name(chain)
            raise AssetNotRegistered(
                token_id,
                chain_name,
                context=ErrorContext(
                    chain=chain_name,
                    token=str(token_id),
                    component="chain_context",
                    operation="must_get_foreign_asset",
                ),
            )
        return address

    async def fetch_token_decimals(self, token_address: str, chain: ChainRef) -> int:
        chain_name = self.registry.to_chain_name(chain)
        if token_address == NATIVE:
            return self.registry.get_chain_config(chain_name).native_token_decimals
        result = await self.provider(chain_name).query(
            self.decimals_call(chain_name, token_address)
        )
        return int(result)

    async def fetch_token_symbol(self, token_address: str, chain: ChainRef) -> str:
        chain_name = self.registry.to_chain_name(chain)
        result = await self.provider(chain_name).query(
            self._call(chain_name, token_address, self.token_interface, "symbol")
        )
        return str(result)

    async def get_native_balance(self, wallet_address: str, chain: ChainRef) -> int:
        return int(await self.provider(chain).get_balance(wallet_address))

    async def get_token_balance(
        self, wallet_address: str, token_id: TokenId, chain: ChainRef
    ) -> Optional[int]:
        chain_name = self.registry.to_chain_name(chain)
        address = await self.get_foreign_asset(token_id, chain_name)
        if not address:
            return None
        result = await self.provider(chain_name).query(
            self.balance_call(chain_name, wallet_address, address)
        )
        return int(result)

    async def get_current_block(self, chain: ChainRef) -> int:
        return int(await self.provider(chain).get_block_number())

    async def is_transfer_completed(
        self, dest_chain: ChainRef, signed_vaa: Union[bytes, str]
    ) -> bool:
        chain_name = self.registry.to_chain_name(dest_chain)
        vaa = parse_vaa(signed_vaa)
        result = await self.provider(chain_name).query(
            self.transfer_completed_call(chain_name, vaa.digest)
        )
        return bool(result)

    # ------------------------------------------------------------------
    # state-changing operations, orchestrated by the pipeline

    async def approve(
        self,
        chain: ChainRef,
        spender: str,
        token_address: str,
        amount: Optional[int] = None,
    ) -> Optional[TransactionReceipt]:
        """Ensure ``spender`` may move ``amount`` (default: unbounded) tokens.

        Submits an approval only when the current allowance is insufficient.
        """
        return await self.registry.pipeline.approve(
            self, chain, spender, token_address, amount
        )

    async def prepare_send(
        self,
        token: TokenRef,
        amount: Union[int, str],
        sending_chain: ChainRef,
        sender_address: str,
        recipient_chain: ChainRef,
        recipient_address: str,
        relayer_fee: int = 0,
    ) -> PreparedTransaction:
        return await self.registry.pipeline.prepare_send(
            self,
            token,
            amount,
            sending_chain,
            sender_address,
            recipient_chain,
            recipient_address,
            relayer_fee,
        )

    async def send(
        self,
        token: TokenRef,
        amount: Union[int, str],
        sending_chain: ChainRef,
        sender_address: str,
        recipient_chain: ChainRef,
        recipient_address: str,
        relayer_fee: int = 0,
    ) -> TransactionReceipt:
        return await self.registry.pipeline.send(
            self,
            token,
            amount,
            sending_chain,
            sender_address,
            recipient_chain,
            recipient_address,
            relayer_fee,
        )

    async def send_with_payload(
        self,
        token: TokenRef,
        amount: Union[int, str],
        sending_chain: ChainRef,
        sender_address: str,
        recipient_chain: ChainRef,
        recipient_address: str,
        payload: bytes,
    ) -> TransactionReceipt:
        return await self.registry.pipeline.send_with_payload(
            self,
            token,
            amount,
            sending_chain,
            sender_address,
            recipient_chain,
            recipient_address,
            payload,
        )

    async def prepare_send_with_relay(
        self,
        token: TokenRef,
        amount: Union[int, str],
        to_native_token: Union[int, str],
        sending_chain: ChainRef,
        sender_address: str,
        recipient_chain: ChainRef,
        recipient_address: str,
    ) -> PreparedTransaction:
        return await self.registry.pipeline.prepare_send_with_relay(
            self,
            token,
            amount,
            to_native_token,
            sending_chain,
            sender_address,
            recipient_chain,
            recipient_address,
        )

    async def send_with_relay(
        self,
        token: TokenRef,
        amount: Union[int, str],
        to_native_token: Union[int, str],
        sending_chain: ChainRef,
        sender_address: str,
        recipient_chain: ChainRef,
        recipient_address: str,
    ) -> TransactionReceipt:
        return await self.registry.pipeline.send_with_relay(
            self,
            token,
            amount,
            to_native_token,
            sending_chain,
            sender_address,
            recipient_chain,
            recipient_address,
        )

    async def prepare_redeem(
        self,
        dest_chain: ChainRef,
        signed_vaa: Union[bytes, str],
        sender_address: Optional[str] = None,
    ) -> PreparedTransaction:
        return await self.registry.pipeline.prepare_redeem(
            self, dest_chain, signed_vaa, sender_address
        )

    async def redeem(
        self, dest_chain: ChainRef, signed_vaa: Union[bytes, str]
    ) -> TransactionReceipt:
        return await self.registry.pipeline.redeem(self, dest_chain, signed_vaa)

    # ------------------------------------------------------------------
    # relayer and message queries

    async def calculate_max_swap_amount(
        self, dest_chain: ChainRef, token_id: TokenId, wallet_address: Optional[str] = None
    ) -> int:
        return await self.registry.relayer_fees.calculate_max_swap_amount(
            dest_chain, token_id, wallet_address
        )

    async def calculate_native_token_amt(
        self,
        dest_chain: ChainRef,
        token_id: TokenId,
        amount: int,
        wallet_address: Optional[str] = None,
    ) -> int:
        return await self.registry.relayer_fees.calculate_native_token_amt(
            dest_chain, token_id, amount, wallet_address
        )

    async def get_relayer_fee(
        self, source_chain: ChainRef, dest_chain: ChainRef, token_id: TokenId
    ) -> int:
        return await self.registry.relayer_fees.get_relayer_fee(
            source_chain, dest_chain, token_id
        )

    async def parse_message_from_tx(self, tx: str, chain: ChainRef) -> List["AnyMessage"]:
        return await self.registry.message_codec.parse_message_from_tx(tx, chain)

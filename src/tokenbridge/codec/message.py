"""
Bridge message decoding from transaction receipts.

A receipt is reduced to the messages its chain's core contract published;
each message payload is decoded by payload id and its addresses translated
into native formats. Token addresses are translated by the token's home
chain context and recipients by the destination chain context, because
each is embedded in that chain's representation.
"""

import asyncio
from typing import TYPE_CHECKING, List, Union

from ..bridge_types import ParsedMessage, ParsedRelayerMessage, TokenId
from ..errors import ReceiptNotFound
from ..logging import LogContext, get_logger
from ..providers import PublishedMessage, TransactionReceipt
from .address import to_hex
from .payload import PAYLOAD_TRANSFER, TransferPayload, decode_transfer_payload

if TYPE_CHECKING:
    from ..registry import BridgeRegistry

logger = get_logger(__name__)

AnyMessage = Union[ParsedMessage, ParsedRelayerMessage]


class MessageCodec:
    """Decodes bridge transfers out of source-chain receipts."""

    def __init__(self, registry: "BridgeRegistry"):
        self.registry = registry

    async def parse_message_from_tx(self, tx_hash: str, chain) -> List[AnyMessage]:
        """Decode every bridge transfer published by a transaction.

        Returns messages in log order; a receipt without bridge messages
        yields an empty list.
        """
        chain_name = self.registry.to_chain_name(chain)
        context = self.registry.get_context(chain_name)
        provider = self.registry.must_get_provider(chain_name)

        receipt = await provider.get_transaction_receipt(tx_hash)
        if receipt is None:
            raise ReceiptNotFound(tx_hash, chain_name)

        published = context.published_messages(receipt, chain_name)
        logger.debug(
            f"Found {len(published)} bridge message(s) in {tx_hash}",
            context=LogContext(
                component="message_codec",
                operation="parse_message_from_tx",
                chain=chain_name,
                tx_hash=tx_hash,
            ),
        )
        parsed = await asyncio.gather(
            *(
                self.parse_published_message(message, receipt, chain_name)
                for message in published
            )
        )
        return list(parsed)

    async def parse_published_message(
        self,
        message: PublishedMessage,
        receipt: TransactionReceipt,
        from_chain: str,
    ) -> AnyMessage:
        """Decode one published message into a parsed transfer."""
        transfer = decode_transfer_payload(message.payload)
        return await self.parse_transfer(transfer, message, receipt, from_chain)

    async def parse_transfer(
        self,
        transfer: TransferPayload,
        message: PublishedMessage,
        receipt: TransactionReceipt,
        from_chain: str,
    ) -> AnyMessage:
        registry = self.registry
        to_chain = registry.to_chain_name(transfer.to_chain)
        token_chain = registry.to_chain_name(transfer.token_chain)
        dest_context = registry.get_context(to_chain)
        token_context = registry.get_context(token_chain)

        token_address = await token_context.parse_asset_address(transfer.token_address)
        common = dict(
            send_tx=receipt.tx_hash,
            sender=receipt.sender,
            amount=transfer.amount,
            payload_id=transfer.payload_id,
            to_chain=to_chain,
            from_chain=from_chain,
            token_address=token_address,
            token_chain=token_chain,
            token_id=TokenId(chain=token_chain, address=token_address),
            sequence=message.sequence,
            emitter_address=to_hex(message.emitter_address),
            block=receipt.block_number,
            gas_fee=receipt.gas_fee,
        )

        if transfer.payload_id == PAYLOAD_TRANSFER:
            return ParsedMessage(
                recipient=dest_context.parse_address(transfer.to), **common
            )

        # relayer payload layouts differ per destination ecosystem
        relayer_payload = dest_context.parse_relayer_payload(transfer.payload)
        return ParsedRelayerMessage(
            recipient=relayer_payload.to,
            payload=transfer.payload,
            to=dest_context.parse_address(transfer.to),
            relayer_payload_id=relayer_payload.relayer_payload_id,
            relayer_fee=relayer_payload.relayer_fee,
            to_native_token_amount=relayer_payload.to_native_token_amount,
            **common,
        )

"""
EVM chain context.

Addresses are 20 bytes, zero-padded into the 32-byte canonical form. ERC-20
tokens use the allowance model; the gas token is sent through the bridge's
wrap-and-transfer entry points.
"""

from typing import Any, List, Optional

from eth_abi import decode
from web3 import Web3

from ...bridge_types import ChainRef, ContextKind
from ...codec.address import BytesLike, canonical, narrow, zero_pad
from ...codec.amount import MAX_UINT256
from ...errors import AddressFormatError
from ...providers import ContractCall, PublishedMessage, TransactionReceipt
from ..base import RELAY_BATCH_ID, ChainContext
from .abi import LOG_MESSAGE_PUBLISHED_DATA, LOG_MESSAGE_PUBLISHED_TOPIC

EVM_ADDRESS_LENGTH = 20
ZERO_ADDRESS = "0x" + "00" * EVM_ADDRESS_LENGTH


def _checksum(address: str) -> str:
    return Web3.to_checksum_address(address)


class EvmContext(ChainContext):
    """Backend for EVM chains (Ethereum, BSC, Polygon, Avalanche, ...)."""

    kind = ContextKind.EVM
    supports_allowance = True
    max_allowance = MAX_UINT256
    token_interface = "ERC20"

    def format_address(self, address: str) -> bytes:
        if not isinstance(address, str) or not Web3.is_address(address):
            raise AddressFormatError(f"Invalid EVM address {address!r}", address=address)
        digits = address[2:] if address[:2].lower() == "0x" else address
        mixed_case = digits != digits.lower() and digits != digits.upper()
        if mixed_case and not Web3.is_checksum_address(address):
            raise AddressFormatError(f"Bad checksum in EVM address {address!r}", address=address)
        return zero_pad(Web3.to_bytes(hexstr=address))

    def parse_address(self, address: BytesLike) -> str:
        return _checksum("0x" + narrow(address, EVM_ADDRESS_LENGTH).hex())

    def is_same_address(self, left: str, right: str) -> bool:
        return left.lower() == right.lower()

    def published_messages(
        self, receipt: TransactionReceipt, chain: str
    ) -> List[PublishedMessage]:
        core = self.must_get_core(chain)
        messages = []
        for log in receipt.logs:
            if not self.is_same_address(log.address, core):
                continue
            if not log.topics or bytes(log.topics[0]) != LOG_MESSAGE_PUBLISHED_TOPIC:
                continue
            sequence, nonce, payload, consistency_level = decode(
                LOG_MESSAGE_PUBLISHED_DATA, bytes(log.data)
            )
            messages.append(
                PublishedMessage(
                    # indexed sender, already left-padded to 32 bytes
                    emitter_address=canonical(log.topics[1]),
                    sequence=sequence,
                    payload=payload,
                    nonce=nonce,
                    consistency_level=consistency_level,
                )
            )
        return messages

    # call builders; web3 wants checksummed addresses everywhere

    def _call(
        self, chain: str, contract: str, interface: str, method: str, *args, value: int = 0
    ) -> ContractCall:
        return super()._call(chain, _checksum(contract), interface, method, *args, value=value)

    def interpret_wrapped_asset(self, result: Any) -> Optional[str]:
        if not result or result.lower() == ZERO_ADDRESS:
            return None
        return _checksum(result)

    def balance_call(self, chain: str, wallet_address: str, token_address: str) -> ContractCall:
        return super().balance_call(chain, _checksum(wallet_address), token_address)

    def allowance_call(
        self, chain: str, token_address: str, owner: str, spender: str
    ) -> ContractCall:
        return self._call(
            chain, token_address, "ERC20", "allowance", _checksum(owner), _checksum(spender)
        )

    def approve_call(
        self, chain: str, token_address: str, spender: str, amount: int
    ) -> ContractCall:
        return self._call(chain, token_address, "ERC20", "approve", _checksum(spender), amount)

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
        if token_address is not None:
            return super().transfer_call(
                chain,
                _checksum(token_address),
                amount,
                recipient_chain_id,
                recipient,
                relayer_fee,
                nonce,
                payload,
            )
        recipient = canonical(recipient)
        if payload is None:
            return self.bridge_call(
                chain,
                "wrapAndTransferETH",
                recipient_chain_id,
                recipient,
                relayer_fee,
                nonce,
                value=amount,
            )
        return self.bridge_call(
            chain,
            "wrapAndTransferETHWithPayload",
            recipient_chain_id,
            recipient,
            nonce,
            payload,
            value=amount,
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
        if token_address is not None:
            return super().relay_transfer_call(
                chain,
                _checksum(token_address),
                amount,
                to_native_token_amount,
                recipient_chain_id,
                recipient,
            )
        return self.relayer_call(
            chain,
            "wrapAndTransferEthWithRelay",
            to_native_token_amount,
            recipient_chain_id,
            canonical(recipient),
            RELAY_BATCH_ID,
            value=amount,
        )

    def max_swap_call(self, chain: str, token_address: str) -> ContractCall:
        return super().max_swap_call(chain, _checksum(token_address))

    def native_swap_call(self, chain: str, token_address: str, amount: int) -> ContractCall:
        return super().native_swap_call(chain, _checksum(token_address), amount)

    def relayer_fee_call(
        self, chain: str, dest_chain_id: int, token_address: str, decimals: int
    ) -> ContractCall:
        return super().relayer_fee_call(chain, dest_chain_id, _checksum(token_address), decimals)

    async def get_wrapped_native(self, chain: ChainRef) -> str:
        chain_name = self.registry.to_chain_name(chain)
        result = await self.provider(chain_name).query(self.bridge_call(chain_name, "WETH"))
        return _checksum(result)

"""
Sei chain context.

Sei addresses are bech32 with the ``sei`` prefix: 20 bytes for accounts and
32 bytes for contracts. Tokens are either cw20 contracts (allowance model,
``increase_allowance``) or bank denoms such as ``usei``, which the bridge
encodes as ``0x01`` followed by the zero-padded denom.

Transfers into Sei are addressed to the token translator contract, which
mints a bank token for the final recipient named in a JSON payload.
"""

import base64
import json

import bech32

from ...bridge_types import ChainRef, ContextKind, ParsedRelayerPayload, TokenId
from ...codec.address import BytesLike, canonical, narrow, to_bytes, zero_pad
from ...codec.amount import MAX_UINT128
from ...errors import AddressFormatError, ContractNotConfigured, MalformedPayloadError
from ..base import ChainContext, TransferTarget

SEI_PREFIX = "sei"
SEI_NATIVE_DENOM = "usei"
ACCOUNT_LENGTH = 20
NATIVE_DENOM_MARKER = 0x01


def bech32_to_bytes(address: str, prefix: str = SEI_PREFIX) -> bytes:
    hrp, data = bech32.bech32_decode(address)
    if hrp != prefix or data is None:
        raise AddressFormatError(f"Invalid {prefix} address {address!r}", address=address)
    raw = bech32.convertbits(data, 5, 8, False)
    if raw is None or len(raw) not in (ACCOUNT_LENGTH, 32):
        raise AddressFormatError(f"Invalid {prefix} address {address!r}", address=address)
    return bytes(raw)


def bytes_to_bech32(raw: bytes, prefix: str = SEI_PREFIX) -> str:
    return bech32.bech32_encode(prefix, bech32.convertbits(list(raw), 8, 5))


def is_native_denom(token_address: str) -> bool:
    return not token_address.startswith(SEI_PREFIX + "1")


def encode_native_denom(denom: str) -> bytes:
    raw = denom.encode()
    if not raw or len(raw) > 31:
        raise AddressFormatError(f"Denom {denom!r} does not fit in 31 bytes", address=denom)
    return bytes([NATIVE_DENOM_MARKER]) + zero_pad(raw, 31)


def decode_native_denom(address: bytes) -> str:
    return address[1:].lstrip(b"\x00").decode()


def translator_payload(recipient: str) -> bytes:
    """JSON instructions telling the token translator whom to credit."""
    message = {
        "basic_recipient": {
            "recipient": base64.b64encode(recipient.encode()).decode(),
        }
    }
    return json.dumps(message, separators=(",", ":")).encode()


class SeiContext(ChainContext):
    """Backend for Sei."""

    kind = ContextKind.SEI
    supports_allowance = True
    max_allowance = MAX_UINT128
    token_interface = "Cw20"
    message_event = "wasm"

    def format_address(self, address: str) -> bytes:
        if not isinstance(address, str):
            raise AddressFormatError(f"Invalid Sei address {address!r}", address=address)
        return zero_pad(bech32_to_bytes(address))

    def parse_address(self, address: BytesLike) -> str:
        raw = canonical(address)
        if any(raw[: len(raw) - ACCOUNT_LENGTH]):
            return bytes_to_bech32(raw)
        return bytes_to_bech32(narrow(raw, ACCOUNT_LENGTH))

    async def format_asset_address(self, address: str) -> bytes:
        if is_native_denom(address):
            return encode_native_denom(address)
        return self.format_address(address)

    async def parse_asset_address(self, address: BytesLike) -> str:
        raw = canonical(address)
        if raw[0] == NATIVE_DENOM_MARKER:
            return decode_native_denom(raw)
        return self.parse_address(raw)

    def requires_allowance(self, token_address: str) -> bool:
        return not is_native_denom(token_address)

    def allowance_call(self, chain, token_address, owner, spender):
        return self._call(chain, token_address, "Cw20", "allowance", owner, spender)

    def approve_call(self, chain, token_address, spender, amount):
        return self._call(chain, token_address, "Cw20", "increase_allowance", spender, amount)

    def approval_amount(self, target: int, allowance: int) -> int:
        # increase_allowance adds to the current value
        return target - allowance

    def message_fields(self):
        return ("message.sender", "message.sequence", "message.message")

    def emitter_bytes(self, value) -> bytes:
        # wasm attributes carry the emitter as bare hex
        return canonical(to_bytes(value))

    async def get_wrapped_native(self, chain: ChainRef) -> str:
        return SEI_NATIVE_DENOM

    async def resolve_transfer_target(
        self, token_id: TokenId, recipient: str, chain: ChainRef
    ) -> TransferTarget:
        """Route the transfer through the token translator."""
        self.format_address(recipient)
        translator = self.contracts(chain).sei_token_translator
        if not translator:
            raise ContractNotConfigured(self.registry.to_chain_name(chain), "sei_token_translator")
        return TransferTarget(recipient=translator, payload=translator_payload(recipient))

    def parse_relayer_payload(self, payload: bytes) -> ParsedRelayerPayload:
        try:
            message = json.loads(bytes(payload).decode())
            encoded = message["basic_recipient"]["recipient"]
            recipient = base64.b64decode(encoded).decode()
        except (ValueError, KeyError, TypeError) as e:
            raise MalformedPayloadError(
                f"Invalid token translator payload: {e}", actual_length=len(payload)
            ) from e
        return ParsedRelayerPayload(
            relayer_payload_id=0,
            to=recipient,
            relayer_fee=0,
            to_native_token_amount=0,
        )

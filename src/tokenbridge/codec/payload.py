"""
Token bridge payload codec.

Layout (big-endian)::

    0    payload id           1   (1 = transfer, 3 = transfer with payload)
    1    amount              32   8-decimal wire scale
    33   token address       32   canonical, origin chain
    65   token chain          2
    67   recipient           32   canonical
    99   recipient chain      2
    101  fee                 32   payload 1, optional
    101  sender              32   payload 3
    133  payload            var   payload 3

The payload id is read before anything else; ids other than 1 and 3 are
rejected.

Payload 3 follows the deployed token bridge: the sender occupies offset 101
and the opaque payload starts at 133, so an id-3 message shorter than 133
bytes raises MalformedPayloadError.
"""

from dataclasses import dataclass
from typing import Optional

from ..errors import MalformedPayloadError, UnrecognizedPayloadDiscriminant
from .address import canonical, zero_pad
from .amount import check_uint

PAYLOAD_TRANSFER = 1
PAYLOAD_TRANSFER_WITH_PAYLOAD = 3

TRANSFER_FIXED_LENGTH = 101
TRANSFER_WITH_FEE_LENGTH = 133
TRANSFER_WITH_PAYLOAD_MIN_LENGTH = 133
RELAYER_PAYLOAD_LENGTH = 97


@dataclass(frozen=True)
class TransferPayload:
    """A decoded token bridge transfer payload."""

    payload_id: int
    amount: int
    token_address: bytes
    token_chain: int
    to: bytes
    to_chain: int
    fee: int = 0
    from_address: Optional[bytes] = None
    payload: Optional[bytes] = None

    @property
    def has_payload(self) -> bool:
        return self.payload_id == PAYLOAD_TRANSFER_WITH_PAYLOAD


@dataclass(frozen=True)
class RelayerPayload:
    """The default relayer instructions layout."""

    relayer_payload_id: int
    relayer_fee: int
    to_native_token_amount: int
    recipient: bytes


def _uint(data: bytes, start: int, width: int) -> int:
    return int.from_bytes(data[start : start + width], "big")


def payload_discriminant(data: bytes) -> int:
    """Read the payload id byte."""
    if not data:
        raise MalformedPayloadError(
            "Empty payload", expected_length=1, actual_length=0
        )
    return data[0]


def decode_transfer_payload(data: bytes) -> TransferPayload:
    """Decode a transfer or transfer-with-payload message body."""
    data = bytes(data)
    payload_id = payload_discriminant(data)

    if payload_id == PAYLOAD_TRANSFER:
        if len(data) < TRANSFER_FIXED_LENGTH:
            raise MalformedPayloadError(
                f"Transfer payload is {len(data)} bytes, expected at least "
                f"{TRANSFER_FIXED_LENGTH}",
                expected_length=TRANSFER_FIXED_LENGTH,
                actual_length=len(data),
            )
        fee = 0
        if len(data) >= TRANSFER_WITH_FEE_LENGTH:
            fee = _uint(data, 101, 32)
        return TransferPayload(
            payload_id=payload_id,
            amount=_uint(data, 1, 32),
            token_address=data[33:65],
            token_chain=_uint(data, 65, 2),
            to=data[67:99],
            to_chain=_uint(data, 99, 2),
            fee=fee,
        )

    if payload_id == PAYLOAD_TRANSFER_WITH_PAYLOAD:
        if len(data) < TRANSFER_WITH_PAYLOAD_MIN_LENGTH:
            raise MalformedPayloadError(
                f"Transfer-with-payload is {len(data)} bytes, expected at least "
                f"{TRANSFER_WITH_PAYLOAD_MIN_LENGTH}",
                expected_length=TRANSFER_WITH_PAYLOAD_MIN_LENGTH,
                actual_length=len(data),
            )
        return TransferPayload(
            payload_id=payload_id,
            amount=_uint(data, 1, 32),
            token_address=data[33:65],
            token_chain=_uint(data, 65, 2),
            to=data[67:99],
            to_chain=_uint(data, 99, 2),
            from_address=data[101:133],
            payload=data[133:],
        )

    raise UnrecognizedPayloadDiscriminant(payload_id)


def encode_transfer_payload(transfer: TransferPayload) -> bytes:
    """Encode a transfer payload, the inverse of ``decode_transfer_payload``."""
    if transfer.payload_id not in (PAYLOAD_TRANSFER, PAYLOAD_TRANSFER_WITH_PAYLOAD):
        raise UnrecognizedPayloadDiscriminant(transfer.payload_id)

    body = bytearray([transfer.payload_id])
    body += check_uint(transfer.amount).to_bytes(32, "big")
    body += canonical(transfer.token_address)
    body += check_uint(transfer.token_chain, 16, "token_chain").to_bytes(2, "big")
    body += canonical(transfer.to)
    body += check_uint(transfer.to_chain, 16, "to_chain").to_bytes(2, "big")
    if transfer.payload_id == PAYLOAD_TRANSFER:
        body += check_uint(transfer.fee, name="fee").to_bytes(32, "big")
    else:
        body += zero_pad(transfer.from_address or b"")
        body += transfer.payload or b""
    return bytes(body)


def decode_relayer_payload(data: bytes) -> RelayerPayload:
    """Decode the default relayer layout: id, fee, native amount, recipient."""
    data = bytes(data)
    if len(data) < RELAYER_PAYLOAD_LENGTH:
        raise MalformedPayloadError(
            f"Relayer payload is {len(data)} bytes, expected {RELAYER_PAYLOAD_LENGTH}",
            expected_length=RELAYER_PAYLOAD_LENGTH,
            actual_length=len(data),
        )
    return RelayerPayload(
        relayer_payload_id=data[0],
        relayer_fee=_uint(data, 1, 32),
        to_native_token_amount=_uint(data, 33, 32),
        recipient=data[65:97],
    )


def encode_relayer_payload(payload: RelayerPayload) -> bytes:
    """Encode the default relayer layout."""
    return (
        bytes([check_uint(payload.relayer_payload_id, 8, "relayer_payload_id")])
        + check_uint(payload.relayer_fee, name="relayer_fee").to_bytes(32, "big")
        + check_uint(payload.to_native_token_amount, name="to_native_token_amount").to_bytes(
            32, "big"
        )
        + canonical(payload.recipient)
    )

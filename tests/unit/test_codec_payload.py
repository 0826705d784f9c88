"""Unit tests for the token bridge payload codec."""

import pytest

from tokenbridge.codec.payload import (
    PAYLOAD_TRANSFER,
    PAYLOAD_TRANSFER_WITH_PAYLOAD,
    RelayerPayload,
    TransferPayload,
    decode_relayer_payload,
    decode_transfer_payload,
    encode_relayer_payload,
    encode_transfer_payload,
    payload_discriminant,
)
from tokenbridge.errors import (
    AmountOverflowError,
    MalformedPayloadError,
    UnrecognizedPayloadDiscriminant,
)

TOKEN = b"\x00" * 12 + b"\xa0" * 20
RECIPIENT = b"\x05" * 32


def transfer_bytes(amount=1_000_000, token_chain=2, to_chain=1, fee=None) -> bytes:
    body = (
        b"\x01"
        + amount.to_bytes(32, "big")
        + TOKEN
        + token_chain.to_bytes(2, "big")
        + RECIPIENT
        + to_chain.to_bytes(2, "big")
    )
    if fee is not None:
        body += fee.to_bytes(32, "big")
    return body


class TestDiscriminant:
    """Test payload id handling."""

    def test_reads_first_byte(self):
        assert payload_discriminant(b"\x03rest") == 3

    def test_empty_payload(self):
        with pytest.raises(MalformedPayloadError):
            payload_discriminant(b"")

    @pytest.mark.parametrize("payload_id", [0, 2, 4, 255])
    def test_unknown_discriminant(self, payload_id):
        data = bytes([payload_id]) + transfer_bytes()[1:]
        with pytest.raises(UnrecognizedPayloadDiscriminant) as exc_info:
            decode_transfer_payload(data)
        assert exc_info.value.discriminant == payload_id


class TestTransferPayload:
    """Test payload 1 decoding."""

    def test_one_token_transfer(self):
        data = transfer_bytes()
        assert data[1:33].hex().endswith("0f4240")

        transfer = decode_transfer_payload(data)

        assert transfer.payload_id == PAYLOAD_TRANSFER
        assert transfer.amount == 1_000_000
        assert transfer.token_address == TOKEN
        assert transfer.token_chain == 2
        assert transfer.to == RECIPIENT
        assert transfer.to_chain == 1
        assert transfer.fee == 0
        assert not transfer.has_payload

    def test_fee_is_read_when_present(self):
        transfer = decode_transfer_payload(transfer_bytes(fee=77))
        assert transfer.fee == 77

    def test_short_payload(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            decode_transfer_payload(transfer_bytes()[:100])
        assert exc_info.value.expected_length == 101
        assert exc_info.value.actual_length == 100

    def test_encode_matches_layout(self):
        transfer = TransferPayload(
            payload_id=PAYLOAD_TRANSFER,
            amount=1_000_000,
            token_address=TOKEN,
            token_chain=2,
            to=RECIPIENT,
            to_chain=1,
            fee=9,
        )
        assert encode_transfer_payload(transfer) == transfer_bytes(fee=9)

    def test_encode_rejects_overflow(self):
        transfer = TransferPayload(
            payload_id=PAYLOAD_TRANSFER,
            amount=2**256,
            token_address=TOKEN,
            token_chain=2,
            to=RECIPIENT,
            to_chain=1,
        )
        with pytest.raises(AmountOverflowError):
            encode_transfer_payload(transfer)


class TestTransferWithPayload:
    """Test payload 3 decoding."""

    def test_trailing_payload(self):
        sender = b"\x09" * 32
        data = b"\x03" + transfer_bytes()[1:] + sender + b"hello"

        transfer = decode_transfer_payload(data)

        assert transfer.payload_id == PAYLOAD_TRANSFER_WITH_PAYLOAD
        assert transfer.from_address == sender
        assert transfer.payload == b"hello"
        assert transfer.has_payload

    def test_empty_trailing_payload(self):
        data = b"\x03" + transfer_bytes()[1:] + b"\x09" * 32
        assert decode_transfer_payload(data).payload == b""

    def test_short(self):
        with pytest.raises(MalformedPayloadError):
            decode_transfer_payload(b"\x03" + transfer_bytes()[1:])


class TestRelayerPayload:
    """Test the relayer sub-payload."""

    def test_decode(self):
        data = (
            b"\x01"
            + (250).to_bytes(32, "big")
            + (10**6).to_bytes(32, "big")
            + RECIPIENT
        )
        payload = decode_relayer_payload(data)
        assert payload == RelayerPayload(
            relayer_payload_id=1,
            relayer_fee=250,
            to_native_token_amount=10**6,
            recipient=RECIPIENT,
        )
        assert encode_relayer_payload(payload) == data

    def test_short(self):
        with pytest.raises(MalformedPayloadError):
            decode_relayer_payload(b"\x01" * 96)

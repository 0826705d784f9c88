"""
Codecs for canonical addresses, wire amounts, bridge payloads and VAAs.
"""

from .address import (
    CANONICAL_ADDRESS_LENGTH,
    canonical,
    hex_account,
    narrow,
    strip_zeros,
    to_bytes,
    to_hex,
    zero_pad,
)
from .amount import (
    MAX_UINT64,
    MAX_UINT128,
    MAX_UINT256,
    WIRE_DECIMALS,
    check_uint,
    denormalize_amount,
    format_units,
    normalize_amount,
    parse_units,
    to_fixed_decimals,
    truncate_amount,
)
from .message import MessageCodec
from .payload import (
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
from .vaa import GuardianSignature, SignedVaa, parse_vaa

__all__ = [
    # Addresses
    "CANONICAL_ADDRESS_LENGTH",
    "canonical",
    "hex_account",
    "narrow",
    "strip_zeros",
    "to_bytes",
    "to_hex",
    "zero_pad",
    # Amounts
    "WIRE_DECIMALS",
    "MAX_UINT64",
    "MAX_UINT128",
    "MAX_UINT256",
    "check_uint",
    "normalize_amount",
    "denormalize_amount",
    "truncate_amount",
    "parse_units",
    "format_units",
    "to_fixed_decimals",
    # Payloads
    "PAYLOAD_TRANSFER",
    "PAYLOAD_TRANSFER_WITH_PAYLOAD",
    "TransferPayload",
    "RelayerPayload",
    "payload_discriminant",
    "decode_transfer_payload",
    "encode_transfer_payload",
    "decode_relayer_payload",
    "encode_relayer_payload",
    # Attestations
    "GuardianSignature",
    "SignedVaa",
    "parse_vaa",
    # Messages
    "MessageCodec",
]

"""Sei chain backend."""

from .context import (
    SEI_NATIVE_DENOM,
    SeiContext,
    bech32_to_bytes,
    bytes_to_bech32,
    decode_native_denom,
    encode_native_denom,
    is_native_denom,
    translator_payload,
)

__all__ = [
    "SeiContext",
    "SEI_NATIVE_DENOM",
    "bech32_to_bytes",
    "bytes_to_bech32",
    "encode_native_denom",
    "decode_native_denom",
    "is_native_denom",
    "translator_payload",
]

"""
Canonical address helpers.

The bridge identifies every account and asset by a 32-byte big-endian value.
Chains with shorter native addresses are zero-left-padded into it; going
back, the dropped prefix must be all zero.
"""

from typing import Union

from ..errors import AddressFormatError

CANONICAL_ADDRESS_LENGTH = 32

BytesLike = Union[bytes, bytearray, memoryview, str]


def to_bytes(value: BytesLike) -> bytes:
    """Accept raw bytes or a hex string (with or without ``0x``)."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        text = value[2:] if value[:2] in ("0x", "0X") else value
        if len(text) % 2:
            text = "0" + text
        try:
            return bytes.fromhex(text)
        except ValueError as e:
            raise AddressFormatError(f"Invalid hex string {value!r}", address=value) from e
    raise AddressFormatError(
        f"Expected bytes or hex string, got {type(value).__name__}", address=value
    )


def zero_pad(data: BytesLike, length: int = CANONICAL_ADDRESS_LENGTH) -> bytes:
    """Left-pad ``data`` with zero bytes to ``length``."""
    raw = to_bytes(data)
    if len(raw) > length:
        raise AddressFormatError(
            f"Address of {len(raw)} bytes does not fit in {length} bytes",
            address="0x" + raw.hex(),
        )
    return raw.rjust(length, b"\x00")


def narrow(data: BytesLike, width: int) -> bytes:
    """Take the low ``width`` bytes of a canonical address.

    The high bytes must be zero; a non-zero prefix means the value is not an
    address of the narrower format.
    """
    raw = to_bytes(data)
    if len(raw) < width:
        return raw.rjust(width, b"\x00")
    prefix, tail = raw[: len(raw) - width], raw[len(raw) - width :]
    if any(prefix):
        raise AddressFormatError(
            f"Address 0x{raw.hex()} has a non-zero prefix and cannot be narrowed "
            f"to {width} bytes",
            address="0x" + raw.hex(),
        )
    return tail


def strip_zeros(data: BytesLike) -> bytes:
    """Drop leading zero bytes."""
    return to_bytes(data).lstrip(b"\x00")


def to_hex(data: BytesLike) -> str:
    """Render bytes as ``0x``-prefixed lowercase hex."""
    return "0x" + to_bytes(data).hex()


def canonical(data: BytesLike) -> bytes:
    """Validate a value that must already be a 32-byte canonical address."""
    raw = to_bytes(data)
    if len(raw) != CANONICAL_ADDRESS_LENGTH:
        raise AddressFormatError(
            f"Canonical address must be {CANONICAL_ADDRESS_LENGTH} bytes, got {len(raw)}",
            address="0x" + raw.hex(),
        )
    return raw


def hex_account(address: str) -> bytes:
    """Parse a ``0x``-prefixed account of at most 32 bytes, as used by Move chains.

    Short forms such as ``0x2`` are zero-padded.
    """
    if not isinstance(address, str) or address[:2] not in ("0x", "0X"):
        raise AddressFormatError(
            f"Expected 0x-prefixed hex address, got {address!r}", address=address
        )
    text = address[2:]
    if not text or len(text) > 2 * CANONICAL_ADDRESS_LENGTH:
        raise AddressFormatError(f"Invalid account address {address!r}", address=address)
    return zero_pad(text)

"""
Signed attestation (VAA) parser.

A VAA is a header carrying the guardian signatures followed by the signed
body::

    version (1) | guardian set index (4) | n (1) | n * (index (1) | sig (65))
    timestamp (4) | nonce (4) | emitter chain (2) | emitter address (32)
    sequence (8) | consistency level (1) | payload

The hash identifying the VAA (used for replay protection by the bridge
contracts) is ``keccak256(body)``.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from web3 import Web3

from ..errors import MalformedPayloadError
from .address import to_bytes

HEADER_LENGTH = 6
SIGNATURE_LENGTH = 66
BODY_FIXED_LENGTH = 51


@dataclass(frozen=True)
class GuardianSignature:
    index: int
    signature: bytes


@dataclass(frozen=True)
class SignedVaa:
    """A parsed guardian-signed attestation."""

    version: int
    guardian_set_index: int
    guardian_signatures: Tuple[GuardianSignature, ...]
    timestamp: int
    nonce: int
    emitter_chain: int
    emitter_address: bytes
    sequence: int
    consistency_level: int
    payload: bytes
    body: bytes
    hash: bytes

    @property
    def digest(self) -> bytes:
        """The value the guardians sign: ``keccak256(hash)``.

        Bridges record completed transfers under this value.
        """
        return bytes(Web3.keccak(self.hash))


def parse_vaa(signed_vaa: Union[bytes, str]) -> SignedVaa:
    """Parse raw VAA bytes (or their hex encoding)."""
    data = to_bytes(signed_vaa)
    if len(data) < HEADER_LENGTH:
        raise MalformedPayloadError(
            f"VAA is {len(data)} bytes, shorter than its header",
            expected_length=HEADER_LENGTH,
            actual_length=len(data),
        )

    version = data[0]
    guardian_set_index = int.from_bytes(data[1:5], "big")
    signature_count = data[5]
    body_start = HEADER_LENGTH + signature_count * SIGNATURE_LENGTH
    if len(data) < body_start + BODY_FIXED_LENGTH:
        raise MalformedPayloadError(
            f"VAA with {signature_count} signatures is {len(data)} bytes, expected "
            f"at least {body_start + BODY_FIXED_LENGTH}",
            expected_length=body_start + BODY_FIXED_LENGTH,
            actual_length=len(data),
        )

    signatures = []
    for i in range(signature_count):
        offset = HEADER_LENGTH + i * SIGNATURE_LENGTH
        signatures.append(
            GuardianSignature(
                index=data[offset],
                signature=data[offset + 1 : offset + SIGNATURE_LENGTH],
            )
        )

    body = data[body_start:]
    return SignedVaa(
        version=version,
        guardian_set_index=guardian_set_index,
        guardian_signatures=tuple(signatures),
        timestamp=int.from_bytes(body[0:4], "big"),
        nonce=int.from_bytes(body[4:8], "big"),
        emitter_chain=int.from_bytes(body[8:10], "big"),
        emitter_address=body[10:42],
        sequence=int.from_bytes(body[42:50], "big"),
        consistency_level=body[50],
        payload=body[51:],
        body=body,
        hash=bytes(Web3.keccak(body)),
    )

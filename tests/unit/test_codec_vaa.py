"""Unit tests for the VAA parser."""

import pytest
from web3 import Web3

from tokenbridge.codec.vaa import parse_vaa
from tokenbridge.errors import MalformedPayloadError

from bridge_fakes import build_vaa


class TestParseVaa:
    """Test parse_vaa."""

    def test_fields(self):
        raw = build_vaa()
        vaa = parse_vaa(raw)

        assert vaa.version == 1
        assert vaa.guardian_set_index == 3
        assert [sig.index for sig in vaa.guardian_signatures] == [0, 1]
        assert vaa.guardian_signatures[1].signature == b"\x02" * 65
        assert vaa.timestamp == 1_700_000_000
        assert vaa.nonce == 42
        assert vaa.emitter_chain == 2
        assert vaa.emitter_address == b"\x00" * 12 + b"\x3e" * 20
        assert vaa.sequence == 1234
        assert vaa.consistency_level == 15
        assert vaa.payload == b"payload"

    def test_hash_is_keccak_of_body(self):
        raw = build_vaa()
        vaa = parse_vaa(raw)
        body = raw[6 + 2 * 66 :]
        assert vaa.body == body
        assert vaa.hash == bytes(Web3.keccak(body))
        assert vaa.digest == bytes(Web3.keccak(vaa.hash))

    def test_hex_input(self):
        raw = build_vaa(signatures=0)
        assert parse_vaa("0x" + raw.hex()) == parse_vaa(raw)

    def test_truncated_header(self):
        with pytest.raises(MalformedPayloadError):
            parse_vaa(b"\x01\x00")

    def test_truncated_body(self):
        raw = build_vaa(payload=b"")
        with pytest.raises(MalformedPayloadError):
            parse_vaa(raw[:-1])

"""
Unit tests for shared helpers and the local signing capability
"""

import re
from datetime import datetime, timedelta, timezone

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from multisign_sdk.exceptions import SigningFailedError, ValidationError
from multisign_sdk.signing import IdentityProvider, LocalAccountSigner, SigningCapability, StaticIdentityProvider
from multisign_sdk.utils import (
    format_timestamp,
    generate_document_id,
    hex_to_bytes,
    normalize_hex,
    now_utc,
    parse_timestamp,
)


class TestTimestamps:
    """Test timestamp helpers"""

    def test_now_truncated_to_milliseconds(self):
        assert now_utc().microsecond % 1000 == 0
        assert now_utc().tzinfo == timezone.utc

    def test_format(self):
        dt = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        assert format_timestamp(dt) == "2025-01-02T03:04:05.678Z"

    def test_format_converts_to_utc(self):
        dt = datetime(2025, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(dt) == "2025-01-02T03:04:05.000Z"

    def test_parse_round_trip(self):
        dt = now_utc()
        assert parse_timestamp(format_timestamp(dt)) == dt

    @pytest.mark.parametrize("value", ["", "yesterday", None, 12])
    def test_parse_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_timestamp(value)


class TestIdentifiers:
    """Test document id generation"""

    def test_format_and_uniqueness(self):
        ids = {generate_document_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(re.match(r'^doc_\d+_[0-9a-f]{9}$', i) for i in ids)


class TestHex:
    """Test hex helpers"""

    def test_normalize(self):
        assert normalize_hex("ABcd") == "0xabcd"
        assert normalize_hex("0xABCD") == "0xabcd"
        assert normalize_hex(b"\x01\xff") == "0x01ff"
        assert hex_to_bytes("0x01ff") == b"\x01\xff"

    @pytest.mark.parametrize("value", ["0xabc", "xyz", 5])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            normalize_hex(value)


class TestLocalAccountSigner:
    """Test the eth-account backed signer"""

    def test_protocols(self, alice_signer):
        assert isinstance(alice_signer, SigningCapability)
        assert isinstance(StaticIdentityProvider(), IdentityProvider)

    def test_sign_recoverable(self, alice_signer):
        signature = alice_signer.sign("attest", alice_signer.address)
        assert len(hex_to_bytes(signature)) == 65
        recovered = Account.recover_message(encode_defunct(text="attest"), signature=signature)
        assert recovered == alice_signer.get_account()

    def test_deterministic_for_fixed_key(self, alice_signer):
        assert alice_signer.sign("m", alice_signer.address) == alice_signer.sign("m", alice_signer.address)

    def test_wrong_account(self, alice_signer, bob_signer):
        with pytest.raises(SigningFailedError):
            alice_signer.sign("m", bob_signer.address)

    def test_generated_keys_differ(self):
        assert LocalAccountSigner.generate().address != LocalAccountSigner.generate().address

"""
Unit tests for the identity matching policy
"""

import pytest

from multisign_sdk.documents.types import AuthenticatedUser, Identity, RequiredSigner, Signature
from multisign_sdk.exceptions import NotAuthenticatedError
from multisign_sdk.signing.identity import (
    build_identity,
    find_signature,
    identities_match,
    identity_matches,
    signer_has_signed,
)
from multisign_sdk.utils import now_utc


class TestIdentityMatches:
    """Test identity to identifier matching"""

    def test_subject_id(self, alice):
        assert identity_matches(alice, "sub-alice")

    def test_email_case_insensitive(self, bob):
        assert identity_matches(bob, "bob@example.com")
        assert identity_matches(bob, "BOB@EXAMPLE.COM")

    def test_display_name_exact(self, alice):
        assert identity_matches(alice, "alice")
        assert not identity_matches(alice, "Alice")

    def test_no_match(self, alice):
        assert not identity_matches(alice, "sub-bob")
        assert not identity_matches(alice, "")
        assert not identity_matches(alice, None)

    def test_identity_without_email(self, carol):
        assert not identity_matches(carol, "carol@example.com")
        assert identity_matches(carol, "sub-carol")


class TestIdentitiesMatch:
    """Test identity to identity matching"""

    def test_same_subject(self, alice):
        other = Identity(subject_id="sub-alice", display_name="x", wallet_address="0x1")
        assert identities_match(alice, other)

    def test_same_email(self, bob):
        other = Identity(subject_id="other", display_name="x", email="bob@example.com", wallet_address="0x1")
        assert identities_match(bob, other)

    def test_display_name_alone_does_not_match(self, alice):
        impostor = Identity(subject_id="sub-eve", display_name="alice", wallet_address="0x1")
        assert not identities_match(alice, impostor)

    def test_none(self, alice):
        assert not identities_match(alice, None)


class TestSignatureLookup:
    """Test signature lookup helpers"""

    def test_signer_has_signed_and_find(self, alice, bob):
        signature = Signature(signer=alice, signature="0x00", signed_at=now_utc(), document_hash="0x00")
        assert signer_has_signed(RequiredSigner("alice@example.com"), [signature])
        assert not signer_has_signed(RequiredSigner("sub-bob"), [signature])
        assert find_signature(alice, [signature]) is signature
        assert find_signature(bob, [signature]) is None


class TestBuildIdentity:
    """Test combining a user with a wallet"""

    def test_build(self):
        identity = build_identity(AuthenticatedUser("sub-1", "dana", "d@example.com"), "0xabc")
        assert identity.display_name == "dana"
        assert identity.wallet_address == "0xabc"

    def test_display_name_falls_back(self):
        assert build_identity(AuthenticatedUser("sub-1", None, "d@example.com"), "0xabc").display_name == "d@example.com"
        assert build_identity(AuthenticatedUser("sub-1"), "0xabc").display_name == "sub-1"

    @pytest.mark.parametrize("user,wallet", [
        (None, "0xabc"),
        (AuthenticatedUser("sub-1"), None),
        (AuthenticatedUser("sub-1"), ""),
        (AuthenticatedUser(""), "0xabc"),
    ])
    def test_missing_parts(self, user, wallet):
        with pytest.raises(NotAuthenticatedError):
            build_identity(user, wallet)

"""
Unit tests for document lifecycle derivation
"""

from dataclasses import replace

import pytest

from multisign_sdk.documents import lifecycle
from multisign_sdk.documents.types import DocumentStatus, RequiredSigner, Signature
from multisign_sdk.exceptions import InvalidDocumentStateError, NotAuthenticatedError
from multisign_sdk.utils import now_utc


def add_signature(document, identity):
    document.signatures.append(Signature(
        signer=identity,
        signature="0x" + "00" * 65,
        signed_at=now_utc(),
        document_hash=document.content.hash
    ))


class TestComputeStatus:
    """Test status derivation"""

    def test_pending_without_signatures(self, make_document):
        assert lifecycle.compute_status(make_document()) == DocumentStatus.PENDING

    def test_partial_then_complete(self, make_document, alice, bob):
        document = make_document()
        add_signature(document, alice)
        assert lifecycle.refresh(document).status == DocumentStatus.PARTIAL
        assert [s.has_signed for s in document.required_signers] == [True, False]

        add_signature(document, bob)
        assert lifecycle.refresh(document).status == DocumentStatus.COMPLETE
        assert all(s.has_signed for s in document.required_signers)

    def test_signer_matched_by_email(self, make_document, bob):
        document = make_document(signers=('bob@example.com',))
        add_signature(document, bob)
        assert lifecycle.refresh(document).status == DocumentStatus.COMPLETE

    def test_stale_cache_ignored(self, make_document):
        document = make_document()
        for signer in document.required_signers:
            signer.has_signed = True
        document.status = DocumentStatus.COMPLETE
        assert lifecycle.refresh(document).status == DocumentStatus.PENDING
        assert not any(s.has_signed for s in document.required_signers)

    def test_optional_signer_not_needed(self, make_document, alice):
        document = make_document()
        document.required_signers[1] = RequiredSigner("sub-bob", required=False)
        add_signature(document, alice)
        assert lifecycle.refresh(document).status == DocumentStatus.COMPLETE

    def test_cancelled_is_sticky(self, make_document, alice, bob):
        document = make_document()
        document.status = DocumentStatus.CANCELLED
        add_signature(document, alice)
        add_signature(document, bob)
        assert lifecycle.refresh(document).status == DocumentStatus.CANCELLED


class TestSignatureStatus:
    """Test signature coverage reporting"""

    def test_half_signed(self, make_document, alice):
        document = make_document()
        add_signature(document, alice)
        status = lifecycle.signature_status(document)
        assert (status.total, status.signed, status.percentage) == (2, 1, 50)
        assert status.pending == ["sub-bob"]
        assert status.missing_signers[0].identifier == "sub-bob"
        assert not status.complete

    def test_rounding(self, make_document, alice):
        document = make_document(signers=('sub-alice', 'b', 'c'))
        add_signature(document, alice)
        assert lifecycle.signature_status(document).percentage == 33

    def test_unrelated_signature_not_counted(self, make_document, carol):
        document = make_document()
        add_signature(document, carol)
        assert lifecycle.signature_status(document).signed == 0


class TestMembership:
    """Test signer membership helpers"""

    def test_is_required_signer_and_has_signed(self, make_document, alice, carol):
        document = make_document()
        assert lifecycle.is_required_signer(document, alice)
        assert not lifecycle.is_required_signer(document, carol)
        assert not lifecycle.is_required_signer(document, None)

        assert lifecycle.can_sign(document, alice)
        add_signature(document, alice)
        assert lifecycle.has_signed(document, alice)
        assert not lifecycle.can_sign(document, alice)

    def test_filled_display_name_entry_blocks_namesake(self, make_document, bob):
        namesake = replace(bob, subject_id='sub-bob-2', email=None, wallet_address='0x' + '34' * 20)
        document = make_document(signers=('sub-alice', 'bob'))
        assert lifecycle.can_sign(document, namesake)

        add_signature(document, bob)
        assert lifecycle.is_required_signer(document, namesake)
        assert not lifecycle.has_signed(document, namesake)
        assert not lifecycle.can_sign(document, namesake)


class TestCancel:
    """Test administrative cancellation"""

    def test_cancel_pending(self, make_document, alice):
        document = lifecycle.cancel(make_document(), alice, "wrong terms")
        assert document.status == DocumentStatus.CANCELLED
        assert document.cancelled_by is alice
        assert document.cancellation_reason == "wrong terms"
        assert document.cancelled_at is not None

    def test_cancel_partial(self, make_document, alice):
        document = make_document()
        add_signature(document, alice)
        assert lifecycle.cancel(document, alice, "x").status == DocumentStatus.CANCELLED

    def test_cannot_cancel_complete(self, make_document, alice, bob):
        document = make_document()
        add_signature(document, alice)
        add_signature(document, bob)
        with pytest.raises(InvalidDocumentStateError):
            lifecycle.cancel(document, alice, "too late")

    def test_cannot_cancel_twice(self, make_document, alice):
        document = lifecycle.cancel(make_document(), alice, "once")
        with pytest.raises(InvalidDocumentStateError):
            lifecycle.cancel(document, alice, "twice")

    def test_requires_actor(self, make_document):
        with pytest.raises(NotAuthenticatedError):
            lifecycle.cancel(make_document(), None, "anonymous")

    def test_cancel_is_logged(self, make_document, alice, caplog):
        with caplog.at_level("INFO", logger="multisign_sdk.documents.lifecycle"):
            lifecycle.cancel(make_document(), alice, "audit me")
        assert "AUDIT document cancelled" in caplog.text
        assert "audit me" in caplog.text

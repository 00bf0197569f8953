"""
Document lifecycle

Status and signature coverage are derived from the signature list every
time they are needed; the stored `status` and `has_signed` fields are caches
rewritten by `refresh`.
"""

import logging
from typing import List, Optional

from ..exceptions import InvalidDocumentStateError, NotAuthenticatedError
from ..signing.identity import find_signature, identity_matches, signer_entries_filled, signer_has_signed
from ..utils import now_utc
from .types import Document, DocumentStatus, Identity, RequiredSigner, SignatureStatus

logger = logging.getLogger(__name__)

CANCELLABLE_STATUSES = (DocumentStatus.PENDING, DocumentStatus.PARTIAL)


def required_entries(document: Document) -> List[RequiredSigner]:
    return [s for s in document.required_signers if s.required]


def all_required_signed(document: Document) -> bool:
    """Whether every required signer has a matching signature."""
    return all(signer_has_signed(s, document.signatures) for s in required_entries(document))


def compute_status(document: Document) -> DocumentStatus:
    """
    Derive the status of a document from its signatures.

    Returns:
        DocumentStatus: cancelled if administratively cancelled, otherwise
        complete, partial or pending depending on signature coverage
    """
    if document.status == DocumentStatus.CANCELLED or document.cancelled_at is not None:
        return DocumentStatus.CANCELLED

    if all_required_signed(document):
        return DocumentStatus.COMPLETE

    if document.signatures:
        return DocumentStatus.PARTIAL

    return DocumentStatus.PENDING


def refresh(document: Document) -> Document:
    """
    Rewrite the cached signer flags and status of a document in place.

    Returns:
        Document: The same document, for chaining
    """
    for signer in document.required_signers:
        signer.has_signed = signer_has_signed(signer, document.signatures)

    previous = document.status
    document.status = compute_status(document)

    if previous != document.status:
        logger.debug(f"Document {document.id} status {previous.value} -> {document.status.value}")
        if document.status == DocumentStatus.COMPLETE:
            logger.info(f"Document {document.id} has collected all required signatures")

    return document


def signature_status(document: Document) -> SignatureStatus:
    """
    Compute signature coverage over the required signers.

    Entries marked optional are left out of the totals.
    """
    required = required_entries(document)
    missing = [s for s in required if not signer_has_signed(s, document.signatures)]
    total = len(required)
    signed = total - len(missing)

    return SignatureStatus(
        total=total,
        signed=signed,
        percentage=round(signed / total * 100) if total else 0,
        pending=[s.identifier for s in missing],
        complete=total > 0 and not missing,
        missing_signers=missing
    )


def is_required_signer(document: Document, identity: Optional[Identity]) -> bool:
    """Whether the identity answers to any signer entry of the document."""
    if identity is None:
        return False
    return any(identity_matches(identity, s.identifier) for s in document.required_signers)


def has_signed(document: Document, identity: Optional[Identity]) -> bool:
    """Whether the identity already holds a signature on the document."""
    if identity is None:
        return False
    return find_signature(identity, document.signatures) is not None


def can_sign(document: Document, identity: Optional[Identity]) -> bool:
    return (
        document.status != DocumentStatus.CANCELLED
        and is_required_signer(document, identity)
        and not has_signed(document, identity)
        and not signer_entries_filled(identity, document.required_signers, document.signatures)
    )


def cancel(document: Document, actor: Optional[Identity], reason: str) -> Document:
    """
    Administratively cancel a document.

    Args:
        document: Document to cancel
        actor: Authenticated identity performing the cancellation
        reason: Recorded reason

    Returns:
        Document: The cancelled document

    Raises:
        NotAuthenticatedError: If no actor is given
        InvalidDocumentStateError: If the document is not pending or partially signed
    """
    if actor is None or not actor.subject_id:
        raise NotAuthenticatedError()

    refresh(document)
    if document.status not in CANCELLABLE_STATUSES:
        raise InvalidDocumentStateError(
            f"Cannot cancel a document that is {document.status.value}",
            document.id,
            document.status.value
        )

    now = now_utc()
    document.status = DocumentStatus.CANCELLED
    document.cancelled_at = now
    document.cancelled_by = actor
    document.cancellation_reason = reason
    document.updated_at = now

    logger.info(
        f"AUDIT document cancelled: id={document.id} by={actor.subject_id} "
        f"reason={reason!r} signatures={len(document.signatures)}"
    )
    return document

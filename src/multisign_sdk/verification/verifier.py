"""
Offline verification engine for multi-party signed documents

Everything is recomputed from the document itself: the attestation message
is rebuilt, the content hash recomputed and the signer address recovered
from each signature. Cached `verified` flags are never consulted.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from eth_account import Account
from eth_account.messages import encode_defunct

from ..canonical.hashing import hash_content
from ..documents.types import Document, Signature
from ..signing.identity import signer_has_signed
from ..signing.message import build_message
from ..signing.types import SIGNATURE_LENGTH
from ..utils import hex_to_bytes, now_utc
from .types import DocumentVerification, SignatureVerification

logger = logging.getLogger(__name__)

MISSING_SIGNERS_ERROR = "Not all required signers have signed"


class VerificationEngine:
    """
    Verifies signatures and documents without trusting application state
    """

    def __init__(self, max_workers: int = 1):
        """
        Initialize the verification engine.

        Args:
            max_workers: Threads used to verify the documents of a batch and the
                signatures of one document;
                1 verifies sequentially
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers

    def verify_signature(self, signature: Signature, document: Document,
                         current_hash: Optional[str] = None) -> SignatureVerification:
        """
        Verify one signature against the document it was recorded on.

        Args:
            signature: Signature record to verify
            document: Document carrying the signature
            current_hash: Freshly computed content hash, when the caller already has one

        Returns:
            SignatureVerification: Never raises; failures are reported in the result
        """
        expected = signature.signer.wallet_address if signature.signer else ''

        try:
            if current_hash is None:
                current_hash = hash_content(document.content.data, max_depth=None)

            signature_bytes = hex_to_bytes(signature.signature)
            if len(signature_bytes) != SIGNATURE_LENGTH:
                return SignatureVerification.create_error(
                    expected, f"signature must be {SIGNATURE_LENGTH} bytes, got {len(signature_bytes)}"
                )

            message = build_message(document)
            recovered = Account.recover_message(encode_defunct(text=message), signature=signature_bytes)
        except Exception as e:
            logger.warning(f"Signature on {document.id} could not be checked: {e}")
            return SignatureVerification.create_error(expected, str(e) or type(e).__name__)

        address_match = bool(expected) and recovered.lower() == expected.lower()
        hash_match = signature.document_hash.lower() == current_hash

        error = None
        if not address_match:
            error = f"recovered address {recovered} does not match {expected or 'an empty address'}"
        elif not hash_match:
            error = "document content changed after signing"

        return SignatureVerification(
            valid=address_match and hash_match,
            recovered_address=recovered,
            expected_address=expected,
            address_match=address_match,
            hash_match=hash_match,
            error=error
        )

    def verify_document(self, document: Document) -> DocumentVerification:
        """
        Verify every signature, the content hash and signer coverage.

        Args:
            document: Document to verify

        Returns:
            DocumentVerification: Aggregated result; never raises
        """
        errors: List[str] = []

        try:
            current_hash: Optional[str] = hash_content(document.content.data, max_depth=None)
        except Exception as e:
            logger.warning(f"Content of {document.id} could not be canonicalized: {e}")
            current_hash = None
            errors.append(f"Content could not be canonicalized: {e}")

        content_hash_valid = current_hash is not None and current_hash == document.content.hash.lower()
        if current_hash is not None and not content_hash_valid:
            errors.append("Content hash does not match document content")

        if current_hash is None:
            results = [
                SignatureVerification.create_error(sig.signer.wallet_address, "content could not be canonicalized")
                for sig in document.signatures
            ]
        else:
            results = self._verify_all(document, current_hash)

        for sig, result in zip(document.signatures, results):
            if not result.valid:
                errors.append(f"Invalid signature from {sig.signer.display_name}: {result.error}")

        signatures_valid = all(r.valid for r in results)

        all_signers_present = all(
            signer_has_signed(s, document.signatures)
            for s in document.required_signers if s.required
        )
        if not all_signers_present:
            errors.append(MISSING_SIGNERS_ERROR)

        valid = signatures_valid and content_hash_valid and all_signers_present
        if valid:
            logger.debug(f"Document {document.id} verified with {len(results)} signatures")
        else:
            logger.warning(f"Document {document.id} failed verification: {'; '.join(errors)}")

        return DocumentVerification(
            valid=valid,
            signatures_valid=signatures_valid,
            content_hash_valid=content_hash_valid,
            all_signers_present=all_signers_present,
            errors=errors,
            verified_at=now_utc(),
            signature_results=results
        )

    def verify_documents(self, documents: List[Document]) -> List[DocumentVerification]:
        """Verify a batch of documents, preserving order."""
        documents = list(documents)
        if self.max_workers == 1 or len(documents) < 2:
            return [self.verify_document(doc) for doc in documents]

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(self.verify_document, documents))

    def _verify_all(self, document: Document, current_hash: str) -> List[SignatureVerification]:
        signatures = list(document.signatures)
        if self.max_workers == 1 or len(signatures) < 2:
            return [self.verify_signature(sig, document, current_hash) for sig in signatures]

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(lambda sig: self.verify_signature(sig, document, current_hash), signatures))


def apply_verification(document: Document, report: DocumentVerification) -> Document:
    """
    Write the lazy `verified` caches of a document from a verification report.

    The caches are a read optimization; verification always recomputes.
    """
    for sig, result in zip(document.signatures, report.signature_results):
        sig.verified = result.valid
        sig.verified_at = report.verified_at
    return document


def verify_signature(signature: Signature, document: Document) -> SignatureVerification:
    """Verify a single signature with a default engine."""
    return VerificationEngine().verify_signature(signature, document)


def verify_document(document: Document) -> DocumentVerification:
    """Verify a document with a default engine."""
    return VerificationEngine().verify_document(document)

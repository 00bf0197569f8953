"""
Offline verification of signed documents
"""

from .types import DocumentVerification, SignatureVerification, VerificationStatus
from .verifier import (
    MISSING_SIGNERS_ERROR,
    VerificationEngine,
    apply_verification,
    verify_document,
    verify_signature,
)

__all__ = [
    'DocumentVerification',
    'SignatureVerification',
    'VerificationStatus',
    'MISSING_SIGNERS_ERROR',
    'VerificationEngine',
    'apply_verification',
    'verify_document',
    'verify_signature',
]

"""
Type definitions for signature verification

Verification never raises for a bad signature or tampered content; it
reports the outcome in these result objects instead.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..utils import format_timestamp


class VerificationStatus(str, Enum):
    """Verification result status"""
    VALID = "valid"
    INVALID = "invalid"
    ERROR = "error"


@dataclass
class SignatureVerification:
    """
    Result of verifying a single signature

    Attributes:
        valid: address_match and hash_match
        recovered_address: Address recovered from the signature, if recovery succeeded
        expected_address: Wallet address recorded for the signer
        address_match: Recovered address equals the expected one (case-insensitive)
        hash_match: Hash recorded at signing equals the freshly computed content hash
        error: Reason the signature failed, if it did
    """
    valid: bool
    recovered_address: Optional[str]
    expected_address: str
    address_match: bool
    hash_match: bool
    error: Optional[str] = None

    @property
    def status(self) -> VerificationStatus:
        if self.valid:
            return VerificationStatus.VALID
        if self.recovered_address is None:
            return VerificationStatus.ERROR
        return VerificationStatus.INVALID

    @classmethod
    def create_error(cls, expected_address: str, error: str) -> 'SignatureVerification':
        """Create a result for a signature that could not be checked at all"""
        return cls(
            valid=False,
            recovered_address=None,
            expected_address=expected_address,
            address_match=False,
            hash_match=False,
            error=error
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'valid': self.valid,
            'recoveredAddress': self.recovered_address,
            'expectedAddress': self.expected_address,
            'addressMatch': self.address_match,
            'hashMatch': self.hash_match,
            'error': self.error,
        }


@dataclass
class DocumentVerification:
    """
    Result of verifying a whole document

    Attributes:
        valid: Conjunction of the three checks below
        signatures_valid: Every signature verified
        content_hash_valid: Stored content hash equals the freshly computed one
        all_signers_present: Every required signer has a matching signature
        errors: Human-readable failure descriptions
        verified_at: When the verification ran
        signature_results: Per-signature results, in signature order
    """
    valid: bool
    signatures_valid: bool
    content_hash_valid: bool
    all_signers_present: bool
    errors: List[str]
    verified_at: datetime
    signature_results: List[SignatureVerification] = field(default_factory=list)

    @property
    def status(self) -> VerificationStatus:
        return VerificationStatus.VALID if self.valid else VerificationStatus.INVALID

    def to_dict(self) -> Dict[str, Any]:
        return {
            'valid': self.valid,
            'signaturesValid': self.signatures_valid,
            'contentHashValid': self.content_hash_valid,
            'allSignersPresent': self.all_signers_present,
            'errors': list(self.errors),
            'verifiedAt': format_timestamp(self.verified_at),
            'signatureResults': [r.to_dict() for r in self.signature_results],
        }

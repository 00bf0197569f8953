"""
Signing: identity matching, attestation messages and signature coordination
"""

from .identity import (
    build_identity,
    find_signature,
    identities_match,
    identity_matches,
    signer_entries_filled,
    signer_has_signed,
)
from .message import (
    LEGACY_MESSAGE_VERSION,
    MESSAGE_FORMAT_VERSION,
    AttestationMessageBuilder,
    build_message,
    message_version,
    parse_attestation_message,
    validate_attestation_message,
)
from .types import SIGNATURE_LENGTH, IdentityProvider, SigningCapability
from .wallet import LocalAccountSigner, StaticIdentityProvider
from .coordinator import DocumentLockRegistry, SignatureCoordinator

__all__ = [
    'build_identity',
    'find_signature',
    'identities_match',
    'identity_matches',
    'signer_entries_filled',
    'signer_has_signed',
    'LEGACY_MESSAGE_VERSION',
    'MESSAGE_FORMAT_VERSION',
    'AttestationMessageBuilder',
    'build_message',
    'message_version',
    'parse_attestation_message',
    'validate_attestation_message',
    'SIGNATURE_LENGTH',
    'IdentityProvider',
    'SigningCapability',
    'LocalAccountSigner',
    'StaticIdentityProvider',
    'DocumentLockRegistry',
    'SignatureCoordinator',
]

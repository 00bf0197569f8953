"""
Identity matching policy

One predicate decides whether an identity corresponds to a required signer
identifier or to another identity. The coordinator, lifecycle and verifier
all go through these functions.
"""

from typing import Iterable, Optional

from ..documents.types import AuthenticatedUser, Identity, RequiredSigner, Signature
from ..exceptions import NotAuthenticatedError


def identity_matches(identity: Identity, identifier: Optional[str]) -> bool:
    """
    Check whether an identity answers to a signer identifier.

    Matches on equal subject id, on case-insensitively equal email, or on
    an identifier equal to the display name.

    Args:
        identity: Identity to test
        identifier: Subject id, email or display name

    Returns:
        bool: True if the identity answers to the identifier
    """
    if identity is None or not identifier:
        return False

    if identity.subject_id and identifier == identity.subject_id:
        return True

    if identity.email and identifier.lower() == identity.email.lower():
        return True

    return bool(identity.display_name) and identifier == identity.display_name


def identities_match(identity: Identity, other: Identity) -> bool:
    """
    Check whether two identities denote the same party.

    Display names are not unique, so only the subject id and the email of
    `other` are tried against `identity`.
    """
    if identity is None or other is None:
        return False
    if identity_matches(identity, other.subject_id):
        return True
    return bool(other.email) and identity_matches(identity, other.email)


def matches_required_signer(identity: Identity, signer: RequiredSigner) -> bool:
    return identity_matches(identity, signer.identifier)


def signer_has_signed(signer: RequiredSigner, signatures: Iterable[Signature]) -> bool:
    """Whether any signature was produced by an identity answering to the signer."""
    return any(identity_matches(sig.signer, signer.identifier) for sig in signatures)


def find_signature(identity: Identity, signatures: Iterable[Signature]) -> Optional[Signature]:
    """Return the signature held by the identity, if any."""
    for sig in signatures:
        if identities_match(sig.signer, identity):
            return sig
    return None


def signer_entries_filled(identity: Identity, signers: Iterable[RequiredSigner],
                          signatures: Iterable[Signature]) -> bool:
    """
    Whether every signer entry the identity answers to is already covered.

    An entry is covered by any signature whose signer answers to it, so a
    second party sharing a display name cannot fill an entry twice.
    """
    signatures = list(signatures)
    entries = [s for s in signers if matches_required_signer(identity, s)]
    return bool(entries) and all(signer_has_signed(s, signatures) for s in entries)


def build_identity(user: Optional[AuthenticatedUser], wallet_address: Optional[str]) -> Identity:
    """
    Combine an authenticated user with a connected wallet account.

    Raises:
        NotAuthenticatedError: If either the user or the wallet is missing
    """
    if user is None or not user.subject_id or not wallet_address:
        raise NotAuthenticatedError()

    return Identity(
        subject_id=user.subject_id,
        display_name=user.username or user.email or user.subject_id,
        email=user.email,
        wallet_address=wallet_address
    )

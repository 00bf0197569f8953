"""
Interfaces of the external collaborators used for signing

The core never talks to a wallet or an identity provider directly; callers
inject objects satisfying these protocols.
"""

from typing import Optional, Protocol, Union, runtime_checkable

from ..documents.types import AuthenticatedUser

# r (32) + s (32) + v (1)
SIGNATURE_LENGTH = 65


@runtime_checkable
class SigningCapability(Protocol):
    """
    Wallet able to produce recoverable secp256k1 signatures

    `sign` applies EIP-191 personal_sign prefixing to the message and returns
    the 65-byte signature as bytes or hex, or None when the user declined.
    """

    def get_account(self) -> Optional[str]:
        ...

    def sign(self, message: str, account: str) -> Optional[Union[str, bytes]]:
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    """Source of the currently authenticated user"""

    def current_user(self) -> Optional[AuthenticatedUser]:
        ...

"""
Local implementations of the signing and identity interfaces

LocalAccountSigner wraps an eth-account LocalAccount. It is meant for
development, command-line use and tests; production deployments inject a
wallet connector instead.
"""

import logging
from typing import Optional, Union

from eth_account import Account
from eth_account.messages import encode_defunct

from ..documents.types import AuthenticatedUser
from ..exceptions import SigningFailedError

logger = logging.getLogger(__name__)


class LocalAccountSigner:
    """
    Signing capability backed by an in-process secp256k1 key
    """

    def __init__(self, private_key: Union[str, bytes, None] = None):
        """
        Initialize the signer.

        Args:
            private_key: Hex or raw 32-byte key; a fresh random key when omitted
        """
        self._account = Account.from_key(private_key) if private_key is not None else Account.create()

    @classmethod
    def generate(cls) -> 'LocalAccountSigner':
        return cls()

    @property
    def address(self) -> str:
        return self._account.address

    def get_account(self) -> Optional[str]:
        return self._account.address

    def sign(self, message: str, account: str) -> Optional[str]:
        """
        Sign a message with EIP-191 personal_sign prefixing.

        Args:
            message: Attestation message text
            account: Account expected to sign

        Returns:
            str: 0x-prefixed hex of the 65-byte signature

        Raises:
            SigningFailedError: If the requested account is not held by this signer
        """
        if account.lower() != self._account.address.lower():
            raise SigningFailedError(
                "Requested account is not available to this signer",
                details={'account': account}
            )

        signed = self._account.sign_message(encode_defunct(text=message))
        logger.debug(f"Signed {len(message)} char message with {self._account.address}")
        return '0x' + bytes(signed.signature).hex()


class StaticIdentityProvider:
    """
    Identity provider returning a fixed user (or nobody)
    """

    def __init__(self, user: Optional[AuthenticatedUser] = None):
        self.user = user

    def current_user(self) -> Optional[AuthenticatedUser]:
        return self.user

    def login(self, user: AuthenticatedUser) -> None:
        self.user = user

    def logout(self) -> None:
        self.user = None

"""
Signature coordination

The coordinator authorizes one signing attempt per (document, identity),
drives the external signing capability and records the resulting signature.
The duplicate check is repeated against the latest document state after the
interactive signing call returns, inside the store's atomic update or under
a per-document lock.
"""

import logging
import threading
import weakref
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TYPE_CHECKING, Optional, Union

from ..documents import lifecycle
from ..documents.types import Document, DocumentStatus, Identity, Signature
from ..exceptions import (
    AlreadySignedError,
    ErrorCodes,
    InvalidDocumentStateError,
    NotARequiredSignerError,
    NotAuthenticatedError,
    SigningFailedError,
    ValidationError,
)
from ..utils import normalize_hex, now_utc
from .identity import find_signature, identity_matches, signer_entries_filled
from .message import build_message
from .types import SIGNATURE_LENGTH, SigningCapability

if TYPE_CHECKING:
    from ..storage.base import DocumentStore

logger = logging.getLogger(__name__)


class DocumentLock:
    """Per-document lock that can be held weakly by the registry"""

    __slots__ = ('_lock', '__weakref__')

    def __init__(self):
        self._lock = threading.Lock()

    def __enter__(self) -> 'DocumentLock':
        self._lock.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()


class DocumentLockRegistry:
    """
    Registry of per-document locks

    Locks are held weakly, so an entry disappears once no caller holds or
    waits on its lock.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: 'weakref.WeakValueDictionary[str, DocumentLock]' = weakref.WeakValueDictionary()

    def lock_for(self, document_id: str) -> DocumentLock:
        with self._guard:
            lock = self._locks.get(document_id)
            if lock is None:
                lock = DocumentLock()
                self._locks[document_id] = lock
            return lock

    def __len__(self) -> int:
        return len(self._locks)


class SignatureCoordinator:
    """
    Authorizes and records signatures on documents
    """

    def __init__(self, lock_registry: Optional[DocumentLockRegistry] = None,
                 default_timeout: Optional[float] = None):
        """
        Initialize the coordinator.

        Args:
            lock_registry: Per-document locks for documents signed without a store
            default_timeout: Seconds to wait for the signing capability (None waits forever)
        """
        self.locks = lock_registry or DocumentLockRegistry()
        self.default_timeout = default_timeout

    def check_preconditions(self, document: Document, identity: Optional[Identity]) -> None:
        """
        Check that the identity may sign the document.

        Raises:
            NotAuthenticatedError: No identity or no connected wallet
            NotARequiredSignerError: Identity matches no signer entry
            AlreadySignedError: Identity already holds a signature
            InvalidDocumentStateError: Document was cancelled
        """
        if identity is None or not identity.subject_id or not identity.wallet_address:
            raise NotAuthenticatedError()

        if not any(identity_matches(identity, s.identifier) for s in document.required_signers):
            raise NotARequiredSignerError(document.id, identity.subject_id)

        self._check_still_signable(document, identity)

    def sign(self, document: Document, identity: Optional[Identity],
             signing_capability: SigningCapability,
             timeout: Optional[float] = None,
             store: Optional['DocumentStore'] = None) -> Signature:
        """
        Sign a document on behalf of an identity.

        With a store, the signature is appended to the stored document inside
        `store.update`, so the duplicate and cancellation checks see the state
        written by every other signer of the same store. Without one, the
        given document is changed under its per-document lock.

        Args:
            document: Document to sign
            identity: Identity of the signer
            signing_capability: Wallet that signs the attestation message
            timeout: Seconds to wait for the wallet; overrides the default
            store: Store holding the document; the signature is persisted there

        Returns:
            Signature: The recorded signature

        Raises:
            AuthorizationError: If a precondition fails
            InvalidDocumentStateError: If the document was cancelled
            SigningFailedError: If the wallet declined, failed, timed out or
                returned a malformed signature
            DocumentNotFoundError: If the document left the store meanwhile
        """
        self.check_preconditions(document, identity)

        message = build_message(document)
        logger.info(f"Requesting signature on {document.id} from {identity.subject_id}")
        logger.debug(f"Attestation message for {document.id}:\n{message}")

        signature_hex = self._request_signature(
            signing_capability, message, identity.wallet_address,
            self.default_timeout if timeout is None else timeout
        )

        def append(target: Document) -> Document:
            self._check_still_signable(target, identity)
            target.signatures.append(Signature(
                signer=identity,
                signature=signature_hex,
                signed_at=now_utc(),
                document_hash=target.content.hash,
                verified=False
            ))
            lifecycle.refresh(target)
            target.updated_at = target.signatures[-1].signed_at
            return target

        if store is not None:
            target = store.update(document.id, append)
            document.signatures[:] = target.signatures
            lifecycle.refresh(document)
            document.updated_at = target.updated_at
        else:
            with self.locks.lock_for(document.id):
                target = append(document)

        signature = target.signatures[-1]
        logger.info(
            f"Recorded signature on {target.id} from {identity.subject_id}; "
            f"status is now {target.status.value}"
        )
        return signature

    def _check_still_signable(self, document: Document, identity: Identity) -> None:
        if (find_signature(identity, document.signatures) is not None
                or signer_entries_filled(identity, document.required_signers, document.signatures)):
            raise AlreadySignedError(document.id, identity.subject_id)

        if document.status == DocumentStatus.CANCELLED or document.cancelled_at is not None:
            raise InvalidDocumentStateError(
                "Document has been cancelled and no longer accepts signatures",
                document.id,
                DocumentStatus.CANCELLED.value
            )

    def _request_signature(self, capability: SigningCapability, message: str,
                           account: str, timeout: Optional[float]) -> str:
        if timeout is None:
            raw = self._call_signer(capability, message, account)
        else:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="multisign-signer")
            try:
                future = executor.submit(self._call_signer, capability, message, account)
                raw = future.result(timeout=timeout)
            except FutureTimeoutError:
                logger.warning(f"Signing request for {account} timed out after {timeout}s")
                raise SigningFailedError(
                    f"Signing timed out after {timeout} seconds",
                    ErrorCodes.SIGNING_TIMEOUT,
                    {'timeout': timeout}
                )
            finally:
                executor.shutdown(wait=False)

        return self._normalize_signature(raw)

    @staticmethod
    def _call_signer(capability: SigningCapability, message: str, account: str) -> Optional[Union[str, bytes]]:
        try:
            return capability.sign(message, account)
        except SigningFailedError:
            raise
        except Exception as e:
            logger.warning(f"Signing capability failed: {e}")
            raise SigningFailedError(f"Signature failed: {e}", details={'original_error': str(e)})

    @staticmethod
    def _normalize_signature(raw: Optional[Union[str, bytes]]) -> str:
        if raw is None:
            logger.warning("Signing capability returned no signature")
            raise SigningFailedError()

        try:
            signature_hex = normalize_hex(raw)
        except ValidationError:
            raise SigningFailedError(
                "Signing capability returned a malformed signature",
                details={'reason': 'not hex'}
            )

        length = (len(signature_hex) - 2) // 2
        if length != SIGNATURE_LENGTH:
            raise SigningFailedError(
                "Signing capability returned a malformed signature",
                details={'reason': f"expected {SIGNATURE_LENGTH} bytes, got {length}"}
            )

        return signature_hex

"""
Document service

Application facade over the signing core: creates documents, collects
signatures, reports status and verifies, with the identity provider, the
signing capability and the document store injected by the caller. The store
is reloaded for every operation; nothing is cached between calls.
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict, List, Optional

from .canonical.hashing import hash_content
from .config.settings import MultiSignConfig
from .documents import lifecycle
from .documents.types import (
    BinaryContent,
    ContentData,
    ContentKind,
    CreateDocumentParams,
    Document,
    DocumentContent,
    DocumentFilter,
    DocumentStatus,
    Identity,
    RequiredSigner,
    Signature,
    SignatureStatus,
    StructuredContent,
    TextContent,
    content_summary,
)
from .exceptions import AuthorizationError, ErrorCodes, ValidationError
from .signing.coordinator import SignatureCoordinator
from .signing.identity import build_identity, identities_match, identity_matches
from .signing.types import IdentityProvider, SigningCapability
from .storage.base import DocumentStore
from .storage.serialization import document_to_dict
from .utils import generate_document_id, now_utc
from .verification.types import DocumentVerification
from .verification.verifier import VerificationEngine, apply_verification

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Multi-party document signing service
    """

    def __init__(self, identity_provider: IdentityProvider, signing_capability: SigningCapability,
                 store: DocumentStore, config: Optional[MultiSignConfig] = None,
                 coordinator: Optional[SignatureCoordinator] = None,
                 verifier: Optional[VerificationEngine] = None):
        """
        Initialize the service.

        Args:
            identity_provider: Source of the authenticated user
            signing_capability: Wallet producing signatures for the user
            store: Document collection store
            config: SDK configuration; defaults when omitted
            coordinator: Signature coordinator; built from config when omitted
            verifier: Verification engine; built from config when omitted
        """
        self.identity_provider = identity_provider
        self.signing_capability = signing_capability
        self.store = store
        self.config = config or MultiSignConfig()
        self.coordinator = coordinator or SignatureCoordinator(default_timeout=self.config.signing.timeout_seconds)
        self.verifier = verifier or VerificationEngine(self.config.verification.max_workers)

    def current_identity(self) -> Optional[Identity]:
        """
        The authenticated user bound to the connected wallet, if both are present.
        """
        user = self.identity_provider.current_user()
        account = self.signing_capability.get_account()
        if user is None or not account:
            return None
        return build_identity(user, account)

    def require_identity(self) -> Identity:
        """
        Raises:
            NotAuthenticatedError: If no user is logged in or no wallet is connected
        """
        return build_identity(self.identity_provider.current_user(), self.signing_capability.get_account())

    def create_document(self, params: CreateDocumentParams) -> Document:
        """
        Create a document and optionally sign it as its creator.

        Args:
            params: Content and signer parameters

        Returns:
            Document: The stored document

        Raises:
            NotAuthenticatedError: If no identity is available
            ValidationError: If content or signers are invalid
            SigningFailedError: If the immediate self-signature fails; the
                document stays stored as pending
        """
        creator = self.require_identity()

        content_data = self._build_content(params)
        content = DocumentContent(
            data=content_data,
            hash=hash_content(content_data, self.config.canonicalization.max_depth)
        )
        signers = self._build_signers(params, creator)

        now = now_utc()
        document = Document(
            id=generate_document_id(),
            content=content,
            created_by=creator,
            created_at=now,
            updated_at=now,
            status=DocumentStatus.PENDING,
            required_signers=signers,
            signatures=[]
        )

        self.store.insert(document)

        logger.info(
            f"Created document {document.id} ({content_summary(content)}) by {creator.subject_id} "
            f"with {len(signers)} signers"
        )

        if params.sign_immediately:
            self.sign_document(document.id)
            return self.get_document(document.id)

        return document

    def get_document(self, document_id: str) -> Document:
        """
        Raises:
            DocumentNotFoundError: If the id is unknown
        """
        return self.store.get(document_id)

    def get_documents(self, doc_filter: Optional[DocumentFilter] = None) -> List[Document]:
        """
        List stored documents, optionally filtered.
        """
        documents = self.store.load_all()
        if doc_filter is None:
            return documents

        identity = self.current_identity()
        if (doc_filter.requires_my_signature or doc_filter.created_by_me) and identity is None:
            return []

        statuses = doc_filter.statuses()
        result = []
        for doc in documents:
            if statuses is not None and doc.status not in statuses:
                continue
            if doc_filter.kind is not None and doc.content.kind != ContentKind(doc_filter.kind):
                continue
            if doc_filter.created_by is not None and not identity_matches(doc.created_by, doc_filter.created_by):
                continue
            if doc_filter.created_by_me and not identities_match(doc.created_by, identity):
                continue
            if doc_filter.requires_my_signature and not lifecycle.can_sign(doc, identity):
                continue
            result.append(doc)
        return result

    def get_my_documents(self) -> List[Document]:
        """Documents the current identity created or is asked to sign."""
        identity = self.current_identity()
        if identity is None:
            return []

        return [
            doc for doc in self.store.load_all()
            if identities_match(doc.created_by, identity) or lifecycle.is_required_signer(doc, identity)
        ]

    def get_pending_documents(self) -> List[Document]:
        """Documents still awaiting the current identity's signature."""
        return self.get_documents(DocumentFilter(requires_my_signature=True))

    def sign_document(self, document_id: str) -> Signature:
        """
        Sign a stored document as the current identity.

        The signature is appended through the store's atomic update after the
        wallet returns, so concurrent signers sharing the store never overwrite
        each other.

        Raises:
            DocumentNotFoundError: If the id is unknown
            AuthorizationError: If the identity may not sign
            InvalidDocumentStateError: If the document was cancelled
            SigningFailedError: If the wallet fails; nothing is recorded
        """
        document = self.get_document(document_id)
        identity = self.current_identity()

        return self.coordinator.sign(document, identity, self.signing_capability, store=self.store)

    def get_signature_status(self, document_id: str) -> SignatureStatus:
        return lifecycle.signature_status(self.get_document(document_id))

    def verify_document(self, document_id: str, update_cache: bool = True) -> DocumentVerification:
        """
        Verify a stored document.

        Args:
            document_id: Document to verify
            update_cache: Write the per-signature `verified` flags back to the store

        Returns:
            DocumentVerification: Verification report
        """
        document = self.get_document(document_id)
        report = self.verifier.verify_document(document)

        if update_cache and document.signatures:
            def cache(current: Document) -> None:
                # Only cache results for the signatures that were checked
                if len(current.signatures) == len(document.signatures):
                    apply_verification(current, report)

            self.store.update(document_id, cache)

        return report

    def cancel_document(self, document_id: str, reason: str) -> Document:
        """
        Administratively cancel a document as the current identity.

        Only the creator may cancel.

        Raises:
            NotAuthenticatedError: If no identity is available
            AuthorizationError: If the actor did not create the document
            InvalidDocumentStateError: If the document is complete or already cancelled
        """
        actor = self.require_identity()

        def cancel(document: Document) -> Document:
            if not identities_match(document.created_by, actor):
                raise AuthorizationError(
                    "Only the document creator can cancel it",
                    ErrorCodes.NOT_DOCUMENT_CREATOR,
                    {'document_id': document_id, 'subject_id': actor.subject_id}
                )
            return lifecycle.cancel(document, actor, reason)

        return self.store.update(document_id, cancel)

    def export_document(self, document_id: str) -> Dict[str, Any]:
        """Export a document as a self-contained record for offline verification."""
        return document_to_dict(self.get_document(document_id))

    def export_document_json(self, document_id: str, indent: Optional[int] = 2) -> str:
        return json.dumps(self.export_document(document_id), indent=indent, ensure_ascii=False)

    def _build_content(self, params: CreateDocumentParams) -> ContentData:
        kind = params.kind
        data = params.data

        if kind == ContentKind.TEXT:
            if not isinstance(data, str):
                raise ValidationError("Text content must be a string", ErrorCodes.INVALID_CONTENT)
            if not data.strip():
                raise ValidationError("Please enter text content", ErrorCodes.INVALID_CONTENT)
            return TextContent(data)

        if kind == ContentKind.STRUCTURED:
            if isinstance(data, str):
                if not data.strip():
                    raise ValidationError("Please enter JSON content", ErrorCodes.INVALID_CONTENT)
                try:
                    data = json.loads(data)
                except json.JSONDecodeError as e:
                    raise ValidationError(
                        f"Invalid JSON format: {e}", ErrorCodes.INVALID_CONTENT, {'line': e.lineno, 'column': e.colno}
                    )
            return StructuredContent(data)

        return self._build_binary(params)

    def _build_binary(self, params: CreateDocumentParams) -> BinaryContent:
        data = params.data
        content_config = self.config.content

        if isinstance(data, BinaryContent):
            binary = data
        elif isinstance(data, (bytes, bytearray)):
            binary = BinaryContent.from_bytes(
                bytes(data), params.filename, params.mime_type or 'application/octet-stream'
            )
        elif isinstance(data, str):
            text = data.split(',', 1)[1] if data.startswith('data:') and ',' in data else data
            try:
                raw = base64.b64decode(text, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValidationError(f"Invalid base64 payload: {e}", ErrorCodes.INVALID_CONTENT)
            binary = BinaryContent(
                base64=text,
                filename=params.filename,
                mime_type=params.mime_type or 'application/octet-stream',
                size=len(raw)
            )
        else:
            raise ValidationError(
                "Binary content must be bytes, base64 text or BinaryContent",
                ErrorCodes.INVALID_CONTENT,
                {'type': type(data).__name__}
            )

        size = len(binary.decode())
        if size == 0:
            raise ValidationError("Binary content is empty", ErrorCodes.INVALID_CONTENT)
        if size > content_config.max_binary_size_bytes:
            raise ValidationError(
                f"File size exceeds {content_config.max_binary_size_mb}MB limit",
                ErrorCodes.BINARY_TOO_LARGE,
                {'size': size, 'limit': content_config.max_binary_size_bytes}
            )

        allowed = content_config.allowed_binary_mime_types
        if allowed and binary.mime_type not in allowed:
            raise ValidationError(
                f"Unsupported file type: {binary.mime_type}",
                ErrorCodes.INVALID_CONTENT,
                {'allowed': list(allowed)}
            )

        if binary.size != size:
            binary = BinaryContent(base64=binary.base64, filename=binary.filename, mime_type=binary.mime_type, size=size)
        return binary

    def _build_signers(self, params: CreateDocumentParams, creator: Identity) -> List[RequiredSigner]:
        identifiers = [i.strip() for i in params.required_signers if isinstance(i, str) and i.strip()]

        if len(identifiers) != len(params.required_signers):
            raise ValidationError("Signer identifiers must be non-empty strings", ErrorCodes.INVALID_SIGNERS)

        seen = set()
        for identifier in identifiers:
            key = identifier.lower()
            if key in seen:
                raise ValidationError(
                    f"Duplicate signer: {identifier}", ErrorCodes.INVALID_SIGNERS, {'identifier': identifier}
                )
            seen.add(key)

        if params.include_creator and not any(identity_matches(creator, i) for i in identifiers):
            identifiers.insert(0, creator.subject_id)

        if not identifiers:
            raise ValidationError("Please add at least one signer", ErrorCodes.INVALID_SIGNERS)

        return [RequiredSigner(identifier=i, required=True) for i in identifiers]

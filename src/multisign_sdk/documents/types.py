"""
Type definitions for multi-party document signing

This module provides the document data model: the tagged content variant,
identities, required signers, signature records and the derived status
types used by the lifecycle and service layers.
"""

import base64
import binascii
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from ..exceptions import ValidationError

# Attestation message layouts; documents record the one their signers signed
MESSAGE_FORMAT_VERSION = 1
LEGACY_MESSAGE_VERSION = 0


class ContentKind(str, Enum):
    """Document content kinds"""
    TEXT = "text"
    STRUCTURED = "structured"
    BINARY = "binary"


class DocumentStatus(str, Enum):
    """Document status throughout its lifecycle"""
    DRAFT = "draft"
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TextContent:
    """
    Free text content

    Attributes:
        text: The text exactly as it will be hashed
    """
    text: str
    kind: ClassVar[ContentKind] = ContentKind.TEXT

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise ValidationError("Text content must be a string", details={'type': type(self.text).__name__})


@dataclass(frozen=True)
class StructuredContent:
    """
    JSON-like structured content (objects, arrays, strings, numbers, booleans, null)

    Attributes:
        value: The structured value
    """
    value: Any
    kind: ClassVar[ContentKind] = ContentKind.STRUCTURED


@dataclass(frozen=True)
class BinaryContent:
    """
    Binary file content held as base64 text

    Attributes:
        base64: Standard base64 encoding of the file; this text is what gets hashed
        filename: Original filename
        mime_type: MIME type of the file
        size: Decoded size in bytes
    """
    base64: str
    filename: Optional[str] = None
    mime_type: str = "application/octet-stream"
    size: int = 0
    kind: ClassVar[ContentKind] = ContentKind.BINARY

    def __post_init__(self):
        if not isinstance(self.base64, str):
            raise ValidationError("Binary content must be base64 text", details={'type': type(self.base64).__name__})
        if self.size < 0:
            raise ValidationError("Binary size cannot be negative")

    @classmethod
    def from_bytes(cls, data: bytes, filename: Optional[str] = None,
                   mime_type: str = "application/octet-stream") -> 'BinaryContent':
        """Encode raw bytes into binary content."""
        return cls(
            base64=base64.b64encode(data).decode('ascii'),
            filename=filename,
            mime_type=mime_type,
            size=len(data)
        )

    def decode(self) -> bytes:
        """
        Decode the base64 payload.

        Raises:
            ValidationError: If the payload is not valid base64
        """
        try:
            return base64.b64decode(self.base64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(f"Invalid base64 payload: {e}", details={'filename': self.filename})


ContentData = Union[TextContent, StructuredContent, BinaryContent]


@dataclass
class DocumentContent:
    """
    Document content with its canonical hash

    Attributes:
        data: Tagged content variant
        hash: 0x-prefixed Keccak-256 digest of the canonical form, stamped at creation
    """
    data: ContentData
    hash: str

    @property
    def kind(self) -> ContentKind:
        return self.data.kind


@dataclass
class Identity:
    """
    Authenticated identity bound to a signing account

    Attributes:
        subject_id: Stable identity-provider subject id
        display_name: Display name (preferred username)
        email: Optional email address
        wallet_address: Account able to produce signatures
    """
    subject_id: str
    display_name: str
    wallet_address: str
    email: Optional[str] = None


@dataclass
class AuthenticatedUser:
    """
    Identity as supplied by the identity provider, before a wallet is attached

    Attributes:
        subject_id: Stable identity-provider subject id
        username: Preferred username
        email: Optional email address
    """
    subject_id: str
    username: Optional[str] = None
    email: Optional[str] = None


@dataclass
class RequiredSigner:
    """
    Required signer entry

    Attributes:
        identifier: Subject id, email or display name of the signer
        required: Whether the signature is required for completion
        has_signed: Cached flag, recomputed from signatures on every refresh
    """
    identifier: str
    required: bool = True
    has_signed: bool = False


@dataclass
class Signature:
    """
    Signature record on a document

    Attributes:
        signer: Identity snapshot taken at signing time
        signature: 0x-prefixed hex of the 65-byte recoverable ECDSA signature
        signed_at: When the signature was recorded
        document_hash: Content hash at signing time
        verified: Cached verification flag, never ground truth
        verified_at: When the cached flag was last computed
    """
    signer: Identity
    signature: str
    signed_at: datetime
    document_hash: str
    verified: bool = False
    verified_at: Optional[datetime] = None


@dataclass
class Document:
    """
    Multi-party signed document

    Attributes:
        id: Opaque unique identifier
        content: Content and its hash
        created_by: Creator identity
        created_at: Creation timestamp
        updated_at: Last modification timestamp
        status: Lifecycle status, derived from signatures
        required_signers: Ordered required signers, fixed at creation
        signatures: Append-only list of signatures
        cancelled_at: When the document was administratively cancelled
        cancelled_by: Who cancelled it
        cancellation_reason: Recorded reason for cancellation
        message_version: Attestation message layout signed for this document
    """
    id: str
    content: DocumentContent
    created_by: Identity
    created_at: datetime
    updated_at: datetime
    status: DocumentStatus = DocumentStatus.PENDING
    required_signers: List[RequiredSigner] = field(default_factory=list)
    signatures: List[Signature] = field(default_factory=list)
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[Identity] = None
    cancellation_reason: Optional[str] = None
    message_version: int = MESSAGE_FORMAT_VERSION


@dataclass
class SignatureStatus:
    """
    Signature collection status

    Attributes:
        total: Number of required signers
        signed: Number of required signers with a matching signature
        percentage: Rounded completion percentage
        pending: Identifiers still to sign
        complete: Whether all required signatures are present
        missing_signers: Required signer entries still to sign
    """
    total: int
    signed: int
    percentage: int
    pending: List[str]
    complete: bool
    missing_signers: List[RequiredSigner]


@dataclass
class CreateDocumentParams:
    """
    Document creation parameters

    Attributes:
        kind: Content kind
        data: str for text, JSON-like value or JSON string for structured,
            bytes / base64 str / BinaryContent for binary
        required_signers: Subject ids, emails or display names
        sign_immediately: Whether the creator signs right after creation
        include_creator: Add the creator to the signers when not already listed
        filename: Filename for binary content
        mime_type: MIME type for binary content
    """
    kind: ContentKind
    data: Any
    required_signers: List[str]
    sign_immediately: bool = False
    include_creator: bool = True
    filename: Optional[str] = None
    mime_type: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.kind, ContentKind):
            try:
                self.kind = ContentKind(self.kind)
            except ValueError:
                raise ValidationError(
                    f"Unsupported content type: {self.kind}",
                    details={'supported': [k.value for k in ContentKind]}
                )


@dataclass
class DocumentFilter:
    """
    Document filter options

    Attributes:
        status: Status or statuses to keep
        kind: Content kind to keep
        created_by: Creator subject id
        requires_my_signature: Keep documents the current identity still has to sign
        created_by_me: Keep documents created by the current identity
    """
    status: Optional[Union[DocumentStatus, List[DocumentStatus]]] = None
    kind: Optional[ContentKind] = None
    created_by: Optional[str] = None
    requires_my_signature: bool = False
    created_by_me: bool = False

    def statuses(self) -> Optional[List[DocumentStatus]]:
        if self.status is None:
            return None
        if isinstance(self.status, (list, tuple, set)):
            return [DocumentStatus(s) for s in self.status]
        return [DocumentStatus(self.status)]


def content_summary(content: DocumentContent) -> Dict[str, Any]:
    """Short description of content for logs and listings."""
    data = content.data
    if isinstance(data, TextContent):
        return {'kind': data.kind.value, 'length': len(data.text)}
    if isinstance(data, BinaryContent):
        return {'kind': data.kind.value, 'filename': data.filename, 'size': data.size}
    return {'kind': data.kind.value}

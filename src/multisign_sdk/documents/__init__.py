"""
Document model

Status derivation lives in `multisign_sdk.documents.lifecycle`.
"""

from .types import (
    AuthenticatedUser,
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
)

__all__ = [
    'AuthenticatedUser',
    'BinaryContent',
    'ContentData',
    'ContentKind',
    'CreateDocumentParams',
    'Document',
    'DocumentContent',
    'DocumentFilter',
    'DocumentStatus',
    'Identity',
    'RequiredSigner',
    'Signature',
    'SignatureStatus',
    'StructuredContent',
    'TextContent',
]

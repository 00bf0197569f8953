"""
MultiSign Python SDK
Multi-party document signing with offline verification
"""

from .version import __version__
from .exceptions import (
    ErrorCodes,
    MultiSignSDKError,
    ValidationError,
    UnsupportedValueError,
    DepthExceededError,
    AuthorizationError,
    NotAuthenticatedError,
    NotARequiredSignerError,
    AlreadySignedError,
    ExternalFailureError,
    SigningFailedError,
    StorageError,
    DocumentNotFoundError,
    InvalidDocumentStateError,
    ConfigError,
)
from .documents import (
    AuthenticatedUser,
    BinaryContent,
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
from .canonical import (
    canonicalize,
    canonicalize_json,
    hash_content,
    keccak256_hex,
    verify_content_hash,
)
from .signing import (
    LEGACY_MESSAGE_VERSION,
    MESSAGE_FORMAT_VERSION,
    IdentityProvider,
    LocalAccountSigner,
    SignatureCoordinator,
    SigningCapability,
    StaticIdentityProvider,
    build_message,
    identities_match,
    identity_matches,
)
from .documents.lifecycle import (
    cancel,
    compute_status,
    refresh,
    signature_status,
)
from .verification import (
    DocumentVerification,
    SignatureVerification,
    VerificationEngine,
    apply_verification,
    verify_document,
    verify_signature,
)
from .storage import (
    DocumentStore,
    HttpDocumentStore,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    document_from_dict,
    document_to_dict,
    dumps_documents,
    loads_documents,
)
from .config import (
    MultiSignConfig,
    configure_logging,
    create_store,
    load_config,
)
from .service import DocumentService

__all__ = [
    '__version__',
    # Errors
    'ErrorCodes',
    'MultiSignSDKError',
    'ValidationError',
    'UnsupportedValueError',
    'DepthExceededError',
    'AuthorizationError',
    'NotAuthenticatedError',
    'NotARequiredSignerError',
    'AlreadySignedError',
    'ExternalFailureError',
    'SigningFailedError',
    'StorageError',
    'DocumentNotFoundError',
    'InvalidDocumentStateError',
    'ConfigError',
    # Document model
    'AuthenticatedUser',
    'BinaryContent',
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
    # Canonicalization and hashing
    'canonicalize',
    'canonicalize_json',
    'hash_content',
    'keccak256_hex',
    'verify_content_hash',
    # Signing
    'LEGACY_MESSAGE_VERSION',
    'MESSAGE_FORMAT_VERSION',
    'IdentityProvider',
    'LocalAccountSigner',
    'SignatureCoordinator',
    'SigningCapability',
    'StaticIdentityProvider',
    'build_message',
    'identities_match',
    'identity_matches',
    # Lifecycle
    'cancel',
    'compute_status',
    'refresh',
    'signature_status',
    # Verification
    'DocumentVerification',
    'SignatureVerification',
    'VerificationEngine',
    'apply_verification',
    'verify_document',
    'verify_signature',
    # Storage
    'DocumentStore',
    'HttpDocumentStore',
    'InMemoryDocumentStore',
    'JsonFileDocumentStore',
    'document_from_dict',
    'document_to_dict',
    'dumps_documents',
    'loads_documents',
    # Configuration
    'MultiSignConfig',
    'configure_logging',
    'create_store',
    'load_config',
    # Service
    'DocumentService',
]

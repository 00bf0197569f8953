"""
Exception classes for MultiSign Python SDK
"""

from typing import Optional, Dict, Any


class ErrorCodes:
    """Stable machine-readable error codes"""

    # Validation
    VALIDATION_FAILED = "VALIDATION_FAILED"
    UNSUPPORTED_MESSAGE_VERSION = "UNSUPPORTED_MESSAGE_VERSION"
    UNSUPPORTED_VALUE = "UNSUPPORTED_VALUE"
    DEPTH_EXCEEDED = "DEPTH_EXCEEDED"
    INVALID_CONTENT = "INVALID_CONTENT"
    BINARY_TOO_LARGE = "BINARY_TOO_LARGE"
    INVALID_SIGNERS = "INVALID_SIGNERS"

    # Authorization
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    NOT_A_REQUIRED_SIGNER = "NOT_A_REQUIRED_SIGNER"
    ALREADY_SIGNED = "ALREADY_SIGNED"
    NOT_DOCUMENT_CREATOR = "NOT_DOCUMENT_CREATOR"

    # External failures
    SIGNING_FAILED = "SIGNING_FAILED"
    SIGNING_TIMEOUT = "SIGNING_TIMEOUT"
    STORAGE_FAILED = "STORAGE_FAILED"

    # Documents
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    INVALID_DOCUMENT_STATE = "INVALID_DOCUMENT_STATE"

    # Configuration
    CONFIG_ERROR = "CONFIG_ERROR"


class MultiSignSDKError(Exception):
    """Base exception for all MultiSign SDK errors"""

    retryable = False

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.error_code,
            'message': self.message,
            'details': self.details,
            'retryable': self.retryable,
        }


class ValidationError(MultiSignSDKError):
    """Exception raised for malformed content or parameters"""

    def __init__(self, message: str, error_code: str = ErrorCodes.VALIDATION_FAILED,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class UnsupportedValueError(ValidationError):
    """Exception raised when a value has no canonical JSON representation"""

    def __init__(self, message: str, path: str = "", details: Optional[Dict[str, Any]] = None):
        full_details = dict(details or {})
        full_details.setdefault('path', path or '$')
        super().__init__(message, ErrorCodes.UNSUPPORTED_VALUE, full_details)
        self.path = full_details['path']


class DepthExceededError(ValidationError):
    """Exception raised when structured content nests deeper than allowed"""

    def __init__(self, max_depth: int, path: str = ""):
        super().__init__(
            f"Structured content exceeds maximum nesting depth of {max_depth}",
            ErrorCodes.DEPTH_EXCEEDED,
            {'max_depth': max_depth, 'path': path or '$'}
        )
        self.max_depth = max_depth


class AuthorizationError(MultiSignSDKError):
    """Base class for signer authorization failures"""
    pass


class NotAuthenticatedError(AuthorizationError):
    """Exception raised when no authenticated identity with a wallet is available"""

    def __init__(self, message: str = "User not authenticated or wallet not connected",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCodes.NOT_AUTHENTICATED, details)


class NotARequiredSignerError(AuthorizationError):
    """Exception raised when the identity is not among the required signers"""

    def __init__(self, document_id: str, subject_id: str):
        super().__init__(
            "You are not a required signer for this document",
            ErrorCodes.NOT_A_REQUIRED_SIGNER,
            {'document_id': document_id, 'subject_id': subject_id}
        )


class AlreadySignedError(AuthorizationError):
    """Exception raised when the identity already holds a signature on the document"""

    def __init__(self, document_id: str, subject_id: str):
        super().__init__(
            "You have already signed this document",
            ErrorCodes.ALREADY_SIGNED,
            {'document_id': document_id, 'subject_id': subject_id}
        )


class ExternalFailureError(MultiSignSDKError):
    """Base class for failures of external collaborators; safe to retry"""

    retryable = True


class SigningFailedError(ExternalFailureError):
    """Exception raised when the signing capability produced no usable signature"""

    def __init__(self, message: str = "Signature failed", error_code: str = ErrorCodes.SIGNING_FAILED,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class StorageError(ExternalFailureError):
    """Exception raised for document store I/O errors"""

    def __init__(self, message: str, error_code: str = ErrorCodes.STORAGE_FAILED,
                 details: Optional[Dict[str, Any]] = None, http_status: int = 0):
        super().__init__(message, error_code, details)
        self.http_status = http_status


class DocumentNotFoundError(MultiSignSDKError):
    """Exception raised when a document id is unknown to the store"""

    def __init__(self, document_id: str):
        super().__init__(
            f"Document not found: {document_id}",
            ErrorCodes.DOCUMENT_NOT_FOUND,
            {'document_id': document_id}
        )


class InvalidDocumentStateError(MultiSignSDKError):
    """Exception raised when an operation is not allowed in the document's status"""

    def __init__(self, message: str, document_id: str, status: str):
        super().__init__(
            message,
            ErrorCodes.INVALID_DOCUMENT_STATE,
            {'document_id': document_id, 'status': status}
        )


class ConfigError(MultiSignSDKError):
    """Configuration loading and validation error"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message, ErrorCodes.CONFIG_ERROR, {'reason': code} if code else None)
        self.code = code

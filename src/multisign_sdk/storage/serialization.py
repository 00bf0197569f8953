"""
Document record serialization

Documents are stored as camelCase JSON records with ISO-8601 timestamps and
binary payloads as base64 text. Loading also accepts the field names used by
older browser-side stores (`type: json|pdf`, `userId`, `username`) and
recomputes every derived cache. Records without `messageVersion` were signed
over the version 0 attestation layout.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from ..documents import lifecycle
from ..documents.types import (
    LEGACY_MESSAGE_VERSION,
    BinaryContent,
    ContentData,
    ContentKind,
    Document,
    DocumentContent,
    DocumentStatus,
    Identity,
    RequiredSigner,
    Signature,
    StructuredContent,
    TextContent,
)
from ..exceptions import ValidationError
from ..utils import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

# Content type names written by older stores
LEGACY_KINDS = {
    'json': ContentKind.STRUCTURED,
    'pdf': ContentKind.BINARY,
}


def identity_to_dict(identity: Identity) -> Dict[str, Any]:
    return {
        'subjectId': identity.subject_id,
        'displayName': identity.display_name,
        'email': identity.email,
        'walletAddress': identity.wallet_address,
    }


def identity_from_dict(data: Dict[str, Any]) -> Identity:
    subject_id = data.get('subjectId') or data.get('userId')
    if not subject_id:
        raise ValidationError("Identity record has no subject id", details={'record': sorted(data)})

    return Identity(
        subject_id=subject_id,
        display_name=data.get('displayName') or data.get('username') or data.get('email') or subject_id,
        email=data.get('email'),
        wallet_address=data.get('walletAddress') or ''
    )


def content_to_dict(content: DocumentContent) -> Dict[str, Any]:
    data = content.data
    if isinstance(data, TextContent):
        payload: Any = data.text
    elif isinstance(data, StructuredContent):
        payload = data.value
    else:
        payload = {
            'base64': data.base64,
            'filename': data.filename,
            'mimeType': data.mime_type,
            'size': data.size,
        }

    return {'type': content.kind.value, 'data': payload, 'hash': content.hash}


def content_from_dict(data: Dict[str, Any]) -> DocumentContent:
    raw_kind = data.get('type')
    try:
        kind = LEGACY_KINDS.get(raw_kind) or ContentKind(raw_kind)
    except ValueError:
        raise ValidationError(f"Unknown content type: {raw_kind!r}")

    payload = data.get('data')
    content_data: ContentData
    if kind == ContentKind.TEXT:
        content_data = TextContent(payload if payload is not None else '')
    elif kind == ContentKind.STRUCTURED:
        content_data = StructuredContent(payload)
    else:
        content_data = _binary_from_payload(payload)

    content_hash = data.get('hash')
    if not content_hash:
        raise ValidationError("Content record has no hash")

    return DocumentContent(data=content_data, hash=content_hash)


def _binary_from_payload(payload: Any) -> BinaryContent:
    if isinstance(payload, str):
        # Legacy stores kept the bare base64 string
        return BinaryContent(base64=payload, mime_type='application/pdf', size=len(payload) * 3 // 4 - payload.count('='))

    if not isinstance(payload, dict) or 'base64' not in payload:
        raise ValidationError("Binary content record has no base64 payload")

    return BinaryContent(
        base64=payload['base64'],
        filename=payload.get('filename'),
        mime_type=payload.get('mimeType') or 'application/octet-stream',
        size=int(payload.get('size') or 0)
    )


def signature_to_dict(signature: Signature) -> Dict[str, Any]:
    return {
        'signer': identity_to_dict(signature.signer),
        'signature': signature.signature,
        'signedAt': format_timestamp(signature.signed_at),
        'documentHash': signature.document_hash,
        'verified': signature.verified,
        'verifiedAt': format_timestamp(signature.verified_at) if signature.verified_at else None,
    }


def signature_from_dict(data: Dict[str, Any]) -> Signature:
    verified_at = data.get('verifiedAt')
    return Signature(
        signer=identity_from_dict(data['signer']),
        signature=data['signature'],
        signed_at=parse_timestamp(data['signedAt']),
        document_hash=data['documentHash'],
        verified=bool(data.get('verified', False)),
        verified_at=parse_timestamp(verified_at) if verified_at else None
    )


def document_to_dict(document: Document) -> Dict[str, Any]:
    """
    Convert a document to its JSON record.

    Args:
        document: Document to convert

    Returns:
        Dict[str, Any]: JSON-serializable record
    """
    record = {
        'id': document.id,
        'content': content_to_dict(document.content),
        'createdBy': identity_to_dict(document.created_by),
        'createdAt': format_timestamp(document.created_at),
        'updatedAt': format_timestamp(document.updated_at),
        'status': document.status.value,
        'requiredSigners': [
            {'identifier': s.identifier, 'required': s.required, 'hasSigned': s.has_signed}
            for s in document.required_signers
        ],
        'signatures': [signature_to_dict(sig) for sig in document.signatures],
        'messageVersion': document.message_version,
    }

    if document.cancelled_at is not None:
        record['cancelledAt'] = format_timestamp(document.cancelled_at)
        record['cancelledBy'] = identity_to_dict(document.cancelled_by) if document.cancelled_by else None
        record['cancellationReason'] = document.cancellation_reason

    return record


def document_from_dict(data: Dict[str, Any]) -> Document:
    """
    Restore a document from its JSON record.

    Derived fields (`hasSigned`, `status`) are recomputed rather than trusted;
    only the cancelled marker is carried over.

    Raises:
        ValidationError: If the record is malformed
    """
    try:
        created_at = parse_timestamp(data['createdAt'])
        cancelled_at = data.get('cancelledAt')
        cancelled_by = data.get('cancelledBy')

        document = Document(
            id=data['id'],
            content=content_from_dict(data['content']),
            created_by=identity_from_dict(data['createdBy']),
            created_at=created_at,
            updated_at=parse_timestamp(data.get('updatedAt') or data['createdAt']),
            status=DocumentStatus.CANCELLED if data.get('status') == DocumentStatus.CANCELLED.value else DocumentStatus.PENDING,
            required_signers=[_signer_from_record(s) for s in data.get('requiredSigners', [])],
            signatures=[signature_from_dict(s) for s in data.get('signatures', [])],
            cancelled_at=parse_timestamp(cancelled_at) if cancelled_at else None,
            cancelled_by=identity_from_dict(cancelled_by) if cancelled_by else None,
            cancellation_reason=data.get('cancellationReason'),
            message_version=int(data.get('messageVersion', LEGACY_MESSAGE_VERSION))
        )
    except KeyError as e:
        raise ValidationError(f"Document record is missing field {e}", details={'id': data.get('id')})
    except (TypeError, AttributeError, ValueError) as e:
        raise ValidationError(f"Malformed document record: {e}", details={'id': data.get('id')})

    return lifecycle.refresh(document)


def _signer_from_record(record: Any) -> RequiredSigner:
    if isinstance(record, str):
        return RequiredSigner(identifier=record)
    identifier = record.get('identifier') or record.get('userId')
    if not identifier:
        raise ValidationError("Required signer record has no identifier")
    return RequiredSigner(identifier=identifier, required=bool(record.get('required', True)))


def dumps_documents(documents: List[Document], indent: Optional[int] = 2) -> str:
    """Serialize a document collection to JSON text."""
    return json.dumps([document_to_dict(doc) for doc in documents], indent=indent, ensure_ascii=False)


def loads_documents(text: str) -> List[Document]:
    """
    Parse a document collection from JSON text.

    A single record (an object instead of an array) is accepted too.

    Raises:
        ValidationError: If the text is not a valid collection
    """
    try:
        data = json.loads(text) if text.strip() else []
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid document JSON: {e}")

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValidationError("Document collection must be a JSON array")

    documents = [document_from_dict(record) for record in data]
    logger.debug(f"Loaded {len(documents)} documents")
    return documents

"""
Attestation message construction

This module builds the human-readable message every signer signs. The
message depends only on the immutable parts of a document (id, content
kind, content hash, creation time and required signer identifiers in stored
order), so it can be rebuilt byte for byte by anyone holding the document.

Each layout is versioned. Documents record the version their signers signed,
so records written by the earlier browser application (version 0, with its
own header and `text|json|pdf` type names) still verify.
"""

import logging
from typing import Dict, List

from ..documents.types import LEGACY_MESSAGE_VERSION, MESSAGE_FORMAT_VERSION, ContentKind, Document
from ..exceptions import ErrorCodes, ValidationError
from ..utils import format_timestamp

logger = logging.getLogger(__name__)

MESSAGE_HEADERS = {
    LEGACY_MESSAGE_VERSION: "=== VIA DOCUMENT SIGNATURE ===",
    MESSAGE_FORMAT_VERSION: f"=== MULTISIGN DOCUMENT SIGNATURE (v{MESSAGE_FORMAT_VERSION}) ===",
}
MESSAGE_HEADER = MESSAGE_HEADERS[MESSAGE_FORMAT_VERSION]
MESSAGE_FOOTER = "=== END SIGNATURE ==="
APPROVAL_STATEMENT = "By signing this message, I confirm that I have reviewed and approve this document."

# Content type names of the version 0 layout
LEGACY_KIND_NAMES = {
    ContentKind.TEXT: 'text',
    ContentKind.STRUCTURED: 'json',
    ContentKind.BINARY: 'pdf',
}

FIELD_DOCUMENT_ID = "Document ID"
FIELD_CONTENT_TYPE = "Content Type"
FIELD_CONTENT_HASH = "Content Hash"
FIELD_CREATED = "Created"
FIELD_REQUIRED_SIGNERS = "Required Signers"

MESSAGE_FIELDS = [
    FIELD_DOCUMENT_ID,
    FIELD_CONTENT_TYPE,
    FIELD_CONTENT_HASH,
    FIELD_CREATED,
    FIELD_REQUIRED_SIGNERS,
]


class AttestationMessageBuilder:
    """
    Attestation message builder
    """

    def __init__(self, document: Document):
        """
        Initialize attestation message builder.

        Args:
            document: Document whose immutable fields are attested
        """
        self.document_id = document.id
        self.kind = document.content.kind
        self.content_hash = document.content.hash
        self.created_at = document.created_at
        self.signer_identifiers = [s.identifier for s in document.required_signers]
        self.version = document.message_version

    def build(self) -> str:
        """
        Build the attestation message in the document's layout version.

        Returns:
            str: Message lines joined with newlines, without a trailing newline

        Raises:
            ValidationError: If the layout version is unknown
        """
        header = MESSAGE_HEADERS.get(self.version)
        if header is None:
            raise ValidationError(
                f"Unsupported attestation message version: {self.version}",
                ErrorCodes.UNSUPPORTED_MESSAGE_VERSION,
                {'version': self.version, 'supported': sorted(MESSAGE_HEADERS)}
            )

        kind_name = LEGACY_KIND_NAMES[self.kind] if self.version == LEGACY_MESSAGE_VERSION else self.kind.value
        values = {
            FIELD_DOCUMENT_ID: self.document_id,
            FIELD_CONTENT_TYPE: kind_name,
            FIELD_CONTENT_HASH: self.content_hash,
            FIELD_CREATED: format_timestamp(self.created_at),
            FIELD_REQUIRED_SIGNERS: ', '.join(self.signer_identifiers),
        }

        lines = [header, '']
        lines.extend(f"{name}: {values[name]}" for name in MESSAGE_FIELDS)
        lines.extend(['', APPROVAL_STATEMENT, '', MESSAGE_FOOTER])

        message = '\n'.join(lines)
        logger.debug(f"Built v{self.version} attestation message for {self.document_id} ({len(message)} chars)")
        return message


def build_message(document: Document) -> str:
    """Build the attestation message for a document."""
    return AttestationMessageBuilder(document).build()


def message_version(message: str) -> int:
    """
    Return the layout version named by a message header.

    Raises:
        ValidationError: If the header is not a known layout
    """
    header = message.split('\n', 1)[0]
    for version, known in MESSAGE_HEADERS.items():
        if header == known:
            return version
    raise _invalid(f"Unexpected header: {header!r}")


def parse_attestation_message(message: str) -> Dict[str, str]:
    """
    Parse an attestation message into its fields.

    Args:
        message: Message text as produced by build_message, in any known layout

    Returns:
        Dict[str, str]: Field name to value, in message order

    Raises:
        ValidationError: If the message does not follow the expected layout
    """
    lines = message.split('\n')
    expected_length = 2 + len(MESSAGE_FIELDS) + 4

    if len(lines) != expected_length:
        raise _invalid(f"Expected {expected_length} lines, found {len(lines)}")
    message_version(message)
    if lines[-1] != MESSAGE_FOOTER:
        raise _invalid(f"Unexpected footer: {lines[-1]!r}")
    if lines[1] != '' or lines[-2] != '' or lines[-4] != '' or lines[-3] != APPROVAL_STATEMENT:
        raise _invalid("Approval statement or separators are malformed")

    fields: Dict[str, str] = {}
    for name, line in zip(MESSAGE_FIELDS, lines[2:2 + len(MESSAGE_FIELDS)]):
        prefix = f"{name}: "
        if not line.startswith(prefix):
            raise _invalid(f"Expected field {name!r}, found {line!r}")
        fields[name] = line[len(prefix):]

    return fields


def validate_attestation_message(message: str) -> List[str]:
    """
    Validate the layout of an attestation message.

    Returns:
        List[str]: Problems found; empty when the message is well formed
    """
    try:
        parse_attestation_message(message)
    except ValidationError as e:
        return [e.message]
    return []


def _invalid(reason: str) -> ValidationError:
    return ValidationError(
        f"Malformed attestation message: {reason}",
        ErrorCodes.VALIDATION_FAILED,
        {'format_version': MESSAGE_FORMAT_VERSION}
    )

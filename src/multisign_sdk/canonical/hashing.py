"""
Content hashing

A single hash function is used across the system: Keccak-256 (the Ethereum
variant, not NIST SHA3-256) over canonical bytes, rendered as 0x-prefixed
lowercase hex.
"""

import logging
from typing import Optional

from eth_utils import keccak

from ..documents.types import ContentData, DocumentContent
from ..exceptions import ValidationError
from .canonicalizer import DEFAULT_MAX_DEPTH, canonicalize

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "keccak256"


def keccak256_hex(data: bytes) -> str:
    """
    Keccak-256 digest of raw bytes.

    Args:
        data: Bytes to hash

    Returns:
        str: "0x" followed by 64 lowercase hex digits
    """
    return '0x' + keccak(primitive=bytes(data)).hex()


def hash_content(content: ContentData, max_depth: Optional[int] = DEFAULT_MAX_DEPTH) -> str:
    """
    Hash the canonical form of a content variant.

    Raises:
        ValidationError: If the content cannot be canonicalized
    """
    digest = keccak256_hex(canonicalize(content, max_depth))
    logger.debug(f"Hashed {content.kind.value} content: {digest}")
    return digest


def verify_content_hash(content: DocumentContent, max_depth: Optional[int] = None) -> bool:
    """
    Check a stored content hash against a freshly computed one.

    Never raises; content that can no longer be canonicalized does not match.
    """
    try:
        return hash_content(content.data, max_depth) == content.hash.lower()
    except ValidationError as e:
        logger.warning(f"Content could not be canonicalized for hash check: {e}")
        return False

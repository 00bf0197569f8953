"""
Canonical serialization and content hashing
"""

from .canonicalizer import (
    DEFAULT_MAX_DEPTH,
    canonical_json_bytes,
    canonicalize,
    canonicalize_json,
    check_depth,
    check_representable,
)
from .hashing import (
    HASH_ALGORITHM,
    hash_content,
    keccak256_hex,
    verify_content_hash,
)

__all__ = [
    'DEFAULT_MAX_DEPTH',
    'canonical_json_bytes',
    'canonicalize',
    'canonicalize_json',
    'check_depth',
    'check_representable',
    'HASH_ALGORITHM',
    'hash_content',
    'keccak256_hex',
    'verify_content_hash',
]

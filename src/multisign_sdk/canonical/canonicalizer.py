"""
Canonical serialization of document content

Identical logical content always yields identical bytes:

- text: UTF-8 bytes of the string, verbatim
- structured: RFC 8785 (JCS) JSON, produced by the `jcs` library, with sorted
  keys, no whitespace, arrays in order and ECMAScript number layout
- binary: the base64 text of the payload

Structured values are walked once before serialization so that anything
without a JSON representation is reported with its path instead of being
coerced by the encoder.
"""

import math
from typing import Any, Optional, Set

import jcs

from ..documents.types import BinaryContent, ContentData, StructuredContent, TextContent
from ..exceptions import DepthExceededError, UnsupportedValueError, ValidationError

DEFAULT_MAX_DEPTH = 10


def canonicalize(content: ContentData, max_depth: Optional[int] = DEFAULT_MAX_DEPTH) -> bytes:
    """
    Produce the canonical byte form of a content variant.

    Args:
        content: Text, structured or binary content
        max_depth: Nesting limit for structured content (None disables the guard)

    Returns:
        bytes: Canonical bytes used as hash input

    Raises:
        UnsupportedValueError: If structured content has no JSON representation
        DepthExceededError: If structured content nests deeper than max_depth
        ValidationError: If the content is not a known variant
    """
    if isinstance(content, TextContent):
        return _encode_utf8(content.text, '$')

    if isinstance(content, StructuredContent):
        return canonical_json_bytes(content.value, max_depth)

    if isinstance(content, BinaryContent):
        try:
            return content.base64.encode('ascii')
        except UnicodeEncodeError:
            raise ValidationError("Binary content base64 text must be ASCII", details={'filename': content.filename})

    raise ValidationError(
        f"Unsupported content: {type(content).__name__}",
        details={'type': type(content).__name__}
    )


def canonical_json_bytes(value: Any, max_depth: Optional[int] = DEFAULT_MAX_DEPTH) -> bytes:
    """
    Serialize a JSON-like value to canonical UTF-8 bytes.

    Args:
        value: dict / list / tuple / str / int / float / bool / None tree
        max_depth: Nesting limit checked before serialization (None disables)

    Raises:
        DepthExceededError: If the value nests deeper than max_depth
        UnsupportedValueError: If the value has no JSON representation
    """
    if max_depth is not None:
        check_depth(value, max_depth)

    check_representable(value)

    try:
        return jcs.canonicalize(value)
    except (TypeError, ValueError) as e:
        raise UnsupportedValueError(f"Value has no canonical JSON form: {e}", '$')


def canonicalize_json(value: Any, max_depth: Optional[int] = DEFAULT_MAX_DEPTH) -> str:
    """
    Serialize a JSON-like value to its canonical string.

    Raises:
        DepthExceededError: If the value nests deeper than max_depth
        UnsupportedValueError: If the value has no JSON representation
    """
    return canonical_json_bytes(value, max_depth).decode('utf-8')


def check_depth(value: Any, max_depth: int) -> None:
    """
    Reject values nested deeper than max_depth.

    The root sits at depth 0 and every element or member one level below its
    container.

    Raises:
        DepthExceededError: On the first value found past the limit
    """
    stack = [(value, 0, '$')]
    while stack:
        current, depth, path = stack.pop()
        if depth > max_depth:
            raise DepthExceededError(max_depth, path)
        if isinstance(current, dict):
            for key, item in current.items():
                stack.append((item, depth + 1, f"{path}.{key}"))
        elif isinstance(current, (list, tuple)):
            for index, item in enumerate(current):
                stack.append((item, depth + 1, f"{path}[{index}]"))


def check_representable(value: Any, path: str = '$', active: Optional[Set[int]] = None) -> None:
    """
    Check that a value has a JSON representation.

    Raises:
        UnsupportedValueError: For cycles, non-string keys, non-finite numbers,
            lone surrogates and any non-JSON type
    """
    if active is None:
        active = set()

    if value is None or isinstance(value, bool):
        return

    if isinstance(value, str):
        _encode_utf8(value, path)
    elif isinstance(value, int):
        return
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise UnsupportedValueError(f"Non-finite number has no JSON representation: {value}", path)
    elif isinstance(value, dict):
        _enter(value, path, active)
        for key, item in value.items():
            if not isinstance(key, str):
                raise UnsupportedValueError(
                    f"Object keys must be strings, got {type(key).__name__}", path
                )
            _encode_utf8(key, path)
            check_representable(item, f"{path}.{key}", active)
        active.discard(id(value))
    elif isinstance(value, (list, tuple)):
        _enter(value, path, active)
        for index, item in enumerate(value):
            check_representable(item, f"{path}[{index}]", active)
        active.discard(id(value))
    else:
        raise UnsupportedValueError(
            f"Cannot canonicalize value of type {type(value).__name__}",
            path,
            {'type': type(value).__name__}
        )


def _enter(container: Any, path: str, active: Set[int]) -> None:
    marker = id(container)
    if marker in active:
        raise UnsupportedValueError("Cyclic reference has no JSON representation", path)
    active.add(marker)


def _encode_utf8(text: str, path: str) -> bytes:
    try:
        return text.encode('utf-8')
    except UnicodeEncodeError as e:
        raise UnsupportedValueError(f"String is not valid Unicode text: {e.reason}", path)

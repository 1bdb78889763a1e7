"""
Persisted theme envelope with integrity checking.

A serialized theme is ``{version, theme, checksum, exportedAt}``. The
checksum is a 32-bit string hash over the theme's JSON with sorted keys.
It detects corruption and accidental edits; it is not a security measure.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .composition import to_token_dict
from .errors import ThemeIntegrityError
from .ir.theme import SERIALIZATION_VERSION, BuiltTheme, SerializedTheme, utc_timestamp


def canonical_json(theme: Mapping[str, Any]) -> str:
    """Deterministic JSON: sorted keys, no whitespace, ASCII only."""
    return json.dumps(theme, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def compute_checksum(theme: Mapping[str, Any]) -> str:
    """Signed 32-bit ``h * 31 + c`` hash of the canonical JSON, in hex."""
    value = 0
    for char in canonical_json(theme):
        value = ((value << 5) - value + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return format(value, "x") if value >= 0 else f"-{format(-value, 'x')}"


def serialize_theme(theme: BuiltTheme | Mapping[str, Any]) -> SerializedTheme:
    tokens = to_token_dict(theme)
    return SerializedTheme(
        version=SERIALIZATION_VERSION,
        theme=tokens,
        checksum=compute_checksum(tokens),
        exported_at=utc_timestamp(),
    )


def deserialize_theme(data: SerializedTheme | Mapping[str, Any] | str) -> BuiltTheme:
    """Verify and unpack a serialized theme.

    Args:
        data: Envelope as a model, mapping, or JSON string.

    Returns:
        The embedded theme.

    Raises:
        ThemeIntegrityError: If the envelope is malformed or the checksum
            does not match the embedded theme.
    """
    try:
        if isinstance(data, str):
            envelope = SerializedTheme.model_validate_json(data)
        elif isinstance(data, SerializedTheme):
            envelope = data
        else:
            envelope = SerializedTheme.model_validate(dict(data))
    except ValidationError as e:
        raise ThemeIntegrityError(f"Malformed serialized theme: {e}") from e

    expected = compute_checksum(envelope.theme)
    if expected != envelope.checksum:
        raise ThemeIntegrityError(
            "Theme checksum mismatch - data may be corrupted",
            {"expected": expected, "found": envelope.checksum},
        )

    try:
        return BuiltTheme.from_tokens(envelope.theme)
    except ValidationError as e:
        raise ThemeIntegrityError(f"Serialized theme has an invalid shape: {e}") from e

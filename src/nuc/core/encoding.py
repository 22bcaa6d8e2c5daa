"""Byte/text encoding helpers shared by the codec, identity and builder layers.

Token segments are unpadded base64url; hashes and public keys travel as
lower-case hex.  The base64url primitives come from ``jwt.utils`` so that
the token format matches what JOSE tooling produces.
"""
from __future__ import annotations

import binascii
import json
import re
from typing import Any

from jwt.utils import base64url_decode as _jwt_b64_decode
from jwt.utils import base64url_encode as _jwt_b64_encode

_BASE64URL_RE = re.compile(r"[A-Za-z0-9_-]*")


def base64url_encode(data: bytes) -> str:
    """Encode *data* as unpadded base64url text."""
    return _jwt_b64_encode(data).decode("ascii")


def base64url_decode(text: str) -> bytes:
    """Decode canonical, unpadded base64url *text*.

    Only the encoding :func:`base64url_encode` would produce is accepted,
    so every byte string has exactly one textual form.

    Raises
    ------
    ValueError
        If *text* contains padding or characters outside the base64url
        alphabet, has an impossible length, or sets non-zero trailing bits.
    """
    # urlsafe_b64decode silently drops unknown characters
    if not _BASE64URL_RE.fullmatch(text):
        raise ValueError("base64url input must be unpadded and URL-safe")
    try:
        data = _jwt_b64_decode(text.encode("ascii"))
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid base64url input: {exc}") from exc
    # non-zero trailing bits decode to the same bytes as the canonical text
    if base64url_encode(data) != text:
        raise ValueError("base64url input is not canonical")
    return data


def base64url_decode_text(text: str) -> str:
    """Decode base64url *text* and interpret the bytes as UTF-8."""
    return base64url_decode(text).decode("utf-8")


def hex_to_bytes(text: str) -> bytes:
    """Parse hex, tolerating a leading ``0x``.

    Raises
    ------
    ValueError
        If *text* is not valid hex.
    """
    if text.startswith(("0x", "0X")):
        text = text[2:]
    return bytes.fromhex(text)


def text_to_hex(text: str) -> str:
    return text.encode("utf-8").hex()


def compact_json(value: Any) -> str:
    """Serialise *value* without whitespace, keeping key order and non-ASCII text."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)

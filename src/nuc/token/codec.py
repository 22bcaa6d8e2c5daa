"""Wire codec: ``header.payload.signature`` tokens joined by ``/``.

The leaf token comes first, followed by its proofs.  Decoding validates
the segment structure, the strict header schema and the payload schema;
it does not verify signatures or chain relationships.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from nuc.core.encoding import base64url_decode, base64url_decode_text
from nuc.core.errors import InvalidNucStructure
from nuc.token.envelope import Envelope, Nuc
from nuc.token.header import parse_header
from nuc.token.payload import parse_payload

logger = logging.getLogger(__name__)

TOKEN_SEPARATOR = "/"
SEGMENT_SEPARATOR = "."


def _decode_json_segment(segment: str, name: str) -> Any:
    try:
        return json.loads(base64url_decode_text(segment))
    except (ValueError, UnicodeDecodeError) as exc:
        raise InvalidNucStructure(
            f"{name} segment is not base64url-encoded JSON",
            details={"segment": segment},
        ) from exc


def parse_token(token: str) -> Nuc:
    """Decode one ``header.payload.signature`` token.

    Raises
    ------
    InvalidNucStructure
        If the token does not have three non-empty segments or a segment
        cannot be decoded.
    InvalidNucHeader
        If the header violates the header schema.
    InvalidPayload
        If the payload violates the payload schema.
    """
    parts = token.split(SEGMENT_SEPARATOR)
    if len(parts) != 3 or not all(parts):
        raise InvalidNucStructure(details={"segments": len(parts)})
    raw_header, raw_payload, raw_signature = parts

    parse_header(_decode_json_segment(raw_header, "header"))
    payload = parse_payload(_decode_json_segment(raw_payload, "payload"))
    try:
        signature = base64url_decode(raw_signature)
    except ValueError as exc:
        raise InvalidNucStructure(
            "signature segment is not base64url",
            details={"segment": raw_signature},
        ) from exc
    return Nuc(
        raw_header=raw_header,
        raw_payload=raw_payload,
        signature=signature,
        payload=payload,
    )


def decode_base64url(text: str) -> Envelope:
    """Decode a serialised envelope (leaf first, proofs after).

    Raises
    ------
    InvalidNucStructure
        If *text* is empty or contains an empty token.
    ParseError
        Any error raised by :func:`parse_token`.
    """
    parts = text.split(TOKEN_SEPARATOR)
    if not all(parts):
        raise InvalidNucStructure("empty token", details={"tokens": len(parts)})
    tokens = [parse_token(part) for part in parts]
    logger.debug("decoded envelope with %d token(s)", len(tokens))
    return Envelope(nuc=tokens[0], proofs=tuple(tokens[1:]))


def serialize_base64url(envelope: Envelope) -> str:
    return TOKEN_SEPARATOR.join(nuc.serialize() for nuc in envelope.all_tokens())

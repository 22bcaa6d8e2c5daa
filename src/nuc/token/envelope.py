"""Decoded tokens and envelopes.

A :class:`Nuc` keeps the base64url header and payload segments exactly
as they appeared on the wire: the signature and the token hash are
computed over those segments, never over a re-encoding of the parsed
payload.
"""
from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass

from nuc.core.encoding import base64url_decode_text, base64url_encode
from nuc.token.header import NucHeader, parse_header
from nuc.token.payload import Payload


@dataclass(frozen=True, slots=True)
class Nuc:
    """A single decoded token."""

    raw_header: str
    raw_payload: str
    signature: bytes
    payload: Payload

    @property
    def header(self) -> NucHeader:
        return parse_header(json.loads(base64url_decode_text(self.raw_header)))

    def signed_message(self) -> bytes:
        """The bytes covered by a native signature: ``raw_header.raw_payload``."""
        return f"{self.raw_header}.{self.raw_payload}".encode("utf-8")

    def serialize(self) -> str:
        return f"{self.raw_header}.{self.raw_payload}.{base64url_encode(self.signature)}"


def compute_hash(nuc: Nuc) -> bytes:
    """SHA-256 of the token's wire form; proofs are referenced by this hash."""
    return hashlib.sha256(nuc.serialize().encode("utf-8")).digest()


@dataclass(frozen=True, slots=True)
class Envelope:
    """A leaf token plus the (unordered) proofs it was derived from."""

    nuc: Nuc
    proofs: tuple[Nuc, ...] = ()

    def all_tokens(self) -> tuple[Nuc, ...]:
        """Leaf first, then proofs in envelope order."""
        return (self.nuc, *self.proofs)

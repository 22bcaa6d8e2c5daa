"""NUC identity layer.

DID parsing, serialisation, cross-method equality and signature
verification, plus secp256k1 key pairs.

Public API
----------
- :class:`DidKey`, :class:`DidEthr`, :class:`DidNil` -- DID records.
- :func:`parse_did` / :func:`serialize_did` -- string conversion.
- :func:`did_from_public_key` / :func:`did_from_address` -- constructors.
- :func:`are_equal` -- identity equality across methods.
- :func:`verify_signature` -- per-method signature verification.
- :class:`Keypair` -- secp256k1 key pair with hex helpers.
"""
from __future__ import annotations

from nuc.identity.did import (
    Did,
    DidEthr,
    DidKey,
    DidNil,
    are_equal,
    did_from_address,
    did_from_public_key,
    parse_did,
    serialize_did,
    verify_signature,
)
from nuc.identity.keypair import Keypair

__all__ = [
    "Did",
    "DidEthr",
    "DidKey",
    "DidNil",
    "Keypair",
    "are_equal",
    "did_from_address",
    "did_from_public_key",
    "parse_did",
    "serialize_did",
    "verify_signature",
]

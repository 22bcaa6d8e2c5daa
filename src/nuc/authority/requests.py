"""Signed requests to a token authority.

An authority accepts JSON requests that prove possession of a key: the
payload travels hex-encoded next to the requester's public key and a
signature over the payload text.
"""
from __future__ import annotations

import enum
import secrets
import time
from typing import Any

from nuc.core.constants import DEFAULT_NONCE_LENGTH, ONE_MINUTE_SECONDS
from nuc.core.encoding import compact_json, text_to_hex
from nuc.identity.keypair import Keypair


class BlindModule(enum.StrEnum):
    """Services an authority issues subscriptions and tokens for."""

    NILAI = "nilai"
    NILDB = "nildb"


def create_signed_request(payload: dict[str, Any], keypair: Keypair) -> dict[str, str]:
    """Wrap *payload* in a request signed by *keypair*.

    Returns
    -------
    dict[str, str]
        ``public_key`` (compressed, hex), ``signature`` (compact, hex,
        over the compact JSON text) and ``payload`` (hex of that text).
    """
    text = compact_json(payload)
    return {
        "public_key": keypair.public_key(),
        "signature": keypair.sign(text),
        "payload": text_to_hex(text),
    }


def token_request_payload(
    authority_public_key: str,
    blind_module: BlindModule,
    *,
    expires_in: int = ONE_MINUTE_SECONDS,
) -> dict[str, Any]:
    """Payload asking the authority for a root token, valid for *expires_in* seconds."""
    return {
        "nonce": secrets.token_hex(DEFAULT_NONCE_LENGTH),
        "target_public_key": authority_public_key,
        "expires_at": int(time.time()) + expires_in,
        "blind_module": blind_module,
    }

"""Network-free helpers for talking to a token authority.

These build the signed requests, payment payloads and revocation tokens
an authority expects; sending them is left to the caller's HTTP client.

Public API
----------
- :func:`create_signed_request` / :func:`token_request_payload`
- :func:`pay_for_subscription` -> :class:`PaymentReceipt`
- :func:`build_revocation` / :func:`find_revocation_hashes`
"""
from __future__ import annotations

from nuc.authority.payments import PaymentReceipt, pay_for_subscription
from nuc.authority.requests import BlindModule, create_signed_request, token_request_payload
from nuc.authority.revocation import build_revocation, find_revocation_hashes

__all__ = [
    "BlindModule",
    "PaymentReceipt",
    "build_revocation",
    "create_signed_request",
    "find_revocation_hashes",
    "pay_for_subscription",
    "token_request_payload",
]

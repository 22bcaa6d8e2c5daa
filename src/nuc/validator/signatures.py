"""Signature verification, dispatched on the header ``typ``.

Each scheme is a :class:`SignatureVerifier`; :func:`verifier_for` picks
the one a header asks for so the rest of the validator never inspects
header types itself.
"""
from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import eth_keys.exceptions
from eth_account import Account

from nuc.core.errors import (
    Eip712InvalidIssuer,
    Eip712InvalidSignature,
    NativeSignatureVerificationFailed,
)
from nuc.identity.did import DidEthr, verify_signature
from nuc.token.eip712 import parse_eip712_meta, to_eip712_payload, typed_data_message
from nuc.token.envelope import Envelope, Nuc
from nuc.token.header import NucHeader

logger = logging.getLogger(__name__)


@runtime_checkable
class SignatureVerifier(Protocol):
    """Verifies one token's signature, raising on failure."""

    def verify(self, nuc: Nuc) -> None:
        ...


class NativeSignatureVerifier:
    """Verifies the issuer's signature over ``raw_header.raw_payload``."""

    def verify(self, nuc: Nuc) -> None:
        if not verify_signature(nuc.payload.iss, nuc.signed_message(), nuc.signature):
            logger.debug("native signature check failed for issuer %s", nuc.payload.iss)
            raise NativeSignatureVerificationFailed(
                details={"issuer": nuc.payload.iss.did_string}
            )


class Eip712SignatureVerifier:
    """Recovers the signer of the typed-data projection and compares it to the issuer.

    The domain, types and primary type come from the token's own header,
    so the verifier reconstructs exactly what the wallet signed.
    """

    def __init__(self, header: NucHeader) -> None:
        self._header = header

    def verify(self, nuc: Nuc) -> None:
        issuer = nuc.payload.iss
        if not isinstance(issuer, DidEthr):
            raise Eip712InvalidIssuer(details={"issuer": issuer.did_string})

        meta = parse_eip712_meta(self._header.meta)
        try:
            message = typed_data_message(meta, to_eip712_payload(nuc.payload))
            recovered = Account.recover_message(message, signature=nuc.signature)
        except (
            KeyError,
            TypeError,
            ValueError,
            eth_keys.exceptions.BadSignature,
            eth_keys.exceptions.ValidationError,
        ) as exc:
            logger.debug("EIP-712 recovery failed: %s", exc)
            raise Eip712InvalidSignature(details={"issuer": issuer.did_string}) from exc

        if recovered.lower() != issuer.address.lower():
            logger.debug("EIP-712 signer %s is not issuer %s", recovered, issuer.address)
            raise Eip712InvalidSignature(
                details={"issuer": issuer.address, "recovered": recovered}
            )


def verifier_for(header: NucHeader) -> SignatureVerifier:
    if header.is_eip712:
        return Eip712SignatureVerifier(header)
    return NativeSignatureVerifier()


def validate_signature(nuc: Nuc) -> None:
    """Verify a single token with the scheme its header names."""
    verifier_for(nuc.header).verify(nuc)


def validate_envelope_signatures(envelope: Envelope) -> None:
    """Verify the leaf, then every proof in envelope order; the first failure propagates."""
    for nuc in envelope.all_tokens():
        validate_signature(nuc)

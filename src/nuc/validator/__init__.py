"""NUC envelope validation.

Public API
----------
- :func:`validate` / :class:`Validator` -- full envelope validation.
- :class:`ValidatedEnvelope` -- proof that an envelope passed validation.
- :func:`sort_proofs` -- order an envelope's proofs into a chain.
- :func:`validate_envelope_signatures` -- signature checks only.
- :class:`SignatureVerifier` and its native / EIP-712 implementations.
"""
from __future__ import annotations

from nuc.validator.chain import (
    sort_proofs,
    validate_payload_chain,
    validate_proofs,
    validate_relationship_properties,
)
from nuc.validator.policy import validate_policy_properties
from nuc.validator.signatures import (
    Eip712SignatureVerifier,
    NativeSignatureVerifier,
    SignatureVerifier,
    validate_envelope_signatures,
    validate_signature,
    verifier_for,
)
from nuc.validator.temporal import validate_temporal_properties
from nuc.validator.validator import ValidatedEnvelope, Validator, validate, validate_payload

__all__ = [
    "Eip712SignatureVerifier",
    "NativeSignatureVerifier",
    "SignatureVerifier",
    "ValidatedEnvelope",
    "Validator",
    "sort_proofs",
    "validate",
    "validate_envelope_signatures",
    "validate_payload",
    "validate_payload_chain",
    "validate_policy_properties",
    "validate_proofs",
    "validate_relationship_properties",
    "validate_signature",
    "validate_temporal_properties",
    "verifier_for",
]

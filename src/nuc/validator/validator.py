"""Envelope validation entry point.

:func:`validate` runs every check a receiving service must apply before
acting on a token, cheapest first:

1. Chain length against ``max_chain_length``.
2. The leaf references at most one proof.
3. Proofs are put in chain order (:func:`~nuc.validator.chain.sort_proofs`).
4. The root is issued by a trusted root issuer; every proof is a delegation.
5. Chain invariants over the root-first payload sequence.
6. Leaf checks: ancestor policies hold for an invocation, and the leaf
   satisfies the caller's token requirements.
7. Every signature verifies.

The first failing check raises; nothing is accumulated.  On success the
caller receives a :class:`ValidatedEnvelope`, which only this module
constructs.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from nuc.core.config import TokenRequirement, ValidationOptions
from nuc.core.errors import (
    ChainTooLong,
    Eip712MetadataMissing,
    InvalidAudience,
    InvalidSignatures,
    NeedDelegation,
    NeedInvocation,
    PolicyNotMet,
    ProofsMustBeDelegations,
    SignatureError,
    TooManyProofs,
    UnchainedProofs,
)
from nuc.identity.did import are_equal, parse_did
from nuc.policy.evaluator import evaluate
from nuc.token.envelope import Envelope
from nuc.token.payload import (
    DelegationPayload,
    InvocationPayload,
    Payload,
    payload_to_json,
    proof_hashes,
)
from nuc.validator.chain import sort_proofs, validate_payload_chain, validate_proofs
from nuc.validator.signatures import validate_envelope_signatures

logger = logging.getLogger(__name__)

_CONSTRUCTION_KEY = object()


@dataclass(frozen=True, slots=True)
class ValidatedEnvelope:
    """An envelope that passed :func:`validate`.

    ``chain`` holds the payloads root first, leaf last.
    """

    envelope: Envelope
    chain: tuple[Payload, ...]
    _key: object = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._key is not _CONSTRUCTION_KEY:
            raise TypeError("ValidatedEnvelope instances are created by validate()")

    @property
    def payload(self) -> Payload:
        return self.envelope.nuc.payload


# ---------------------------------------------------------------------------
# Leaf checks
# ---------------------------------------------------------------------------

def _check_audience(payload: Payload, requirement: TokenRequirement) -> None:
    if not are_equal(payload.aud, parse_did(requirement.audience)):
        logger.debug(
            "invalid audience: expected %s, got %s", requirement.audience, payload.aud
        )
        raise InvalidAudience(
            details={"expected": requirement.audience, "actual": payload.aud.did_string}
        )


def _validate_delegation_payload(
    payload: DelegationPayload,
    requirement: TokenRequirement | None,
) -> None:
    if requirement is None:
        return
    if requirement.kind == "invocation":
        logger.debug("expected invocation, got delegation")
        raise NeedInvocation()
    _check_audience(payload, requirement)


def _validate_invocation_payload(
    payload: InvocationPayload,
    ancestors: Sequence[Payload],
    context: dict[str, Any],
    requirement: TokenRequirement | None,
) -> None:
    record = payload_to_json(payload)
    for ancestor in ancestors:
        if not isinstance(ancestor, DelegationPayload):
            raise ProofsMustBeDelegations(details={"cmd": ancestor.cmd})
        if not evaluate(ancestor.pol, record, context):
            logger.debug("policy of %s not met by invocation", ancestor.iss)
            raise PolicyNotMet(details={"issuer": ancestor.iss.did_string})

    if requirement is None:
        return
    if requirement.kind == "delegation":
        logger.debug("expected delegation, got invocation")
        raise NeedDelegation()
    _check_audience(payload, requirement)


def validate_payload(
    payload: Payload,
    ancestors: Sequence[Payload],
    context: dict[str, Any],
    requirement: TokenRequirement | None,
) -> None:
    """Leaf checks; *ancestors* are root first."""
    if isinstance(payload, DelegationPayload):
        _validate_delegation_payload(payload, requirement)
    else:
        _validate_invocation_payload(payload, ancestors, context, requirement)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def validate(envelope: Envelope, options: ValidationOptions | None = None) -> ValidatedEnvelope:
    """Validate *envelope* and return it wrapped as a :class:`ValidatedEnvelope`.

    Parameters
    ----------
    envelope:
        Decoded envelope (leaf plus proofs).
    options:
        Trusted root issuers, limits, token requirements, policy
        context and clock.  Defaults apply when omitted.

    Raises
    ------
    ChainError, RelationshipError, PolicyError, TrustError
        The first structural, relationship, policy or trust check that fails.
    InvalidSignatures
        If any signature fails; the scheme-specific error is the ``__cause__``.
    """
    options = options if options is not None else ValidationOptions()
    params = options.params

    chain_length = len(envelope.proofs) + 1
    if chain_length > params.max_chain_length:
        logger.debug(
            "chain too long: %d tokens, max %d", chain_length, params.max_chain_length
        )
        raise ChainTooLong(
            details={"length": chain_length, "max_chain_length": params.max_chain_length}
        )

    payload = envelope.nuc.payload
    references = proof_hashes(payload)
    if len(references) > 1:
        logger.debug("leaf references %d proofs", len(references))
        raise TooManyProofs(details={"count": len(references)})

    if references:
        proofs = sort_proofs(references[0], envelope.proofs)
    elif envelope.proofs:
        logger.debug("%d proof(s) not part of the chain", len(envelope.proofs))
        raise UnchainedProofs(details={"count": len(envelope.proofs)})
    else:
        proofs = []

    now_ms = options.time_provider()

    validate_proofs(payload, proofs, options.root_issuers)
    ancestors = tuple(reversed(proofs))
    chain = (*ancestors, payload)
    validate_payload_chain(chain, params, now_ms)
    validate_payload(payload, ancestors, options.context, params.token_requirements)

    try:
        validate_envelope_signatures(envelope)
    except (SignatureError, Eip712MetadataMissing) as exc:
        logger.debug("signature validation failed: %r", exc)
        raise InvalidSignatures(details={"cause": exc.code}) from exc

    logger.debug("envelope valid: chain length %d", len(chain))
    return ValidatedEnvelope(envelope=envelope, chain=chain, _key=_CONSTRUCTION_KEY)


class Validator:
    """Holds :class:`ValidationOptions` for repeated validation.

    Usage
    -----
    ::

        validator = Validator(ValidationOptions(root_issuers=[root_did]))
        validated = validator.validate(decode_base64url(token))
    """

    def __init__(self, options: ValidationOptions | None = None) -> None:
        self._options = options if options is not None else ValidationOptions()

    @property
    def options(self) -> ValidationOptions:
        return self._options

    def validate(self, envelope: Envelope) -> ValidatedEnvelope:
        return validate(envelope, self._options)

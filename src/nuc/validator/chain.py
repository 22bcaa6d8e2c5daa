"""Proof-chain reconstruction and chain invariants.

Envelopes carry their proofs as an unordered bag.  :func:`sort_proofs`
walks the ``prf`` hash references from the leaf upwards to put them in
order; the remaining functions check the invariants every consecutive
pair of tokens, and the chain as a whole, must satisfy.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from nuc.core.config import ValidationParameters
from nuc.core.constants import REVOKE_COMMAND
from nuc.core.errors import (
    CommandNotAttenuated,
    DifferentSubjects,
    IssuerAudienceMismatch,
    MissingProof,
    NotBeforeBackwards,
    ProofsMustBeDelegations,
    RootKeySignatureMissing,
    SubjectNotInChain,
    TooManyProofs,
    UnchainedProofs,
)
from nuc.identity.did import are_equal, parse_did
from nuc.token.envelope import Nuc, compute_hash
from nuc.token.payload import (
    DelegationPayload,
    InvocationPayload,
    Payload,
    is_command_attenuation_of,
    proof_hashes,
)
from nuc.validator.policy import validate_policy_properties
from nuc.validator.temporal import validate_temporal_properties

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reconstruction
# ---------------------------------------------------------------------------

def sort_proofs(start_hash: bytes, proofs: Sequence[Nuc]) -> list[Payload]:
    """Order *proofs* by following ``prf`` references from *start_hash*.

    Returns the proof payloads nearest-ancestor first (root last).

    Raises
    ------
    MissingProof
        If a referenced hash matches no remaining proof.
    TooManyProofs
        If a visited proof references more than one parent.
    UnchainedProofs
        If proofs remain that are not part of the chain.
    """
    remaining: dict[bytes, list[Payload]] = {}
    for proof in proofs:
        remaining.setdefault(compute_hash(proof), []).append(proof.payload)

    ordered: list[Payload] = []
    next_hash: bytes | None = start_hash
    while next_hash is not None:
        candidates = remaining.get(next_hash)
        if not candidates:
            logger.debug("missing proof %s", next_hash.hex())
            raise MissingProof(details={"hash": next_hash.hex()})
        payload = candidates.pop(0)
        if not candidates:
            del remaining[next_hash]
        ordered.append(payload)

        parents = proof_hashes(payload)
        if len(parents) > 1:
            logger.debug("proof references %d parents", len(parents))
            raise TooManyProofs(details={"count": len(parents)})
        next_hash = parents[0] if parents else None

    unchained = sum(len(payloads) for payloads in remaining.values())
    if unchained:
        logger.debug("%d proof(s) not part of the chain", unchained)
        raise UnchainedProofs(details={"count": unchained})
    return ordered


# ---------------------------------------------------------------------------
# Root trust
# ---------------------------------------------------------------------------

def validate_proofs(
    payload: Payload,
    proofs: Sequence[Payload],
    root_issuers: Sequence[str],
) -> None:
    """Check the chain's root issuer and that every proof is a delegation.

    *proofs* is nearest-ancestor first, as returned by :func:`sort_proofs`.

    Raises
    ------
    RootKeySignatureMissing
        If *root_issuers* is non-empty and the root is not issued by one.
    ProofsMustBeDelegations
        If any proof is an invocation.
    """
    if root_issuers:
        root = proofs[-1] if proofs else payload
        if not any(are_equal(parse_did(issuer), root.iss) for issuer in root_issuers):
            logger.debug(
                "root issuer %s not in trusted set %s", root.iss, list(root_issuers)
            )
            raise RootKeySignatureMissing(details={"issuer": root.iss.did_string})

    for proof in proofs:
        if isinstance(proof, InvocationPayload):
            logger.debug("proof %s is an invocation", proof.cmd)
            raise ProofsMustBeDelegations(details={"cmd": proof.cmd})


# ---------------------------------------------------------------------------
# Chain invariants
# ---------------------------------------------------------------------------

def validate_relationship_properties(previous: Payload, current: Payload) -> None:
    """Invariants between a token (*current*) and its parent (*previous*)."""
    if not are_equal(previous.aud, current.iss):
        logger.debug("issuer/audience mismatch: %s != %s", previous.aud, current.iss)
        raise IssuerAudienceMismatch(
            details={"expected": previous.aud.did_string, "actual": current.iss.did_string}
        )
    if not are_equal(previous.sub, current.sub):
        logger.debug("different subjects: %s != %s", previous.sub, current.sub)
        raise DifferentSubjects(
            details={"previous": previous.sub.did_string, "current": current.sub.did_string}
        )
    if current.cmd != REVOKE_COMMAND and not is_command_attenuation_of(current.cmd, previous.cmd):
        logger.debug("command %s does not attenuate %s", current.cmd, previous.cmd)
        raise CommandNotAttenuated(
            details={"previous": previous.cmd, "current": current.cmd}
        )
    if previous.nbf is not None and current.nbf is not None and previous.nbf > current.nbf:
        logger.debug("not before moved backwards: %d > %d", previous.nbf, current.nbf)
        raise NotBeforeBackwards(
            details={"previous": previous.nbf, "current": current.nbf}
        )


def validate_payload_chain(
    payloads: Sequence[Payload],
    params: ValidationParameters,
    now_ms: int,
) -> None:
    """Check a root-first sequence of payloads.

    Pairwise invariants run first over the whole chain, then per-token
    validity windows and delegation policy limits, then the requirement
    that the first token after the root is issued by the subject.
    """
    for previous, current in zip(payloads, payloads[1:]):
        validate_relationship_properties(previous, current)

    for payload in payloads:
        validate_temporal_properties(payload, now_ms)
        if isinstance(payload, DelegationPayload):
            validate_policy_properties(payload.pol, params)

    if len(payloads) >= 2:
        first_hop = payloads[1]
        if not are_equal(first_hop.iss, first_hop.sub):
            logger.debug(
                "subject %s not in chain (issuer %s)", first_hop.sub, first_hop.iss
            )
            raise SubjectNotInChain(
                details={"issuer": first_hop.iss.did_string, "subject": first_hop.sub.did_string}
            )

"""Fluent builders for delegation and invocation tokens.

Usage
-----
Root delegation::

    root = await (
        delegation()
        .audience(service_did)
        .subject(user_did)
        .command("/nil/db")
        .policy([["==", ".args.table", "users"]])
        .build(root_signer)
    )

Invocation derived from it::

    token = await invoking(root).audience(service_did).arguments({"table": "users"}).build(user_signer)

Building signs ``raw_header + "." + raw_payload`` where both segments
are the base64url encoding of compact JSON.  The resulting envelope
carries the proof's whole chain, so it can be validated on its own.
"""
from __future__ import annotations

import abc
import logging
import secrets
from typing import Any, TypeVar

from nuc.core.constants import DEFAULT_NONCE_LENGTH
from nuc.core.encoding import base64url_encode, compact_json
from nuc.core.errors import MissingRequiredField, ProofsMustBeDelegations
from nuc.core.interfaces import Signer
from nuc.identity.did import Did
from nuc.policy.rules import Policy, Rule, parse_policy, parse_rule
from nuc.token.codec import decode_base64url, serialize_base64url
from nuc.token.envelope import Envelope, Nuc, compute_hash
from nuc.token.payload import (
    DelegationPayload,
    InvocationPayload,
    Payload,
    payload_to_json,
    validate_command,
)

logger = logging.getLogger(__name__)

_B = TypeVar("_B", bound="_TokenBuilder")


class _TokenBuilder(abc.ABC):
    """Fields and signing shared by both token kinds."""

    def __init__(self) -> None:
        self._issuer: Did | None = None
        self._audience: Did | None = None
        self._subject: Did | None = None
        self._command: str | None = None
        self._expires_at: int | None = None
        self._not_before: int | None = None
        self._meta: dict[str, Any] | None = None
        self._nonce: str | None = None
        self._proof: Envelope | None = None

    # -- setters ---------------------------------------------------------

    def issuer(self: _B, iss: Did) -> _B:
        """Override the issuer; by default it is the signer's DID."""
        self._issuer = iss
        return self

    def audience(self: _B, aud: Did) -> _B:
        self._audience = aud
        return self

    def subject(self: _B, sub: Did) -> _B:
        self._subject = sub
        return self

    def command(self: _B, cmd: str) -> _B:
        self._command = validate_command(cmd)
        return self

    def expires_at(self: _B, seconds: int) -> _B:
        """Expiry as seconds since the epoch."""
        self._expires_at = seconds
        return self

    def not_before(self: _B, seconds: int) -> _B:
        """Start of validity as seconds since the epoch."""
        self._not_before = seconds
        return self

    def meta(self: _B, meta: dict[str, Any]) -> _B:
        self._meta = meta
        return self

    def nonce(self: _B, nonce: str) -> _B:
        self._nonce = nonce
        return self

    def proof(self: _B, proof: Envelope) -> _B:
        self._proof = proof
        return self

    # -- building --------------------------------------------------------

    def _common_fields(self, issuer: Did) -> dict[str, Any]:
        if self._audience is None or self._subject is None or self._command is None:
            raise MissingRequiredField(
                details={
                    "audience": self._audience is not None,
                    "subject": self._subject is not None,
                    "command": self._command is not None,
                }
            )
        return {
            "iss": issuer,
            "aud": self._audience,
            "sub": self._subject,
            "cmd": self._command,
            "nbf": self._not_before,
            "exp": self._expires_at,
            "meta": self._meta,
            "nonce": self._nonce or secrets.token_hex(DEFAULT_NONCE_LENGTH),
            "prf": (compute_hash(self._proof.nuc).hex(),) if self._proof else (),
        }

    @abc.abstractmethod
    def _payload(self, issuer: Did) -> Payload:
        """The unsigned payload for *issuer*."""

    async def build(self, signer: Signer) -> Envelope:
        """Sign the token with *signer* and return it with its proof chain.

        Raises
        ------
        MissingRequiredField
            If audience, subject or command has not been set.
        """
        issuer = self._issuer if self._issuer is not None else await signer.get_did()
        payload = self._payload(issuer)

        raw_header = base64url_encode(compact_json(signer.header.to_json()).encode("utf-8"))
        raw_payload = base64url_encode(compact_json(payload_to_json(payload)).encode("utf-8"))
        signature = await signer.sign(f"{raw_header}.{raw_payload}".encode("utf-8"))

        nuc = Nuc(
            raw_header=raw_header,
            raw_payload=raw_payload,
            signature=bytes(signature),
            payload=payload,
        )
        proofs = self._proof.all_tokens() if self._proof else ()
        logger.info(
            "built %s token cmd=%s iss=%s chain_length=%d",
            type(payload).__name__, payload.cmd, issuer, len(proofs) + 1,
        )
        return Envelope(nuc=nuc, proofs=proofs)

    async def sign_and_serialize(self, signer: Signer) -> str:
        return serialize_base64url(await self.build(signer))


class DelegationBuilder(_TokenBuilder):
    """Builds a :class:`DelegationPayload` token."""

    def __init__(self) -> None:
        super().__init__()
        self._policy: list[Rule] = []

    def policy(self, policy: Policy | list[Any]) -> DelegationBuilder:
        """Replace the policy; accepts parsed rules or the JSON wire form."""
        if policy and not isinstance(policy[0], list):
            self._policy = list(policy)
        else:
            self._policy = list(parse_policy(list(policy)))
        return self

    def add_policy(self, rule: Rule | list[Any]) -> DelegationBuilder:
        self._policy.append(parse_rule(rule) if isinstance(rule, list) else rule)
        return self

    def _payload(self, issuer: Did) -> DelegationPayload:
        return DelegationPayload(pol=tuple(self._policy), **self._common_fields(issuer))


class InvocationBuilder(_TokenBuilder):
    """Builds an :class:`InvocationPayload` token."""

    def __init__(self) -> None:
        super().__init__()
        self._args: dict[str, Any] = {}

    def arguments(self, args: dict[str, Any]) -> InvocationBuilder:
        self._args = dict(args)
        return self

    def add_argument(self, key: str, value: Any) -> InvocationBuilder:
        self._args[key] = value
        return self

    def _payload(self, issuer: Did) -> InvocationPayload:
        return InvocationPayload(args=dict(self._args), **self._common_fields(issuer))


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def delegation() -> DelegationBuilder:
    return DelegationBuilder()


def invocation() -> InvocationBuilder:
    return InvocationBuilder()


def _require_delegation(proof: Envelope) -> DelegationPayload:
    payload = proof.nuc.payload
    if not isinstance(payload, DelegationPayload):
        raise ProofsMustBeDelegations(
            "Cannot extend a token that is not a delegation.",
            details={"cmd": payload.cmd},
        )
    return payload


def delegating(proof: Envelope) -> DelegationBuilder:
    """A delegation chained on *proof*, inheriting its subject, command and policy."""
    parent = _require_delegation(proof)
    return (
        DelegationBuilder()
        .subject(parent.sub)
        .command(parent.cmd)
        .proof(proof)
        .policy(parent.pol)
    )


def invoking(proof: Envelope) -> InvocationBuilder:
    """An invocation chained on *proof*, inheriting its subject and command."""
    parent = _require_delegation(proof)
    return InvocationBuilder().subject(parent.sub).command(parent.cmd).proof(proof)


def delegating_from_string(token: str) -> DelegationBuilder:
    return delegating(decode_base64url(token))


def invoking_from_string(token: str) -> InvocationBuilder:
    return invoking(decode_base64url(token))

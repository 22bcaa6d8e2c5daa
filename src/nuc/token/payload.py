"""Token payloads: delegations and invocations.

A payload is either a :class:`DelegationPayload` (grants a command,
restricted by a policy) or an :class:`InvocationPayload` (exercises a
command with concrete arguments).  Both share the issuer / audience /
subject triple, the command, a nonce, an optional validity window,
optional metadata and the hash of the proof they were derived from.

The JSON form is discriminated structurally: a payload carrying ``pol``
is a delegation, one carrying ``args`` is an invocation, and exactly one
of the two must be present.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from nuc.core.errors import InvalidCommand, InvalidPayload
from nuc.identity.did import Did, parse_did
from nuc.policy.rules import Policy, parse_policy, policy_to_json

# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def validate_command(command: Any) -> str:
    """Return *command* if it is a ``/``-rooted path.

    Raises
    ------
    InvalidCommand
        If *command* is not a string starting with ``/``.
    """
    if not isinstance(command, str) or not command.startswith("/"):
        raise InvalidCommand(details={"command": command})
    return command


def _segments(command: str) -> list[str]:
    return [segment for segment in command[1:].split("/") if segment]


def is_command_attenuation_of(command: str, parent: str) -> bool:
    """``True`` if *command* equals *parent* or extends it by whole segments.

    ``/nil/db/read`` attenuates ``/nil/db`` and ``/``; it does not
    attenuate ``/nil/d`` or ``/nil/write``.
    """
    command_segments = _segments(command)
    parent_segments = _segments(parent)
    return (
        len(command_segments) >= len(parent_segments)
        and command_segments[: len(parent_segments)] == parent_segments
    )


# ---------------------------------------------------------------------------
# Payload records
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DelegationPayload:
    """Grants *cmd* over *sub* to *aud*, restricted by *pol*."""

    iss: Did
    aud: Did
    sub: Did
    cmd: str
    pol: Policy
    nonce: str
    nbf: int | None = None
    exp: int | None = None
    meta: dict[str, Any] | None = None
    prf: tuple[str, ...] = field(default=())


@dataclass(frozen=True, slots=True)
class InvocationPayload:
    """Exercises *cmd* over *sub* with *args*, addressed to *aud*."""

    iss: Did
    aud: Did
    sub: Did
    cmd: str
    args: dict[str, Any]
    nonce: str
    nbf: int | None = None
    exp: int | None = None
    meta: dict[str, Any] | None = None
    prf: tuple[str, ...] = field(default=())


Payload: TypeAlias = DelegationPayload | InvocationPayload


def is_delegation(payload: Payload) -> bool:
    return isinstance(payload, DelegationPayload)


def is_invocation(payload: Payload) -> bool:
    return isinstance(payload, InvocationPayload)


def proof_hashes(payload: Payload) -> list[bytes]:
    """The proof references of *payload* as raw hash bytes."""
    return [bytes.fromhex(proof) for proof in payload.prf]


# ---------------------------------------------------------------------------
# JSON form
# ---------------------------------------------------------------------------

class _PayloadWire(BaseModel):
    """Strict schema for the decoded payload JSON."""

    model_config = ConfigDict(strict=True, extra="forbid")

    iss: str
    aud: str
    sub: str
    cmd: str
    nonce: str
    pol: list[Any] | None = None
    args: dict[str, Any] | None = None
    nbf: int | None = None
    exp: int | None = None
    meta: dict[str, Any] | None = None
    prf: list[str] = Field(default_factory=list)

    @field_validator("nbf", "exp", mode="before")
    @classmethod
    def _integral_float_to_int(cls, value: Any) -> Any:
        # 10.0 is read as 10; fractional values still fail the strict int check
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


def parse_payload(value: Any) -> Payload:
    """Build a payload record from its decoded JSON object.

    Raises
    ------
    InvalidPayload
        If *value* does not match the payload schema, carries both or
        neither of ``pol`` / ``args``, or has a non-hex proof reference.
    InvalidCommand, InvalidPolicy, InvalidSelector, IdentityError
        If an individual field is malformed.
    """
    if not isinstance(value, dict):
        raise InvalidPayload("payload must be a JSON object", details={"payload": value})
    try:
        wire = _PayloadWire.model_validate(value)
    except ValidationError as exc:
        raise InvalidPayload(
            f"payload does not match schema: {exc.error_count()} error(s)",
            details={"errors": exc.errors(include_url=False, include_input=False)},
        ) from exc

    if (wire.pol is None) == (wire.args is None):
        raise InvalidPayload(
            "payload must carry exactly one of `pol` or `args`",
            details={"keys": sorted(value)},
        )
    for proof in wire.prf:
        try:
            bytes.fromhex(proof)
        except ValueError as exc:
            raise InvalidPayload(
                "proof references must be hex encoded",
                details={"prf": proof},
            ) from exc

    common: dict[str, Any] = {
        "iss": parse_did(wire.iss),
        "aud": parse_did(wire.aud),
        "sub": parse_did(wire.sub),
        "cmd": validate_command(wire.cmd),
        "nonce": wire.nonce,
        "nbf": wire.nbf,
        "exp": wire.exp,
        "meta": wire.meta,
        "prf": tuple(wire.prf),
    }
    if wire.pol is not None:
        return DelegationPayload(pol=parse_policy(wire.pol), **common)
    return InvocationPayload(args=wire.args, **common)


def payload_to_json(payload: Payload) -> dict[str, Any]:
    """The JSON object for *payload*, with absent optionals omitted.

    Keys are emitted in the canonical order ``iss, aud, sub, cmd,
    pol|args, nbf, exp, meta, nonce, prf``.
    """
    result: dict[str, Any] = {
        "iss": payload.iss.did_string,
        "aud": payload.aud.did_string,
        "sub": payload.sub.did_string,
        "cmd": payload.cmd,
    }
    if isinstance(payload, DelegationPayload):
        result["pol"] = policy_to_json(payload.pol)
    else:
        result["args"] = payload.args
    if payload.nbf is not None:
        result["nbf"] = payload.nbf
    if payload.exp is not None:
        result["exp"] = payload.exp
    if payload.meta is not None:
        result["meta"] = payload.meta
    result["nonce"] = payload.nonce
    result["prf"] = list(payload.prf)
    return result

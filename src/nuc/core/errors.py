"""NUC error-code hierarchy.

Every failure the token engine can report is a concrete exception class with
a stable code, so callers can branch on the cause instead of matching
message strings.

Hierarchy
---------
::

    NucError
    +-- ParseError              (NUC-E1xx)  malformed wire data
    |   +-- IdentityError       (NUC-E2xx)  DID parsing
    +-- NucValidationError
    |   +-- ChainError          (NUC-E3xx)  chain shape
    |   +-- RelationshipError   (NUC-E4xx)  relationship / temporal
    |   +-- PolicyError         (NUC-E5xx)  policy limits and evaluation
    |   +-- TrustError          (NUC-E6xx)  root trust and requirements
    |   +-- SignatureError      (NUC-E7xx)  cryptographic verification
    +-- SigningError            (NUC-E8xx)  building / signing tokens
    +-- PaymentError            (NUC-E9xx)  authority payment helpers

Usage
-----
Raise concrete subclasses directly::

    raise MissingProof(details={"hash": missing})

Catch by category::

    try:
        validate(envelope, options)
    except RelationshipError:
        # handles TokenExpired, NotBeforeNotMet, DifferentSubjects, etc.
        ...
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class NucError(Exception):
    """Base exception for all NUC errors.

    Attributes
    ----------
    code : str
        Stable error code, e.g. ``"NUC-E300"``.
    message : str
        Human-readable description.
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    """

    code: str = "NUC-E000"
    message: str = "Unknown NUC error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error to a JSON-friendly mapping."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["detail"] = self.details
        return {"error": payload}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ===================================================================
# Category base classes
# ===================================================================

class ParseError(NucError):
    """NUC-E1xx -- Malformed token strings, headers, payloads or policies."""

    code = "NUC-E1XX"


class IdentityError(ParseError):
    """NUC-E2xx -- DID strings that cannot be parsed."""

    code = "NUC-E2XX"


class NucValidationError(NucError):
    """Base for every failure raised while validating a well-formed envelope."""

    code = "NUC-EVXX"


class ChainError(NucValidationError):
    """NUC-E3xx -- The proof chain has the wrong shape."""

    code = "NUC-E3XX"


class RelationshipError(NucValidationError):
    """NUC-E4xx -- Consecutive tokens disagree, or a token is out of its time window."""

    code = "NUC-E4XX"


class PolicyError(NucValidationError):
    """NUC-E5xx -- Policy limits exceeded or policy not satisfied."""

    code = "NUC-E5XX"


class TrustError(NucValidationError):
    """NUC-E6xx -- Root trust or caller requirements not satisfied."""

    code = "NUC-E6XX"


class SignatureError(NucValidationError):
    """NUC-E7xx -- Cryptographic verification failed."""

    code = "NUC-E7XX"


class SigningError(NucError):
    """NUC-E8xx -- A token could not be built or signed."""

    code = "NUC-E8XX"


class PaymentError(NucError):
    """NUC-E9xx -- Authority payment helpers failed."""

    code = "NUC-E9XX"


# ===================================================================
# NUC-E1xx  Parse errors
# ===================================================================

class InvalidNucStructure(ParseError):
    """NUC-E100 -- Token string is not ``header.payload.signature`` segments."""

    code = "NUC-E100"
    message = "invalid Nuc structure"


class InvalidNucHeader(ParseError):
    """NUC-E101 -- Header JSON does not match the strict header schema."""

    code = "NUC-E101"
    message = "invalid Nuc header"


class InvalidPayload(ParseError):
    """NUC-E102 -- Payload JSON is not a delegation or an invocation."""

    code = "NUC-E102"
    message = "invalid Nuc payload"


class InvalidPolicy(ParseError):
    """NUC-E103 -- Policy does not follow the policy grammar."""

    code = "NUC-E103"
    message = "invalid policy structure"


class InvalidSelector(ParseError):
    """NUC-E104 -- Selector path is malformed."""

    code = "NUC-E104"
    message = "invalid selector format"


class InvalidCommand(ParseError):
    """NUC-E105 -- Command does not start with ``/``."""

    code = "NUC-E105"
    message = "command must start with '/'"


# ===================================================================
# NUC-E2xx  Identity errors
# ===================================================================

class UnsupportedMethod(IdentityError):
    """NUC-E200 -- DID method is not one of key, ethr or nil."""

    code = "NUC-E200"
    message = "unsupported DID method"


class InvalidDidFormat(IdentityError):
    """NUC-E201 -- DID method is known but its identifier is malformed."""

    code = "NUC-E201"
    message = "invalid DID format"


# ===================================================================
# NUC-E3xx  Chain-shape errors
# ===================================================================

class ChainTooLong(ChainError):
    """NUC-E300 -- More tokens than the configured maximum chain length."""

    code = "NUC-E300"
    message = "token chain is too long"


class TooManyProofs(ChainError):
    """NUC-E301 -- A token references more than one proof."""

    code = "NUC-E301"
    message = "up to one `prf` in a token is allowed"


class MissingProof(ChainError):
    """NUC-E302 -- A referenced proof is not in the envelope."""

    code = "NUC-E302"
    message = "proof is missing"


class UnchainedProofs(ChainError):
    """NUC-E303 -- The envelope carries proofs that are not part of the chain."""

    code = "NUC-E303"
    message = "extra proofs not part of chain provided"


class ProofsMustBeDelegations(ChainError):
    """NUC-E304 -- An ancestor token is an invocation."""

    code = "NUC-E304"
    message = "proofs must be delegations"


# ===================================================================
# NUC-E4xx  Relationship and temporal errors
# ===================================================================

class IssuerAudienceMismatch(RelationshipError):
    """NUC-E400 -- A token's issuer is not its parent's audience."""

    code = "NUC-E400"
    message = "issuer/audience mismatch"


class DifferentSubjects(RelationshipError):
    """NUC-E401 -- Consecutive tokens name different subjects."""

    code = "NUC-E401"
    message = "different subjects in chain"


class CommandNotAttenuated(RelationshipError):
    """NUC-E402 -- A token's command does not narrow its parent's command."""

    code = "NUC-E402"
    message = "command is not an attenuation"


class NotBeforeBackwards(RelationshipError):
    """NUC-E403 -- A token's ``nbf`` precedes its parent's ``nbf``."""

    code = "NUC-E403"
    message = "`not before` cannot move backwards"


class SubjectNotInChain(RelationshipError):
    """NUC-E404 -- The first delegation after the root is not issued by the subject."""

    code = "NUC-E404"
    message = "subject not in chain"


class TokenExpired(RelationshipError):
    """NUC-E405 -- ``exp`` is at or before the current time."""

    code = "NUC-E405"
    message = "token is expired"


class NotBeforeNotMet(RelationshipError):
    """NUC-E406 -- ``nbf`` is after the current time."""

    code = "NUC-E406"
    message = "`not before` date not met"


# ===================================================================
# NUC-E5xx  Policy errors
# ===================================================================

class PolicyNotMet(PolicyError):
    """NUC-E500 -- An ancestor policy evaluated to false for the invocation."""

    code = "NUC-E500"
    message = "policy not met"


class PolicyTooWide(PolicyError):
    """NUC-E501 -- Policy fan-out exceeds the configured maximum width."""

    code = "NUC-E501"
    message = "policy is too wide"


class PolicyTooDeep(PolicyError):
    """NUC-E502 -- Policy nesting exceeds the configured maximum depth."""

    code = "NUC-E502"
    message = "policy is too deep"


# ===================================================================
# NUC-E6xx  Trust errors
# ===================================================================

class RootKeySignatureMissing(TrustError):
    """NUC-E600 -- The root token is not issued by a trusted root issuer."""

    code = "NUC-E600"
    message = "root NUC is not signed by a root issuer"


class InvalidAudience(TrustError):
    """NUC-E601 -- Leaf audience differs from the required audience."""

    code = "NUC-E601"
    message = "invalid audience"


class NeedDelegation(TrustError):
    """NUC-E602 -- An invocation was supplied where a delegation is required."""

    code = "NUC-E602"
    message = "token must be a delegation"


class NeedInvocation(TrustError):
    """NUC-E603 -- A delegation was supplied where an invocation is required."""

    code = "NUC-E603"
    message = "token must be an invocation"


# ===================================================================
# NUC-E7xx  Signature errors
# ===================================================================

class InvalidSignatures(SignatureError):
    """NUC-E700 -- At least one token in the envelope failed verification."""

    code = "NUC-E700"
    message = "invalid signatures"


class Eip712InvalidIssuer(SignatureError):
    """NUC-E701 -- EIP-712 tokens must be issued by a ``did:ethr``."""

    code = "NUC-E701"
    message = "issuer must be a did:ethr for EIP-712 tokens"


class Eip712InvalidSignature(SignatureError):
    """NUC-E702 -- Recovered EIP-712 signer does not match the issuer."""

    code = "NUC-E702"
    message = "EIP-712 signature verification failed"


class NativeSignatureVerificationFailed(SignatureError):
    """NUC-E703 -- Native signature does not verify against the issuer."""

    code = "NUC-E703"
    message = "native signature verification failed"


# ===================================================================
# NUC-E8xx / E9xx  Signing and payment errors
# ===================================================================

class MissingRequiredField(SigningError):
    """NUC-E800 -- Builder is missing audience, subject or command."""

    code = "NUC-E800"
    message = "Audience, subject, and command are required fields."


class Eip712MetadataMissing(SigningError):
    """NUC-E801 -- EIP-712 header lacks a well-formed domain, types or primary type."""

    code = "NUC-E801"
    message = "EIP-712 metadata missing from header"


class PaymentTxFailed(PaymentError):
    """NUC-E900 -- The payer could not submit the payment transaction."""

    code = "NUC-E900"
    message = "Payment transaction failed."


# ---------------------------------------------------------------------------
# Lookup helper
# ---------------------------------------------------------------------------

_CODE_MAP: dict[str, type[NucError]] = {
    cls.code: cls
    for cls in [
        # E1xx
        InvalidNucStructure,
        InvalidNucHeader,
        InvalidPayload,
        InvalidPolicy,
        InvalidSelector,
        InvalidCommand,
        # E2xx
        UnsupportedMethod,
        InvalidDidFormat,
        # E3xx
        ChainTooLong,
        TooManyProofs,
        MissingProof,
        UnchainedProofs,
        ProofsMustBeDelegations,
        # E4xx
        IssuerAudienceMismatch,
        DifferentSubjects,
        CommandNotAttenuated,
        NotBeforeBackwards,
        SubjectNotInChain,
        TokenExpired,
        NotBeforeNotMet,
        # E5xx
        PolicyNotMet,
        PolicyTooWide,
        PolicyTooDeep,
        # E6xx
        RootKeySignatureMissing,
        InvalidAudience,
        NeedDelegation,
        NeedInvocation,
        # E7xx
        InvalidSignatures,
        Eip712InvalidIssuer,
        Eip712InvalidSignature,
        NativeSignatureVerificationFailed,
        # E8xx / E9xx
        MissingRequiredField,
        Eip712MetadataMissing,
        PaymentTxFailed,
    ]
}


def error_from_code(code: str, message: str | None = None) -> NucError:
    """Instantiate the correct exception class for a NUC error code.

    Raises
    ------
    KeyError
        If *code* is not a recognised NUC error code.
    """
    cls = _CODE_MAP[code]
    return cls(message) if message else cls()

"""NUC -- chained, delegatable capability tokens.

A NUC is a signed token granting (delegation) or exercising (invocation)
a command over a subject.  Tokens chain through proof hashes; a service
validates the whole chain back to a trusted root before acting.

Layers
------
1. Identity (:mod:`nuc.identity`) -- DIDs, key pairs, signature checks.
2. Policy (:mod:`nuc.policy`) -- selectors, rule trees, evaluation.
3. Token (:mod:`nuc.token`) -- payloads, headers, codec, signers, builders.
4. Validation (:mod:`nuc.validator`) -- chain reconstruction and checks.
5. Authority (:mod:`nuc.authority`) -- signed requests, payments, revocation.
"""
from __future__ import annotations

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Layer 5 -- Authority helpers
# ---------------------------------------------------------------------------
from nuc.authority import (
    BlindModule,
    PaymentReceipt,
    build_revocation,
    create_signed_request,
    find_revocation_hashes,
    pay_for_subscription,
    token_request_payload,
)

# ---------------------------------------------------------------------------
# Core -- config, constants, errors, interfaces
# ---------------------------------------------------------------------------
from nuc.core.config import TokenRequirement, ValidationOptions, ValidationParameters
from nuc.core.constants import REVOKE_COMMAND
from nuc.core.errors import (
    ChainError,
    IdentityError,
    NucError,
    NucValidationError,
    ParseError,
    PaymentError,
    PolicyError,
    RelationshipError,
    SignatureError,
    SigningError,
    TrustError,
    error_from_code,
)
from nuc.core.interfaces import Eip712Signer, InMemoryPayer, Payer, Signer

# ---------------------------------------------------------------------------
# Layer 1 -- Identity
# ---------------------------------------------------------------------------
from nuc.identity import (
    Did,
    DidEthr,
    DidKey,
    DidNil,
    Keypair,
    are_equal,
    did_from_address,
    did_from_public_key,
    parse_did,
    serialize_did,
    verify_signature,
)

# ---------------------------------------------------------------------------
# Layer 2 -- Policy
# ---------------------------------------------------------------------------
from nuc.policy import Policy, evaluate, parse_policy, policy_to_json, tree_shape

# ---------------------------------------------------------------------------
# Layer 3 -- Token
# ---------------------------------------------------------------------------
from nuc.token import (
    NUC_EIP712_DOMAIN,
    DelegationBuilder,
    DelegationPayload,
    Envelope,
    EthAccountEip712Signer,
    InvocationBuilder,
    InvocationPayload,
    NativeSigner,
    Nuc,
    NucHeader,
    Payload,
    Web3Signer,
    compute_hash,
    decode_base64url,
    delegating,
    delegation,
    generate_signer,
    invocation,
    invoking,
    native_signer,
    serialize_base64url,
    web3_signer,
)

# ---------------------------------------------------------------------------
# Layer 4 -- Validation
# ---------------------------------------------------------------------------
from nuc.validator import ValidatedEnvelope, Validator, validate

__all__ = [
    # Meta
    "__version__",
    # Config & constants
    "REVOKE_COMMAND",
    "TokenRequirement",
    "ValidationOptions",
    "ValidationParameters",
    # Error hierarchy
    "NucError",
    "ParseError",
    "IdentityError",
    "NucValidationError",
    "ChainError",
    "RelationshipError",
    "PolicyError",
    "TrustError",
    "SignatureError",
    "SigningError",
    "PaymentError",
    "error_from_code",
    # Interfaces
    "Signer",
    "Eip712Signer",
    "Payer",
    "InMemoryPayer",
    # Layer 1 -- Identity
    "Did",
    "DidKey",
    "DidEthr",
    "DidNil",
    "Keypair",
    "are_equal",
    "did_from_address",
    "did_from_public_key",
    "parse_did",
    "serialize_did",
    "verify_signature",
    # Layer 2 -- Policy
    "Policy",
    "evaluate",
    "parse_policy",
    "policy_to_json",
    "tree_shape",
    # Layer 3 -- Token
    "NUC_EIP712_DOMAIN",
    "DelegationBuilder",
    "DelegationPayload",
    "Envelope",
    "EthAccountEip712Signer",
    "InvocationBuilder",
    "InvocationPayload",
    "NativeSigner",
    "Nuc",
    "NucHeader",
    "Payload",
    "Web3Signer",
    "compute_hash",
    "decode_base64url",
    "delegating",
    "delegation",
    "generate_signer",
    "invocation",
    "invoking",
    "native_signer",
    "serialize_base64url",
    "web3_signer",
    # Layer 4 -- Validation
    "ValidatedEnvelope",
    "Validator",
    "validate",
    # Layer 5 -- Authority
    "BlindModule",
    "PaymentReceipt",
    "build_revocation",
    "create_signed_request",
    "find_revocation_hashes",
    "pay_for_subscription",
    "token_request_payload",
]

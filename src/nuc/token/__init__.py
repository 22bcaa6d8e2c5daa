"""NUC token data model, wire codec, signers and builders.

Public API
----------
- :class:`DelegationPayload`, :class:`InvocationPayload` -- payload records.
- :class:`NucHeader` and the header presets.
- :class:`Nuc`, :class:`Envelope`, :func:`compute_hash` -- decoded tokens.
- :func:`decode_base64url` / :func:`serialize_base64url` -- wire codec.
- :func:`to_eip712_payload` -- typed-data projection of a payload.
- :class:`Eip712Meta`, :func:`parse_eip712_meta` -- EIP-712 header metadata.
- :class:`NativeSigner`, :class:`Web3Signer` -- signer implementations.
- :func:`delegation`, :func:`invocation`, :func:`delegating`,
  :func:`invoking` -- token builders.
"""
from __future__ import annotations

from nuc.token.builder import (
    DelegationBuilder,
    InvocationBuilder,
    delegating,
    delegating_from_string,
    delegation,
    invocation,
    invoking,
    invoking_from_string,
)
from nuc.token.codec import decode_base64url, parse_token, serialize_base64url
from nuc.token.eip712 import (
    NUC_EIP712_DOMAIN,
    NUC_EIP712_PRIMARY_TYPE,
    NUC_EIP712_TYPES,
    Eip712Meta,
    parse_eip712_meta,
    to_eip712_payload,
    typed_data_message,
)
from nuc.token.envelope import Envelope, Nuc, compute_hash
from nuc.token.header import (
    NucHeader,
    legacy_header,
    parse_header,
    v1_eip712_header,
    v1_header,
)
from nuc.token.payload import (
    DelegationPayload,
    InvocationPayload,
    Payload,
    is_command_attenuation_of,
    is_delegation,
    is_invocation,
    parse_payload,
    payload_to_json,
    proof_hashes,
    validate_command,
)
from nuc.token.signer import (
    EthAccountEip712Signer,
    NativeSigner,
    Web3Signer,
    generate_signer,
    native_signer,
    web3_signer,
)

__all__ = [
    "NUC_EIP712_DOMAIN",
    "NUC_EIP712_PRIMARY_TYPE",
    "NUC_EIP712_TYPES",
    "DelegationBuilder",
    "DelegationPayload",
    "Eip712Meta",
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
    "delegating_from_string",
    "delegation",
    "generate_signer",
    "invocation",
    "invoking",
    "invoking_from_string",
    "is_command_attenuation_of",
    "is_delegation",
    "is_invocation",
    "legacy_header",
    "native_signer",
    "parse_eip712_meta",
    "parse_header",
    "parse_payload",
    "parse_token",
    "payload_to_json",
    "proof_hashes",
    "serialize_base64url",
    "to_eip712_payload",
    "typed_data_message",
    "v1_eip712_header",
    "v1_header",
    "validate_command",
    "web3_signer",
]

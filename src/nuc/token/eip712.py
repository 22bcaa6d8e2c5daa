"""EIP-712 typed-data form of NUC payloads.

Tokens with header ``typ`` ``"nuc+eip712"`` are signed by an Ethereum
wallet over a typed-data message instead of over the raw token bytes.
The message is a fixed, flat projection of the payload: DIDs become
strings, the policy and the arguments become compact JSON strings, and
absent fields take neutral defaults so the projection is total.
"""
from __future__ import annotations

from typing import Any

from eth_account.messages import SignableMessage, encode_typed_data
from eth_utils import is_address
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from nuc.core.encoding import compact_json
from nuc.core.errors import Eip712MetadataMissing
from nuc.policy.rules import policy_to_json
from nuc.token.payload import DelegationPayload, Payload

NUC_EIP712_PRIMARY_TYPE = "NucPayload"

NUC_EIP712_DOMAIN: dict[str, Any] = {
    "name": "NUC",
    "version": "1",
    "chainId": 1,
}

NUC_EIP712_TYPES: dict[str, list[dict[str, str]]] = {
    NUC_EIP712_PRIMARY_TYPE: [
        {"name": "iss", "type": "string"},
        {"name": "aud", "type": "string"},
        {"name": "sub", "type": "string"},
        {"name": "cmd", "type": "string"},
        {"name": "pol", "type": "string"},
        {"name": "args", "type": "string"},
        {"name": "nbf", "type": "uint256"},
        {"name": "exp", "type": "uint256"},
        {"name": "nonce", "type": "string"},
        {"name": "prf", "type": "string[]"},
    ],
}


def to_eip712_payload(payload: Payload) -> dict[str, Any]:
    """Project *payload* onto the ``NucPayload`` typed-data struct."""
    if isinstance(payload, DelegationPayload):
        pol = compact_json(policy_to_json(payload.pol))
        args = "{}"
    else:
        pol = "[]"
        args = compact_json(payload.args)
    return {
        "iss": payload.iss.did_string,
        "aud": payload.aud.did_string,
        "sub": payload.sub.did_string,
        "cmd": payload.cmd,
        "pol": pol,
        "args": args,
        "nbf": payload.nbf or 0,
        "exp": payload.exp or 0,
        "nonce": payload.nonce,
        "prf": list(payload.prf),
    }


# ---------------------------------------------------------------------------
# Header metadata
# ---------------------------------------------------------------------------

class Eip712Domain(BaseModel):
    """Domain separator fields a ``nuc+eip712`` header may carry."""

    model_config = ConfigDict(strict=True, frozen=True, extra="forbid")

    name: str | None = None
    version: str | None = None
    chainId: int | None = Field(default=None, ge=0)
    verifyingContract: str | None = None
    salt: str | None = Field(default=None, pattern=r"^0x[0-9a-fA-F]{64}$")

    @field_validator("verifyingContract")
    @classmethod
    def _check_contract(cls, value: str | None) -> str | None:
        if value is not None and not is_address(value):
            raise ValueError("verifyingContract must be an Ethereum address")
        return value

    @model_validator(mode="after")
    def _check_not_empty(self) -> Eip712Domain:
        if not self.model_dump(exclude_none=True):
            raise ValueError("domain must set at least one field")
        return self


class Eip712TypeField(BaseModel):
    model_config = ConfigDict(strict=True, frozen=True, extra="forbid")

    name: str
    type: str


class Eip712Meta(BaseModel):
    """The ``meta`` object of a ``nuc+eip712`` header.

    The primary type must describe exactly the ``NucPayload`` projection
    produced by :func:`to_eip712_payload`; any other schema cannot be the
    one a wallet signed this payload under.
    """

    model_config = ConfigDict(strict=True, frozen=True, populate_by_name=True)

    domain: Eip712Domain
    types: dict[str, list[Eip712TypeField]]
    primary_type: str = Field(alias="primaryType")

    @model_validator(mode="after")
    def _check_primary_type(self) -> Eip712Meta:
        fields = self.types.get(self.primary_type)
        if fields is None:
            raise ValueError("primaryType is not declared in types")
        if [field.model_dump() for field in fields] != NUC_EIP712_TYPES[NUC_EIP712_PRIMARY_TYPE]:
            raise ValueError("primaryType does not describe the NUC payload")
        return self

    def domain_data(self) -> dict[str, Any]:
        return self.domain.model_dump(exclude_none=True)

    def message_types(self) -> dict[str, list[dict[str, str]]]:
        """The primary type alone, as wallets and ``eth_account`` expect it."""
        return {
            self.primary_type: [field.model_dump() for field in self.types[self.primary_type]]
        }


def parse_eip712_meta(meta: Any) -> Eip712Meta:
    """Validate the ``meta`` of a ``nuc+eip712`` header.

    Raises
    ------
    Eip712MetadataMissing
        If *meta* is absent or does not carry a well-formed domain, types
        and primary type.
    """
    if not meta:
        raise Eip712MetadataMissing(details={"meta": meta})
    try:
        return Eip712Meta.model_validate(meta)
    except ValidationError as exc:
        raise Eip712MetadataMissing(
            "EIP-712 metadata in header is malformed",
            details={
                "errors": exc.errors(include_url=False, include_input=False, include_context=False)
            },
        ) from exc


def typed_data_message(meta: Eip712Meta, value: dict[str, Any]) -> SignableMessage:
    """The EIP-712 signable message for *value* under the header's *meta*."""
    return encode_typed_data(
        domain_data=meta.domain_data(),
        message_types=meta.message_types(),
        message_data=value,
    )

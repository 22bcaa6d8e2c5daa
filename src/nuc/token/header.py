"""Token header schema and presets.

The header names the signature algorithm and, through ``typ``, the
verification strategy: absent or ``"nuc"`` means a native secp256k1
signature over the raw token bytes, ``"nuc+eip712"`` means an EIP-712
typed-data signature whose domain and types travel in ``meta``.

Unknown header fields are rejected so that a token cannot smuggle in
parameters that change how it is verified.
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from nuc.core.constants import ES256K, NUC_PAYLOAD_VERSION, NUC_TYPE_EIP712, NUC_TYPE_NATIVE
from nuc.core.errors import InvalidNucHeader
from nuc.token.eip712 import NUC_EIP712_DOMAIN, NUC_EIP712_PRIMARY_TYPE, NUC_EIP712_TYPES


class NucHeader(BaseModel):
    """Decoded token header."""

    model_config = ConfigDict(strict=True, frozen=True, extra="forbid")

    typ: Literal["nuc", "nuc+eip712"] | None = Field(
        default=None,
        description="Signing protocol; absent for legacy native tokens.",
    )
    alg: Literal["ES256K"] = Field(
        description="Signature algorithm.",
    )
    ver: str | None = Field(
        default=None,
        pattern=r"^\d+\.\d+\.\d+$",
        description="Semantic version of the payload format.",
    )
    meta: dict[str, Any] | None = Field(
        default=None,
        description="Parameters required by specific ``typ`` values.",
    )

    @property
    def is_eip712(self) -> bool:
        return self.typ == NUC_TYPE_EIP712

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def parse_header(value: Any) -> NucHeader:
    """Validate a decoded header object.

    Raises
    ------
    InvalidNucHeader
        If *value* does not match the header schema.
    """
    try:
        return NucHeader.model_validate(value)
    except ValidationError as exc:
        raise InvalidNucHeader(
            details={"errors": exc.errors(include_url=False, include_input=False)},
        ) from exc


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

def legacy_header() -> NucHeader:
    """Header of tokens issued before ``typ``/``ver`` existed."""
    return NucHeader(alg=ES256K)


def v1_header() -> NucHeader:
    return NucHeader(typ=NUC_TYPE_NATIVE, alg=ES256K, ver=NUC_PAYLOAD_VERSION)


def v1_eip712_header(domain: dict[str, Any] | None = None) -> NucHeader:
    """Header for EIP-712 tokens signed under *domain* (default ``NUC_EIP712_DOMAIN``)."""
    return NucHeader(
        typ=NUC_TYPE_EIP712,
        alg=ES256K,
        ver=NUC_PAYLOAD_VERSION,
        meta={
            "domain": dict(domain if domain is not None else NUC_EIP712_DOMAIN),
            "primaryType": NUC_EIP712_PRIMARY_TYPE,
            "types": {
                name: [dict(entry) for entry in fields]
                for name, fields in NUC_EIP712_TYPES.items()
            },
        },
    )

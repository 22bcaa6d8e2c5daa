"""Validation configuration.

Defines the validated configuration models consumed by the token validator.
Limits default to the values every validating party is expected to apply
(chain length 5, policy width 10, policy depth 5); callers override them
per call by passing a new model instead of mutating shared state.
"""
from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from nuc.core.constants import (
    DEFAULT_MAX_CHAIN_LENGTH,
    DEFAULT_MAX_POLICY_DEPTH,
    DEFAULT_MAX_POLICY_WIDTH,
)


def wall_clock_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


class TokenRequirement(BaseModel):
    """Constraint on the kind and audience of the leaf token."""

    model_config = ConfigDict(strict=True, frozen=True)

    kind: Literal["invocation", "delegation"] = Field(
        description="Whether the leaf token must be an invocation or a delegation.",
    )
    audience: str = Field(
        description="DID string the leaf token's audience must equal.",
    )


class ValidationParameters(BaseModel):
    """Resource limits and optional leaf requirements.

    The limits bound the work a single validation may perform and are
    enforced before any policy evaluation or signature verification.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    max_chain_length: int = Field(
        default=DEFAULT_MAX_CHAIN_LENGTH,
        ge=1,
        description="Maximum number of tokens (proofs + leaf) in an envelope.",
    )
    max_policy_width: int = Field(
        default=DEFAULT_MAX_POLICY_WIDTH,
        ge=1,
        description="Maximum fan-out of any policy connector or top-level list.",
    )
    max_policy_depth: int = Field(
        default=DEFAULT_MAX_POLICY_DEPTH,
        ge=1,
        description="Maximum nesting depth of a policy tree.",
    )
    token_requirements: TokenRequirement | None = Field(
        default=None,
        description="Optional constraint on the leaf token's kind and audience.",
    )


class ValidationOptions(BaseModel):
    """Everything a single ``validate`` call needs besides the envelope."""

    model_config = ConfigDict(strict=True, frozen=True)

    root_issuers: list[str] = Field(
        default_factory=list,
        description=(
            "DID strings trusted to issue root tokens.  When empty, the root "
            "issuer is not checked."
        ),
    )
    params: ValidationParameters = Field(
        default_factory=ValidationParameters,
        description="Resource limits and leaf requirements.",
    )
    context: dict[str, Any] = Field(
        default_factory=dict,
        description="Values reachable from policies through ``$.`` selectors.",
    )
    time_provider: Callable[[], int] = Field(
        default=wall_clock_ms,
        description="Returns the current time in milliseconds since the epoch.",
    )

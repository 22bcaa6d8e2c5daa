"""Policy size limits for delegations in a chain."""
from __future__ import annotations

import logging

from nuc.core.config import ValidationParameters
from nuc.core.errors import PolicyTooDeep, PolicyTooWide
from nuc.policy.evaluator import tree_shape
from nuc.policy.rules import Policy

logger = logging.getLogger(__name__)


def validate_policy_properties(policy: Policy, params: ValidationParameters) -> None:
    """Reject policies wider or deeper than *params* allow.

    The top-level rule count is checked first, then the widest connector
    and the deepest path of the rule tree.

    Raises
    ------
    PolicyTooWide
        If the policy or one of its connectors has too many children.
    PolicyTooDeep
        If the rule tree is nested too deeply.
    """
    if len(policy) > params.max_policy_width:
        logger.debug(
            "policy too wide: %d rules, max %d", len(policy), params.max_policy_width
        )
        raise PolicyTooWide(
            details={"width": len(policy), "max_policy_width": params.max_policy_width}
        )
    shape = tree_shape(policy)
    if shape.max_width > params.max_policy_width:
        logger.debug(
            "policy too wide: width %d, max %d", shape.max_width, params.max_policy_width
        )
        raise PolicyTooWide(
            details={"width": shape.max_width, "max_policy_width": params.max_policy_width}
        )
    if shape.max_depth > params.max_policy_depth:
        logger.debug(
            "policy too deep: depth %d, max %d", shape.max_depth, params.max_policy_depth
        )
        raise PolicyTooDeep(
            details={"depth": shape.max_depth, "max_policy_depth": params.max_policy_depth}
        )

"""Policy evaluation and tree-shape analysis."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from nuc.policy.rules import And, AnyOf, Equals, Not, NotEquals, Or, Policy, Rule
from nuc.policy.selector import apply_selector

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Equality
# ---------------------------------------------------------------------------

def json_equal(a: Any, b: Any) -> bool:
    """Deep equality with JSON semantics.

    Booleans never equal numbers (``True != 1``), integers equal floats
    of the same value, and tuples compare like lists.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(json_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(json_equal(x, y) for x, y in zip(a, b))
    return type(a) is type(b) and a == b


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def evaluate(policy: Policy, record: dict[str, Any], context: dict[str, Any]) -> bool:
    """Evaluate *policy* against *record* and *context*.

    The top-level rules are ANDed; evaluation stops at the first rule
    that does not hold.
    """
    return all(evaluate_rule(rule, record, context) for rule in policy)


def evaluate_rule(rule: Rule, record: dict[str, Any], context: dict[str, Any]) -> bool:
    if isinstance(rule, (Equals, NotEquals, AnyOf)):
        selected = apply_selector(rule.selector, record, context)
        if isinstance(rule, Equals):
            result = json_equal(selected, rule.value)
        elif isinstance(rule, NotEquals):
            result = not json_equal(selected, rule.value)
        else:
            result = any(json_equal(selected, option) for option in rule.options)
        logger.debug(
            "%s %s: selected=%r result=%s",
            type(rule).__name__, rule.selector, selected, result,
        )
        return result
    if isinstance(rule, And):
        return all(evaluate_rule(child, record, context) for child in rule.rules)
    if isinstance(rule, Or):
        return any(evaluate_rule(child, record, context) for child in rule.rules)
    return not evaluate_rule(rule.rule, record, context)


# ---------------------------------------------------------------------------
# Shape
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PolicyShape:
    max_depth: int
    max_width: int


def _rule_shape(rule: Rule) -> PolicyShape:
    if isinstance(rule, AnyOf):
        return PolicyShape(max_depth=1, max_width=max(1, len(rule.options)))
    if isinstance(rule, (Equals, NotEquals)):
        return PolicyShape(max_depth=1, max_width=1)
    if isinstance(rule, Not):
        inner = _rule_shape(rule.rule)
        return PolicyShape(max_depth=inner.max_depth + 1, max_width=inner.max_width)
    return _connector_shape(rule.rules)


def _connector_shape(children: tuple[Rule, ...]) -> PolicyShape:
    shapes = [_rule_shape(child) for child in children]
    return PolicyShape(
        max_depth=1 + max((s.max_depth for s in shapes), default=0),
        max_width=max([len(children), *(s.max_width for s in shapes)]),
    )


def tree_shape(policy: Policy) -> PolicyShape:
    """Longest root-to-leaf path and widest fan-out of *policy*.

    A single-rule policy is measured as that rule; any other list is
    measured as an implicit AND over its rules, so an empty policy has
    depth 1 and width 0.
    """
    shape = _rule_shape(policy[0]) if len(policy) == 1 else _connector_shape(policy)
    logger.debug(
        "policy tree shape: depth=%d width=%d", shape.max_depth, shape.max_width
    )
    return shape

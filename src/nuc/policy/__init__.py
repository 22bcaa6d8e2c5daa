"""NUC policy engine.

Delegations restrict what invocations may do through a small policy
language: selectors into the invocation payload or a caller-supplied
context, compared against literals and combined with ``and`` / ``or`` /
``not``.

Public API
----------
- :func:`parse_policy` / :func:`policy_to_json` -- wire-form conversion.
- :func:`evaluate` -- evaluate a policy against a record and context.
- :func:`tree_shape` -- depth/width used to bound policy size.
- :func:`parse_selector` / :func:`apply_selector` -- selector handling.
"""
from __future__ import annotations

from nuc.policy.evaluator import PolicyShape, evaluate, json_equal, tree_shape
from nuc.policy.rules import (
    And,
    AnyOf,
    Equals,
    Not,
    NotEquals,
    Or,
    Policy,
    Rule,
    parse_policy,
    parse_rule,
    policy_to_json,
    rule_to_json,
)
from nuc.policy.selector import UNDEFINED, Selector, apply_selector, parse_selector

__all__ = [
    "UNDEFINED",
    "And",
    "AnyOf",
    "Equals",
    "Not",
    "NotEquals",
    "Or",
    "Policy",
    "PolicyShape",
    "Rule",
    "Selector",
    "apply_selector",
    "evaluate",
    "json_equal",
    "parse_policy",
    "parse_rule",
    "parse_selector",
    "policy_to_json",
    "rule_to_json",
    "tree_shape",
]

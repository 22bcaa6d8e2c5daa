"""Policy rule tree and its JSON wire form.

A policy is a list of rules combined with an implicit AND.  Rules are
either *operators* that compare a selected value against a literal, or
*connectors* that combine other rules:

=========  ================================  ==========================
Operator   Wire form                         Holds when
=========  ================================  ==========================
Equals     ``["==", selector, value]``       selected == value
NotEquals  ``["!=", selector, value]``       selected != value
AnyOf      ``["anyOf", selector, [v, ...]]`` selected equals some v
And        ``["and", [rule, ...]]``          every rule holds
Or         ``["or", [rule, ...]]``           some rule holds
Not        ``["not", rule]``                 rule does not hold
=========  ================================  ==========================

``And`` and ``Or`` must have at least one child; this is enforced when
the rule is constructed, so an empty connector never reaches evaluation.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

from nuc.core.errors import InvalidPolicy
from nuc.policy.selector import Selector, parse_selector

# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Equals:
    selector: Selector
    value: Any


@dataclass(frozen=True, slots=True)
class NotEquals:
    selector: Selector
    value: Any


@dataclass(frozen=True, slots=True)
class AnyOf:
    selector: Selector
    options: tuple[Any, ...]


# ---------------------------------------------------------------------------
# Connectors
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class And:
    rules: tuple[Rule, ...]

    def __post_init__(self) -> None:
        if not self.rules:
            raise InvalidPolicy("Connector and requires at least one policy")


@dataclass(frozen=True, slots=True)
class Or:
    rules: tuple[Rule, ...]

    def __post_init__(self) -> None:
        if not self.rules:
            raise InvalidPolicy("Connector or requires at least one policy")


@dataclass(frozen=True, slots=True)
class Not:
    rule: Rule


Operator: TypeAlias = Equals | NotEquals | AnyOf
Connector: TypeAlias = And | Or | Not
Rule: TypeAlias = Operator | Connector
Policy: TypeAlias = tuple[Rule, ...]


# ---------------------------------------------------------------------------
# Wire form
# ---------------------------------------------------------------------------

def parse_policy(value: Any) -> Policy:
    """Parse the JSON wire form of a policy.

    Raises
    ------
    InvalidPolicy
        If *value* is not a list of well-formed rules.
    InvalidSelector
        If any operator carries a malformed selector.
    """
    if not isinstance(value, list):
        raise InvalidPolicy("Policy must be an array", details={"policy": value})
    return tuple(parse_rule(rule) for rule in value)


def parse_rule(value: Any) -> Rule:
    """Parse one rule of the JSON wire form."""
    if not isinstance(value, list) or len(value) < 2:
        raise InvalidPolicy(
            "Policy rule must be an array with at least 2 elements",
            details={"rule": value},
        )
    op, *args = value
    if op in ("==", "!="):
        if len(args) != 2:
            raise InvalidPolicy(
                f"Operator {op} requires exactly 2 arguments",
                details={"rule": value},
            )
        selector = parse_selector(args[0])
        return Equals(selector, args[1]) if op == "==" else NotEquals(selector, args[1])
    if op == "anyOf":
        if len(args) != 2 or not isinstance(args[1], list):
            raise InvalidPolicy(
                "Operator anyOf requires a selector and an array",
                details={"rule": value},
            )
        return AnyOf(parse_selector(args[0]), tuple(args[1]))
    if op in ("and", "or"):
        if len(args) != 1 or not isinstance(args[0], list):
            raise InvalidPolicy(
                f"Connector {op} requires an array of policies",
                details={"rule": value},
            )
        children = tuple(parse_rule(child) for child in args[0])
        return And(children) if op == "and" else Or(children)
    if op == "not":
        if len(args) != 1:
            raise InvalidPolicy(
                "Connector not requires exactly one policy rule",
                details={"rule": value},
            )
        return Not(parse_rule(args[0]))
    raise InvalidPolicy(f"Unknown policy operator: {op}", details={"rule": value})


def rule_to_json(rule: Rule) -> list[Any]:
    if isinstance(rule, Equals):
        return ["==", rule.selector.raw, rule.value]
    if isinstance(rule, NotEquals):
        return ["!=", rule.selector.raw, rule.value]
    if isinstance(rule, AnyOf):
        return ["anyOf", rule.selector.raw, list(rule.options)]
    if isinstance(rule, And):
        return ["and", [rule_to_json(child) for child in rule.rules]]
    if isinstance(rule, Or):
        return ["or", [rule_to_json(child) for child in rule.rules]]
    return ["not", rule_to_json(rule.rule)]


def policy_to_json(policy: Policy) -> list[list[Any]]:
    return [rule_to_json(rule) for rule in policy]

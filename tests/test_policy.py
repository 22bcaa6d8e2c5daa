"""Tests for the policy layer -- selectors, rule parsing, evaluation and shape.

1. **Selectors** -- grammar, payload vs context roots, missing paths.
2. **Parsing** -- every operator and connector, malformed rules.
3. **Evaluation** -- operators, connectors, JSON equality semantics.
4. **Shape** -- depth and width of rule trees.
"""
from __future__ import annotations

from typing import Any

import pytest

from nuc.core.errors import InvalidPolicy, InvalidSelector
from nuc.policy import (
    UNDEFINED,
    And,
    AnyOf,
    Equals,
    Not,
    NotEquals,
    Or,
    apply_selector,
    evaluate,
    parse_policy,
    parse_rule,
    parse_selector,
    policy_to_json,
    tree_shape,
)
from nuc.policy.evaluator import json_equal

# ---------------------------------------------------------------------------
# Constants & helpers
# ---------------------------------------------------------------------------

RECORD: dict[str, Any] = {
    "cmd": "/nil/db/read",
    "args": {
        "table": "users",
        "limit": 10,
        "tags": ["a", "b"],
        "nested": {"flag": True},
    },
}
CONTEXT: dict[str, Any] = {"req": {"bar": 1337}, "env": "prod"}


def _holds(policy: list[Any]) -> bool:
    return evaluate(parse_policy(policy), RECORD, CONTEXT)


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------

class TestSelectors:
    @pytest.mark.parametrize(
        ("text", "is_context", "path"),
        [
            (".", False, ()),
            (".args", False, ("args",)),
            (".args.table", False, ("args", "table")),
            ("$.", True, ()),
            ("$.req.bar", True, ("req", "bar")),
            (".a_b-c.0", False, ("a_b-c", "0")),
        ],
    )
    def test_parse(self, text: str, is_context: bool, path: tuple[str, ...]) -> None:
        selector = parse_selector(text)
        assert selector.is_context is is_context
        assert selector.path == path
        assert str(selector) == text

    @pytest.mark.parametrize(
        "text",
        ["", "args", "..", ".a.", ".a..b", "$", "$a", ".a b", ".a.$", 5, None],
    )
    def test_invalid(self, text: Any) -> None:
        with pytest.raises(InvalidSelector):
            parse_selector(text)

    def test_apply_payload_and_context(self) -> None:
        assert apply_selector(parse_selector(".args.table"), RECORD, CONTEXT) == "users"
        assert apply_selector(parse_selector("$.req.bar"), RECORD, CONTEXT) == 1337
        assert apply_selector(parse_selector("."), RECORD, CONTEXT) is RECORD
        assert apply_selector(parse_selector("$."), RECORD, CONTEXT) is CONTEXT

    def test_apply_list_index(self) -> None:
        assert apply_selector(parse_selector(".args.tags.1"), RECORD, CONTEXT) == "b"
        assert apply_selector(parse_selector(".args.tags.5"), RECORD, CONTEXT) is UNDEFINED

    @pytest.mark.parametrize(
        "text", [".args.missing", ".args.table.length", ".nope.deeper", "$.req.baz"]
    )
    def test_apply_missing_is_undefined(self, text: str) -> None:
        assert apply_selector(parse_selector(text), RECORD, CONTEXT) is UNDEFINED

    def test_undefined_is_falsy_singleton(self) -> None:
        assert not UNDEFINED
        assert type(UNDEFINED)() is UNDEFINED
        assert repr(UNDEFINED) == "UNDEFINED"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestParsing:
    def test_operators(self) -> None:
        assert isinstance(parse_rule(["==", ".a", 1]), Equals)
        assert isinstance(parse_rule(["!=", ".a", 1]), NotEquals)
        rule = parse_rule(["anyOf", ".a", [1, 2]])
        assert isinstance(rule, AnyOf)
        assert rule.options == (1, 2)

    def test_connectors(self) -> None:
        rule = parse_rule(["and", [["==", ".a", 1], ["or", [["!=", ".b", 2]]]]])
        assert isinstance(rule, And)
        assert isinstance(rule.rules[1], Or)
        negated = parse_rule(["not", ["==", ".a", 1]])
        assert isinstance(negated, Not)
        assert isinstance(negated.rule, Equals)

    def test_wire_round_trip(self) -> None:
        wire = [
            ["==", ".args.table", "users"],
            ["anyOf", "$.env", ["prod", "staging"]],
            ["not", ["and", [["!=", ".args.limit", 0], ["or", [["==", ".cmd", "/x"]]]]]],
        ]
        assert policy_to_json(parse_policy(wire)) == wire

    def test_empty_policy(self) -> None:
        assert parse_policy([]) == ()

    @pytest.mark.parametrize(
        "rule",
        [
            "==",
            ["=="],
            ["==", ".a"],
            ["==", ".a", 1, 2],
            ["anyOf", ".a", 1],
            ["and", []],
            ["or", []],
            ["and", ["==", ".a", 1]],
            ["not", ["==", ".a", 1], ["==", ".b", 2]],
            ["xor", [["==", ".a", 1]]],
            ["and", [["bogus", ".a"]]],
        ],
    )
    def test_invalid_rule(self, rule: Any) -> None:
        with pytest.raises(InvalidPolicy):
            parse_rule(rule)

    def test_invalid_selector_propagates(self) -> None:
        with pytest.raises(InvalidSelector):
            parse_rule(["==", "args", 1])

    def test_policy_must_be_list(self) -> None:
        with pytest.raises(InvalidPolicy):
            parse_policy({"==": 1})

    def test_empty_connector_rejected_on_construction(self) -> None:
        with pytest.raises(InvalidPolicy):
            And(())
        with pytest.raises(InvalidPolicy):
            Or(())


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

class TestEvaluation:
    def test_empty_policy_holds(self) -> None:
        assert _holds([])

    def test_equals(self) -> None:
        assert _holds([["==", ".args.table", "users"]])
        assert not _holds([["==", ".args.table", "orders"]])
        assert _holds([["==", ".args.nested", {"flag": True}]])
        assert _holds([["==", ".args.tags", ["a", "b"]]])

    def test_not_equals(self) -> None:
        assert _holds([["!=", ".args.table", "orders"]])
        assert not _holds([["!=", ".args.table", "users"]])

    def test_missing_value(self) -> None:
        assert not _holds([["==", ".args.missing", None]])
        assert _holds([["!=", ".args.missing", None]])

    def test_any_of(self) -> None:
        assert _holds([["anyOf", ".args.limit", [5, 10]]])
        assert not _holds([["anyOf", ".args.limit", [5, 20]]])
        assert not _holds([["anyOf", ".args.limit", []]])

    def test_context(self) -> None:
        assert _holds([["==", "$.req.bar", 1337]])
        assert not _holds([["==", "$.req.bar", 1338]])

    def test_connectors(self) -> None:
        eq = ["==", ".args.table", "users"]
        ne = ["==", ".args.table", "orders"]
        assert _holds([["and", [eq, eq]]])
        assert not _holds([["and", [eq, ne]]])
        assert _holds([["or", [ne, eq]]])
        assert not _holds([["or", [ne, ne]]])
        assert _holds([["not", ne]])
        assert not _holds([["not", eq]])

    @pytest.mark.parametrize(
        ("selector", "value"),
        [
            (".args.table", "users"),
            (".args.table", "orders"),
            (".args.limit", 10.0),
            (".args.limit", True),
            (".args.nested", {"flag": True}),
            (".args.missing", None),
            ("$.req.bar", 1337),
        ],
    )
    def test_any_of_single_option_is_equals(self, selector: str, value: Any) -> None:
        parsed = parse_selector(selector)
        assert evaluate((AnyOf(parsed, (value,)),), RECORD, CONTEXT) is evaluate(
            (Equals(parsed, value),), RECORD, CONTEXT
        )

    @pytest.mark.parametrize(
        "rule",
        [
            Equals(parse_selector(".args.table"), "users"),
            Equals(parse_selector(".args.table"), "orders"),
            AnyOf(parse_selector(".args.limit"), (5, 10)),
            AnyOf(parse_selector(".args.limit"), (5, 20)),
            And((
                Equals(parse_selector(".args.table"), "users"),
                AnyOf(parse_selector(".args.limit"), (10,)),
            )),
            And((
                Equals(parse_selector(".args.table"), "users"),
                AnyOf(parse_selector(".args.limit"), (11,)),
            )),
            Or((
                NotEquals(parse_selector("$.env"), "prod"),
                AnyOf(parse_selector(".args.tags"), (["a", "b"],)),
            )),
            Not(Equals(parse_selector(".args.missing"), None)),
        ],
    )
    def test_not_negates(self, rule: Any) -> None:
        holds = evaluate((rule,), RECORD, CONTEXT)
        assert evaluate((Not(rule),), RECORD, CONTEXT) is (not holds)
        assert evaluate((Not(Not(rule)),), RECORD, CONTEXT) is holds

    def test_top_level_is_conjunction(self) -> None:
        assert not _holds([["==", ".args.table", "users"], ["==", ".args.limit", 11]])

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            (1, 1.0, True),
            (True, 1, False),
            (False, 0, False),
            (True, True, True),
            (None, None, True),
            ([1, [2]], (1, (2,)), True),
            ({"a": 1}, {"a": 1, "b": 2}, False),
            ("1", 1, False),
        ],
    )
    def test_json_equal(self, a: Any, b: Any, expected: bool) -> None:
        assert json_equal(a, b) is expected


# ---------------------------------------------------------------------------
# Shape
# ---------------------------------------------------------------------------

class TestShape:
    @pytest.mark.parametrize(
        ("wire", "depth", "width"),
        [
            ([], 1, 0),
            ([["==", ".a", 1]], 1, 1),
            ([["==", ".a", 1], ["==", ".b", 2]], 2, 2),
            ([["anyOf", ".a", [1, 2, 3]]], 1, 3),
            ([["anyOf", ".a", []]], 1, 1),
            ([["not", ["==", ".a", 1]]], 2, 1),
            ([["and", [["==", ".a", 1], ["==", ".b", 2], ["==", ".c", 3]]]], 2, 3),
            ([["or", [["not", ["and", [["==", ".a", 1]]]]]]], 4, 1),
        ],
    )
    def test_tree_shape(self, wire: list[Any], depth: int, width: int) -> None:
        shape = tree_shape(parse_policy(wire))
        assert shape.max_depth == depth
        assert shape.max_width == width

"""Tests for validation configuration models and encoding helpers."""
from __future__ import annotations

import time

import pytest
from pydantic import ValidationError

from nuc.core.config import (
    TokenRequirement,
    ValidationOptions,
    ValidationParameters,
    wall_clock_ms,
)
from nuc.core.encoding import (
    base64url_decode,
    base64url_encode,
    compact_json,
    hex_to_bytes,
)


class TestValidationParameters:
    def test_defaults(self) -> None:
        params = ValidationParameters()
        assert params.max_chain_length == 5
        assert params.max_policy_width == 10
        assert params.max_policy_depth == 5
        assert params.token_requirements is None

    @pytest.mark.parametrize(
        "field", ["max_chain_length", "max_policy_width", "max_policy_depth"]
    )
    def test_limits_must_be_positive(self, field: str) -> None:
        with pytest.raises(ValidationError):
            ValidationParameters(**{field: 0})

    def test_strict_types(self) -> None:
        with pytest.raises(ValidationError):
            ValidationParameters(max_chain_length="5")

    def test_frozen(self) -> None:
        params = ValidationParameters()
        with pytest.raises(ValidationError):
            params.max_chain_length = 7

    def test_requirement_kind(self) -> None:
        with pytest.raises(ValidationError):
            TokenRequirement(kind="proof", audience="did:key:z")


class TestValidationOptions:
    def test_defaults(self) -> None:
        options = ValidationOptions()
        assert options.root_issuers == []
        assert options.context == {}
        assert isinstance(options.params, ValidationParameters)

    def test_default_clock_is_milliseconds(self) -> None:
        before = int(time.time() * 1000)
        now = ValidationOptions().time_provider()
        assert before <= now <= int(time.time() * 1000)
        assert abs(wall_clock_ms() - now) < 60_000


class TestEncoding:
    def test_base64url_is_unpadded(self) -> None:
        assert base64url_encode(b"\xff\xfe") == "__4"
        assert base64url_decode("__4") == b"\xff\xfe"

    @pytest.mark.parametrize("text", ["a+b/", "ab cd", "abc$", "abcd\n"])
    def test_base64url_rejects_foreign_characters(self, text: str) -> None:
        with pytest.raises(ValueError):
            base64url_decode(text)

    @pytest.mark.parametrize("text", ["__4=", "__4==", "AA=="])
    def test_base64url_rejects_padding(self, text: str) -> None:
        with pytest.raises(ValueError):
            base64url_decode(text)

    @pytest.mark.parametrize("text", ["__5", "__7", "AB", "AAB"])
    def test_base64url_rejects_non_zero_trailing_bits(self, text: str) -> None:
        with pytest.raises(ValueError):
            base64url_decode(text)

    def test_base64url_rejects_impossible_length(self) -> None:
        with pytest.raises(ValueError):
            base64url_decode("AAAAA")

    def test_hex_prefix(self) -> None:
        assert hex_to_bytes("0xabcd") == hex_to_bytes("abcd") == b"\xab\xcd"

    def test_compact_json_keeps_order_and_unicode(self) -> None:
        assert compact_json({"b": 1, "a": "é"}) == '{"b":1,"a":"é"}'

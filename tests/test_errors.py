"""Tests for the NUC error-code hierarchy.

1. **Codes** -- every concrete class carries a unique ``NUC-Exxx`` code.
2. **Hierarchy** -- concrete errors are caught by their category base.
3. **Serialisation** -- ``to_dict`` and ``repr`` output.
4. **Lookup** -- ``error_from_code`` round-trips every registered code.
"""
from __future__ import annotations

import re

import pytest

from nuc.core.errors import (
    _CODE_MAP,
    ChainError,
    ChainTooLong,
    Eip712MetadataMissing,
    IdentityError,
    InvalidDidFormat,
    InvalidNucStructure,
    InvalidSignatures,
    MissingProof,
    NucError,
    NucValidationError,
    ParseError,
    PaymentError,
    PaymentTxFailed,
    PolicyError,
    PolicyNotMet,
    RelationshipError,
    RootKeySignatureMissing,
    SignatureError,
    SigningError,
    TokenExpired,
    TrustError,
    UnsupportedMethod,
    error_from_code,
)

CODE_RE = re.compile(r"^NUC-E\d{3}$")


class TestCodes:
    def test_every_code_is_well_formed(self) -> None:
        for code, cls in _CODE_MAP.items():
            assert CODE_RE.match(code), code
            assert cls.code == code

    def test_codes_are_unique(self) -> None:
        classes = list(_CODE_MAP.values())
        assert len({cls.code for cls in classes}) == len(classes)

    @pytest.mark.parametrize(
        ("cls", "prefix"),
        [
            (InvalidNucStructure, "NUC-E1"),
            (UnsupportedMethod, "NUC-E2"),
            (ChainTooLong, "NUC-E3"),
            (TokenExpired, "NUC-E4"),
            (PolicyNotMet, "NUC-E5"),
            (RootKeySignatureMissing, "NUC-E6"),
            (InvalidSignatures, "NUC-E7"),
            (Eip712MetadataMissing, "NUC-E8"),
            (PaymentTxFailed, "NUC-E9"),
        ],
    )
    def test_code_ranges(self, cls: type[NucError], prefix: str) -> None:
        assert cls.code.startswith(prefix)


class TestHierarchy:
    @pytest.mark.parametrize(
        ("cls", "base"),
        [
            (InvalidNucStructure, ParseError),
            (InvalidDidFormat, IdentityError),
            (InvalidDidFormat, ParseError),
            (MissingProof, ChainError),
            (TokenExpired, RelationshipError),
            (PolicyNotMet, PolicyError),
            (RootKeySignatureMissing, TrustError),
            (InvalidSignatures, SignatureError),
            (Eip712MetadataMissing, SigningError),
            (PaymentTxFailed, PaymentError),
        ],
    )
    def test_subclass_of_category(self, cls: type[NucError], base: type[NucError]) -> None:
        assert issubclass(cls, base)
        assert issubclass(cls, NucError)

    def test_validation_categories_share_a_base(self) -> None:
        for base in (ChainError, RelationshipError, PolicyError, TrustError, SignatureError):
            assert issubclass(base, NucValidationError)
        assert not issubclass(ParseError, NucValidationError)

    def test_catch_by_category(self) -> None:
        with pytest.raises(RelationshipError):
            raise TokenExpired(details={"exp": 1})


class TestSerialisation:
    def test_default_message(self) -> None:
        err = MissingProof()
        assert err.message == "proof is missing"
        assert str(err) == "proof is missing"
        assert err.details == {}

    def test_custom_message_and_details(self) -> None:
        err = MissingProof("no such proof", details={"hash": "ab"})
        assert err.to_dict() == {
            "error": {
                "code": "NUC-E302",
                "message": "no such proof",
                "detail": {"hash": "ab"},
            }
        }

    def test_to_dict_omits_empty_details(self) -> None:
        assert "detail" not in ChainTooLong().to_dict()["error"]

    def test_repr(self) -> None:
        assert repr(ChainTooLong()) == (
            "ChainTooLong(code='NUC-E300', message='token chain is too long')"
        )


class TestLookup:
    def test_round_trip_every_code(self) -> None:
        for code, cls in _CODE_MAP.items():
            err = error_from_code(code)
            assert type(err) is cls

    def test_custom_message(self) -> None:
        err = error_from_code("NUC-E405", "expired yesterday")
        assert isinstance(err, TokenExpired)
        assert err.message == "expired yesterday"

    def test_unknown_code(self) -> None:
        with pytest.raises(KeyError):
            error_from_code("NUC-E999")

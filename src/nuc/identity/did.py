"""Decentralized identifiers used as NUC issuers, audiences and subjects.

Three DID methods are supported, modelled as a closed union of frozen
records:

* ``did:key:z<base58btc(0xe7 0x01 || pubkey)>`` -- self-certifying
  secp256k1 public key (:class:`DidKey`).
* ``did:nil:<hex pubkey>`` -- legacy form of the same key material
  (:class:`DidNil`).
* ``did:ethr:<checksummed address>`` -- Ethereum account, verified by
  address recovery (:class:`DidEthr`).

Every function in this module dispatches on the concrete record type;
there is no per-method subclass behaviour.  ``did:key`` and ``did:nil``
identities carrying the same public key are the same principal for
:func:`are_equal`, even though their strings differ.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar, Literal, TypeAlias

import base58
import eth_keys.exceptions
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import is_address, to_checksum_address

from nuc.core.encoding import hex_to_bytes
from nuc.core.errors import InvalidDidFormat, UnsupportedMethod
from nuc.identity.secp256k1 import verify_compact

logger = logging.getLogger(__name__)

KEY_PREFIX = "did:key:"
ETHR_PREFIX = "did:ethr:"
NIL_PREFIX = "did:nil:"

SECP256K1_MULTICODEC = b"\xe7\x01"
MULTIBASE_BASE58BTC = "z"


# ---------------------------------------------------------------------------
# DID records
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DidKey:
    """A ``did:key`` identity over a secp256k1 public key."""

    method: ClassVar[Literal["key"]] = "key"
    multicodec: ClassVar[str] = "secp256k1-pub"

    public_key_bytes: bytes
    did_string: str = field(compare=False)

    def __str__(self) -> str:
        return self.did_string


@dataclass(frozen=True, slots=True)
class DidEthr:
    """A ``did:ethr`` identity naming an Ethereum address."""

    method: ClassVar[Literal["ethr"]] = "ethr"

    address: str
    did_string: str = field(compare=False)

    def __str__(self) -> str:
        return self.did_string


@dataclass(frozen=True, slots=True)
class DidNil:
    """A legacy ``did:nil`` identity (hex-encoded public key).

    Deprecated in favour of :class:`DidKey`; still accepted everywhere.
    """

    method: ClassVar[Literal["nil"]] = "nil"

    public_key_bytes: bytes
    did_string: str = field(compare=False)

    def __str__(self) -> str:
        return self.did_string


Did: TypeAlias = DidKey | DidEthr | DidNil


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def did_key_from_public_key_bytes(public_key: bytes) -> DidKey:
    encoded = base58.b58encode(SECP256K1_MULTICODEC + public_key).decode("ascii")
    return DidKey(
        public_key_bytes=bytes(public_key),
        did_string=f"{KEY_PREFIX}{MULTIBASE_BASE58BTC}{encoded}",
    )


def did_nil_from_public_key_bytes(public_key: bytes) -> DidNil:
    return DidNil(
        public_key_bytes=bytes(public_key),
        did_string=f"{NIL_PREFIX}{public_key.hex()}",
    )


def did_from_public_key(public_key: str, method: Literal["key", "nil"] = "key") -> Did:
    """Build a DID from a hex-encoded public key.

    Parameters
    ----------
    public_key:
        Hex-encoded (optionally ``0x``-prefixed) secp256k1 public key.
    method:
        ``"key"`` (default) or the legacy ``"nil"``.

    Raises
    ------
    InvalidDidFormat
        If *public_key* is not valid hex.
    """
    try:
        key_bytes = hex_to_bytes(public_key)
    except ValueError as exc:
        raise InvalidDidFormat(
            "public key must be hex encoded",
            details={"public_key": public_key},
        ) from exc
    if method == "key":
        return did_key_from_public_key_bytes(key_bytes)
    return did_nil_from_public_key_bytes(key_bytes)


def did_from_address(address: str) -> DidEthr:
    """Build a ``did:ethr`` from an Ethereum address, checksumming it.

    Raises
    ------
    InvalidDidFormat
        If *address* is not a valid Ethereum address.
    """
    checksummed = _checksum_address(address)
    return DidEthr(address=checksummed, did_string=f"{ETHR_PREFIX}{checksummed}")


# ---------------------------------------------------------------------------
# Parsing / serialisation
# ---------------------------------------------------------------------------

def parse_did(did_string: str) -> Did:
    """Parse a DID string into its structured record.

    Raises
    ------
    UnsupportedMethod
        If the string does not start with a known ``did:<method>:`` prefix.
    InvalidDidFormat
        If the method-specific identifier is malformed.
    """
    if did_string.startswith(KEY_PREFIX):
        return _parse_key(did_string)
    if did_string.startswith(ETHR_PREFIX):
        return _parse_ethr(did_string)
    if did_string.startswith(NIL_PREFIX):
        return _parse_nil(did_string)
    raise UnsupportedMethod(
        f"Unsupported Did method for string: {did_string}",
        details={"did": did_string},
    )


def serialize_did(did: Did) -> str:
    return did.did_string


def _parse_key(did_string: str) -> DidKey:
    multibase = did_string[len(KEY_PREFIX):]
    if not multibase.startswith(MULTIBASE_BASE58BTC):
        raise InvalidDidFormat(
            "Unsupported multibase encoding for did:key",
            details={"did": did_string},
        )
    try:
        decoded = base58.b58decode(multibase[1:])
    except ValueError as exc:
        raise InvalidDidFormat(
            "did:key identifier is not base58btc",
            details={"did": did_string},
        ) from exc
    if decoded[:2] != SECP256K1_MULTICODEC or len(decoded) == 2:
        raise InvalidDidFormat(
            "Unsupported multicodec for did:key",
            details={"did": did_string},
        )
    return DidKey(public_key_bytes=decoded[2:], did_string=did_string)


def _parse_nil(did_string: str) -> DidNil:
    identifier = did_string[len(NIL_PREFIX):]
    try:
        key_bytes = bytes.fromhex(identifier)
    except ValueError as exc:
        raise InvalidDidFormat(
            "did:nil identifier is not hex",
            details={"did": did_string},
        ) from exc
    if not key_bytes:
        raise InvalidDidFormat("did:nil identifier is empty", details={"did": did_string})
    return DidNil(public_key_bytes=key_bytes, did_string=did_string)


def _parse_ethr(did_string: str) -> DidEthr:
    parts = did_string.split(":")
    if len(parts) != 3:
        raise InvalidDidFormat("Invalid did:ethr format", details={"did": did_string})
    return DidEthr(address=_checksum_address(parts[2]), did_string=did_string)


def _checksum_address(address: str) -> str:
    # is_address rejects mixed-case strings with a bad checksum
    if not is_address(address):
        raise InvalidDidFormat(
            "invalid Ethereum address",
            details={"address": address},
        )
    return to_checksum_address(address)


# ---------------------------------------------------------------------------
# Equality and verification
# ---------------------------------------------------------------------------

def public_key_bytes_of(did: Did) -> bytes | None:
    """Return the embedded public key, or ``None`` for address-based DIDs."""
    if isinstance(did, (DidKey, DidNil)):
        return did.public_key_bytes
    return None


def are_equal(a: Did, b: Did) -> bool:
    """Semantic equality of two identities.

    When both sides embed a public key, the key bytes are compared, so a
    ``did:key`` and a ``did:nil`` for the same key are equal.  Otherwise
    the records are compared structurally (method and address).
    """
    key_a = public_key_bytes_of(a)
    key_b = public_key_bytes_of(b)
    if key_a is not None and key_b is not None:
        return key_a == key_b
    return a == b


def verify_signature(did: Did, message: bytes, signature: bytes) -> bool:
    """Return ``True`` if *signature* over *message* was produced by *did*.

    ``did:key`` / ``did:nil`` verify a compact secp256k1 signature over
    SHA-256(*message*) against the embedded key.  ``did:ethr`` recovers
    the signer of the EIP-191 personal message and compares addresses
    case-insensitively.
    """
    if isinstance(did, DidEthr):
        return _verify_ethr(did, message, signature)
    return verify_compact(did.public_key_bytes, message, signature)


def _verify_ethr(did: DidEthr, message: bytes, signature: bytes) -> bool:
    try:
        recovered = Account.recover_message(
            encode_defunct(primitive=message),
            signature=signature,
        )
    except (
        ValueError,
        eth_keys.exceptions.BadSignature,
        eth_keys.exceptions.ValidationError,
    ) as exc:
        logger.debug("did:ethr signature recovery failed: %s", exc)
        return False
    return recovered.lower() == did.address.lower()

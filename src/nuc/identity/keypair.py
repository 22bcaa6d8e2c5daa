"""secp256k1 key pairs with a hex-string API."""
from __future__ import annotations

from typing import Literal

from cryptography.hazmat.primitives.asymmetric import ec

from nuc.core.encoding import hex_to_bytes
from nuc.identity import secp256k1
from nuc.identity.did import (
    Did,
    did_key_from_public_key_bytes,
    did_nil_from_public_key_bytes,
)


class Keypair:
    """A secp256k1 private key and its compressed public key.

    Create instances through :meth:`generate`, :meth:`from_hex` or
    :meth:`from_bytes`.  ``repr()`` never includes the private key.

    Usage
    -----
    ::

        keypair = Keypair.generate()
        did = keypair.to_did()          # did:key:z...
        legacy = keypair.to_did("nil")  # did:nil:03...
        signature = keypair.sign("hello")
    """

    __slots__ = ("_private_key", "_public_key")

    def __init__(self, private_key: ec.EllipticCurvePrivateKey) -> None:
        self._private_key = private_key
        self._public_key = secp256k1.compressed_public_key(private_key)

    @classmethod
    def generate(cls) -> Keypair:
        return cls(secp256k1.generate_private_key())

    @classmethod
    def from_hex(cls, secret_key: str) -> Keypair:
        """Load a keypair from a hex private key (``0x`` prefix allowed)."""
        return cls.from_bytes(hex_to_bytes(secret_key))

    @classmethod
    def from_bytes(cls, secret_key: bytes) -> Keypair:
        return cls(secp256k1.private_key_from_bytes(secret_key))

    def private_key(self) -> str:
        return self.private_key_bytes().hex()

    def private_key_bytes(self) -> bytes:
        return secp256k1.private_key_to_bytes(self._private_key)

    def public_key(self) -> str:
        """Compressed public key as lower-case hex."""
        return self._public_key.hex()

    def public_key_bytes(self) -> bytes:
        return self._public_key

    def matches_public_key(self, public_key: str) -> bool:
        return self.public_key() == public_key

    def to_did(self, method: Literal["key", "nil"] = "key") -> Did:
        if method == "nil":
            return did_nil_from_public_key_bytes(self._public_key)
        return did_key_from_public_key_bytes(self._public_key)

    def sign(self, text: str) -> str:
        """Sign the UTF-8 bytes of *text*; returns the compact signature as hex."""
        return self.sign_bytes(text.encode("utf-8")).hex()

    def sign_bytes(self, data: bytes) -> bytes:
        """Sign SHA-256(*data*); returns a 64-byte low-s ``r || s`` signature."""
        return secp256k1.sign_compact(self._private_key, data)

    def __repr__(self) -> str:
        return f"Keypair(public_key={self.public_key()!r})"

"""ECDSA over secp256k1 with compact, low-s signatures.

Native NUC signatures are 64 bytes (``r || s``, big-endian) over the
SHA-256 digest of the message.  ``cryptography`` produces and consumes
DER, so the conversion goes through the JOSE helpers in ``jwt.utils``.
Signatures with ``s`` above half the curve order are produced in
canonical form and rejected on verification, which makes signatures
non-malleable.
"""
from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from jwt.utils import der_to_raw_signature, raw_to_der_signature

CURVE = ec.SECP256K1()

# Order of the secp256k1 base point.
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
HALF_CURVE_ORDER = CURVE_ORDER // 2

SIGNATURE_LENGTH = 64
PRIVATE_KEY_LENGTH = 32

_ALGORITHM = ec.ECDSA(hashes.SHA256())


def private_key_from_bytes(secret: bytes) -> ec.EllipticCurvePrivateKey:
    """Load a 32-byte big-endian scalar as a secp256k1 private key.

    Raises
    ------
    ValueError
        If *secret* has the wrong length or is not a valid scalar.
    """
    if len(secret) != PRIVATE_KEY_LENGTH:
        raise ValueError(
            f"secp256k1 private keys are {PRIVATE_KEY_LENGTH} bytes, got {len(secret)}"
        )
    return ec.derive_private_key(int.from_bytes(secret, "big"), CURVE)


def generate_private_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(CURVE)


def private_key_to_bytes(key: ec.EllipticCurvePrivateKey) -> bytes:
    return key.private_numbers().private_value.to_bytes(PRIVATE_KEY_LENGTH, "big")


def compressed_public_key(key: ec.EllipticCurvePrivateKey) -> bytes:
    """SEC1 compressed encoding (33 bytes) of *key*'s public point."""
    return key.public_key().public_bytes(Encoding.X962, PublicFormat.CompressedPoint)


def sign_compact(key: ec.EllipticCurvePrivateKey, message: bytes) -> bytes:
    """Sign SHA-256(*message*) and return a 64-byte low-s signature."""
    der = key.sign(message, _ALGORITHM)
    raw = der_to_raw_signature(der, CURVE)
    r = int.from_bytes(raw[:32], "big")
    s = int.from_bytes(raw[32:], "big")
    if s > HALF_CURVE_ORDER:
        s = CURVE_ORDER - s
    return r.to_bytes(32, "big") + s.to_bytes(32, "big")


def verify_compact(public_key: bytes, message: bytes, signature: bytes) -> bool:
    """Verify a 64-byte compact signature over SHA-256(*message*).

    Returns ``False`` for malformed keys, malformed or high-s signatures
    and signatures that do not verify; never raises for bad input.
    """
    if len(signature) != SIGNATURE_LENGTH:
        return False
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:], "big")
    if not (0 < r < CURVE_ORDER) or not (0 < s <= HALF_CURVE_ORDER):
        return False
    try:
        point = ec.EllipticCurvePublicKey.from_encoded_point(CURVE, public_key)
    except ValueError:
        return False
    try:
        point.verify(raw_to_der_signature(signature, CURVE), message, _ALGORITHM)
    except InvalidSignature:
        return False
    return True

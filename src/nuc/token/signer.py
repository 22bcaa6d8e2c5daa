"""Concrete token signers.

Two families implement the :class:`~nuc.core.interfaces.Signer` protocol:

* :class:`NativeSigner` -- signs ``raw_header.raw_payload`` with a local
  secp256k1 key and issues tokens as ``did:key`` (or legacy ``did:nil``).
* :class:`Web3Signer` -- delegates to an EIP-712 capable wallet and
  issues tokens as ``did:ethr``.  The wallet signs the typed-data
  projection of the payload, not the raw bytes.
"""
from __future__ import annotations

import json
import logging
import warnings
from typing import Any, Literal

from eth_account.signers.local import LocalAccount

from nuc.core.encoding import base64url_decode_text, hex_to_bytes
from nuc.core.errors import SigningError
from nuc.core.interfaces import Eip712Signer
from nuc.identity.did import Did, did_from_address
from nuc.identity.keypair import Keypair
from nuc.token.eip712 import NUC_EIP712_DOMAIN, parse_eip712_meta, to_eip712_payload
from nuc.token.header import NucHeader, legacy_header, parse_header, v1_eip712_header, v1_header
from nuc.token.payload import parse_payload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Native
# ---------------------------------------------------------------------------

class NativeSigner:
    """Signs tokens with a local secp256k1 key.

    ``did:key`` signers use the v1 header; ``did:nil`` signers use the
    legacy header understood by older validators.
    """

    def __init__(self, keypair: Keypair, did_method: Literal["key", "nil"] = "key") -> None:
        self._keypair = keypair
        self._did = keypair.to_did(did_method)
        self._header = legacy_header() if did_method == "nil" else v1_header()

    @property
    def header(self) -> NucHeader:
        return self._header

    async def get_did(self) -> Did:
        return self._did

    async def sign(self, data: bytes) -> bytes:
        return self._keypair.sign_bytes(data)


def native_signer(
    private_key: str | bytes | Keypair,
    did_method: Literal["key", "nil"] = "key",
) -> NativeSigner:
    """Create a native signer from a hex key, raw key bytes or a :class:`Keypair`."""
    if isinstance(private_key, Keypair):
        keypair = private_key
    elif isinstance(private_key, str):
        keypair = Keypair.from_hex(private_key)
    else:
        keypair = Keypair.from_bytes(private_key)
    if did_method == "nil":
        warnings.warn(
            'The "nil" DID method is deprecated; use the "key" method instead.',
            DeprecationWarning,
            stacklevel=2,
        )
    return NativeSigner(keypair, did_method)


def generate_signer(did_method: Literal["key", "nil"] = "key") -> NativeSigner:
    """A native signer over a freshly generated key."""
    return NativeSigner(Keypair.generate(), did_method)


# ---------------------------------------------------------------------------
# EIP-712
# ---------------------------------------------------------------------------

class Web3Signer:
    """Signs tokens through an EIP-712 wallet.

    :meth:`sign` receives ``raw_header.raw_payload`` like every signer,
    decodes both segments, and asks the wallet to sign the typed-data
    projection described by the header's ``meta``.
    """

    def __init__(self, wallet: Eip712Signer, domain: dict[str, Any] | None = None) -> None:
        self._wallet = wallet
        self._header = v1_eip712_header(domain if domain is not None else NUC_EIP712_DOMAIN)

    @property
    def header(self) -> NucHeader:
        return self._header

    async def get_did(self) -> Did:
        return did_from_address(await self._wallet.get_address())

    async def sign(self, data: bytes) -> bytes:
        parts = data.decode("utf-8").split(".")
        if len(parts) != 2 or not all(parts):
            raise SigningError("Invalid data format for EIP-712 signing")
        raw_header, raw_payload = parts

        header = parse_header(json.loads(base64url_decode_text(raw_header)))
        meta = parse_eip712_meta(header.meta)

        payload = parse_payload(json.loads(base64url_decode_text(raw_payload)))
        signature_hex = await self._wallet.sign_typed_data(
            meta.domain_data(),
            meta.message_types(),
            to_eip712_payload(payload),
        )
        return hex_to_bytes(signature_hex)


def web3_signer(wallet: Eip712Signer, domain: dict[str, Any] | None = None) -> Web3Signer:
    return Web3Signer(wallet, domain)


class EthAccountEip712Signer:
    """:class:`~nuc.core.interfaces.Eip712Signer` over an ``eth_account`` local account."""

    def __init__(self, account: LocalAccount) -> None:
        self._account = account

    async def get_address(self) -> str:
        return self._account.address

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, list[dict[str, str]]],
        value: dict[str, Any],
    ) -> str:
        signed = self._account.sign_typed_data(
            domain_data=domain,
            message_types=types,
            message_data=value,
        )
        return "0x" + bytes(signed.signature).hex()

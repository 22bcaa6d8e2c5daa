"""NUC abstract interfaces and in-memory implementations.

This module defines the *structural* interfaces (``typing.Protocol``) for
the collaborators the token core consumes but never implements itself:
token signers, EIP-712 wallets and payment submitters.  A lightweight
in-memory payer is included for testing and local development.

Every Protocol class is decorated with ``@runtime_checkable`` so that
``isinstance`` checks work at run-time in addition to static analysis.
"""
from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from nuc.identity.did import Did
    from nuc.token.header import NucHeader

# ===================================================================
# Protocol (interface) definitions
# ===================================================================

@runtime_checkable
class Signer(Protocol):
    """Capability surface the token builder signs through.

    The builder never touches key material; it serialises ``header``,
    asks for the issuer DID and hands the exact ``header.payload`` bytes
    to :meth:`sign`.
    """

    @property
    def header(self) -> NucHeader:
        """Header placed on every token this signer produces."""
        ...

    async def get_did(self) -> Did:
        """Return the DID tokens signed by this signer are issued by."""
        ...

    async def sign(self, data: bytes) -> bytes:
        """Sign *data* (``raw_header + "." + raw_payload``) and return raw signature bytes."""
        ...


@runtime_checkable
class Eip712Signer(Protocol):
    """An Ethereum wallet able to sign EIP-712 typed data."""

    async def get_address(self) -> str:
        """Return the wallet's ``0x``-prefixed address."""
        ...

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, list[dict[str, str]]],
        value: dict[str, Any],
    ) -> str:
        """Sign the typed *value* and return the 65-byte signature as hex."""
        ...


@runtime_checkable
class Payer(Protocol):
    """Submits a payment bound to a resource digest."""

    async def pay(self, resource: bytes, amount: int) -> str:
        """Pay *amount* units for *resource* and return the transaction hash.

        Implementations raise on any failure; callers wrap the exception.
        """
        ...


# ===================================================================
# In-memory implementations (testing / development)
# ===================================================================

class InMemoryPayer:
    """Payer that records payments instead of broadcasting them.

    Transaction hashes are the hex SHA-256 of ``resource || amount`` so
    repeated payments for the same resource are recognisable in tests.
    This implementation is NOT suitable for production use.
    """

    def __init__(self, *, fail_with: Exception | None = None) -> None:
        self.payments: list[tuple[bytes, int]] = []
        self._fail_with = fail_with

    async def pay(self, resource: bytes, amount: int) -> str:
        if self._fail_with is not None:
            raise self._fail_with
        self.payments.append((resource, amount))
        digest = hashlib.sha256(resource + amount.to_bytes(32, "big"))
        return "0x" + digest.hexdigest()

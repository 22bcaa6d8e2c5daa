"""Tests for the authority helpers -- signed requests, payments, revocation.

1. **Signed requests** -- payload encoding and verifiable signatures.
2. **Payments** -- resource digests, receipts, payer failures.
3. **Revocation** -- revocation invocations and hash lookups.
"""
from __future__ import annotations

import hashlib
import json
import time

import pytest

from nuc.authority import (
    BlindModule,
    build_revocation,
    create_signed_request,
    find_revocation_hashes,
    pay_for_subscription,
    token_request_payload,
)
from nuc.core.config import ValidationOptions
from nuc.core.constants import REVOKE_COMMAND
from nuc.core.errors import PaymentError, PaymentTxFailed
from nuc.core.interfaces import InMemoryPayer, Payer
from nuc.identity import Keypair, verify_signature
from nuc.token import (
    Envelope,
    InvocationPayload,
    NativeSigner,
    compute_hash,
    decode_base64url,
    delegation,
    legacy_header,
    serialize_base64url,
)
from nuc.validator import validate

# ---------------------------------------------------------------------------
# Constants & helpers
# ---------------------------------------------------------------------------

AUTHORITY = Keypair.generate()
USER = Keypair.generate()


async def _make_auth_token() -> Envelope:
    """Root token the authority grants a user."""
    return await (
        delegation()
        .audience(USER.to_did())
        .subject(USER.to_did())
        .command("/nil")
        .build(NativeSigner(AUTHORITY))
    )


# ---------------------------------------------------------------------------
# Signed requests
# ---------------------------------------------------------------------------

class TestSignedRequests:
    def test_request_shape(self) -> None:
        request = create_signed_request({"b": 1, "a": "x"}, USER)
        assert set(request) == {"public_key", "signature", "payload"}
        assert request["public_key"] == USER.public_key()
        assert bytes.fromhex(request["payload"]).decode("utf-8") == '{"b":1,"a":"x"}'

    def test_signature_verifies_over_payload_text(self) -> None:
        request = create_signed_request({"nonce": "00"}, USER)
        text = bytes.fromhex(request["payload"])
        signature = bytes.fromhex(request["signature"])
        assert verify_signature(USER.to_did(), text, signature)
        assert not verify_signature(AUTHORITY.to_did(), text, signature)

    def test_token_request_payload(self) -> None:
        before = int(time.time())
        payload = token_request_payload(AUTHORITY.public_key(), BlindModule.NILDB)
        assert payload["target_public_key"] == AUTHORITY.public_key()
        assert payload["blind_module"] == "nildb"
        assert len(payload["nonce"]) == 32
        assert before + 60 <= payload["expires_at"] <= int(time.time()) + 60

    def test_token_request_payload_custom_expiry(self) -> None:
        payload = token_request_payload(AUTHORITY.public_key(), BlindModule.NILAI, expires_in=5)
        assert payload["expires_at"] <= int(time.time()) + 5

    def test_signed_token_request_round_trip(self) -> None:
        payload = token_request_payload(AUTHORITY.public_key(), BlindModule.NILAI)
        request = create_signed_request(payload, USER)
        decoded = json.loads(bytes.fromhex(request["payload"]))
        assert decoded["blind_module"] == "nilai"
        assert decoded["nonce"] == payload["nonce"]


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------

class TestPayments:
    def test_in_memory_payer_is_a_payer(self) -> None:
        assert isinstance(InMemoryPayer(), Payer)

    @pytest.mark.asyncio
    async def test_pay_for_subscription(self) -> None:
        payer = InMemoryPayer()
        receipt = await pay_for_subscription(payer, AUTHORITY.public_key(), BlindModule.NILDB, 1000)

        assert receipt.tx_hash.startswith("0x")
        assert len(payer.payments) == 1
        resource, amount = payer.payments[0]
        assert amount == 1000
        text = bytes.fromhex(receipt.payload_hex)
        assert resource == hashlib.sha256(text).digest()

        body = json.loads(text)
        assert body["service_public_key"] == AUTHORITY.public_key()
        assert body["blind_module"] == "nildb"

    @pytest.mark.asyncio
    async def test_payloads_are_unique(self) -> None:
        payer = InMemoryPayer()
        first = await pay_for_subscription(payer, AUTHORITY.public_key(), BlindModule.NILAI, 1)
        second = await pay_for_subscription(payer, AUTHORITY.public_key(), BlindModule.NILAI, 1)
        assert first.payload_hex != second.payload_hex
        assert first.tx_hash != second.tx_hash

    @pytest.mark.asyncio
    async def test_payer_failure_is_wrapped(self) -> None:
        payer = InMemoryPayer(fail_with=RuntimeError("insufficient funds"))
        with pytest.raises(PaymentTxFailed) as exc_info:
            await pay_for_subscription(payer, AUTHORITY.public_key(), BlindModule.NILDB, 1)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert isinstance(exc_info.value, PaymentError)
        assert payer.payments == []


# ---------------------------------------------------------------------------
# Revocation
# ---------------------------------------------------------------------------

class TestRevocation:
    @pytest.mark.asyncio
    async def test_build_revocation(self) -> None:
        auth_token = await _make_auth_token()
        target = await _make_auth_token()

        revocation = await build_revocation(USER, auth_token, target, AUTHORITY.public_key())
        payload = revocation.nuc.payload

        assert isinstance(payload, InvocationPayload)
        assert payload.cmd == REVOKE_COMMAND
        assert payload.args == {"token": serialize_base64url(target)}
        assert payload.aud.did_string == f"did:nil:{AUTHORITY.public_key()}"
        assert payload.iss.did_string == f"did:nil:{USER.public_key()}"
        assert revocation.nuc.header == legacy_header()
        assert revocation.proofs == auth_token.all_tokens()

    @pytest.mark.asyncio
    async def test_revocation_validates(self) -> None:
        auth_token = await _make_auth_token()
        target = await _make_auth_token()
        revocation = await build_revocation(USER, auth_token, target, AUTHORITY.public_key())

        token = serialize_base64url(revocation)
        options = ValidationOptions(root_issuers=[AUTHORITY.to_did().did_string])
        validated = validate(decode_base64url(token), options)
        assert validated.payload.cmd == REVOKE_COMMAND

    @pytest.mark.asyncio
    async def test_find_revocation_hashes(self) -> None:
        auth_token = await _make_auth_token()
        revocation = await build_revocation(USER, auth_token, auth_token, AUTHORITY.public_key())
        hashes = find_revocation_hashes(revocation)
        assert hashes == [
            compute_hash(revocation.nuc).hex(),
            compute_hash(auth_token.nuc).hex(),
        ]

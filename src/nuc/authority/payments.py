"""Subscription payments bound to an authority.

The payment resource is the SHA-256 digest of a JSON payload naming the
authority and the module; the authority later matches the transaction
against the hex payload returned here.
"""
from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass

from nuc.authority.requests import BlindModule
from nuc.core.constants import DEFAULT_NONCE_LENGTH
from nuc.core.encoding import compact_json, text_to_hex
from nuc.core.errors import PaymentTxFailed
from nuc.core.interfaces import Payer

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PaymentReceipt:
    tx_hash: str
    payload_hex: str


async def pay_for_subscription(
    payer: Payer,
    service_public_key: str,
    blind_module: BlindModule,
    amount: int,
) -> PaymentReceipt:
    """Pay *amount* for a *blind_module* subscription with the authority.

    Raises
    ------
    PaymentTxFailed
        If the payer fails; the payer's exception is the ``__cause__``.
    """
    text = compact_json({
        "nonce": secrets.token_hex(DEFAULT_NONCE_LENGTH),
        "service_public_key": service_public_key,
        "blind_module": blind_module,
    })
    payload_hex = text_to_hex(text)
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    logger.debug("paying for subscription: payload=%s digest=%s", payload_hex, digest.hex())

    try:
        tx_hash = await payer.pay(digest, amount)
    except Exception as exc:
        raise PaymentTxFailed(details={"blind_module": str(blind_module)}) from exc

    logger.info("subscription payment submitted: module=%s tx=%s", blind_module, tx_hash)
    return PaymentReceipt(tx_hash=tx_hash, payload_hex=payload_hex)

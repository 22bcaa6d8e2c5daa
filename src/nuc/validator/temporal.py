"""Validity-window checks for individual tokens."""
from __future__ import annotations

import logging

from nuc.core.errors import NotBeforeNotMet, TokenExpired
from nuc.token.payload import Payload

logger = logging.getLogger(__name__)


def validate_temporal_properties(payload: Payload, now_ms: int) -> None:
    """Check ``exp`` and ``nbf`` of *payload* against *now_ms*.

    Token times are whole seconds; *now_ms* is truncated to seconds
    before comparing.

    Raises
    ------
    TokenExpired
        If ``exp`` is set and is at or before now.
    NotBeforeNotMet
        If ``nbf`` is set and is after now.
    """
    now = now_ms // 1000
    if payload.exp is not None and payload.exp <= now:
        logger.debug("token expired: exp=%d now=%d", payload.exp, now)
        raise TokenExpired(details={"exp": payload.exp, "now": now})
    if payload.nbf is not None and payload.nbf > now:
        logger.debug("token not yet valid: nbf=%d now=%d", payload.nbf, now)
        raise NotBeforeNotMet(details={"nbf": payload.nbf, "now": now})

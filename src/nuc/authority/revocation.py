"""Revocation requests and lookups."""
from __future__ import annotations

import logging

from nuc.core.constants import REVOKE_COMMAND
from nuc.identity.did import parse_did
from nuc.identity.keypair import Keypair
from nuc.token.builder import invocation
from nuc.token.codec import serialize_base64url
from nuc.token.envelope import Envelope, compute_hash
from nuc.token.signer import NativeSigner

logger = logging.getLogger(__name__)


async def build_revocation(
    keypair: Keypair,
    auth_token: Envelope,
    token_to_revoke: Envelope,
    authority_public_key: str,
) -> Envelope:
    """Invocation asking the authority to revoke *token_to_revoke*.

    The invocation is chained on *auth_token*, addressed to the
    authority's ``did:nil`` and signed with the legacy header, which is
    what revocation endpoints accept.
    """
    envelope = await (
        invocation()
        .arguments({"token": serialize_base64url(token_to_revoke)})
        .command(REVOKE_COMMAND)
        .audience(parse_did(f"did:nil:{authority_public_key}"))
        .issuer(keypair.to_did("nil"))
        .subject(auth_token.nuc.payload.sub)
        .proof(auth_token)
        .build(NativeSigner(keypair, "nil"))
    )
    logger.info("built revocation for token %s", compute_hash(token_to_revoke.nuc).hex())
    return envelope


def find_revocation_hashes(envelope: Envelope) -> list[str]:
    """Hex hashes of every token in *envelope*, leaf first, for a revocation lookup."""
    return [compute_hash(nuc).hex() for nuc in envelope.all_tokens()]

#!/usr/bin/env python3
"""NUC quickstart -- delegate, invoke, validate.

Demonstrates the core workflow of NUC tokens:

1. Create key pairs for an authority, a user and a service.
2. The authority delegates ``/nil/db`` to the user, restricted to one table.
3. The user invokes the command against the service.
4. The service decodes and validates the token chain.
5. An invocation that breaks the policy is rejected.

Run:
    python examples/quickstart.py
"""
from __future__ import annotations

import asyncio
import time

from nuc import (
    Keypair,
    NativeSigner,
    TokenRequirement,
    ValidationOptions,
    ValidationParameters,
    decode_base64url,
    delegation,
    invoking,
    serialize_base64url,
    validate,
)
from nuc.core.errors import NucError


async def main() -> None:
    # -- Step 1: Key pairs ---------------------------------------------------
    authority = Keypair.generate()
    user = Keypair.generate()
    service = Keypair.generate()
    print(f"[1] Authority: {authority.to_did()}")
    print(f"    User:      {user.to_did()}")
    print(f"    Service:   {service.to_did()}")

    # -- Step 2: Root delegation ---------------------------------------------
    root = await (
        delegation()
        .audience(user.to_did())
        .subject(user.to_did())
        .command("/nil/db")
        .policy([["==", ".args.table", "users"]])
        .expires_at(int(time.time()) + 3600)
        .build(NativeSigner(authority))
    )
    print(f"[2] Root delegation issued for {root.nuc.payload.cmd}")

    # -- Step 3: Invocation --------------------------------------------------
    token = serialize_base64url(
        await invoking(root)
        .audience(service.to_did())
        .command("/nil/db/read")
        .arguments({"table": "users"})
        .build(NativeSigner(user))
    )
    print(f"[3] Invocation token ({len(token)} chars)")

    # -- Step 4: Validation on the service side ------------------------------
    options = ValidationOptions(
        root_issuers=[authority.to_did().did_string],
        params=ValidationParameters(
            token_requirements=TokenRequirement(
                kind="invocation",
                audience=service.to_did().did_string,
            ),
        ),
    )
    validated = validate(decode_base64url(token), options)
    print(f"[4] Valid chain of {len(validated.chain)} token(s)")

    # -- Step 5: A policy violation ------------------------------------------
    bad = await (
        invoking(root)
        .audience(service.to_did())
        .arguments({"table": "orders"})
        .build(NativeSigner(user))
    )
    try:
        validate(bad, options)
    except NucError as exc:
        print(f"[5] Rejected: [{exc.code}] {exc.message}")

    print("\nDone.")


if __name__ == "__main__":
    asyncio.run(main())

#!/usr/bin/env python3
"""Endorsement registry quickstart.

Demonstrates the core workflow:

1. Create a registry with an in-memory notification store.
2. The controller requests an endorsement.
3. The identity endorses, then revokes.
4. The controller re-requests and removes.
5. One registry endorses another on its controller's behalf.
6. The notification log is verified.

Run:
    python examples/quickstart.py
"""
from __future__ import annotations

import asyncio
import logging

from endorsement_registry import (
    EndorsementRegistry,
    EndorsementRegistryError,
    Identity,
    InMemoryNotificationStore,
    RegistryConfig,
    verify_chain,
)

OWNER = Identity("0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266")
ALICE = Identity("0x70997970c51812dc3a010c7d01b50e0d17dc79c8")
PARTNER_OWNER = Identity("0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc")


async def main() -> None:
    # -- Step 1: Create the registry ----------------------------------------
    store = InMemoryNotificationStore()
    registry = EndorsementRegistry(
        RegistryConfig(
            registry_id=Identity("0x5fbdb2315678afecb367f032d93f642f64180aa3"),
            creator=OWNER,
        ),
        store=store,
    )
    print(f"[1] Registry {registry.identity} controlled by {registry.controller}")

    # -- Step 2: Request -----------------------------------------------------
    await registry.request_endorsement(OWNER, ALICE, "quarterly review")
    print(f"[2] Alice: {registry.get_endorsement_status(ALICE)}")

    # -- Step 3: Endorse, then revoke ----------------------------------------
    await registry.endorse(ALICE, "glad to")
    print(f"[3] Alice: {registry.get_endorsement_status(ALICE)}")
    await registry.revoke_endorsement(ALICE)
    print(f"    Alice: {registry.get_endorsement_status(ALICE)}")

    # -- Step 4: Re-request and remove ---------------------------------------
    await registry.request_endorsement(OWNER, ALICE)
    await registry.remove_endorsement(OWNER, ALICE, "no longer needed")
    print(f"[4] Alice: {registry.get_endorsement_status(ALICE)}")

    try:
        await registry.endorse(ALICE)
    except EndorsementRegistryError as exc:
        print(f"    Rejected as expected: {exc.code} {exc.message}")

    # -- Step 5: Registry-to-registry endorsement ----------------------------
    partner = EndorsementRegistry(
        RegistryConfig(
            registry_id=Identity("0xe7f1725e7734ce288f8367e1bb143e90bb3f0512"),
            creator=PARTNER_OWNER,
            initial_requests=[registry.identity],
        ),
    )
    await registry.endorse_registry(OWNER, partner, "cross-endorsement")
    print(f"[5] Partner sees us as: {partner.get_endorsement_status(registry.identity)}")

    # -- Step 6: Verify the log ----------------------------------------------
    result = verify_chain(store.notifications)
    print(f"[6] {result.entries_verified} notifications, chain valid: {result.valid}")
    for n in store.notifications:
        print(f"    #{n.sequence} {n.type:<22} {n.identity} comment={n.comment!r}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    asyncio.run(main())

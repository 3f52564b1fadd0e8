"""Notification log.

* **Records** -- notification factory and canonical JSON serialisation
  (:mod:`~endorsement_registry.notifications.records`).
* **Hash chain** -- SHA-256 linked, append-only log per registry
  (:mod:`~endorsement_registry.notifications.chain`).
* **Verification** -- full log verification with gap detection
  (:mod:`~endorsement_registry.notifications.verification`).
"""
from __future__ import annotations

from endorsement_registry.notifications.chain import (
    GENESIS_PREV_HASH,
    NotificationChain,
    notification_hash_input,
    compute_hash,
    link_notification,
)
from endorsement_registry.notifications.records import (
    canonical_json,
    create_notification,
)
from endorsement_registry.notifications.verification import (
    BrokenLink,
    ChainVerificationResult,
    verify_chain,
)

__all__ = [
    # Records
    "canonical_json",
    "create_notification",
    # Chain
    "GENESIS_PREV_HASH",
    "NotificationChain",
    "notification_hash_input",
    "compute_hash",
    "link_notification",
    # Verification
    "BrokenLink",
    "ChainVerificationResult",
    "verify_chain",
]

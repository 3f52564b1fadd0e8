"""Verification of notification logs.

Recalculates every hash of a log from the first notification, checks
the ``previous_hash`` linkage and reports gaps in the sequence.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from endorsement_registry.core.errors import ChainIntegrityFailure
from endorsement_registry.core.types import Notification
from endorsement_registry.notifications.chain import (
    GENESIS_PREV_HASH,
    compute_hash,
    notification_hash_input,
)

# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class BrokenLink:
    """Describes a single broken link in the hash chain."""

    sequence: int
    notification_id: str
    expected_hash: str
    actual_hash: str
    reason: str


@dataclass(slots=True)
class ChainVerificationResult:
    """Result of a chain verification.

    Attributes
    ----------
    valid:
        ``True`` if the entire log is intact, ``False`` otherwise.
    broken_links:
        One :class:`BrokenLink` per integrity failure detected.
    missing_sequences:
        Sequence numbers absent from the log (gap detection).
    entries_verified:
        Total number of notifications checked.
    """

    valid: bool
    broken_links: list[BrokenLink] = field(default_factory=list)
    missing_sequences: list[int] = field(default_factory=list)
    entries_verified: int = 0

    def raise_for_status(self) -> None:
        """Raise :class:`ChainIntegrityFailure` if the log is not valid."""
        if self.valid:
            return
        raise ChainIntegrityFailure(
            details={
                "broken_links": [
                    {"sequence": link.sequence, "reason": link.reason}
                    for link in self.broken_links
                ],
                "missing_sequences": list(self.missing_sequences),
            },
        )


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

def verify_chain(notifications: list[Notification]) -> ChainVerificationResult:
    """Verify an ordered list of notifications from one registry.

    1. The first notification links to the genesis hash.
    2. Each notification's hash is recomputed and compared.
    3. Each ``previous_hash`` matches its predecessor's hash.
    4. Sequence numbers are contiguous.
    """
    if not notifications:
        return ChainVerificationResult(valid=True, entries_verified=0)

    broken_links: list[BrokenLink] = []
    missing: list[int] = []

    for i, notification in enumerate(notifications):
        expected_hash = compute_hash(notification_hash_input(notification))
        if expected_hash != notification.notification_hash:
            broken_links.append(BrokenLink(
                sequence=notification.sequence,
                notification_id=notification.notification_id,
                expected_hash=expected_hash,
                actual_hash=notification.notification_hash,
                reason="hash_mismatch",
            ))

        if i == 0:
            if notification.previous_hash != GENESIS_PREV_HASH:
                broken_links.append(BrokenLink(
                    sequence=notification.sequence,
                    notification_id=notification.notification_id,
                    expected_hash=GENESIS_PREV_HASH,
                    actual_hash=notification.previous_hash,
                    reason="invalid_genesis_prev_hash",
                ))
            continue

        prev = notifications[i - 1]
        if notification.previous_hash != prev.notification_hash:
            broken_links.append(BrokenLink(
                sequence=notification.sequence,
                notification_id=notification.notification_id,
                expected_hash=prev.notification_hash,
                actual_hash=notification.previous_hash,
                reason="prev_hash_mismatch",
            ))
        missing.extend(range(prev.sequence + 1, notification.sequence))

    return ChainVerificationResult(
        valid=not broken_links and not missing,
        broken_links=broken_links,
        missing_sequences=missing,
        entries_verified=len(notifications),
    )

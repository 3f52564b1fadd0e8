"""SHA-256 hash chain for registry notifications.

Each notification includes the hash of the previous one emitted by the
same registry, so an observer holding the full log can detect dropped,
reordered or altered entries.

The hash is SHA-256 over the canonical JSON (sorted keys, no
whitespace) of every notification field except ``notification_hash``,
so the actor, both states, the comment and the link to the previous
entry are all covered.  JSON string escaping keeps free-text comments
from colliding with neighbouring fields.
"""
from __future__ import annotations

import hashlib
import logging
from datetime import datetime

from endorsement_registry.core.errors import NotificationWriteFailure
from endorsement_registry.core.interfaces import NotificationStore
from endorsement_registry.core.types import (
    EndorsementState,
    Identity,
    Notification,
    NotificationType,
)
from endorsement_registry.notifications.records import (
    canonical_json,
    create_notification,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

GENESIS_PREV_HASH = "sha256:" + "0" * 64
"""The ``previous_hash`` of the first notification in any log."""

HASH_PREFIX = "sha256:"


# ---------------------------------------------------------------------------
# Hash computation
# ---------------------------------------------------------------------------

def compute_hash(canonical_input: str) -> str:
    """Compute the SHA-256 hex digest of *canonical_input*, ``sha256:``-prefixed."""
    digest = hashlib.sha256(canonical_input.encode("utf-8")).hexdigest()
    return f"{HASH_PREFIX}{digest}"


def notification_hash_input(notification: Notification) -> str:
    """Canonical JSON of every field of *notification* except its own hash."""
    fields = notification.model_dump(mode="json", exclude={"notification_hash"})
    return canonical_json(fields)


def link_notification(
    *,
    prev_hash: str,
    sequence: int,
    registry: Identity,
    notification_type: NotificationType,
    identity: Identity,
    caller: Identity,
    previous_state: EndorsementState,
    new_state: EndorsementState,
    comment: str | None = None,
    timestamp: datetime | None = None,
) -> Notification:
    """Create a notification linked to the log via *prev_hash*."""
    unsealed = create_notification(
        registry=registry,
        notification_type=notification_type,
        identity=identity,
        caller=caller,
        previous_state=previous_state,
        new_state=new_state,
        sequence=sequence,
        previous_hash=prev_hash,
        comment=comment,
        timestamp=timestamp,
    )
    digest = compute_hash(notification_hash_input(unsealed))
    return unsealed.model_copy(update={"notification_hash": digest})


# ---------------------------------------------------------------------------
# NotificationChain
# ---------------------------------------------------------------------------

class NotificationChain:
    """Append-only notification log of one registry.

    Tracks the sequence counter and head hash, keeps an in-memory copy
    of every notification and forwards each one to an optional
    :class:`NotificationStore`.

    Parameters
    ----------
    registry:
        Identity of the registry that owns this log.
    store:
        Optional backend receiving each notification.  If ``None``,
        notifications are kept in memory only.
    """

    __slots__ = ("_head_hash", "_notifications", "_registry", "_sequence", "_store")

    def __init__(
        self,
        registry: Identity,
        *,
        store: NotificationStore | None = None,
    ) -> None:
        self._registry = registry
        self._store = store
        self._sequence = 0
        self._head_hash = GENESIS_PREV_HASH
        self._notifications: list[Notification] = []

    @property
    def sequence(self) -> int:
        """The last used sequence number (``0`` for an empty log)."""
        return self._sequence

    @property
    def head_hash(self) -> str:
        """The hash of the most recent notification."""
        return self._head_hash

    @property
    def notifications(self) -> list[Notification]:
        """All notifications in this log (copy)."""
        return list(self._notifications)

    async def append(
        self,
        *,
        notification_type: NotificationType,
        identity: Identity,
        caller: Identity,
        previous_state: EndorsementState,
        new_state: EndorsementState,
        comment: str | None = None,
        timestamp: datetime | None = None,
    ) -> Notification:
        """Create, link and publish the next notification.

        The log only advances once the store has accepted the
        notification.

        Raises
        ------
        NotificationWriteFailure
            If the store raises while appending.
        """
        notification = link_notification(
            prev_hash=self._head_hash,
            sequence=self._sequence + 1,
            registry=self._registry,
            notification_type=notification_type,
            identity=identity,
            caller=caller,
            previous_state=previous_state,
            new_state=new_state,
            comment=comment,
            timestamp=timestamp,
        )
        if self._store is not None:
            try:
                await self._store.append(notification)
            except Exception as exc:
                logger.warning(
                    "Notification store rejected %s for %s: %s",
                    notification_type, identity, exc,
                )
                raise NotificationWriteFailure(
                    f"Notification store failed: {type(exc).__name__}: {exc}",
                    details={
                        "registry": str(self._registry),
                        "identity": str(identity),
                        "type": str(notification_type),
                    },
                ) from exc
        self._sequence = notification.sequence
        self._head_hash = notification.notification_hash
        self._notifications.append(notification)
        return notification

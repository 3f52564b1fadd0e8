"""Shared domain types for the endorsement registry.

Key design decisions:
* ``Identity`` is a ``NewType`` wrapper around ``str`` for static
  type-safety while remaining JSON-serialisable.
* Enums use *string* values so they serialise cleanly to JSON.
* :class:`Notification` is a Pydantic v2 model; it is the only place a
  transition comment is ever kept.
"""
from __future__ import annotations

import enum
from datetime import UTC, datetime
from typing import NewType

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

Identity = NewType("Identity", str)
"""Opaque, equality-comparable party identifier (address-like)."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class EndorsementState(enum.StrEnum):
    """Current endorsement state of one identity.

    ``UNASSIGNED`` is never stored; it is what an unknown identity reads as.
    """

    UNASSIGNED = "unassigned"
    REQUESTED = "requested"
    ENDORSED = "endorsed"
    REVOKED = "revoked"
    REMOVED = "removed"


class NotificationType(enum.StrEnum):
    """Notifications emitted on accepted transitions."""

    ENDORSEMENT_REQUESTED = "endorsement_requested"
    ENDORSED = "endorsed"
    ENDORSEMENT_REVOKED = "endorsement_revoked"
    ENDORSEMENT_REMOVED = "endorsement_removed"


class Operation(enum.StrEnum):
    """Operations offered by a registry, by wire name."""

    REQUEST_ENDORSEMENT = "request_endorsement"
    ENDORSE = "endorse"
    REVOKE_ENDORSEMENT = "revoke_endorsement"
    REMOVE_ENDORSEMENT = "remove_endorsement"
    GET_ENDORSEMENT_STATUS = "get_endorsement_status"

    @property
    def controller_only(self) -> bool:
        """Whether the operation requires the controller capability."""
        return self in (Operation.REQUEST_ENDORSEMENT, Operation.REMOVE_ENDORSEMENT)

    @property
    def takes_identity(self) -> bool:
        """Whether the operation names its subject explicitly.

        ``endorse`` and ``revoke_endorsement`` act on the caller.
        """
        return self not in (Operation.ENDORSE, Operation.REVOKE_ENDORSEMENT)


class RemovalPolicy(enum.StrEnum):
    """Which states the controller may remove an endorsement from."""

    ENDORSED_OR_REQUESTED = "endorsed_or_requested"
    ENDORSED_ONLY = "endorsed_only"

    @property
    def removable_states(self) -> frozenset[EndorsementState]:
        """Return the set of states ``remove_endorsement`` accepts."""
        if self is RemovalPolicy.ENDORSED_ONLY:
            return frozenset({EndorsementState.ENDORSED})
        return frozenset({EndorsementState.ENDORSED, EndorsementState.REQUESTED})


# ---------------------------------------------------------------------------
# Pydantic helper -- UTC-aware datetime default
# ---------------------------------------------------------------------------

def _utcnow() -> datetime:
    """Return the current UTC datetime with timezone information."""
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

class Notification(BaseModel):
    """A hash-chained record of one accepted transition.

    Notifications form a tamper-evident log per registry: each one
    includes the hash of the previous notification.  The ``comment`` is
    echoed here and nowhere else.
    """

    model_config = ConfigDict(strict=True)

    notification_id: str = Field(description="UUID v4 identifying this notification.")
    registry: Identity = Field(description="Identity of the emitting registry.")
    type: NotificationType
    identity: Identity = Field(description="The identity whose state changed.")
    comment: str | None = None
    caller: Identity
    previous_state: EndorsementState
    new_state: EndorsementState
    timestamp: datetime = Field(default_factory=_utcnow)
    sequence: int = Field(ge=1, description="1-based position in the registry log.")
    previous_hash: str = Field(
        description="Hash of the preceding notification in the log.",
    )
    notification_hash: str = Field(
        description="Hash of *this* notification for chain integrity.",
    )

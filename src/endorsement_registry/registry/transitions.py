"""Endorsement state transition table.

.. code-block:: text

    UNASSIGNED/REVOKED/REMOVED ──request──> REQUESTED ──endorse──> ENDORSED
                                                |                     |
                                              remove           revoke | remove
                                                v                     v
                                             REMOVED        REVOKED / REMOVED

Nothing moves back automatically; only a new request returns an
identity to ``REQUESTED``.
"""
from __future__ import annotations

from dataclasses import dataclass

from endorsement_registry.core.errors import (
    AlreadyEndorsed,
    AlreadyRequested,
    EndorsementNotRequested,
    NotEndorsed,
    NotEndorsedOrRequested,
)
from endorsement_registry.core.types import (
    EndorsementState,
    Identity,
    NotificationType,
    Operation,
    RemovalPolicy,
)


@dataclass(frozen=True, slots=True)
class Transition:
    """Target state and notification of one mutating operation."""

    operation: Operation
    target: EndorsementState
    notification: NotificationType


TRANSITIONS: dict[Operation, Transition] = {
    Operation.REQUEST_ENDORSEMENT: Transition(
        Operation.REQUEST_ENDORSEMENT,
        EndorsementState.REQUESTED,
        NotificationType.ENDORSEMENT_REQUESTED,
    ),
    Operation.ENDORSE: Transition(
        Operation.ENDORSE,
        EndorsementState.ENDORSED,
        NotificationType.ENDORSED,
    ),
    Operation.REVOKE_ENDORSEMENT: Transition(
        Operation.REVOKE_ENDORSEMENT,
        EndorsementState.REVOKED,
        NotificationType.ENDORSEMENT_REVOKED,
    ),
    Operation.REMOVE_ENDORSEMENT: Transition(
        Operation.REMOVE_ENDORSEMENT,
        EndorsementState.REMOVED,
        NotificationType.ENDORSEMENT_REMOVED,
    ),
}


def check_transition(
    operation: Operation,
    identity: Identity,
    current: EndorsementState,
    *,
    removal_policy: RemovalPolicy = RemovalPolicy.ENDORSED_OR_REQUESTED,
) -> Transition:
    """Return the transition for *operation* from *current*.

    Raises
    ------
    AlreadyEndorsed, AlreadyRequested
        ``request_endorsement`` from ``ENDORSED`` / ``REQUESTED``.
    EndorsementNotRequested
        ``endorse`` from anything but ``REQUESTED``.
    NotEndorsed
        ``revoke_endorsement`` from anything but ``ENDORSED``, or
        ``remove_endorsement`` of a non-endorsed identity under
        :attr:`RemovalPolicy.ENDORSED_ONLY`.
    NotEndorsedOrRequested
        ``remove_endorsement`` from any other state.
    KeyError
        If *operation* does not mutate state.
    """
    transition = TRANSITIONS[operation]

    if operation is Operation.REQUEST_ENDORSEMENT:
        if current is EndorsementState.ENDORSED:
            raise AlreadyEndorsed(identity, current)
        if current is EndorsementState.REQUESTED:
            raise AlreadyRequested(identity, current)
    elif operation is Operation.ENDORSE:
        if current is not EndorsementState.REQUESTED:
            raise EndorsementNotRequested(identity, current)
    elif operation is Operation.REVOKE_ENDORSEMENT:
        if current is not EndorsementState.ENDORSED:
            raise NotEndorsed(identity, current)
    elif operation is Operation.REMOVE_ENDORSEMENT:
        if current not in removal_policy.removable_states:
            if removal_policy is RemovalPolicy.ENDORSED_ONLY:
                raise NotEndorsed(identity, current)
            raise NotEndorsedOrRequested(identity, current)

    return transition

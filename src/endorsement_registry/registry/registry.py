"""The endorsement registry state machine.

A controller requests an endorsement from an identity, the identity
endorses and may later revoke, and the controller may remove the
endorsement.  Every accepted transition emits exactly one
:class:`~endorsement_registry.core.types.Notification`; every rejected
one raises and changes nothing.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from endorsement_registry.core.errors import EndorsementRegistryError, Unauthorized
from endorsement_registry.core.interfaces import InMemoryAccessController
from endorsement_registry.core.types import (
    EndorsementState,
    Identity,
    Notification,
    Operation,
    RemovalPolicy,
)
from endorsement_registry.notifications.chain import NotificationChain
from endorsement_registry.registry.transitions import check_transition

if TYPE_CHECKING:
    from endorsement_registry.core.config import RegistryConfig
    from endorsement_registry.core.interfaces import (
        AccessController,
        Endorsable,
        NotificationStore,
    )

logger = logging.getLogger(__name__)


class EndorsementRegistry:
    """Tracks one endorsement state per identity.

    Parameters
    ----------
    config:
        Creation-time configuration: the registry's own identity, the
        creator / controller, identities to pre-seed as requested, and
        the removal policy.
    access:
        The controller capability check.  Defaults to an
        :class:`InMemoryAccessController` holding
        ``config.effective_controller``.
    store:
        Optional :class:`NotificationStore` receiving every notification.

    Notes
    -----
    All mutating operations run inside one ``asyncio.Lock`` per
    registry, so a check and the write it guards are never interleaved
    with another operation.  Reads take no lock.
    """

    def __init__(
        self,
        config: RegistryConfig,
        *,
        access: AccessController | None = None,
        store: NotificationStore | None = None,
    ) -> None:
        self._identity = config.registry_id
        self._removal_policy = config.removal_policy
        self._access: AccessController = access or InMemoryAccessController(
            config.effective_controller,
        )
        self._chain = NotificationChain(config.registry_id, store=store)
        self._states: dict[Identity, EndorsementState] = {}
        self._lock = asyncio.Lock()
        self._seed(config.initial_requests)

    def _seed(self, identities: Iterable[Identity]) -> None:
        # No notifications: these identities have no prior state.
        for identity in identities:
            self._states[identity] = EndorsementState.REQUESTED
        if self._states:
            logger.debug(
                "Registry %s seeded %d requested identities",
                self._identity, len(self._states),
            )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def identity(self) -> Identity:
        """The registry's own identity."""
        return self._identity

    @property
    def controller(self) -> Identity:
        """The current controller, as reported by the access check."""
        return self._access.current_controller()

    @property
    def removal_policy(self) -> RemovalPolicy:
        return self._removal_policy

    @property
    def notifications(self) -> list[Notification]:
        """Every notification emitted so far, oldest first."""
        return self._chain.notifications

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_endorsement_status(self, identity: Identity) -> EndorsementState:
        """Return the current state of *identity*.

        Never fails; unknown identities are ``UNASSIGNED``.
        """
        return self._states.get(identity, EndorsementState.UNASSIGNED)

    # ------------------------------------------------------------------
    # Controller operations
    # ------------------------------------------------------------------

    async def request_endorsement(
        self,
        caller: Identity,
        identity: Identity,
        comment: str | None = None,
    ) -> Notification:
        """Request an endorsement from *identity*.

        Valid from ``UNASSIGNED``, ``REVOKED`` and ``REMOVED``; the last
        two are reset to ``REQUESTED``.

        Raises
        ------
        Unauthorized
            If *caller* is not the controller.
        AlreadyEndorsed
            If *identity* is ``ENDORSED``.
        AlreadyRequested
            If *identity* is ``REQUESTED``.
        """
        return await self._apply(
            Operation.REQUEST_ENDORSEMENT, caller, identity, comment,
        )

    async def remove_endorsement(
        self,
        caller: Identity,
        identity: Identity,
        comment: str | None = None,
    ) -> Notification:
        """Remove an existing or requested endorsement.

        Raises
        ------
        Unauthorized
            If *caller* is not the controller.
        NotEndorsedOrRequested
            If *identity* is neither ``ENDORSED`` nor ``REQUESTED``.
        NotEndorsed
            Under :attr:`RemovalPolicy.ENDORSED_ONLY`, if *identity* is
            not ``ENDORSED``.
        """
        return await self._apply(
            Operation.REMOVE_ENDORSEMENT, caller, identity, comment,
        )

    # ------------------------------------------------------------------
    # Identity operations (act on the caller)
    # ------------------------------------------------------------------

    async def endorse(
        self, caller: Identity, comment: str | None = None
    ) -> Notification:
        """Accept a pending request as *caller*.

        Raises :class:`EndorsementNotRequested` unless *caller* is
        ``REQUESTED``.
        """
        return await self._apply(Operation.ENDORSE, caller, caller, comment)

    async def revoke_endorsement(
        self, caller: Identity, comment: str | None = None
    ) -> Notification:
        """Withdraw *caller*'s endorsement.

        Raises :class:`NotEndorsed` unless *caller* is ``ENDORSED``.
        """
        return await self._apply(
            Operation.REVOKE_ENDORSEMENT, caller, caller, comment,
        )

    # ------------------------------------------------------------------
    # Delegated endorsement
    # ------------------------------------------------------------------

    async def endorse_registry(
        self,
        caller: Identity,
        target: Endorsable,
        comment: str | None = None,
    ) -> Notification:
        """Endorse *target* using this registry's own identity.

        Only the controller may do this.  The call to *target* is made
        with :attr:`identity` as the caller, so *target* applies its own
        rules to this registry (it must have requested an endorsement
        from it).  This registry's state and log are unchanged.

        The lock is not held while *target* runs, so a registry may
        target itself.

        Raises
        ------
        Unauthorized
            If *caller* is not this registry's controller.
        EndorsementNotRequested
            Raised by *target* if it has not requested this registry.
        """
        self._authorize(caller, "endorse_registry")
        logger.info(
            "Registry %s endorsing %r on behalf of controller %s",
            self._identity, target, caller,
        )
        return await target.endorse(self._identity, comment)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _authorize(self, caller: Identity, operation: str) -> None:
        if not self._access.is_controller(caller):
            logger.debug(
                "Registry %s rejected %s from non-controller %s",
                self._identity, operation, caller,
            )
            raise Unauthorized(
                details={
                    "caller": str(caller),
                    "operation": operation,
                },
            )

    async def _apply(
        self,
        operation: Operation,
        caller: Identity,
        identity: Identity,
        comment: str | None,
    ) -> Notification:
        async with self._lock:
            if operation.controller_only:
                self._authorize(caller, str(operation))
            current = self.get_endorsement_status(identity)
            try:
                transition = check_transition(
                    operation,
                    identity,
                    current,
                    removal_policy=self._removal_policy,
                )
            except EndorsementRegistryError as exc:
                logger.debug(
                    "Registry %s rejected %s for %s: %s",
                    self._identity, operation, identity, exc.code,
                )
                raise

            # The store may refuse; state is only written after it accepts.
            notification = await self._chain.append(
                notification_type=transition.notification,
                identity=identity,
                caller=caller,
                previous_state=current,
                new_state=transition.target,
                comment=comment,
            )
            self._states[identity] = transition.target

        logger.info(
            "Registry %s: %s %s -> %s (seq %d)",
            self._identity, identity, current, transition.target,
            notification.sequence,
        )
        return notification

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identity={self._identity!r})"

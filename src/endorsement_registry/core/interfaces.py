"""Abstract interfaces and in-memory implementations.

This module defines the *structural* interfaces (``typing.Protocol``)
for the collaborators an :class:`~endorsement_registry.registry.EndorsementRegistry`
depends on, plus lightweight in-memory implementations suitable for
testing and local development.

Every Protocol class is decorated with ``@runtime_checkable`` so that
``isinstance`` checks work at run-time in addition to static analysis.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from endorsement_registry.core.errors import Unauthorized
from endorsement_registry.core.types import Identity, Notification

# ===================================================================
# Protocol (interface) definitions
# ===================================================================

@runtime_checkable
class AccessController(Protocol):
    """Capability check: "is the caller the controller?".

    The registry consults this on every controller-only operation and
    never inspects how control is held or transferred.
    """

    def current_controller(self) -> Identity:
        """Return the identity currently holding control."""
        ...

    def is_controller(self, caller: Identity) -> bool:
        """Return ``True`` if *caller* is the current controller."""
        ...


@runtime_checkable
class NotificationStore(Protocol):
    """Backend receiving every emitted notification, in order."""

    async def append(self, notification: Notification) -> str:
        """Append *notification* and return its ``notification_id``."""
        ...


@runtime_checkable
class Endorsable(Protocol):
    """Anything an identity can endorse.

    Used as the target of a delegated cross-registry endorsement.
    """

    async def endorse(
        self, caller: Identity, comment: str | None = None
    ) -> Notification:
        """Endorse on behalf of *caller*."""
        ...


# ===================================================================
# In-memory implementations (testing / development)
# ===================================================================

class InMemoryAccessController:
    """Single-controller access check held in memory.

    Control may be handed over with :meth:`transfer_control`; only the
    current controller may do so.
    """

    def __init__(self, controller: Identity) -> None:
        self._controller = controller

    def current_controller(self) -> Identity:
        """Return the current controller."""
        return self._controller

    def is_controller(self, caller: Identity) -> bool:
        """Return ``True`` if *caller* is the current controller."""
        return caller == self._controller

    def transfer_control(self, caller: Identity, new_controller: Identity) -> None:
        """Hand control to *new_controller*.

        Raises :class:`Unauthorized` if *caller* is not the controller.
        """
        if not self.is_controller(caller):
            raise Unauthorized(
                details={
                    "caller": str(caller),
                    "operation": "transfer_control",
                },
            )
        if not new_controller:
            raise ValueError("new_controller must be a non-empty identity")
        self._controller = new_controller


class InMemoryNotificationStore:
    """In-memory notification store for testing and development.

    Notifications are stored in append order.  No hash verification is
    performed here; that is the job of
    :func:`~endorsement_registry.notifications.verify_chain`.
    """

    def __init__(self) -> None:
        self._notifications: list[Notification] = []

    async def append(self, notification: Notification) -> str:
        """Append *notification* and return its ``notification_id``."""
        self._notifications.append(notification)
        return notification.notification_id

    @property
    def notifications(self) -> list[Notification]:
        """All stored notifications (copy)."""
        return list(self._notifications)

    def for_identity(self, identity: Identity) -> list[Notification]:
        """Return the stored notifications concerning *identity*."""
        return [n for n in self._notifications if n.identity == identity]

"""Endorsement Registry.

A controller requests endorsements from identities; identities endorse
and may revoke; the controller may remove.  Every accepted transition
emits a hash-chained notification.

Packages
--------
* Core types, errors, config, interfaces (:mod:`endorsement_registry.core`)
* State machine (:mod:`endorsement_registry.registry`)
* Notification log (:mod:`endorsement_registry.notifications`)
* Wire protocol (:mod:`endorsement_registry.wire`)
* Service (:mod:`endorsement_registry.service`)
"""
from __future__ import annotations

__version__ = "1.0.0a1"

from endorsement_registry.core.config import RegistryConfig, ServiceConfig
from endorsement_registry.core.errors import (
    AlreadyEndorsed,
    AlreadyRequested,
    AuthorizationError,
    ChainIntegrityFailure,
    EndorsementNotRequested,
    EndorsementRegistryError,
    MalformedMessage,
    MessageTooLarge,
    NotEndorsed,
    NotEndorsedOrRequested,
    NotificationError,
    NotificationWriteFailure,
    TransitionError,
    TransportError,
    Unauthorized,
    UnknownOperation,
)
from endorsement_registry.core.interfaces import (
    AccessController,
    Endorsable,
    InMemoryAccessController,
    InMemoryNotificationStore,
    NotificationStore,
)
from endorsement_registry.core.types import (
    EndorsementState,
    Identity,
    Notification,
    NotificationType,
    Operation,
    RemovalPolicy,
)
from endorsement_registry.notifications import (
    NotificationChain,
    canonical_json,
    verify_chain,
)
from endorsement_registry.registry import EndorsementRegistry
from endorsement_registry.service import RegistryService

__all__ = [
    # Meta
    "__version__",
    # Types & enums
    "Identity",
    "EndorsementState",
    "NotificationType",
    "Operation",
    "RemovalPolicy",
    "Notification",
    # Config
    "RegistryConfig",
    "ServiceConfig",
    # Error hierarchy
    "EndorsementRegistryError",
    "AuthorizationError",
    "TransitionError",
    "NotificationError",
    "TransportError",
    "Unauthorized",
    "AlreadyEndorsed",
    "AlreadyRequested",
    "EndorsementNotRequested",
    "NotEndorsed",
    "NotEndorsedOrRequested",
    "ChainIntegrityFailure",
    "NotificationWriteFailure",
    "MalformedMessage",
    "UnknownOperation",
    "MessageTooLarge",
    # Interfaces
    "AccessController",
    "Endorsable",
    "NotificationStore",
    "InMemoryAccessController",
    "InMemoryNotificationStore",
    # Registry
    "EndorsementRegistry",
    # Notifications
    "NotificationChain",
    "canonical_json",
    "verify_chain",
    # Service
    "RegistryService",
]

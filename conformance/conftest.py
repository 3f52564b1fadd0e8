"""Shared fixtures for endorsement registry conformance tests.

Provides common identities, a notification store, and a registry
factory with the controller defaulting to the creator.
"""
from __future__ import annotations

import pytest

from endorsement_registry.core.config import RegistryConfig
from endorsement_registry.core.interfaces import InMemoryNotificationStore
from endorsement_registry.core.types import Identity, RemovalPolicy
from endorsement_registry.registry import EndorsementRegistry

# ---------------------------------------------------------------------------
# Common identities used across tests
# ---------------------------------------------------------------------------
REGISTRY_ID = Identity("0x5fbdb2315678afecb367f032d93f642f64180aa3")
CONTROLLER = Identity("0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266")
ALICE = Identity("0x70997970c51812dc3a010c7d01b50e0d17dc79c8")
BOB = Identity("0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc")
MALLORY = Identity("0x90f79bf6eb2c4f870365e785982e1f101e93b906")


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
def make_config(
    *,
    registry_id: Identity = REGISTRY_ID,
    creator: Identity = CONTROLLER,
    controller: Identity | None = None,
    initial_requests: list[Identity] | None = None,
    removal_policy: RemovalPolicy = RemovalPolicy.ENDORSED_OR_REQUESTED,
) -> RegistryConfig:
    """Build a RegistryConfig with sensible defaults for testing."""
    return RegistryConfig(
        registry_id=registry_id,
        creator=creator,
        controller=controller,
        initial_requests=initial_requests or [],
        removal_policy=removal_policy,
    )


@pytest.fixture()
def notification_store() -> InMemoryNotificationStore:
    return InMemoryNotificationStore()


@pytest.fixture()
def registry(notification_store: InMemoryNotificationStore) -> EndorsementRegistry:
    return EndorsementRegistry(make_config(), store=notification_store)

"""Registry and service configuration.

Defines the validated configuration models read at registry creation
and by the wire service.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from endorsement_registry.core.types import Identity, RemovalPolicy


class RegistryConfig(BaseModel):
    """Creation-time configuration for an endorsement registry.

    A minimal configuration is just ``registry_id`` and ``creator``; the
    creator then becomes the controller.
    """

    model_config = ConfigDict(strict=True)

    registry_id: Identity = Field(
        description=(
            "Identity of the registry itself, used as the caller "
            "credential for delegated endorsements."
        ),
    )
    creator: Identity = Field(
        description="Identity that created the registry.",
    )
    controller: Identity | None = Field(
        default=None,
        description="Initial controller; defaults to the creator.",
    )
    initial_requests: list[Identity] = Field(
        default_factory=list,
        description="Identities pre-seeded to the requested state.",
    )
    removal_policy: RemovalPolicy = Field(
        default=RemovalPolicy.ENDORSED_OR_REQUESTED,
        description="States from which the controller may remove.",
    )

    @field_validator("registry_id", "creator", "controller")
    @classmethod
    def _non_empty(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("identity must be a non-empty string")
        return value

    @field_validator("initial_requests")
    @classmethod
    def _non_empty_requests(cls, value: list[Identity]) -> list[Identity]:
        for index, identity in enumerate(value):
            if not identity.strip():
                raise ValueError(f"initial_requests[{index}] must be a non-empty string")
        return value

    @property
    def effective_controller(self) -> Identity:
        """The controller in force at creation time."""
        return self.controller if self.controller is not None else self.creator


class ServiceConfig(BaseModel):
    """Limits applied by :class:`~endorsement_registry.service.RegistryService`."""

    model_config = ConfigDict(strict=True)

    max_message_size_bytes: int = Field(
        default=1_048_576,  # 1 MiB
        ge=1,
        description="Maximum accepted wire message size in bytes.",
    )
    partial_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description=(
            "Maximum time in seconds to wait for a complete NDJSON "
            "line before giving up."
        ),
    )

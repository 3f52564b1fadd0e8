"""Wire message models and helpers.

This module provides:

* **OperationRequest** / **OperationResponse** -- one registry
  operation and its outcome, as exchanged over a transport.
* **Parsing / serialisation** helpers shared by the NDJSON transport
  and :class:`~endorsement_registry.service.RegistryService`.

All helpers are *synchronous* and side-effect-free.
"""
from __future__ import annotations

import json
import uuid
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from endorsement_registry.core.errors import (
    EndorsementRegistryError,
    MalformedMessage,
    UnknownOperation,
)
from endorsement_registry.core.types import (
    EndorsementState,
    Identity,
    Notification,
    Operation,
)

VALID_OPERATIONS: frozenset[str] = frozenset(op.value for op in Operation)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

class OperationRequest(BaseModel):
    """A single registry operation issued by *caller*.

    ``identity`` names the subject of controller operations and status
    queries; ``endorse`` and ``revoke_endorsement`` act on the caller
    and ignore it.
    """

    model_config = ConfigDict(strict=True)

    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4()}")
    operation: Operation
    caller: Identity | None = None
    identity: Identity | None = None
    comment: str | None = None

    @model_validator(mode="after")
    def _check_arguments(self) -> OperationRequest:
        if self.operation is not Operation.GET_ENDORSEMENT_STATUS and not self.caller:
            raise ValueError(f"'{self.operation}' requires a caller")
        if self.operation.takes_identity and not self.identity:
            raise ValueError(f"'{self.operation}' requires an identity")
        return self

    @property
    def subject(self) -> Identity:
        """The identity whose state this request concerns."""
        subject = self.identity if self.operation.takes_identity else self.caller
        if subject is None:
            raise MalformedMessage(
                f"'{self.operation}' request names no subject",
                details={"request_id": self.request_id},
            )
        return subject


class ErrorPayload(BaseModel):
    """Machine-readable error object."""

    model_config = ConfigDict(strict=True)

    code: str = Field(description="Registry error code (ER-EXXX).")
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)
    resolution: str = ""


class OperationResponse(BaseModel):
    """Outcome of an :class:`OperationRequest`.

    ``state`` is the subject's state after the operation (unchanged on
    rejection).  ``notification`` is set only for accepted transitions.
    """

    model_config = ConfigDict(strict=True)

    request_id: str
    status: Literal["success", "rejected", "error"]
    state: EndorsementState | None = None
    notification: Notification | None = None
    error: ErrorPayload | None = None


# ---------------------------------------------------------------------------
# Parsing / serialisation
# ---------------------------------------------------------------------------

def parse_request(raw: str | bytes | dict[str, Any]) -> OperationRequest:
    """Parse raw JSON (or an already-decoded object) into a request.

    Raises
    ------
    MalformedMessage
        If the input is not a JSON object or fails validation.
    UnknownOperation
        If ``operation`` is not an operation the registry offers.
    """
    if isinstance(raw, dict):
        data: Any = raw
    else:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedMessage(f"Message is not UTF-8: {exc}") from exc
        raw = raw.strip()
        if not raw:
            raise MalformedMessage("Empty message")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedMessage(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedMessage(
            "Message must be a JSON object",
            details={"type": type(data).__name__},
        )

    request_id = data.get("request_id")
    if not isinstance(request_id, str):
        request_id = None

    operation = data.get("operation")
    if not isinstance(operation, str):
        raise MalformedMessage(
            "'operation' must be a string",
            details={"type": type(operation).__name__, "request_id": request_id},
        )
    if operation not in VALID_OPERATIONS:
        raise UnknownOperation(
            f"Unknown operation: {operation!r}",
            details={"operation": operation, "request_id": request_id},
        )

    try:
        # Validate from JSON so strict mode accepts enum values as strings.
        return OperationRequest.model_validate_json(json.dumps(data))
    except ValidationError as exc:
        raise MalformedMessage(
            f"Request validation failed: {exc.error_count()} error(s)",
            details={
                "errors": [
                    {"loc": [str(p) for p in err["loc"]], "msg": err["msg"]}
                    for err in exc.errors()
                ],
                "request_id": request_id,
            },
        ) from exc
    except (TypeError, ValueError) as exc:
        raise MalformedMessage(
            f"Message is not JSON-serialisable: {exc}",
            details={"request_id": request_id},
        ) from exc


def error_payload(exc: EndorsementRegistryError) -> ErrorPayload:
    """Build an :class:`ErrorPayload` from a registry error."""
    return ErrorPayload(
        code=exc.code,
        message=exc.message,
        detail=dict(exc.details),
        resolution=exc.resolution,
    )


def serialize_response(response: OperationResponse) -> dict[str, Any]:
    """Return *response* as a JSON-ready ``dict`` (``None`` fields dropped)."""
    return response.model_dump(mode="json", exclude_none=True)

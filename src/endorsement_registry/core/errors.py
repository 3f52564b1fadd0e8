"""Endorsement registry error-code hierarchy.

Every rejection the registry can produce is a concrete exception class
carrying a stable ``ER-Exxx`` code.

Hierarchy
---------
::

    EndorsementRegistryError
    +-- AuthorizationError    (ER-E1xx)
    +-- TransitionError       (ER-E2xx)
    +-- NotificationError     (ER-E3xx)
    +-- TransportError        (ER-E4xx)

Usage
-----
Raise concrete subclasses directly::

    raise AlreadyRequested(identity, EndorsementState.REQUESTED)

Catch by category::

    try:
        ...
    except TransitionError:
        # handles AlreadyEndorsed, NotEndorsed, etc.
        ...

None of these errors is transient: retrying the same call against the
same state yields the same rejection.
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class EndorsementRegistryError(Exception):
    """Base exception for all endorsement registry errors.

    Attributes
    ----------
    code : str
        Error code, e.g. ``"ER-E100"``.
    http_status : int
        Recommended HTTP status code for this error.
    message : str
        Human-readable description.
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    resolution : str
        Suggested action for the caller.
    """

    code: str = "ER-E000"
    http_status: int = 500
    message: str = "Unknown endorsement registry error"
    resolution: str = ""

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        resolution: str | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        if resolution is not None:
            self.resolution = resolution
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error to the wire error format."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["detail"] = self.details
        if self.resolution:
            payload["resolution"] = self.resolution
        return {"error": payload}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ===================================================================
# Category base classes
# ===================================================================

class AuthorizationError(EndorsementRegistryError):
    """ER-E1xx -- Caller lacks the capability for the operation."""

    code = "ER-E1XX"
    http_status = 403


class TransitionError(EndorsementRegistryError):
    """ER-E2xx -- Operation is not valid from the identity's current state.

    Subclasses are built from the affected identity and its current
    state, both of which are recorded in :attr:`details`.
    """

    code = "ER-E2XX"
    http_status = 409

    def __init__(
        self,
        identity: str,
        current_state: str,
        message: str | None = None,
    ) -> None:
        self.identity = identity
        self.current_state = current_state
        super().__init__(
            message or f"{self.message} (identity '{identity}' is '{current_state}')",
            details={
                "identity": str(identity),
                "current_state": str(current_state),
            },
        )


class NotificationError(EndorsementRegistryError):
    """ER-E3xx -- Notification log errors."""

    code = "ER-E3XX"
    http_status = 500


class TransportError(EndorsementRegistryError):
    """ER-E4xx -- Wire message and framing errors."""

    code = "ER-E4XX"
    http_status = 400


# ===================================================================
# ER-E1xx  Authorization
# ===================================================================

class Unauthorized(AuthorizationError):
    """ER-E100 -- Caller is not the registry controller."""

    code = "ER-E100"
    http_status = 403
    message = "Caller is not the registry controller"
    resolution = "Issue the call from the current controller identity."


# ===================================================================
# ER-E2xx  State transitions
# ===================================================================

class AlreadyEndorsed(TransitionError):
    """ER-E200 -- Endorsement requested for an identity that already endorsed."""

    code = "ER-E200"
    message = "Identity has already endorsed"
    resolution = "Remove the endorsement before requesting it again."


class AlreadyRequested(TransitionError):
    """ER-E201 -- Endorsement requested twice with no intervening transition."""

    code = "ER-E201"
    message = "Endorsement has already been requested"
    resolution = "Wait for the identity to endorse, or remove the request."


class EndorsementNotRequested(TransitionError):
    """ER-E202 -- ``endorse`` called without a pending request."""

    code = "ER-E202"
    message = "No endorsement has been requested from this identity"
    resolution = "Ask the controller to request an endorsement first."


class NotEndorsed(TransitionError):
    """ER-E203 -- Operation requires the identity to be endorsed."""

    code = "ER-E203"
    message = "Identity has not endorsed"


class NotEndorsedOrRequested(TransitionError):
    """ER-E204 -- Removal of an identity that is neither endorsed nor requested."""

    code = "ER-E204"
    message = "Identity is neither endorsed nor requested"


# ===================================================================
# ER-E3xx  Notification log
# ===================================================================

class ChainIntegrityFailure(NotificationError):
    """ER-E300 -- Notification hash chain is inconsistent."""

    code = "ER-E300"
    message = "Notification chain integrity check failed"


class NotificationWriteFailure(NotificationError):
    """ER-E301 -- The notification store rejected a write.

    The transition that produced the notification is not applied.
    """

    code = "ER-E301"
    message = "Notification could not be written"
    resolution = "Check the notification store backend and retry."


# ===================================================================
# ER-E4xx  Transport
# ===================================================================

class MalformedMessage(TransportError):
    """ER-E400 -- Message is not valid JSON or fails validation."""

    code = "ER-E400"
    message = "Malformed message"


class UnknownOperation(TransportError):
    """ER-E401 -- Message names an operation the registry does not offer."""

    code = "ER-E401"
    message = "Unknown operation"


class MessageTooLarge(TransportError):
    """ER-E402 -- Message exceeds the configured size limit."""

    code = "ER-E402"
    http_status = 413
    message = "Message exceeds the maximum allowed size"

"""Wire protocol: request/response models and NDJSON framing."""
from __future__ import annotations

from endorsement_registry.wire.messages import (
    VALID_OPERATIONS,
    ErrorPayload,
    OperationRequest,
    OperationResponse,
    error_payload,
    parse_request,
    serialize_response,
)
from endorsement_registry.wire.ndjson import (
    DEFAULT_MAX_MESSAGE_SIZE,
    DEFAULT_PARTIAL_TIMEOUT,
    NDJSONNotificationSink,
    NDJSONReader,
    NDJSONWriter,
)

__all__ = [
    # Messages
    "VALID_OPERATIONS",
    "ErrorPayload",
    "OperationRequest",
    "OperationResponse",
    "error_payload",
    "parse_request",
    "serialize_response",
    # NDJSON
    "DEFAULT_MAX_MESSAGE_SIZE",
    "DEFAULT_PARTIAL_TIMEOUT",
    "NDJSONNotificationSink",
    "NDJSONReader",
    "NDJSONWriter",
]

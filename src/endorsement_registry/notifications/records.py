"""Notification construction helpers and canonical JSON serialisation.

This module provides a factory for building :class:`Notification`
instances with all required fields, plus an RFC 8785 (JCS) style
canonical JSON serialiser used to produce deterministic byte
representations of notifications for external observers.
"""
from __future__ import annotations

import json
import math
import uuid
from datetime import UTC, datetime
from typing import Any

from endorsement_registry.core.types import (
    EndorsementState,
    Identity,
    Notification,
    NotificationType,
)

# ---------------------------------------------------------------------------
# RFC 8785 canonical JSON serialisation
# ---------------------------------------------------------------------------

def _jcs_serialize_value(value: Any) -> str:
    """Serialise a single JSON value per RFC 8785 (JCS).

    * Strings: minimal UTF-8 encoding, mandatory escapes only.
    * Numbers: integers preferred when the value has no fractional part.
    * Booleans / null: lowercase literals.
    * Objects: keys sorted by Unicode code-point order.
    * Arrays: elements in order.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            msg = "NaN and Infinity are not valid JSON values"
            raise ValueError(msg)
        if value == int(value):
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, list):
        elements = ",".join(_jcs_serialize_value(v) for v in value)
        return f"[{elements}]"
    if isinstance(value, dict):
        pairs = ",".join(
            f"{json.dumps(k, ensure_ascii=False)}:{_jcs_serialize_value(value[k])}"
            for k in sorted(value.keys())
        )
        return "{" + pairs + "}"
    msg = f"Unsupported type for JCS serialisation: {type(value)}"
    raise TypeError(msg)


def canonical_json(data: dict[str, Any] | Notification) -> str:
    """Return a canonical JSON string for *data*.

    Accepts either a plain ``dict`` or a :class:`Notification`.
    """
    obj = data.model_dump(mode="json") if isinstance(data, Notification) else data
    return _jcs_serialize_value(obj)


# ---------------------------------------------------------------------------
# Notification factory
# ---------------------------------------------------------------------------

def create_notification(
    *,
    registry: Identity,
    notification_type: NotificationType,
    identity: Identity,
    caller: Identity,
    previous_state: EndorsementState,
    new_state: EndorsementState,
    sequence: int,
    previous_hash: str,
    notification_hash: str = "",
    comment: str | None = None,
    timestamp: datetime | None = None,
    notification_id: str | None = None,
) -> Notification:
    """Build a :class:`Notification` with all required fields populated.

    The caller is responsible for computing ``notification_hash``; see
    :func:`~endorsement_registry.notifications.chain.link_notification`,
    which does both.
    """
    return Notification(
        notification_id=notification_id or str(uuid.uuid4()),
        registry=registry,
        type=notification_type,
        identity=identity,
        comment=comment,
        caller=caller,
        previous_state=previous_state,
        new_state=new_state,
        timestamp=timestamp or datetime.now(UTC),
        sequence=sequence,
        previous_hash=previous_hash,
        notification_hash=notification_hash,
    )

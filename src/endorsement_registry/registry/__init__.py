"""The endorsement registry.

* **EndorsementRegistry** -- per-identity endorsement state machine
  with controller-gated requests and removals.
* **check_transition** / **TRANSITIONS** -- the transition table and
  its precondition checks.
"""
from __future__ import annotations

from endorsement_registry.registry.registry import EndorsementRegistry
from endorsement_registry.registry.transitions import (
    TRANSITIONS,
    Transition,
    check_transition,
)

__all__ = [
    "TRANSITIONS",
    "EndorsementRegistry",
    "Transition",
    "check_transition",
]

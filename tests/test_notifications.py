"""Tests for the notification log.

Covers:

1. **Records** -- factory defaults and canonical JSON.
2. **Hash chain** -- hash input coverage, linking, NotificationChain.
3. **Verification** -- valid log, tampered log, gaps, empty log.
4. **Registry integration** -- a registry's own log verifies.
"""
from __future__ import annotations

import hashlib
import json
from datetime import UTC, datetime

import pytest

from endorsement_registry.core.config import RegistryConfig
from endorsement_registry.core.errors import ChainIntegrityFailure
from endorsement_registry.core.interfaces import InMemoryNotificationStore
from endorsement_registry.core.types import (
    EndorsementState,
    Identity,
    Notification,
    NotificationType,
)
from endorsement_registry.notifications import (
    GENESIS_PREV_HASH,
    NotificationChain,
    canonical_json,
    compute_hash,
    create_notification,
    link_notification,
    notification_hash_input,
    verify_chain,
)
from endorsement_registry.registry import EndorsementRegistry

REGISTRY = Identity("0xfeed000000000000000000000000000000000000")
CONTROLLER = Identity("0xc0de000000000000000000000000000000000000")
ALICE = Identity("0xa11ce00000000000000000000000000000000000")
FIXED_TS = datetime(2026, 3, 1, 12, 30, 45, 123456, tzinfo=UTC)


async def _chain_with(count: int) -> NotificationChain:
    chain = NotificationChain(REGISTRY)
    for i in range(count):
        await chain.append(
            notification_type=NotificationType.ENDORSEMENT_REQUESTED,
            identity=Identity(f"0x{i:040x}"),
            caller=CONTROLLER,
            previous_state=EndorsementState.UNASSIGNED,
            new_state=EndorsementState.REQUESTED,
            comment=f"note {i}",
        )
    return chain


# ===================================================================
# Records
# ===================================================================


class TestCreateNotification:

    def test_defaults(self) -> None:
        n = create_notification(
            registry=REGISTRY,
            notification_type=NotificationType.ENDORSED,
            identity=ALICE,
            caller=ALICE,
            previous_state=EndorsementState.REQUESTED,
            new_state=EndorsementState.ENDORSED,
            sequence=1,
            previous_hash=GENESIS_PREV_HASH,
        )
        assert n.notification_id
        assert n.comment is None
        assert n.notification_hash == ""
        assert n.timestamp.tzinfo is not None

    def test_explicit_id_and_timestamp(self) -> None:
        n = create_notification(
            registry=REGISTRY,
            notification_type=NotificationType.ENDORSED,
            identity=ALICE,
            caller=ALICE,
            previous_state=EndorsementState.REQUESTED,
            new_state=EndorsementState.ENDORSED,
            sequence=3,
            previous_hash=GENESIS_PREV_HASH,
            notification_id="n-1",
            timestamp=FIXED_TS,
        )
        assert n.notification_id == "n-1"
        assert n.timestamp == FIXED_TS


class TestCanonicalJson:

    def test_key_ordering(self) -> None:
        assert canonical_json({"b": 1, "a": 2}) == '{"a":2,"b":1}'

    def test_numbers_normalised(self) -> None:
        assert canonical_json({"x": 1.0, "y": 1.5}) == '{"x":1,"y":1.5}'

    def test_unicode_preserved(self) -> None:
        assert canonical_json({"c": "endossé"}) == '{"c":"endossé"}'

    def test_rejects_nan(self) -> None:
        with pytest.raises(ValueError):
            canonical_json({"x": float("nan")})

    def test_notification_is_single_line(self) -> None:
        n = link_notification(
            prev_hash=GENESIS_PREV_HASH,
            sequence=1,
            registry=REGISTRY,
            notification_type=NotificationType.ENDORSEMENT_REQUESTED,
            identity=ALICE,
            caller=CONTROLLER,
            previous_state=EndorsementState.UNASSIGNED,
            new_state=EndorsementState.REQUESTED,
            comment="line one\nline two",
            timestamp=FIXED_TS,
        )
        out = canonical_json(n)
        assert "\n" not in out
        assert out.startswith('{"caller":')
        assert '"type":"endorsement_requested"' in out

    def test_deterministic(self) -> None:
        data = {"z": [1, 2, {"k": None}], "a": True}
        assert canonical_json(data) == canonical_json(dict(reversed(data.items())))


# ===================================================================
# Hash chain
# ===================================================================


class TestHashing:

    def test_compute_hash_prefixed(self) -> None:
        expected = hashlib.sha256(b"abc").hexdigest()
        assert compute_hash("abc") == f"sha256:{expected}"

    def test_hash_input_covers_every_field(self) -> None:
        n = link_notification(
            prev_hash=GENESIS_PREV_HASH,
            sequence=7,
            registry=REGISTRY,
            notification_type=NotificationType.ENDORSED,
            identity=ALICE,
            caller=ALICE,
            previous_state=EndorsementState.REQUESTED,
            new_state=EndorsementState.ENDORSED,
            timestamp=FIXED_TS,
        )
        fields = json.loads(notification_hash_input(n))
        assert set(fields) == set(Notification.model_fields) - {"notification_hash"}
        assert fields["caller"] == ALICE
        assert fields["new_state"] == "endorsed"
        assert fields["comment"] is None
        assert n.notification_hash == compute_hash(notification_hash_input(n))

    def test_newlines_in_free_text_do_not_collide(self) -> None:
        kwargs = dict(
            prev_hash=GENESIS_PREV_HASH,
            sequence=1,
            registry=REGISTRY,
            notification_type=NotificationType.ENDORSEMENT_REQUESTED,
            caller=CONTROLLER,
            previous_state=EndorsementState.UNASSIGNED,
            new_state=EndorsementState.REQUESTED,
            timestamp=FIXED_TS,
        )
        a = link_notification(identity=Identity("x\ny"), comment="", **kwargs)  # type: ignore[arg-type]
        b = link_notification(identity=Identity("x"), comment="y\n", **kwargs)  # type: ignore[arg-type]
        assert notification_hash_input(a) != notification_hash_input(b)

    def test_comment_changes_hash(self) -> None:
        kwargs = dict(
            prev_hash=GENESIS_PREV_HASH,
            sequence=1,
            registry=REGISTRY,
            notification_type=NotificationType.ENDORSED,
            identity=ALICE,
            caller=ALICE,
            previous_state=EndorsementState.REQUESTED,
            new_state=EndorsementState.ENDORSED,
            timestamp=FIXED_TS,
        )
        a = link_notification(comment="yes", **kwargs)  # type: ignore[arg-type]
        b = link_notification(comment="no", **kwargs)  # type: ignore[arg-type]
        assert a.notification_hash != b.notification_hash


class TestNotificationChain:

    async def test_empty(self) -> None:
        chain = NotificationChain(REGISTRY)
        assert chain.sequence == 0
        assert chain.head_hash == GENESIS_PREV_HASH
        assert chain.notifications == []

    async def test_links_and_sequences(self) -> None:
        chain = await _chain_with(3)
        notes = chain.notifications
        assert [n.sequence for n in notes] == [1, 2, 3]
        assert notes[0].previous_hash == GENESIS_PREV_HASH
        assert notes[1].previous_hash == notes[0].notification_hash
        assert notes[2].previous_hash == notes[1].notification_hash
        assert chain.head_hash == notes[2].notification_hash

    async def test_forwards_to_store(self) -> None:
        store = InMemoryNotificationStore()
        chain = NotificationChain(REGISTRY, store=store)
        n = await chain.append(
            notification_type=NotificationType.ENDORSEMENT_REQUESTED,
            identity=ALICE,
            caller=CONTROLLER,
            previous_state=EndorsementState.UNASSIGNED,
            new_state=EndorsementState.REQUESTED,
        )
        assert store.notifications == [n]
        assert store.for_identity(ALICE) == [n]
        assert store.for_identity(CONTROLLER) == []

    async def test_notifications_is_a_copy(self) -> None:
        chain = await _chain_with(1)
        chain.notifications.clear()
        assert len(chain.notifications) == 1


# ===================================================================
# Verification
# ===================================================================


class TestVerifyChain:

    def test_empty_log_is_valid(self) -> None:
        result = verify_chain([])
        assert result.valid
        assert result.entries_verified == 0

    async def test_valid_log(self) -> None:
        chain = await _chain_with(4)
        result = verify_chain(chain.notifications)
        assert result.valid
        assert result.entries_verified == 4
        result.raise_for_status()

    async def test_tampered_comment_detected(self) -> None:
        notes = (await _chain_with(3)).notifications
        notes[1] = notes[1].model_copy(update={"comment": "rewritten"})
        result = verify_chain(notes)
        assert not result.valid
        assert [(b.sequence, b.reason) for b in result.broken_links] == [
            (2, "hash_mismatch"),
        ]
        with pytest.raises(ChainIntegrityFailure):
            result.raise_for_status()

    @pytest.mark.parametrize(
        "update",
        [
            {"caller": Identity("0xbad0000000000000000000000000000000000000")},
            {"new_state": EndorsementState.ENDORSED},
            {"previous_state": EndorsementState.REVOKED},
            {"identity": ALICE},
            {"notification_id": "forged"},
            {"registry": Identity("0xother")},
            {"caller": Identity("0xbad"), "new_state": EndorsementState.ENDORSED},
        ],
        ids=["caller", "new_state", "previous_state", "identity", "id", "registry", "actor_and_state"],
    )
    async def test_tampered_field_detected(self, update: dict[str, object]) -> None:
        notes = (await _chain_with(3)).notifications
        notes[1] = notes[1].model_copy(update=update)
        result = verify_chain(notes)
        assert not result.valid
        assert [(b.sequence, b.reason) for b in result.broken_links] == [
            (2, "hash_mismatch"),
        ]

    async def test_gap_detected(self) -> None:
        notes = (await _chain_with(4)).notifications
        del notes[2]
        result = verify_chain(notes)
        assert not result.valid
        assert result.missing_sequences == [3]
        assert any(b.reason == "prev_hash_mismatch" for b in result.broken_links)

    async def test_bad_genesis_detected(self) -> None:
        notes = (await _chain_with(2)).notifications[1:]
        result = verify_chain(notes)
        assert not result.valid
        assert result.broken_links[0].reason == "invalid_genesis_prev_hash"


# ===================================================================
# Registry integration
# ===================================================================


class TestRegistryLog:

    async def test_registry_log_verifies(self) -> None:
        store = InMemoryNotificationStore()
        registry = EndorsementRegistry(
            RegistryConfig(registry_id=REGISTRY, creator=CONTROLLER),
            store=store,
        )
        await registry.request_endorsement(CONTROLLER, ALICE, "please")
        await registry.endorse(ALICE, "sure")
        await registry.revoke_endorsement(ALICE)
        assert verify_chain(store.notifications).valid
        assert store.notifications == registry.notifications

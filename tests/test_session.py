import re
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from userbase.modules.errors import AuthErrorKind
from userbase.modules.session import (
    SESSION_LENGTH,
    SessionModule,
    SessionRecord,
    SessionState,
    generate_session_id,
)
from userbase.modules.store import StoreError


@pytest.fixture
def session_module(memory_store, clock):
    """Create a SessionModule over the in-memory store."""
    return SessionModule(memory_store, clock=clock)


def test_session_id_format():
    """Test session ids are 32 lowercase hex characters."""
    assert re.fullmatch(r"[0-9a-f]{32}", generate_session_id())


def test_session_ids_unique():
    """Test 10,000 generated ids never collide."""
    ids = {generate_session_id() for _ in range(10_000)}
    assert len(ids) == 10_000


@pytest.mark.asyncio
async def test_create_session(session_module, memory_store, clock):
    """Test session creation persists the record."""
    result = await session_module.create_session("user-1")

    assert result.ok
    session = result.value
    assert session.user_id == "user-1"
    assert session.creation_date == clock.now
    assert session.invalidated is False

    stored = await memory_store.get("sessions", session.session_id)
    assert stored == {
        "session_id": session.session_id,
        "user_id": "user-1",
        "creation_date": clock.now.isoformat(),
        "invalidated": False,
    }


@pytest.mark.asyncio
async def test_create_session_store_failure(clock):
    """Test store failures become internal failures carrying the store status."""
    store = AsyncMock()
    store.put = AsyncMock(side_effect=StoreError("throttled", status=503))
    module = SessionModule(store, clock=clock)

    result = await module.create_session("user-1")

    assert not result.ok
    assert result.failure.kind == AuthErrorKind.INTERNAL_SERVER_ERROR
    assert result.failure.status_code == 503
    store.put.assert_called_once()


@pytest.mark.asyncio
async def test_get_session(session_module):
    """Test retrieving a stored session."""
    created = (await session_module.create_session("user-1")).value

    result = await session_module.get_session(created.session_id)

    assert result.ok
    assert result.value == created


@pytest.mark.asyncio
async def test_get_session_not_found(session_module):
    """Test retrieving a non-existent session."""
    result = await session_module.get_session("non-existent")

    assert result.ok
    assert result.value is None


@pytest.mark.asyncio
async def test_get_session_store_failure(clock):
    store = AsyncMock()
    store.get = AsyncMock(side_effect=StoreError("connection reset"))

    result = await SessionModule(store, clock=clock).get_session("abc")

    assert not result.ok
    assert result.failure.status_code == 500


@pytest.mark.parametrize(
    "elapsed, expected",
    [
        (timedelta(0), SessionState.VALID),
        (timedelta(hours=23, minutes=59), SessionState.VALID),
        (SESSION_LENGTH, SessionState.VALID),
        (timedelta(hours=24, minutes=1), SessionState.EXPIRED),
        (timedelta(days=30), SessionState.EXPIRED),
    ],
)
def test_session_state_expiry_boundary(session_module, clock, elapsed, expected):
    """Test sessions are valid up to and including SESSION_LENGTH."""
    session = SessionRecord("abc", "user-1", clock.now)

    assert session_module.session_state(session, now=clock.now + elapsed) == expected


def test_invalidation_wins_over_expiry(session_module, clock):
    session = SessionRecord("abc", "user-1", clock.now, invalidated=True)

    assert session_module.session_state(session) == SessionState.INVALIDATED
    assert (
        session_module.session_state(session, now=clock.now + timedelta(days=2))
        == SessionState.INVALIDATED
    )


@pytest.mark.asyncio
async def test_invalidate_session(session_module, clock):
    """Test invalidation flips the flag and is idempotent."""
    session = (await session_module.create_session("user-1")).value

    assert (await session_module.invalidate_session(session.session_id)).ok
    assert (await session_module.invalidate_session(session.session_id)).ok

    stored = (await session_module.get_session(session.session_id)).value
    assert stored.invalidated is True
    assert stored.creation_date == session.creation_date
    assert session_module.session_state(stored) == SessionState.INVALIDATED


@pytest.mark.asyncio
async def test_invalidate_missing_session(session_module, memory_store):
    """Test invalidating an unknown session succeeds without creating it."""
    result = await session_module.invalidate_session("non-existent")

    assert result.ok
    assert await memory_store.get("sessions", "non-existent") is None


@pytest.mark.asyncio
async def test_invalidate_store_failure(clock):
    store = AsyncMock()
    store.update = AsyncMock(side_effect=StoreError("read only replica"))

    result = await SessionModule(store, clock=clock).invalidate_session("abc")

    assert not result.ok
    assert result.failure.kind == AuthErrorKind.INTERNAL_SERVER_ERROR
    store.update.assert_called_once_with("sessions", "abc", {"invalidated": True})


def test_record_from_dict_defaults():
    """Test records without the invalidated flag read as not invalidated."""
    record = SessionRecord.from_dict(
        {"session_id": "abc", "user_id": "user-1", "creation_date": "2024-01-01T12:00:00"}
    )

    assert record.invalidated is False
    assert record.creation_date == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "record",
    [
        {"session_id": "abc", "user_id": "user-1"},
        {"session_id": "abc", "user_id": "user-1", "creation_date": "yesterday"},
        ["abc", "user-1"],
    ],
)
async def test_get_session_malformed_record(session_module, memory_store, record):
    """Test unreadable session records become internal failures."""
    await memory_store.put("sessions", "abc", record)

    result = await session_module.get_session("abc")

    assert not result.ok
    assert result.failure.kind == AuthErrorKind.INTERNAL_SERVER_ERROR
    assert result.failure.status_code == 500

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from userbase.modules.store import (
    ConditionFailedError,
    InMemoryCredentialStore,
    RecordNotFoundError,
    RedisCredentialStore,
    StoreError,
)


@pytest.fixture
def redis_store(mock_redis):
    """Create a RedisCredentialStore with mock Redis."""
    return RedisCredentialStore(mock_redis)


@pytest.mark.asyncio
async def test_get_record(redis_store, mock_redis):
    """Test reading a JSON record from its prefixed key."""
    record = {"username": "alice", "password_hash": "x", "user_id": "u-1"}
    mock_redis.get.return_value = json.dumps(record)

    result = await redis_store.get("users", "alice")

    assert result == record
    mock_redis.get.assert_called_once_with("users:alice")


@pytest.mark.asyncio
async def test_get_missing_record(redis_store, mock_redis):
    """Test a missing key reads as None."""
    mock_redis.get.return_value = None

    assert await redis_store.get("sessions", "abc") is None
    mock_redis.get.assert_called_once_with("sessions:abc")


@pytest.mark.asyncio
async def test_put_unconditional(redis_store, mock_redis):
    """Test a plain put overwrites without NX."""
    record = {"session_id": "abc", "user_id": "u-1"}

    await redis_store.put("sessions", "abc", record)

    mock_redis.set.assert_called_once_with("sessions:abc", json.dumps(record), nx=False)


@pytest.mark.asyncio
async def test_put_if_absent_success(redis_store, mock_redis):
    """Test conditional put uses SET NX."""
    mock_redis.set.return_value = True
    record = {"username": "alice"}

    await redis_store.put("users", "alice", record, if_absent=True)

    mock_redis.set.assert_called_once_with("users:alice", json.dumps(record), nx=True)


@pytest.mark.asyncio
async def test_put_if_absent_conflict(redis_store, mock_redis):
    """Test SET NX returning None raises ConditionFailedError."""
    mock_redis.set.return_value = None

    with pytest.raises(ConditionFailedError):
        await redis_store.put("users", "alice", {"username": "alice"}, if_absent=True)


@pytest.mark.asyncio
async def test_update_runs_script(redis_store, mock_redis):
    """Test partial update is sent as a single script call."""
    mock_redis.eval.return_value = 1

    await redis_store.update("sessions", "abc", {"invalidated": True})

    args = mock_redis.eval.call_args[0]
    assert args[1] == 1
    assert args[2] == "sessions:abc"
    assert json.loads(args[3]) == {"invalidated": True}


@pytest.mark.asyncio
async def test_update_missing_record(redis_store, mock_redis):
    """Test the script's not-found result raises RecordNotFoundError."""
    mock_redis.eval.return_value = 0

    with pytest.raises(RecordNotFoundError):
        await redis_store.update("sessions", "missing", {"invalidated": True})


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["get", "set", "eval"])
async def test_redis_errors_become_store_errors(redis_store, mock_redis, method):
    """Test Redis failures are wrapped and chained."""
    setattr(mock_redis, method, AsyncMock(side_effect=RedisConnectionError("connection refused")))

    with pytest.raises(StoreError) as exc_info:
        if method == "get":
            await redis_store.get("users", "alice")
        elif method == "set":
            await redis_store.put("users", "alice", {})
        else:
            await redis_store.update("sessions", "abc", {"invalidated": True})

    assert not isinstance(exc_info.value, (ConditionFailedError, RecordNotFoundError))
    assert isinstance(exc_info.value.__cause__, RedisConnectionError)
    assert exc_info.value.status is None


@pytest.mark.asyncio
async def test_redis_timeout_is_store_error(redis_store, mock_redis):
    """Test timeouts surface like any other store failure."""
    mock_redis.get = AsyncMock(side_effect=RedisTimeoutError("timed out"))

    with pytest.raises(StoreError):
        await redis_store.get("sessions", "abc")


@pytest.mark.asyncio
async def test_get_malformed_json(redis_store, mock_redis):
    mock_redis.get.return_value = "{not json"

    with pytest.raises(StoreError) as exc_info:
        await redis_store.get("users", "alice")

    assert isinstance(exc_info.value.__cause__, ValueError)


@pytest.mark.asyncio
async def test_memory_store_conditional_put():
    """Test in-memory conditional put keeps the first record."""
    store = InMemoryCredentialStore()
    await store.put("users", "alice", {"user_id": "first"}, if_absent=True)

    with pytest.raises(ConditionFailedError):
        await store.put("users", "alice", {"user_id": "second"}, if_absent=True)

    assert (await store.get("users", "alice"))["user_id"] == "first"
    assert store.count("users") == 1


@pytest.mark.asyncio
async def test_memory_store_returns_copies():
    """Test callers cannot mutate stored records through returned dicts."""
    store = InMemoryCredentialStore()
    await store.put("sessions", "abc", {"invalidated": False})

    record = await store.get("sessions", "abc")
    record["invalidated"] = True

    assert (await store.get("sessions", "abc"))["invalidated"] is False


@pytest.mark.asyncio
async def test_memory_store_update():
    """Test partial update keeps other fields and never creates records."""
    store = InMemoryCredentialStore()
    await store.put("sessions", "abc", {"user_id": "u-1", "invalidated": False})

    await store.update("sessions", "abc", {"invalidated": True})
    assert await store.get("sessions", "abc") == {"user_id": "u-1", "invalidated": True}

    with pytest.raises(RecordNotFoundError):
        await store.update("sessions", "missing", {"invalidated": True})
    assert await store.get("sessions", "missing") is None

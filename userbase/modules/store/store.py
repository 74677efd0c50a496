import copy
import json
from typing import Any, Dict, Optional, Protocol

from redis.exceptions import RedisError


class StoreError(Exception):
    """Infrastructure failure reported by the store."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ConditionFailedError(StoreError):
    """Conditional put rejected because the key already exists."""


class RecordNotFoundError(StoreError):
    """Partial update targeted a key that does not exist."""


class CredentialStore(Protocol):
    """Keyed access to the logical `users` and `sessions` tables."""

    async def get(self, table: str, key: str) -> Optional[Dict[str, Any]]:
        """Return the record stored under key, or None."""
        ...

    async def put(
        self, table: str, key: str, record: Dict[str, Any], if_absent: bool = False
    ) -> None:
        """
        Write a whole record.

        Raises:
            ConditionFailedError: if_absent is set and the key exists
            StoreError: on any other store failure
        """
        ...

    async def update(self, table: str, key: str, fields: Dict[str, Any]) -> None:
        """
        Set fields on an existing record without rewriting the others.

        Raises:
            RecordNotFoundError: key does not exist (no record is created)
            StoreError: on any other store failure
        """
        ...


# Merges ARGV[1] (JSON object) into the JSON document at KEYS[1].
# Returns 0 when the key is missing so the update never creates a record.
_UPDATE_SCRIPT = """
local raw = redis.call('GET', KEYS[1])
if not raw then
    return 0
end
local record = cjson.decode(raw)
local fields = cjson.decode(ARGV[1])
for name, value in pairs(fields) do
    record[name] = value
end
redis.call('SET', KEYS[1], cjson.encode(record))
return 1
"""


class RedisCredentialStore:
    """
    Credential store backed by Redis.

    Each table is a key prefix (``<table>:<key>``) holding a JSON document.
    Records carry no TTL; expiry of sessions is decided by the session module.
    """

    def __init__(self, redis_client):
        """
        Initialize Redis store.

        Args:
            redis_client: Async Redis client (decode_responses=True), owned by the caller
        """
        self.redis = redis_client

    @staticmethod
    def _key(table: str, key: str) -> str:
        return f"{table}:{key}"

    async def get(self, table: str, key: str) -> Optional[Dict[str, Any]]:
        try:
            data = await self.redis.get(self._key(table, key))
        except RedisError as e:
            raise StoreError(f"Failed to read {table} record: {e}") from e

        if not data:
            return None
        try:
            return json.loads(data)
        except ValueError as e:
            raise StoreError(f"Malformed {table} record: {e}") from e

    async def put(
        self, table: str, key: str, record: Dict[str, Any], if_absent: bool = False
    ) -> None:
        redis_key = self._key(table, key)
        try:
            # SET NX is the atomic check-and-insert; None means the key existed
            written = await self.redis.set(redis_key, json.dumps(record), nx=if_absent)
        except RedisError as e:
            raise StoreError(f"Failed to write {table} record: {e}") from e

        if if_absent and not written:
            raise ConditionFailedError(f"{table} record already exists", status=409)

    async def update(self, table: str, key: str, fields: Dict[str, Any]) -> None:
        redis_key = self._key(table, key)
        try:
            updated = await self.redis.eval(_UPDATE_SCRIPT, 1, redis_key, json.dumps(fields))
        except RedisError as e:
            raise StoreError(f"Failed to update {table} record: {e}") from e

        if not updated:
            raise RecordNotFoundError(f"{table} record not found", status=404)


class InMemoryCredentialStore:
    """
    Process-local credential store for development and tests.

    Conditional puts check and insert without awaiting in between, so they are
    atomic with respect to other coroutines on the same event loop.
    """

    def __init__(self):
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        return self._tables.setdefault(table, {})

    async def get(self, table: str, key: str) -> Optional[Dict[str, Any]]:
        record = self._table(table).get(key)
        return copy.deepcopy(record) if record is not None else None

    async def put(
        self, table: str, key: str, record: Dict[str, Any], if_absent: bool = False
    ) -> None:
        rows = self._table(table)
        if if_absent and key in rows:
            raise ConditionFailedError(f"{table} record already exists", status=409)
        rows[key] = copy.deepcopy(record)

    async def update(self, table: str, key: str, fields: Dict[str, Any]) -> None:
        rows = self._table(table)
        if key not in rows:
            raise RecordNotFoundError(f"{table} record not found", status=404)
        rows[key].update(copy.deepcopy(fields))

    def count(self, table: str) -> int:
        """Number of records in a table."""
        return len(self._table(table))

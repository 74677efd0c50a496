"""
Store Module - Black Box Interface

Purpose: Keyed persistence for the users and sessions tables
Interface: get(), put(if_absent=...), update()
Hidden: Redis key layout, serialization, atomic update script

Replaceable with any key-value backend that offers conditional insert.
"""

from .store import (
    ConditionFailedError,
    CredentialStore,
    InMemoryCredentialStore,
    RecordNotFoundError,
    RedisCredentialStore,
    StoreError,
)

__all__ = [
    "CredentialStore",
    "RedisCredentialStore",
    "InMemoryCredentialStore",
    "StoreError",
    "ConditionFailedError",
    "RecordNotFoundError",
]

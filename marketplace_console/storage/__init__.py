"""Local persistence: the versioned key-value store and its key registry."""

from marketplace_console.storage.local_store import KeySchema, LocalStore
from marketplace_console.storage.schemas import (
    CURRENT_SESSION_KEY,
    REMEMBER_ME_KEY,
    master_cache_key,
    membership_key,
    register_default_schemas,
    selection_key,
)

__all__ = [
    "CURRENT_SESSION_KEY",
    "KeySchema",
    "LocalStore",
    "REMEMBER_ME_KEY",
    "master_cache_key",
    "membership_key",
    "register_default_schemas",
    "selection_key",
]

"""Repository modules for key/value persistence."""

from repositories.kv_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    get_store,
)
from repositories.registry_repository import RegistryRepository
from repositories.workspace_repository import WorkspaceRepository

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "get_store",
    "RegistryRepository",
    "WorkspaceRepository",
]

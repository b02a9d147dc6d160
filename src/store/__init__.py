"""Entity Store — хранилище сущностей с атомарной фиксацией и откатом по блоку."""

from .base import ENTITY_TYPES, Checkpoint, EntityStore, StoreError, entity_key
from .memory import InMemoryEntityStore
from .sqlite import SqliteEntityStore

__all__ = [
    "ENTITY_TYPES",
    "Checkpoint",
    "EntityStore",
    "StoreError",
    "entity_key",
    "InMemoryEntityStore",
    "SqliteEntityStore",
]

"""Store backends and the factory that picks one from settings."""

from __future__ import annotations

from zeitgeist.core.config import settings
from zeitgeist.store.base import Store
from zeitgeist.store.memory import MemoryStore
from zeitgeist.store.sql import SqlStore


def build_store(backend: str | None = None) -> Store:
    """Construct the configured store backend."""
    selected = backend or settings.store_backend
    if selected == "memory":
        return MemoryStore()
    if selected == "sql":
        from zeitgeist.db.session import async_session, engine

        return SqlStore(async_session, engine)
    raise ValueError(f"Unknown store backend: {selected}")


__all__ = ["MemoryStore", "SqlStore", "Store", "build_store"]

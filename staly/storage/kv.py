"""
Key-value backends for whole-collection blobs.

Every collection (accounts, profiles, a user's stays) is stored as one
JSON string under one key and rewritten in full on each save. There is no
locking: concurrent writers to the same key race and the last write wins.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from staly.db.models import KeyValueModel

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Minimal string blob storage."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the blob stored under key, or None."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Overwrite the blob stored under key."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key if present."""


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store. Contents are lost on restart."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqlKeyValueStore(KeyValueStore):
    """
    Store backed by the ``kv_entries`` table.

    Each call opens its own session and commits before returning.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def get(self, key: str) -> Optional[str]:
        async with self.session_maker() as session:
            entry = await session.get(KeyValueModel, key)
            return entry.value if entry else None

    async def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc)
        async with self.session_maker() as session:
            entry = await session.get(KeyValueModel, key)
            if entry is None:
                session.add(KeyValueModel(key=key, value=value, updated_at=now))
            else:
                entry.value = value
                entry.updated_at = now
            await session.commit()
        logger.debug(f"Wrote {len(value)} bytes to {key}")

    async def delete(self, key: str) -> None:
        async with self.session_maker() as session:
            await session.execute(delete(KeyValueModel).where(KeyValueModel.key == key))
            await session.commit()

"""Durable key/value storage backed by the application database."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import StoreEntry

logger = logging.getLogger(__name__)


class DurableStore:
    """Async key/value store surviving process restarts.

    Each call runs in its own session, so single-key reads and writes are
    atomic; nothing spans multiple keys transactionally.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for ``key`` or ``default`` when absent."""

        async with self._session_factory() as session:
            entry = await session.get(StoreEntry, key)
            if entry is None:
                return default
            return entry.value

    async def set(self, key: str, value: Any) -> None:
        async with self._session_factory() as session:
            await session.merge(StoreEntry(key=key, value=value))
            await session.commit()

    async def remove(self, key: str) -> bool:
        """Delete ``key``; return whether anything was removed."""

        async with self._session_factory() as session:
            result = await session.execute(
                delete(StoreEntry).where(StoreEntry.key == key)
            )
            await session.commit()
            return bool(result.rowcount)

    async def remove_prefixes(self, *prefixes: str) -> int:
        """Delete every key starting with any of ``prefixes`` in one statement."""

        cleaned = [prefix for prefix in prefixes if prefix]
        if not cleaned:
            return 0
        async with self._session_factory() as session:
            result = await session.execute(
                delete(StoreEntry).where(
                    or_(
                        *(
                            StoreEntry.key.startswith(prefix, autoescape=True)
                            for prefix in cleaned
                        )
                    )
                )
            )
            await session.commit()
        removed = int(result.rowcount or 0)
        logger.debug("Removed %s stored keys under %s", removed, ", ".join(cleaned))
        return removed

    async def keys(self, prefix: str | None = None) -> list[str]:
        """Return stored keys, optionally restricted to ``prefix``."""

        stmt = select(StoreEntry.key).order_by(StoreEntry.key)
        if prefix:
            stmt = stmt.where(StoreEntry.key.startswith(prefix, autoescape=True))
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [row[0] for row in result.all()]

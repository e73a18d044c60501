"""Durable string-keyed stores for saved games."""

from datetime import datetime
from typing import Dict, List, Optional

import structlog

from .connection import Database
from .models import SaveSlot

logger = structlog.get_logger()


class MemorySaveStore:
    """Process-local store, used by tests and throwaway sessions."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def delete(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def keys(self) -> List[str]:
        return sorted(self._items)


class SqlSaveStore:
    """Save slots persisted through SQLAlchemy."""

    def __init__(self, database: Database):
        self.database = database

    def get(self, key: str) -> Optional[str]:
        with self.database.get_session() as session:
            slot = session.query(SaveSlot).filter(SaveSlot.key == key).first()
            return slot.payload if slot is not None else None

    def set(self, key: str, value: str) -> None:
        with self.database.get_session() as session:
            slot = session.query(SaveSlot).filter(SaveSlot.key == key).first()
            if slot is None:
                session.add(SaveSlot(key=key, payload=value))
            else:
                slot.payload = value
                slot.updated_at = datetime.utcnow()
        logger.debug("Save slot written", key=key, size=len(value))

    def delete(self, key: str) -> bool:
        with self.database.get_session() as session:
            deleted = session.query(SaveSlot).filter(SaveSlot.key == key).delete()
        return deleted > 0

    def keys(self) -> List[str]:
        with self.database.get_session() as session:
            return [row.key for row in session.query(SaveSlot.key).order_by(SaveSlot.key)]

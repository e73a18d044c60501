"""
Database utilities and models.

This package provides:
- SQLAlchemy model for save slots
- Database connection management
- Save stores (SQL-backed and in-memory)
"""

from .connection import Database, db
from .models import Base, SaveSlot
from .store import MemorySaveStore, SqlSaveStore

__all__ = [
    # Connection management
    'Database', 'db',

    # Models
    'Base', 'SaveSlot',

    # Stores
    'MemorySaveStore', 'SqlSaveStore',
]

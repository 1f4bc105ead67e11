from __future__ import annotations

from .dictionary import DictionaryDatabase, EmptyDatabaseError

__all__ = ["DictionaryDatabase", "EmptyDatabaseError"]

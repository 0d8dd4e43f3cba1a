"""
Persistence layer for convertcore state.

SQLite-backed storage for circuit breaker state per pathway.
Incident records stay in memory.
"""

from .manager import PersistenceManager
from .errors import PersistenceError, SchemaError, LoadError, SaveError

__all__ = ["PersistenceManager", "PersistenceError", "SchemaError", "LoadError", "SaveError"]

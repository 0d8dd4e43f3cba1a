"""
Errors raised by the circuit state store.

The security gate catches PersistenceError around every write: a failed
write costs the restart guarantee, never the in-memory circuit.
"""

from typing import Optional


class PersistenceError(Exception):
    """Base for circuit state storage failures."""

    def __init__(self, message: str, pathway: Optional[str] = None):
        self.pathway = pathway
        super().__init__(message)


class SchemaError(PersistenceError):
    """The circuit_states table could not be created or checked."""


class LoadError(PersistenceError):
    """Circuit state rows could not be read (pathway is None for a full scan)."""


class SaveError(PersistenceError):
    """A pathway's circuit state could not be written or deleted."""

"""
SQLite persistence manager for convertcore state.

Single-file SQLite database.
Explicit save/load only - the security gate decides when to persist.
"""

import sqlite3
from pathlib import Path
from typing import Dict, List, Optional
from datetime import datetime
from contextlib import contextmanager

from .errors import PersistenceError, SchemaError, LoadError, SaveError


# Database schema version for migrations
SCHEMA_VERSION = 1


class PersistenceManager:
    """
    Manages SQLite persistence for convertcore state.

    Stores:
    - Circuit breaker state per pathway (closed/open, reason, opened_at)

    Does NOT store:
    - Incident records (bounded in-memory log)
    - Rate-limit counters
    - Jobs and artifacts
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize persistence manager.

        Args:
            db_path: Path to SQLite database file (defaults to ./convertcore.db)
        """
        if db_path is None:
            db_path = str(Path.cwd() / "convertcore.db")

        self.db_path = str(db_path)
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._ensure_schema()
        except PersistenceError as e:
            raise SchemaError(f"Could not prepare schema in {self.db_path}: {e}") from e

    @contextmanager
    def _connect(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row  # Access columns by name
        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise PersistenceError(f"Database operation failed: {e}") from e
        finally:
            conn.close()

    def _ensure_schema(self):
        """Create schema if it doesn't exist."""
        with self._connect() as conn:
            cursor = conn.cursor()

            # Schema version tracking
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
            """)

            cursor.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
            row = cursor.fetchone()
            current_version = row[0] if row else 0

            if current_version < SCHEMA_VERSION:
                self._migrate_schema(conn, current_version)

    def _migrate_schema(self, conn, from_version: int):
        """Apply schema migrations."""
        cursor = conn.cursor()

        if from_version < 1:
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS circuit_states (
                    pathway TEXT PRIMARY KEY,
                    state TEXT NOT NULL,
                    reason TEXT,
                    opened_at REAL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute(
                "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                (1, datetime.now().isoformat())
            )

    def schema_version(self) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT MAX(version) FROM schema_version")
            row = cursor.fetchone()
            return row[0] or 0

    # Circuit state persistence

    def save_circuit_state(self, circuit_data: Dict):
        """
        Save or update the circuit state of a pathway.

        Args:
            circuit_data: Dict with keys: pathway, state, reason, opened_at

        Raises:
            SaveError: If the row cannot be written
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO circuit_states (pathway, state, reason, opened_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(pathway) DO UPDATE SET
                        state = excluded.state,
                        reason = excluded.reason,
                        opened_at = excluded.opened_at,
                        updated_at = excluded.updated_at
                """, (
                    circuit_data["pathway"],
                    circuit_data["state"],
                    circuit_data.get("reason"),
                    circuit_data.get("opened_at"),
                    datetime.now().isoformat(),
                ))
        except PersistenceError as e:
            raise SaveError(
                f"Failed to save circuit state for '{circuit_data['pathway']}': {e}",
                pathway=circuit_data["pathway"],
            ) from e

    def load_circuit_state(self, pathway: str) -> Optional[Dict]:
        """
        Load the circuit state of a pathway.

        Returns:
            Dict with circuit data or None if never persisted
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT * FROM circuit_states WHERE pathway = ?", (pathway,))
                row = cursor.fetchone()
        except PersistenceError as e:
            raise LoadError(f"Failed to load circuit state for '{pathway}': {e}", pathway=pathway) from e

        if not row:
            return None
        return self._row_to_circuit(row)

    def load_all_circuit_states(self) -> List[Dict]:
        """Load every persisted circuit state."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT * FROM circuit_states ORDER BY pathway")
                rows = cursor.fetchall()
        except PersistenceError as e:
            raise LoadError(f"Failed to load circuit states: {e}") from e

        return [self._row_to_circuit(row) for row in rows]

    def delete_circuit_state(self, pathway: str):
        """Forget a pathway's circuit state."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM circuit_states WHERE pathway = ?", (pathway,))
        except PersistenceError as e:
            raise SaveError(f"Failed to delete circuit state for '{pathway}': {e}", pathway=pathway) from e

    @staticmethod
    def _row_to_circuit(row) -> Dict:
        return {
            "pathway": row["pathway"],
            "state": row["state"],
            "reason": row["reason"],
            "opened_at": row["opened_at"],
            "updated_at": row["updated_at"],
        }

"""
Sprocket - Database Manager
===========================

One SQLite file for everything the bot has to remember across restarts.

DESIGN:
    A process-wide singleton holds a single connection shared by the
    event loop and worker threads (commands call in through
    asyncio.to_thread). A lock serializes access; WAL lets readers run
    while the scheduler writes.

    Feature queries live in mixins (state, archive, encouragements) so
    this class only owns the connection, the migrations and the small
    query helpers the mixins build on.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from sprocket.core.logger import logger
from sprocket.core.database.schema import SchemaMixin
from sprocket.core.database.state import StateMixin
from sprocket.core.database.archive import ArchiveTasksMixin
from sprocket.core.database.encouragements import EncouragementsMixin


# =============================================================================
# Constants
# =============================================================================

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DATA_DIR = PROJECT_ROOT / "data"
DB_PATH = DATA_DIR / "sprocket.db"

BUSY_TIMEOUT_MS = 5000

PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}",
)


# =============================================================================
# Database Manager
# =============================================================================

class DatabaseManager(
    SchemaMixin,
    StateMixin,
    ArchiveTasksMixin,
    EncouragementsMixin,
):
    """
    Thread-safe SQLite access.

    Attributes:
        db_path: File backing this instance.
    """

    _instance: Optional["DatabaseManager"] = None
    _instance_lock = threading.Lock()

    def __new__(cls, db_path: Optional[Path] = None) -> "DatabaseManager":
        with cls._instance_lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._initialized = False
                cls._instance = instance
        return cls._instance

    def __init__(self, db_path: Optional[Path] = None) -> None:
        if self._initialized:
            return

        self.db_path = Path(db_path) if db_path else DB_PATH
        self._lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        version = self.migrate()
        self._initialized = True

        logger.tree("Database Ready", [
            ("Path", str(self.db_path)),
            ("Schema Version", str(version)),
        ], emoji="🗄️")

    # =========================================================================
    # Connection
    # =========================================================================

    @property
    def connection(self) -> sqlite3.Connection:
        """Open connection, reopened lazily after close()."""
        if self._conn is None:
            conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            for pragma in PRAGMAS:
                conn.execute(pragma)
            self._conn = conn
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Hold the lock for a block of statements; commit on success, roll back on error."""
        with self._lock:
            conn = self.connection
            try:
                yield conn
            except Exception:
                conn.rollback()
                raise
            conn.commit()

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info("Database Connection Closed")

    # =========================================================================
    # Query Helpers
    # =========================================================================

    def execute(self, query: str, params: Sequence = ()) -> sqlite3.Cursor:
        """Run one write statement in its own transaction."""
        with self.transaction() as conn:
            return conn.execute(query, params)

    def fetchone(self, query: str, params: Sequence = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            return self.connection.execute(query, params).fetchone()

    def fetchall(self, query: str, params: Sequence = ()) -> List[sqlite3.Row]:
        with self._lock:
            return self.connection.execute(query, params).fetchall()


def get_db() -> DatabaseManager:
    """Shared database instance."""
    return DatabaseManager()


__all__ = ["DatabaseManager", "get_db", "DB_PATH", "DATA_DIR"]

"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), running several statements atomically
(``unit_of_work``) and applying migrations on application start
(``init_db``).  It uses SQLite as a lightweight embedded database; to
switch to another DBMS you would replace connection logic and adapt
SQL syntax accordingly.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from .config import settings

logger = logging.getLogger(__name__)


def utc_now() -> str:
    """Current UTC time as an ISO 8601 string, the format timestamps are stored in."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path (or the special
    ``:memory:`` name), use it directly.  Otherwise resolve it relative
    to the package root.
    """
    db_url = settings.database_url
    if db_url == ":memory:" or os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # lawn_care_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    The connection uses a row factory to access columns by name and has
    foreign key enforcement switched on.  Dates and timestamps are
    stored as ISO strings and returned as they are stored.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    # Foreign keys are off by default in SQLite and must be enabled per
    # connection.
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


class UnitOfWork:
    """A single database transaction.

    Obtained from :func:`unit_of_work`.  Statements are executed through
    ``cursor``; nothing is persisted until :meth:`commit` is called.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection
        self.cursor = connection.cursor()
        self.committed = False

    def commit(self) -> None:
        self.connection.execute("COMMIT")
        self.committed = True


@contextmanager
def unit_of_work() -> Iterator[UnitOfWork]:
    """Open a connection, begin a transaction and yield a ``UnitOfWork``.

    On exit the transaction is rolled back unless ``commit()`` was
    called, and the connection is always closed.  Exceptions raised in
    the block propagate after the rollback.
    """
    conn = get_connection()
    # Manage BEGIN/COMMIT explicitly instead of relying on the sqlite3
    # module's implicit transactions.
    conn.isolation_level = None
    uow = UnitOfWork(conn)
    try:
        conn.execute("BEGIN")
        yield uow
    finally:
        try:
            if not uow.committed and conn.in_transaction:
                conn.execute("ROLLBACK")
                logger.debug("Transaction rolled back")
        finally:
            conn.close()


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            user_id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE,
            hashed_password TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS GrassSpecies (
            grass_species_id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE
        );

        -- Plan types (and establishment types for new lawns) offered for a species
        CREATE TABLE IF NOT EXISTS GrassSpeciesPlanTypes (
            grass_species_id INTEGER NOT NULL,
            plan_type TEXT NOT NULL,
            establishment_type TEXT,
            FOREIGN KEY(grass_species_id) REFERENCES GrassSpecies(grass_species_id)
        );

        CREATE TABLE IF NOT EXISTS UserPlans (
            user_plan_id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            grass_species_id INTEGER NOT NULL,
            plan_type TEXT NOT NULL,
            establishment_type TEXT,
            is_completed INTEGER NOT NULL DEFAULT 0,
            is_archived INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            completed_at TIMESTAMP,
            FOREIGN KEY(user_id) REFERENCES users(user_id),
            FOREIGN KEY(grass_species_id) REFERENCES GrassSpecies(grass_species_id)
        );

        -- template_id is NULL for steps written by the user
        CREATE TABLE IF NOT EXISTS PlanSteps (
            plan_step_id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_plan_id INTEGER NOT NULL,
            template_id INTEGER,
            step_description TEXT NOT NULL,
            due_date DATE NOT NULL,
            completed INTEGER NOT NULL DEFAULT 0,
            completed_at TIMESTAMP,
            step_order INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(user_plan_id) REFERENCES UserPlans(user_plan_id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: lookup indices
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_user_plans_user_id ON UserPlans(user_id);
        CREATE INDEX IF NOT EXISTS idx_plan_steps_user_plan_id ON PlanSteps(user_plan_id);
        CREATE INDEX IF NOT EXISTS idx_plan_types_species ON GrassSpeciesPlanTypes(grass_species_id);
        """,
    ),
    # Migration 3: reference data.  Ids match the options of the web client.
    (
        3,
        """
        INSERT OR IGNORE INTO GrassSpecies (grass_species_id, name) VALUES
            (1, 'Kentucky Bluegrass'),
            (2, 'Tall Fescue'),
            (3, 'Perennial Ryegrass'),
            (4, 'Bermuda'),
            (5, 'Zoysia'),
            (6, 'St. Augustine'),
            (7, 'Centipede'),
            (8, 'Fine Fescue'),
            (9, 'Buffalo'),
            (10, 'Bahia');

        INSERT INTO GrassSpeciesPlanTypes (grass_species_id, plan_type, establishment_type) VALUES
            (1, 'new_lawn', 'seed'), (1, 'new_lawn', 'sod_plugs'), (1, 'lawn_improvement', NULL),
            (2, 'new_lawn', 'seed'), (2, 'new_lawn', 'sod_plugs'), (2, 'lawn_improvement', NULL),
            (3, 'new_lawn', 'seed'), (3, 'lawn_improvement', NULL),
            (4, 'new_lawn', 'seed'), (4, 'new_lawn', 'sod_plugs'), (4, 'lawn_improvement', NULL),
            (5, 'new_lawn', 'seed'), (5, 'new_lawn', 'sod_plugs'), (5, 'lawn_improvement', NULL),
            (6, 'new_lawn', 'sod_plugs'), (6, 'lawn_improvement', NULL),
            (7, 'new_lawn', 'seed'), (7, 'new_lawn', 'sod_plugs'), (7, 'lawn_improvement', NULL),
            (8, 'new_lawn', 'seed'), (8, 'lawn_improvement', NULL),
            (9, 'new_lawn', 'seed'), (9, 'new_lawn', 'sod_plugs'), (9, 'lawn_improvement', NULL),
            (10, 'new_lawn', 'seed'), (10, 'new_lawn', 'sod_plugs'), (10, 'lawn_improvement', NULL);
        """,
    ),
]


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  If you add a new migration, append it with an
    incremented version number.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying database migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version

"""OverrideDatabase: SQLite-backed classification overrides.

Uses stdlib sqlite3 only.  Besides the overrides themselves the database
holds the per-sub-sub-chapter display-order counters and the two budget
tables the accepted-budget highlight reads.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

from ifctakeoff.models.override import ClassificationOverride, Scope, UnitKind

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS overrides (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    ifc_category TEXT NOT NULL,
    type_name TEXT NOT NULL,
    project_id TEXT,
    center_id TEXT,
    version_id TEXT,
    custom_name TEXT,
    description TEXT,
    preferred_unit TEXT NOT NULL DEFAULT 'UT',
    chapter_id TEXT,
    subchapter_id TEXT,
    subsubchapter_id TEXT,
    display_order INTEGER NOT NULL DEFAULT 1,
    full_code TEXT,
    measured_value REAL NOT NULL DEFAULT 0,
    element_count INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS ux_overrides_key ON overrides(
    ifc_category,
    type_name,
    COALESCE(project_id, ''),
    COALESCE(center_id, ''),
    COALESCE(version_id, '')
);
CREATE INDEX IF NOT EXISTS idx_overrides_project ON overrides(project_id, version_id);
CREATE INDEX IF NOT EXISTS idx_overrides_center ON overrides(center_id);

CREATE TABLE IF NOT EXISTS display_sequences (
    scope_kind TEXT NOT NULL,
    scope_id TEXT NOT NULL,
    version_key TEXT NOT NULL DEFAULT '',
    subsubchapter_id TEXT NOT NULL,
    last_value INTEGER NOT NULL,
    PRIMARY KEY (scope_kind, scope_id, version_key, subsubchapter_id)
);

CREATE TABLE IF NOT EXISTS budget_category_mappings (
    budget_code TEXT PRIMARY KEY,
    category_name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS accepted_budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id TEXT NOT NULL,
    category TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'accepted'
);

CREATE INDEX IF NOT EXISTS idx_accepted_project ON accepted_budgets(project_id, status);
"""

_COLUMNS = (
    "ifc_category", "type_name", "project_id", "center_id", "version_id",
    "custom_name", "description", "preferred_unit",
    "chapter_id", "subchapter_id", "subsubchapter_id",
    "display_order", "full_code", "measured_value", "element_count",
    "created_at", "updated_at",
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _scope_clause(scope: Scope) -> tuple[str, list[Any]]:
    """WHERE fragment selecting the rows that belong to *scope*."""
    project_id, center_id, version_id = scope.persisted_ids()
    if project_id:
        return "project_id = ? AND version_id IS ?", [project_id, version_id]
    return "center_id = ? AND project_id IS NULL AND version_id IS NULL", [center_id]


def _row_to_override(row: sqlite3.Row) -> ClassificationOverride:
    return ClassificationOverride(
        id=row["id"],
        ifc_category=row["ifc_category"],
        type_name=row["type_name"],
        project_id=row["project_id"],
        center_id=row["center_id"],
        version_id=row["version_id"],
        custom_name=row["custom_name"],
        description=row["description"],
        preferred_unit=UnitKind(row["preferred_unit"]),
        chapter_id=row["chapter_id"],
        subchapter_id=row["subchapter_id"],
        subsubchapter_id=row["subsubchapter_id"],
        display_order=row["display_order"],
        measured_value=row["measured_value"],
        element_count=row["element_count"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class OverrideDatabase:
    """SQLite-backed override storage.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.  Use ``':memory:'`` for
        in-memory databases (useful for testing).
    """

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self._db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    @property
    def conn(self) -> sqlite3.Connection:
        """Lazy-initialise and return the database connection."""
        if self._conn is None:
            # Autocommit mode: write transactions are opened explicitly.
            self._conn = sqlite3.connect(
                self._db_path, isolation_level=None, check_same_thread=False
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._init_schema()
        return self._conn

    def _init_schema(self) -> None:
        """Create tables and indexes if they don't exist."""
        self.conn.executescript(_SCHEMA_SQL)

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Hold the write lock for the whole block; roll back on any error."""
        with self._lock:
            conn = self.conn
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    # -- overrides -----------------------------------------------------------

    def fetch_override(
        self,
        ifc_category: str,
        type_name: str,
        scope: Scope,
    ) -> Optional[ClassificationOverride]:
        clause, params = _scope_clause(scope)
        cur = self.conn.execute(
            f"SELECT * FROM overrides WHERE ifc_category = ? AND type_name = ? AND {clause}",
            [ifc_category, type_name, *params],
        )
        row = cur.fetchone()
        return _row_to_override(row) if row else None

    def list_overrides(self, scope: Scope) -> list[ClassificationOverride]:
        clause, params = _scope_clause(scope)
        cur = self.conn.execute(
            f"SELECT * FROM overrides WHERE {clause} ORDER BY ifc_category, type_name",
            params,
        )
        return [_row_to_override(r) for r in cur.fetchall()]

    def write_override(self, override: ClassificationOverride) -> int:
        """Insert or update *override* (matched by ``id``) and return its id.

        The caller is expected to hold :meth:`transaction`.
        """
        updated_at = _now()
        values = {
            "ifc_category": override.ifc_category,
            "type_name": override.type_name,
            "project_id": override.project_id,
            "center_id": override.center_id,
            "version_id": override.version_id,
            "custom_name": override.custom_name,
            "description": override.description,
            "preferred_unit": UnitKind(override.preferred_unit).value,
            "chapter_id": override.chapter_id,
            "subchapter_id": override.subchapter_id,
            "subsubchapter_id": override.subsubchapter_id,
            "display_order": override.display_order,
            "full_code": override.full_code,
            "measured_value": override.measured_value,
            "element_count": override.element_count,
            "created_at": override.created_at.isoformat(),
            "updated_at": updated_at,
        }

        if override.id is None:
            cur = self.conn.execute(
                f"INSERT INTO overrides ({', '.join(_COLUMNS)}) "
                f"VALUES ({', '.join('?' for _ in _COLUMNS)})",
                [values[c] for c in _COLUMNS],
            )
            return cur.lastrowid  # type: ignore[return-value]

        columns = [c for c in _COLUMNS if c != "created_at"]
        self.conn.execute(
            f"UPDATE overrides SET {', '.join(f'{c} = ?' for c in columns)} WHERE id = ?",
            [values[c] for c in columns] + [override.id],
        )
        return override.id

    def get_override(self, override_id: int) -> Optional[ClassificationOverride]:
        cur = self.conn.execute("SELECT * FROM overrides WHERE id = ?", (override_id,))
        row = cur.fetchone()
        return _row_to_override(row) if row else None

    def delete_override(self, ifc_category: str, type_name: str, scope: Scope) -> bool:
        clause, params = _scope_clause(scope)
        with self.transaction() as conn:
            cur = conn.execute(
                f"DELETE FROM overrides WHERE ifc_category = ? AND type_name = ? AND {clause}",
                [ifc_category, type_name, *params],
            )
        return cur.rowcount > 0

    # -- display order -------------------------------------------------------

    def next_display_order(self, scope: Scope, subsubchapter_id: str) -> int:
        """Allocate the next display order under *subsubchapter_id*.

        The counter is seeded from the rows already filed there on first use
        and only ever grows, so deleting an item never frees its number.
        The caller is expected to hold :meth:`transaction`.
        """
        kind = "project" if scope.is_project else "center"
        version_key = scope.effective_version or ""
        key = (kind, scope.scope_id, version_key, subsubchapter_id)

        cur = self.conn.execute(
            "SELECT last_value FROM display_sequences "
            "WHERE scope_kind = ? AND scope_id = ? AND version_key = ? AND subsubchapter_id = ?",
            key,
        )
        row = cur.fetchone()
        if row is not None:
            value = row["last_value"] + 1
            self.conn.execute(
                "UPDATE display_sequences SET last_value = ? "
                "WHERE scope_kind = ? AND scope_id = ? AND version_key = ? AND subsubchapter_id = ?",
                (value, *key),
            )
            return value

        clause, params = _scope_clause(scope)
        cur = self.conn.execute(
            f"SELECT COUNT(*), COALESCE(MAX(display_order), 0) FROM overrides "
            f"WHERE subsubchapter_id = ? AND {clause}",
            [subsubchapter_id, *params],
        )
        count, highest = cur.fetchone()
        value = max(count, highest) + 1
        self.conn.execute(
            "INSERT INTO display_sequences "
            "(scope_kind, scope_id, version_key, subsubchapter_id, last_value) "
            "VALUES (?, ?, ?, ?, ?)",
            (*key, value),
        )
        logger.debug("Seeded display order for %s at %d", subsubchapter_id, value)
        return value

    # -- budgets -------------------------------------------------------------

    def set_budget_mapping(self, budget_code: str, category_name: str) -> None:
        with self.transaction() as conn:
            conn.execute(
                "INSERT INTO budget_category_mappings (budget_code, category_name) VALUES (?, ?) "
                "ON CONFLICT(budget_code) DO UPDATE SET category_name = excluded.category_name",
                (budget_code, category_name),
            )

    def budget_category(self, budget_code: str) -> Optional[str]:
        cur = self.conn.execute(
            "SELECT category_name FROM budget_category_mappings WHERE budget_code = ?",
            (budget_code,),
        )
        row = cur.fetchone()
        return row["category_name"] if row else None

    def add_budget(self, project_id: str, category: str, status: str = "accepted") -> int:
        with self.transaction() as conn:
            cur = conn.execute(
                "INSERT INTO accepted_budgets (project_id, category, status) VALUES (?, ?, ?)",
                (project_id, category, status),
            )
        return cur.lastrowid  # type: ignore[return-value]

    def accepted_categories(self, project_id: str) -> list[str]:
        cur = self.conn.execute(
            "SELECT category FROM accepted_budgets WHERE project_id = ? AND status = 'accepted'",
            (project_id,),
        )
        return [r["category"] for r in cur.fetchall()]

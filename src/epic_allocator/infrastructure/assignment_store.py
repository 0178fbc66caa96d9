from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from pathlib import Path

import duckdb

from epic_allocator.domain.models import AssignmentResult, AssignmentRow
from epic_allocator.infrastructure.exporters import ROW_FIELDS, to_row

logger = logging.getLogger(__name__)

_DEFAULT_DB_DIR = Path.home() / ".epic-allocator"
_DEFAULT_DB_PATH = _DEFAULT_DB_DIR / "runs.db"

_RUN_COLUMNS = [
    "run_id", "created_at", "total_epics", "total_story_points",
    "avg_story_points_per_dev", "high_confidence", "medium_confidence",
    "low_confidence", "manual", "developer_count",
]


class AssignmentStore:
    """Persists assignment runs to DuckDB for history and export."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            self._db_path = _DEFAULT_DB_PATH
        else:
            self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = duckdb.connect(str(self._db_path))
        self._ensure_tables()

    def _ensure_tables(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS assignment_runs (
                run_id                   VARCHAR PRIMARY KEY,
                created_at               TIMESTAMP NOT NULL,
                total_epics              INTEGER NOT NULL,
                total_story_points       INTEGER NOT NULL,
                avg_story_points_per_dev DOUBLE NOT NULL,
                high_confidence          INTEGER NOT NULL,
                medium_confidence        INTEGER NOT NULL,
                low_confidence           INTEGER NOT NULL,
                manual                   INTEGER NOT NULL,
                developer_count          INTEGER NOT NULL
            )
        """)
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS assignment_rows (
                run_id     VARCHAR NOT NULL,
                position   INTEGER NOT NULL,
                epic_id    VARCHAR NOT NULL,
                epic_title VARCHAR NOT NULL,
                category   VARCHAR NOT NULL,
                story_points     INTEGER NOT NULL,
                story_count      INTEGER NOT NULL,
                developer        VARCHAR NOT NULL,
                expertise        VARCHAR NOT NULL,
                experience_level VARCHAR NOT NULL,
                score            INTEGER NOT NULL,
                confidence       VARCHAR NOT NULL,
                PRIMARY KEY (run_id, position)
            )
        """)
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS workloads (
                run_id       VARCHAR NOT NULL,
                developer    VARCHAR NOT NULL,
                story_points INTEGER NOT NULL,
                PRIMARY KEY (run_id, developer)
            )
        """)

    def save_run(self, run_id: str, result: AssignmentResult) -> None:
        """Persist one assignment run in a single transaction."""
        now = datetime.now(timezone.utc)
        s = result.summary

        self._conn.begin()
        try:
            self._conn.execute(
                "INSERT INTO assignment_runs VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    run_id, now, s.total_epics, s.total_story_points,
                    s.avg_story_points_per_dev, s.high_confidence,
                    s.medium_confidence, s.low_confidence, s.manual,
                    len(result.workload_distribution),
                ],
            )
            for position, assignment in enumerate(result.assignments):
                row = to_row(assignment)
                self._conn.execute(
                    "INSERT INTO assignment_rows VALUES "
                    "(?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    [run_id, position, *dataclasses.astuple(row)],
                )
            for developer, points in result.workload_distribution.items():
                self._conn.execute(
                    "INSERT INTO workloads VALUES (?, ?, ?)",
                    [run_id, developer, points],
                )
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise
        logger.info("Stored assignment run %s (%d epics)", run_id, s.total_epics)

    def list_runs(self) -> list[dict]:
        """Return past runs ordered by created_at descending."""
        result = self._conn.execute(
            f"SELECT {', '.join(_RUN_COLUMNS)} FROM assignment_runs "  # noqa: S608
            "ORDER BY created_at DESC"
        ).fetchall()
        return [dict(zip(_RUN_COLUMNS, row)) for row in result]

    def get_run(self, run_id: str) -> dict | None:
        """Return the run row as dict, or None if not found."""
        result = self._conn.execute(
            "SELECT * FROM assignment_runs WHERE run_id = ?", [run_id]
        ).fetchone()
        if result is None:
            return None
        cols = [desc[0] for desc in self._conn.description]
        return dict(zip(cols, result))

    def get_rows(self, run_id: str) -> list[AssignmentRow]:
        """Flattened assignment rows of a run, in assignment order."""
        result = self._conn.execute(
            f"SELECT {', '.join(ROW_FIELDS)} FROM assignment_rows "  # noqa: S608
            "WHERE run_id = ? ORDER BY position",
            [run_id],
        ).fetchall()
        return [AssignmentRow(*row) for row in result]

    def get_workloads(self, run_id: str) -> dict[str, int]:
        result = self._conn.execute(
            "SELECT developer, story_points FROM workloads "
            "WHERE run_id = ? ORDER BY developer",
            [run_id],
        ).fetchall()
        return {developer: points for developer, points in result}

    def close(self) -> None:
        """Close the DuckDB connection."""
        self._conn.close()

"""
DuckDB ledger of the writes made by the commands.

Every non-dry-run create, update or delete is recorded in the
``migration_log`` table so that a run can be audited afterwards, e.g.::

    duckdb data/migration.duckdb "SELECT action, count(*) FROM migration_log GROUP BY 1"
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import Optional

import duckdb
import pandas as pd

TABLE_NAME = "migration_log"


class MigrationLedger:
    """
    Append-only record of writes.  ``path`` may be a file, ``:memory:``, or
    ``None`` to disable recording altogether.
    """

    def __init__(self, path: Optional[str] = "data/migration.duckdb") -> None:
        self.path = path
        self.con = None
        if path is None:
            return
        if path != ":memory:":
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        self.con = duckdb.connect(database=path, read_only=False)
        self.con.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                command VARCHAR,
                source VARCHAR,
                slug VARCHAR,
                object_id BIGINT,
                action VARCHAR,
                recorded_at TIMESTAMP
            )
            """
        )

    @property
    def enabled(self) -> bool:
        return self.con is not None

    def record(self, command: str, source: str, slug: str, object_id: Optional[int], action: str) -> None:
        if self.con is None:
            return
        self.con.execute(
            f"INSERT INTO {TABLE_NAME} VALUES (?, ?, ?, ?, ?, ?)",
            [command, source, slug, object_id, action, datetime.now()],
        )

    def to_frame(self, command: Optional[str] = None) -> pd.DataFrame:
        """Recorded rows, oldest first, optionally for one command only."""
        if self.con is None:
            return pd.DataFrame(columns=["command", "source", "slug", "object_id", "action", "recorded_at"])
        if command:
            return self.con.execute(
                f"SELECT * FROM {TABLE_NAME} WHERE command = ? ORDER BY recorded_at", [command]
            ).df()
        return self.con.execute(f"SELECT * FROM {TABLE_NAME} ORDER BY recorded_at").df()

    def close(self) -> None:
        if self.con is not None:
            self.con.close()
            self.con = None

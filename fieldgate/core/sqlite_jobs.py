"""SQLite-backed job store for single-host deployments."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Iterator

from .config import DEFAULT_JOB_LIST_LIMIT
from .errors import PersistenceFailure
from .jobs import clamp_limit, new_job_id, require_ticket_id
from .types import ValidationJob

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS validation_jobs (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    ticket_id TEXT NOT NULL,
    field_id TEXT NOT NULL,
    validator_id TEXT NOT NULL,
    finished_ts REAL NOT NULL,
    payload TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_validation_jobs_ticket
    ON validation_jobs (ticket_id, finished_ts DESC, seq DESC);
CREATE INDEX IF NOT EXISTS idx_validation_jobs_rule
    ON validation_jobs (ticket_id, field_id, validator_id, finished_ts DESC, seq DESC);
"""

DEFAULT_BUSY_TIMEOUT_MS = 5_000


class SqliteJobStore:
    """Each ``add`` is a single INSERT; rows are never updated."""

    def __init__(self, path: str | Path, *, busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS) -> None:
        self.path = Path(path)
        self.busy_timeout_ms = busy_timeout_ms
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(_SCHEMA_SQL)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.path, timeout=self.busy_timeout_ms / 1000)
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Cannot open job store at {self.path}: {exc}") from exc
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Job store error: {exc}") from exc
        finally:
            conn.close()

    def _insert(self, job: ValidationJob) -> str:
        ticket_id = require_ticket_id(job.ticket_id)
        job_id = new_job_id()
        stored = replace(job, id=job_id, ticket_id=ticket_id)
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO validation_jobs (id, ticket_id, field_id, validator_id, finished_ts, payload) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    job_id,
                    ticket_id,
                    stored.field_id,
                    stored.validator_id,
                    stored.finished_at.timestamp(),
                    json.dumps(stored.to_dict(), ensure_ascii=False),
                ),
            )
        return job_id

    def _select(self, ticket_id: str, limit: int) -> list[ValidationJob]:
        key = require_ticket_id(ticket_id)
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT payload FROM validation_jobs WHERE ticket_id = ? "
                "ORDER BY finished_ts DESC, seq DESC LIMIT ?",
                (key, clamp_limit(limit)),
            ).fetchall()
        return [ValidationJob.from_dict(json.loads(row[0])) for row in rows]

    def _select_latest(self, ticket_id: str, field_id: str, validator_id: str) -> ValidationJob | None:
        key = require_ticket_id(ticket_id)
        with self._connect() as conn:
            row = conn.execute(
                "SELECT payload FROM validation_jobs WHERE ticket_id = ? AND field_id = ? AND validator_id = ? "
                "ORDER BY finished_ts DESC, seq DESC LIMIT 1",
                (key, field_id, validator_id),
            ).fetchone()
        return ValidationJob.from_dict(json.loads(row[0])) if row else None

    async def add(self, job: ValidationJob) -> str:
        return await asyncio.to_thread(self._insert, job)

    async def list(self, ticket_id: str, limit: int = DEFAULT_JOB_LIST_LIMIT) -> list[ValidationJob]:
        return await asyncio.to_thread(self._select, ticket_id, limit)

    async def latest(self, ticket_id: str, field_id: str, validator_id: str) -> ValidationJob | None:
        return await asyncio.to_thread(self._select_latest, ticket_id, field_id, validator_id)


__all__ = ["SqliteJobStore"]

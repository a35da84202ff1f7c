"""Append-only storage of validation jobs, scoped per ticket."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field, replace
from typing import Protocol, runtime_checkable

from .config import DEFAULT_JOB_LIST_LIMIT
from .errors import InputError
from .types import ValidationJob

MAX_JOB_LIST_LIMIT = 200


@runtime_checkable
class JobStore(Protocol):
    async def add(self, job: ValidationJob) -> str: ...

    async def list(self, ticket_id: str, limit: int = DEFAULT_JOB_LIST_LIMIT) -> list[ValidationJob]: ...

    async def latest(self, ticket_id: str, field_id: str, validator_id: str) -> ValidationJob | None:
        """Most recent job for one (field, validator) pair, regardless of list limits."""
        ...


def new_job_id() -> str:
    return uuid.uuid4().hex


def require_ticket_id(ticket_id: str | None) -> str:
    normalized = str(ticket_id or "").strip()
    if not normalized:
        raise InputError("ticketId required")
    return normalized


def clamp_limit(limit: int | None) -> int:
    if limit is None or limit <= 0:
        return DEFAULT_JOB_LIST_LIMIT
    return min(int(limit), MAX_JOB_LIST_LIMIT)


@dataclass
class InMemoryJobStore:
    """Process-local job store.

    Jobs are kept per ticket in insertion order. Listing sorts by
    ``finished_at`` descending; equal timestamps list the later insert first.
    """

    _jobs: dict[str, list[tuple[int, ValidationJob]]] = field(default_factory=dict)
    _seq: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    async def add(self, job: ValidationJob) -> str:
        ticket_id = require_ticket_id(job.ticket_id)
        job_id = new_job_id()
        stored = replace(job, id=job_id, ticket_id=ticket_id)
        with self._lock:
            self._seq += 1
            self._jobs.setdefault(ticket_id, []).append((self._seq, stored))
        return job_id

    async def list(self, ticket_id: str, limit: int = DEFAULT_JOB_LIST_LIMIT) -> list[ValidationJob]:
        key = require_ticket_id(ticket_id)
        with self._lock:
            snapshot = tuple(self._jobs.get(key, ()))
        ordered = sorted(snapshot, key=lambda item: (item[1].finished_at, item[0]), reverse=True)
        return [job for _, job in ordered[: clamp_limit(limit)]]

    async def latest(self, ticket_id: str, field_id: str, validator_id: str) -> ValidationJob | None:
        key = require_ticket_id(ticket_id)
        with self._lock:
            matches = [
                item
                for item in self._jobs.get(key, ())
                if item[1].field_id == field_id and item[1].validator_id == validator_id
            ]
        if not matches:
            return None
        return max(matches, key=lambda item: (item[1].finished_at, item[0]))[1]


__all__ = [
    "InMemoryJobStore",
    "JobStore",
    "MAX_JOB_LIST_LIMIT",
    "clamp_limit",
    "new_job_id",
    "require_ticket_id",
]

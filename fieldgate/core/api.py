"""Stable public API facade for the Fieldgate validation engine."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .config import DEFAULT_JOB_LIST_LIMIT, CoreConfig, config_from_env
from .errors import InputError
from .jobs import InMemoryJobStore, JobStore, require_ticket_id
from .policy import EvaluatedResult, SubmitDecision, can_submit
from .ratelimit import InMemoryCounterStore, RateLimiter
from .registry import Registry, build_registry
from . import clock
from .runner import Runner
from .sqlite_jobs import SqliteJobStore
from .types import (
    FieldDefinition,
    FieldValidationRule,
    RanBy,
    ValidationJob,
    ValidationLevel,
    ValidationStatus,
    ValidatorId,
    ValidatorInfo,
    ValidatorInput,
    ValidatorResult,
    parse_links,
    parse_str_list,
)

NOT_YET_VALIDATED = "Not yet validated"


@dataclass
class Engine:
    registry: Registry
    store: JobStore
    runner: Runner
    limiter: RateLimiter


@dataclass(frozen=True)
class FieldEvaluation:
    field_id: str
    results: list[EvaluatedResult] = field(default_factory=list)
    decision: SubmitDecision = field(default_factory=lambda: SubmitDecision(allowed=True))

    def to_dict(self) -> dict[str, Any]:
        return {
            "fieldId": self.field_id,
            "results": [item.to_dict() for item in self.results],
            "decision": self.decision.to_dict(),
        }


def build_store(config: CoreConfig) -> JobStore:
    if config.job_store_path:
        return SqliteJobStore(config.job_store_path)
    return InMemoryJobStore()


def build_engine(config: CoreConfig | None = None) -> Engine:
    resolved = config or config_from_env()
    registry = build_registry(resolved)
    registry.seal()
    store = build_store(resolved)
    return Engine(
        registry=registry,
        store=store,
        runner=Runner.from_config(resolved, registry=registry, store=store),
        limiter=RateLimiter(
            store=InMemoryCounterStore(),
            max_requests=resolved.rate_limit_max,
            window_seconds=resolved.rate_limit_window_seconds,
        ),
    )


_engine: Engine | None = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = build_engine()
    return _engine


def set_engine(engine: Engine | None) -> None:
    global _engine
    _engine = engine


def list_validators(*, engine: Engine | None = None) -> list[ValidatorInfo]:
    return (engine or get_engine()).registry.list_validators()


async def run_validation(
    validator_id: ValidatorId | str,
    input: ValidatorInput,
    *,
    ticket_id: str | None = None,
    level: ValidationLevel | str = ValidationLevel.HARD,
    ran_by: RanBy | None = None,
    engine: Engine | None = None,
) -> ValidatorResult:
    """Run one check; record a job only when a ticket is given."""
    resolved = engine or get_engine()
    if not str(validator_id or "").strip() or not str(input.field_id or "").strip():
        raise InputError("validatorId and fieldId are required")
    if ticket_id is None:
        return await resolved.runner.execute(validator_id, input)
    return await resolved.runner.run(
        validator_id,
        input,
        ticket_id=ticket_id,
        level=level,
        ran_by=ran_by,
    )


async def evaluate_field(
    ticket_id: str,
    field_def: FieldDefinition,
    value: Any,
    *,
    context: dict[str, Any] | None = None,
    ran_by: RanBy | None = None,
    engine: Engine | None = None,
) -> FieldEvaluation:
    """Run every rule configured on a field, one job per rule."""
    resolved = engine or get_engine()
    ticket = require_ticket_id(ticket_id)
    input = ValidatorInput(
        field_id=field_def.id,
        field_label=field_def.label,
        value=value,
        context=dict(context or {}),
    )
    rules = list(field_def.validations)
    results = await asyncio.gather(
        *(
            resolved.runner.run(rule.validator_id, input, ticket_id=ticket, level=rule.level, ran_by=ran_by)
            for rule in rules
        )
    )
    evaluated = [EvaluatedResult(rule=rule, result=result) for rule, result in zip(rules, results)]
    return FieldEvaluation(field_id=field_def.id, results=evaluated, decision=can_submit(evaluated))


async def record_job(
    payload: dict[str, Any],
    *,
    ran_by: RanBy | None = None,
    engine: Engine | None = None,
) -> str:
    """Append a job built from an already-obtained result."""
    resolved = engine or get_engine()
    ticket = require_ticket_id(payload.get("ticketId"))
    field_id = str(payload.get("fieldId") or "").strip()
    if not field_id:
        raise InputError("fieldId required")
    if not payload.get("validatorId"):
        raise InputError("validatorId required")
    validator_id = ValidatorId.parse(payload["validatorId"])

    now = clock.utcnow()
    job = ValidationJob(
        ticket_id=ticket,
        field_id=field_id,
        field_label=payload.get("fieldLabel") or None,
        validator_id=validator_id.value,
        level=ValidationLevel.parse(payload.get("level") or ValidationLevel.HARD),
        status=ValidationStatus.parse(payload.get("status") or ValidationStatus.PENDING),
        summary=str(payload.get("summary") or ""),
        evidence=payload.get("evidence") if isinstance(payload.get("evidence"), dict) else None,
        links=parse_links(payload.get("links")),
        warnings=parse_str_list(payload.get("warnings")),
        errors=parse_str_list(payload.get("errors")),
        ran_by=ran_by or RanBy.from_dict(payload.get("ranBy")),
        started_at=now,
        finished_at=now,
    )
    return await resolved.store.add(job)


async def list_jobs(
    ticket_id: str,
    limit: int = DEFAULT_JOB_LIST_LIMIT,
    *,
    engine: Engine | None = None,
) -> list[ValidationJob]:
    return await (engine or get_engine()).store.list(require_ticket_id(ticket_id), limit)


async def latest_results(
    ticket_id: str,
    fields: Iterable[FieldDefinition],
    *,
    engine: Engine | None = None,
) -> list[EvaluatedResult]:
    """Pair every configured rule with its most recent recorded result.

    Each (field, validator) pair is looked up on its own, so a ticket's
    full history counts no matter how many jobs it holds. Rules that were
    never run are paired with a ``pending`` result.
    """
    resolved = engine or get_engine()
    ticket = require_ticket_id(ticket_id)
    pairs = [(field_def.id, rule) for field_def in fields for rule in field_def.validations]
    jobs = await asyncio.gather(
        *(resolved.store.latest(ticket, field_id, rule.validator_id.value) for field_id, rule in pairs)
    )

    evaluated: list[EvaluatedResult] = []
    for (_, rule), job in zip(pairs, jobs):
        result = (
            job.result()
            if job is not None
            else ValidatorResult(ValidationStatus.PENDING, NOT_YET_VALIDATED)
        )
        evaluated.append(EvaluatedResult(rule=rule, result=result))
    return evaluated


async def ticket_decision(
    ticket_id: str,
    fields: Iterable[FieldDefinition],
    *,
    engine: Engine | None = None,
) -> SubmitDecision:
    return can_submit(await latest_results(ticket_id, fields, engine=engine))


def evaluated_from_payload(items: Iterable[Any]) -> list[EvaluatedResult]:
    evaluated: list[EvaluatedResult] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict) or not isinstance(item.get("rule"), dict) or not isinstance(item.get("result"), dict):
            raise InputError(f"results[{index}] must have 'rule' and 'result' objects")
        evaluated.append(
            EvaluatedResult(
                rule=FieldValidationRule.from_dict(item["rule"]),
                result=ValidatorResult.from_dict(item["result"]),
            )
        )
    return evaluated


__all__ = [
    "Engine",
    "FieldEvaluation",
    "NOT_YET_VALIDATED",
    "build_engine",
    "build_store",
    "can_submit",
    "evaluate_field",
    "evaluated_from_payload",
    "get_engine",
    "latest_results",
    "list_jobs",
    "list_validators",
    "record_job",
    "run_validation",
    "set_engine",
    "ticket_decision",
]

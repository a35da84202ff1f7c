"""Executes validator checks and records every run as a job."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from . import clock
from .config import DEFAULT_VALIDATOR_TIMEOUT_SECONDS, CoreConfig
from .errors import PersistenceFailure, VendorExecutionFault
from .jobs import InMemoryJobStore, JobStore, require_ticket_id
from .registry import Registry, ValidatorCheck, get_registry
from .types import (
    RanBy,
    ValidationJob,
    ValidationLevel,
    ValidatorId,
    ValidatorInput,
    ValidatorResult,
    error,
)

logger = logging.getLogger(__name__)


def fault_to_result(fault: VendorExecutionFault) -> ValidatorResult:
    """Turn a captured execution fault into an ``error`` result."""
    return error(f'Validator "{fault.validator_id}" failed: {fault}', fault.cause)


@dataclass
class Runner:
    registry: Registry = field(default_factory=get_registry)
    store: JobStore = field(default_factory=InMemoryJobStore)
    timeout_seconds: float = DEFAULT_VALIDATOR_TIMEOUT_SECONDS

    @classmethod
    def from_config(cls, config: CoreConfig, *, registry: Registry, store: JobStore) -> Runner:
        return cls(registry=registry, store=store, timeout_seconds=config.validator_timeout_seconds)

    async def _invoke(self, validator_id: ValidatorId, check: ValidatorCheck, input: ValidatorInput) -> ValidatorResult:
        try:
            result = await asyncio.wait_for(check(input), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            fault = VendorExecutionFault(
                validator_id.value,
                TimeoutError(f"timed out after {self.timeout_seconds:g}s"),
            )
        except Exception as exc:
            fault = VendorExecutionFault(validator_id.value, exc)
        else:
            if isinstance(result, ValidatorResult):
                return result
            fault = VendorExecutionFault(
                validator_id.value,
                TypeError(f"check returned {type(result).__name__}, expected ValidatorResult"),
            )
        logger.warning(
            "Validator %s faulted on field %s: %s",
            validator_id.value,
            input.field_id,
            fault,
        )
        return fault_to_result(fault)

    async def execute(self, validator_id: ValidatorId | str, input: ValidatorInput) -> ValidatorResult:
        """Run a check without recording a job."""
        key = ValidatorId.parse(validator_id)
        check = self.registry.resolve(key)
        return await self._invoke(key, check, input)

    async def run(
        self,
        validator_id: ValidatorId | str,
        input: ValidatorInput,
        *,
        ticket_id: str,
        level: ValidationLevel | str = ValidationLevel.HARD,
        ran_by: RanBy | None = None,
    ) -> ValidatorResult:
        key = ValidatorId.parse(validator_id)
        check = self.registry.resolve(key)
        ticket = require_ticket_id(ticket_id)
        severity = ValidationLevel.parse(level)

        started_at = clock.utcnow()
        result = await self._invoke(key, check, input)
        finished_at = max(clock.utcnow(), started_at)

        job = ValidationJob.from_result(
            ticket_id=ticket,
            validator_id=key.value,
            level=severity,
            input=input,
            result=result,
            started_at=started_at,
            finished_at=finished_at,
            ran_by=ran_by,
        )
        try:
            job_id = await self.store.add(job)
        except PersistenceFailure:
            logger.exception("Failed to record validation job for ticket %s", ticket)
            raise
        except Exception as exc:
            logger.exception("Failed to record validation job for ticket %s", ticket)
            raise PersistenceFailure(f"Could not record validation job: {exc}") from exc

        logger.debug(
            "Recorded job %s: ticket=%s field=%s validator=%s status=%s",
            job_id,
            ticket,
            input.field_id,
            key.value,
            result.status.value,
        )
        return result


__all__ = ["Runner", "fault_to_result"]

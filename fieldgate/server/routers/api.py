"""JSON API routes: /health, /api/v1/*."""


import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ...core import api as core_api

from ...core.api import Engine
from ...core.jobs import MAX_JOB_LIST_LIMIT
from ...core.types import FieldDefinition, RanBy, ValidatorInput
from ..config import get_settings
from ..dependencies import caller_identity, enforce_rate_limit, get_engine
from ..helpers.errors import engine_errors
from ..logging import result_to_loggable
from ..schemas import (
	CanSubmitRequest,
	RecordJobRequest,
	RunValidatorRequest,
	TicketCanSubmitRequest,
	ValidateFieldRequest,
)

settings = get_settings()
logger = logging.getLogger("uvicorn.error")
router = APIRouter()
v1 = APIRouter(prefix="/api/v1", dependencies=[Depends(enforce_rate_limit)])


def _log_result(message: str, payload: dict) -> None:
	logger.debug("%s:\n%s", message, json.dumps(result_to_loggable(payload), ensure_ascii=False, indent=2))


@router.get("/health")
def health() -> dict:
	return {"status": "ok", "app": settings.app_name}


@v1.get("/validators")
def list_validators(engine: Engine = Depends(get_engine)) -> dict:
	return {"validators": [info.to_dict() for info in core_api.list_validators(engine=engine)]}


@v1.post("/validators/run")
async def run_validator(
	payload: RunValidatorRequest,
	engine: Engine = Depends(get_engine),
	ran_by: RanBy | None = Depends(caller_identity),
) -> dict:
	if not payload.validatorId or not payload.fieldId:
		raise HTTPException(status_code=400, detail="validatorId and fieldId are required")

	validator_input = ValidatorInput(
		field_id=payload.fieldId,
		field_label=payload.fieldLabel,
		value=payload.value,
		context=dict(payload.context or {}),
	)
	with engine_errors():
		result = await core_api.run_validation(
			payload.validatorId,
			validator_input,
			ticket_id=payload.ticketId or None,
			level=payload.level,
			ran_by=ran_by,
			engine=engine,
		)
	body = result.to_dict()
	_log_result(f"Validator {payload.validatorId} result", {"ticketId": payload.ticketId, **body})
	return {"result": body}


@v1.post("/fields/validate")
async def validate_field(
	payload: ValidateFieldRequest,
	engine: Engine = Depends(get_engine),
	ran_by: RanBy | None = Depends(caller_identity),
) -> dict:
	if not payload.ticketId:
		raise HTTPException(status_code=400, detail="ticketId required")

	with engine_errors():
		field_def = FieldDefinition.from_dict(payload.field.model_dump())
		evaluation = await core_api.evaluate_field(
			payload.ticketId,
			field_def,
			payload.value,
			context=payload.context,
			ran_by=ran_by,
			engine=engine,
		)
	for item in evaluation.results:
		_log_result(
			f"Field {field_def.id} result",
			{"ticketId": payload.ticketId, "fieldId": field_def.id, **item.to_dict()["result"]},
		)
	return evaluation.to_dict()


@v1.post("/validation-jobs", status_code=201)
async def record_validation_job(
	payload: RecordJobRequest,
	engine: Engine = Depends(get_engine),
	ran_by: RanBy | None = Depends(caller_identity),
) -> dict:
	if not payload.ticketId:
		raise HTTPException(status_code=400, detail="ticketId required")

	with engine_errors():
		job_id = await core_api.record_job(
			payload.model_dump(exclude_none=True),
			ran_by=ran_by,
			engine=engine,
		)
	return {"id": job_id}


@v1.get("/validation-jobs")
async def list_validation_jobs(
	ticket_id: str | None = Query(default=None, alias="ticketId"),
	limit: int = Query(default=50, ge=1, le=MAX_JOB_LIST_LIMIT),
	engine: Engine = Depends(get_engine),
) -> dict:
	if not ticket_id:
		raise HTTPException(status_code=400, detail="ticketId required")

	with engine_errors():
		jobs = await core_api.list_jobs(ticket_id, limit, engine=engine)
	return {"items": [job.to_dict() for job in jobs]}


@v1.post("/policy/can-submit")
def can_submit(payload: CanSubmitRequest) -> dict:
	with engine_errors():
		evaluated = core_api.evaluated_from_payload(item.model_dump() for item in payload.results)
		decision = core_api.can_submit(evaluated)
	return decision.to_dict()


@v1.post("/tickets/{ticket_id}/can-submit")
async def ticket_can_submit(
	ticket_id: str,
	payload: TicketCanSubmitRequest,
	engine: Engine = Depends(get_engine),
) -> dict:
	with engine_errors():
		fields = [FieldDefinition.from_dict(item.model_dump()) for item in payload.fields]
		decision = await core_api.ticket_decision(ticket_id, fields, engine=engine)
	return decision.to_dict()


router.include_router(v1)

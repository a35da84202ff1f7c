from typing import Any, Literal

from pydantic import BaseModel, Field


class LinkPayload(BaseModel):
    label: str
    url: str


class RanByPayload(BaseModel):
    uid: str | None = None
    role: str | None = None


class RunValidatorRequest(BaseModel):
    validatorId: str | None = Field(default=None, examples=["curp.lookup"])
    fieldId: str | None = Field(default=None, examples=["curp"])
    fieldLabel: str = Field(default="")
    value: Any = None
    context: dict[str, Any] | None = None
    ticketId: str | None = Field(
        default=None,
        description="When set, the run is recorded as a validation job for this ticket.",
    )
    level: Literal["hard", "soft"] = Field(default="hard")


class RecordJobRequest(BaseModel):
    ticketId: str | None = None
    fieldId: str | None = None
    fieldLabel: str | None = None
    validatorId: str | None = None
    level: Literal["hard", "soft"] = Field(default="hard")
    status: Literal["pending", "success", "fail", "error"] = Field(default="pending")
    summary: str = Field(default="")
    evidence: dict[str, Any] | None = None
    links: list[LinkPayload] | None = None
    warnings: list[str] | None = None
    errors: list[str] | None = None
    ranBy: RanByPayload | None = None


class ValidationRulePayload(BaseModel):
    validatorId: str
    level: Literal["hard", "soft"] = Field(default="hard")
    mapping: dict[str, str] | None = None


class FieldPayload(BaseModel):
    id: str
    label: str = Field(default="")
    type: Literal["text", "number", "date", "select", "composite"] = Field(default="text")
    required: bool = Field(default=False)
    compositeOf: list[str] = Field(default_factory=list)
    validations: list[ValidationRulePayload] = Field(default_factory=list)


class ValidateFieldRequest(BaseModel):
    ticketId: str | None = None
    field: FieldPayload
    value: Any = None
    context: dict[str, Any] | None = None


class EvaluatedPayload(BaseModel):
    rule: dict[str, Any]
    result: dict[str, Any]


class CanSubmitRequest(BaseModel):
    results: list[EvaluatedPayload] = Field(default_factory=list)


class TicketCanSubmitRequest(BaseModel):
    fields: list[FieldPayload] = Field(default_factory=list)

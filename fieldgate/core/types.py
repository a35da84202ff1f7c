"""Record types shared by the registry, runner, job store and policy."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from .errors import InputError, UnknownValidator

FieldType = Literal["text", "number", "date", "select", "composite"]


class ValidatorId(str, Enum):
    NAMESCAN_PEP_SCREENING = "namescan.pep_screening"
    CURP_LOOKUP = "curp.lookup"
    RFC_SAT_LOOKUP = "rfc_sat.lookup"
    ZAPSIGN_DOC_SIGNATURE = "zapsign.doc_signature"

    @classmethod
    def parse(cls, value: ValidatorId | str) -> ValidatorId:
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise UnknownValidator(value) from None


class ValidationLevel(str, Enum):
    HARD = "hard"
    SOFT = "soft"

    @classmethod
    def parse(cls, value: ValidationLevel | str | None) -> ValidationLevel:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            raise InputError(f"level must be 'hard' or 'soft', got {value!r}") from None


class ValidationStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"

    @classmethod
    def parse(cls, value: ValidationStatus | str | None) -> ValidationStatus:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            raise InputError(f"Unsupported validation status: {value!r}") from None


@dataclass(frozen=True)
class ValidatorLink:
    label: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "url": self.url}


@dataclass(frozen=True)
class RanBy:
    uid: str | None = None
    role: str | None = None

    def to_dict(self) -> dict[str, str]:
        data: dict[str, str] = {}
        if self.uid:
            data["uid"] = self.uid
        if self.role:
            data["role"] = self.role
        return data

    @classmethod
    def from_dict(cls, payload: Any) -> RanBy | None:
        if not isinstance(payload, dict):
            return None
        uid = payload.get("uid")
        role = payload.get("role")
        if not uid and not role:
            return None
        return cls(uid=str(uid) if uid else None, role=str(role) if role else None)


@dataclass(frozen=True)
class ValidatorInput:
    field_id: str
    field_label: str = ""
    value: Any = None
    context: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidatorResult:
    status: ValidationStatus
    summary: str
    evidence: dict[str, Any] | None = None
    links: list[ValidatorLink] | None = None
    warnings: list[str] | None = None
    errors: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value, "summary": self.summary}
        if self.evidence is not None:
            data["evidence"] = self.evidence
        if self.links is not None:
            data["links"] = [link.to_dict() for link in self.links]
        if self.warnings is not None:
            data["warnings"] = list(self.warnings)
        if self.errors is not None:
            data["errors"] = list(self.errors)
        return data

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> ValidatorResult:
        return cls(
            status=ValidationStatus.parse(payload.get("status")),
            summary=str(payload.get("summary") or ""),
            evidence=payload.get("evidence") if isinstance(payload.get("evidence"), dict) else None,
            links=parse_links(payload.get("links")),
            warnings=parse_str_list(payload.get("warnings")),
            errors=parse_str_list(payload.get("errors")),
        )


def success(
    summary: str,
    evidence: dict[str, Any] | None = None,
    links: list[ValidatorLink] | None = None,
) -> ValidatorResult:
    return ValidatorResult(ValidationStatus.SUCCESS, summary, evidence=evidence, links=links)


def failure(
    summary: str,
    evidence: dict[str, Any] | None = None,
    warnings: list[str] | None = None,
) -> ValidatorResult:
    return ValidatorResult(ValidationStatus.FAIL, summary, evidence=evidence, warnings=warnings)


def error(summary: str, cause: object = None) -> ValidatorResult:
    detail = str(cause if cause is not None else "").strip()
    return ValidatorResult(ValidationStatus.ERROR, summary, errors=[detail] if detail else [])


@dataclass(frozen=True)
class ValidationJob:
    """One immutable record of a validator run."""

    ticket_id: str
    field_id: str
    validator_id: str
    level: ValidationLevel
    status: ValidationStatus
    summary: str
    started_at: datetime
    finished_at: datetime
    field_label: str | None = None
    evidence: dict[str, Any] | None = None
    links: list[ValidatorLink] | None = None
    warnings: list[str] | None = None
    errors: list[str] | None = None
    ran_by: RanBy | None = None
    id: str | None = None

    def __post_init__(self) -> None:
        if self.started_at > self.finished_at:
            raise InputError("startedAt must not be later than finishedAt")

    @classmethod
    def from_result(
        cls,
        *,
        ticket_id: str,
        validator_id: str,
        level: ValidationLevel,
        input: ValidatorInput,
        result: ValidatorResult,
        started_at: datetime,
        finished_at: datetime,
        ran_by: RanBy | None = None,
    ) -> ValidationJob:
        return cls(
            ticket_id=ticket_id,
            field_id=input.field_id,
            field_label=input.field_label or None,
            validator_id=validator_id,
            level=level,
            status=result.status,
            summary=result.summary,
            evidence=result.evidence,
            links=result.links,
            warnings=result.warnings,
            errors=result.errors,
            ran_by=ran_by,
            started_at=started_at,
            finished_at=finished_at,
        )

    def result(self) -> ValidatorResult:
        return ValidatorResult(
            status=self.status,
            summary=self.summary,
            evidence=self.evidence,
            links=self.links,
            warnings=self.warnings,
            errors=self.errors,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "ticketId": self.ticket_id,
            "fieldId": self.field_id,
            "validatorId": self.validator_id,
            "level": self.level.value,
            "status": self.status.value,
            "summary": self.summary,
            "startedAt": self.started_at.isoformat(),
            "finishedAt": self.finished_at.isoformat(),
        }
        if self.field_label:
            data["fieldLabel"] = self.field_label
        for key, value in self.result().to_dict().items():
            if key not in data:
                data[key] = value
        if self.ran_by is not None:
            data["ranBy"] = self.ran_by.to_dict()
        return data

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> ValidationJob:
        return cls(
            id=payload.get("id"),
            ticket_id=str(payload["ticketId"]),
            field_id=str(payload["fieldId"]),
            field_label=payload.get("fieldLabel"),
            validator_id=str(payload["validatorId"]),
            level=ValidationLevel.parse(payload.get("level")),
            status=ValidationStatus.parse(payload.get("status")),
            summary=str(payload.get("summary") or ""),
            evidence=payload.get("evidence"),
            links=parse_links(payload.get("links")),
            warnings=parse_str_list(payload.get("warnings")),
            errors=parse_str_list(payload.get("errors")),
            ran_by=RanBy.from_dict(payload.get("ranBy")),
            started_at=datetime.fromisoformat(payload["startedAt"]),
            finished_at=datetime.fromisoformat(payload["finishedAt"]),
        )


@dataclass(frozen=True)
class FieldValidationRule:
    validator_id: ValidatorId
    level: ValidationLevel = ValidationLevel.HARD
    # Declarative parameter mapping, e.g. {"country": "$ticket.country"}.
    # Evaluated by callers, never inside the engine.
    mapping: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"validatorId": self.validator_id.value, "level": self.level.value}
        if self.mapping is not None:
            data["mapping"] = dict(self.mapping)
        return data

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> FieldValidationRule:
        mapping = payload.get("mapping")
        return cls(
            validator_id=ValidatorId.parse(payload.get("validatorId", "")),
            level=ValidationLevel.parse(payload.get("level") or ValidationLevel.HARD),
            mapping={str(k): str(v) for k, v in mapping.items()} if isinstance(mapping, dict) else None,
        )


@dataclass(frozen=True)
class FieldDefinition:
    id: str
    label: str
    type: FieldType = "text"
    required: bool = False
    composite_of: list[str] = field(default_factory=list)
    validations: list[FieldValidationRule] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> FieldDefinition:
        field_id = str(payload.get("id") or "").strip()
        if not field_id:
            raise InputError("field.id is required")
        return cls(
            id=field_id,
            label=str(payload.get("label") or field_id),
            type=payload.get("type") or "text",
            required=bool(payload.get("required", False)),
            composite_of=[str(item) for item in payload.get("compositeOf") or []],
            validations=[
                FieldValidationRule.from_dict(rule)
                for rule in payload.get("validations") or []
                if isinstance(rule, dict)
            ],
        )


@dataclass(frozen=True)
class ValidatorInfo:
    id: ValidatorId
    label: str
    vendor: str
    docs_url: str
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id.value,
            "label": self.label,
            "vendor": self.vendor,
            "docsUrl": self.docs_url,
            "enabled": self.enabled,
        }


def parse_links(value: Any) -> list[ValidatorLink] | None:
    if not isinstance(value, list):
        return None
    links: list[ValidatorLink] = []
    for item in value:
        if isinstance(item, ValidatorLink):
            links.append(item)
        elif isinstance(item, dict) and item.get("url"):
            links.append(ValidatorLink(label=str(item.get("label") or item["url"]), url=str(item["url"])))
    return links


def parse_str_list(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [str(item) for item in value]


__all__ = [
    "FieldDefinition",
    "FieldValidationRule",
    "RanBy",
    "ValidationJob",
    "ValidationLevel",
    "ValidationStatus",
    "ValidatorId",
    "ValidatorInfo",
    "ValidatorInput",
    "ValidatorLink",
    "ValidatorResult",
    "parse_links",
    "parse_str_list",
    "error",
    "failure",
    "success",
]

"""Submission gating over evaluated (rule, result) pairs."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .types import FieldValidationRule, ValidationLevel, ValidationStatus, ValidatorResult

DEFAULT_BLOCK_REASON = "Hard validation failed"

_BLOCKING_STATUSES = frozenset({ValidationStatus.FAIL, ValidationStatus.ERROR})


@dataclass(frozen=True)
class EvaluatedResult:
    rule: FieldValidationRule
    result: ValidatorResult

    def to_dict(self) -> dict[str, Any]:
        return {"rule": self.rule.to_dict(), "result": self.result.to_dict()}


@dataclass(frozen=True)
class SubmitDecision:
    allowed: bool
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"allowed": self.allowed}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


def is_blocking(rule: FieldValidationRule, result: ValidatorResult) -> bool:
    return rule.level is ValidationLevel.HARD and result.status in _BLOCKING_STATUSES


def can_submit(evaluated: Iterable[EvaluatedResult | tuple[FieldValidationRule, ValidatorResult]]) -> SubmitDecision:
    """Block on the first hard rule whose result failed or errored.

    Only the first blocking pair in sequence order is reported. Soft rules
    never block.
    """
    for item in evaluated:
        rule, result = (item.rule, item.result) if isinstance(item, EvaluatedResult) else item
        if is_blocking(rule, result):
            return SubmitDecision(allowed=False, reason=result.summary or DEFAULT_BLOCK_REASON)
    return SubmitDecision(allowed=True)


__all__ = [
    "DEFAULT_BLOCK_REASON",
    "EvaluatedResult",
    "SubmitDecision",
    "can_submit",
    "is_blocking",
]

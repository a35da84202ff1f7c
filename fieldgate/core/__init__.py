"""Core engine API.

The core layer is framework-agnostic and safe to import from scripts, tests,
CLI commands, and web frontends.
"""

from typing import Any

_LAZY_EXPORTS: dict[str, tuple[str, str]] = {
    "CoreConfig": ("fieldgate.core.config", "CoreConfig"),
    "Engine": ("fieldgate.core.api", "Engine"),
    "EvaluatedResult": ("fieldgate.core.policy", "EvaluatedResult"),
    "FieldDefinition": ("fieldgate.core.types", "FieldDefinition"),
    "FieldEvaluation": ("fieldgate.core.api", "FieldEvaluation"),
    "FieldValidationRule": ("fieldgate.core.types", "FieldValidationRule"),
    "InMemoryJobStore": ("fieldgate.core.jobs", "InMemoryJobStore"),
    "InputError": ("fieldgate.core.errors", "InputError"),
    "JobStore": ("fieldgate.core.jobs", "JobStore"),
    "PersistenceFailure": ("fieldgate.core.errors", "PersistenceFailure"),
    "RanBy": ("fieldgate.core.types", "RanBy"),
    "RateLimitExceeded": ("fieldgate.core.errors", "RateLimitExceeded"),
    "RateLimiter": ("fieldgate.core.ratelimit", "RateLimiter"),
    "Registry": ("fieldgate.core.registry", "Registry"),
    "Runner": ("fieldgate.core.runner", "Runner"),
    "SqliteJobStore": ("fieldgate.core.sqlite_jobs", "SqliteJobStore"),
    "SubmitDecision": ("fieldgate.core.policy", "SubmitDecision"),
    "UnknownValidator": ("fieldgate.core.errors", "UnknownValidator"),
    "ValidationJob": ("fieldgate.core.types", "ValidationJob"),
    "ValidationLevel": ("fieldgate.core.types", "ValidationLevel"),
    "ValidationStatus": ("fieldgate.core.types", "ValidationStatus"),
    "ValidatorId": ("fieldgate.core.types", "ValidatorId"),
    "ValidatorInput": ("fieldgate.core.types", "ValidatorInput"),
    "ValidatorResult": ("fieldgate.core.types", "ValidatorResult"),
    "build_engine": ("fieldgate.core.api", "build_engine"),
    "can_submit": ("fieldgate.core.policy", "can_submit"),
    "config_from_env": ("fieldgate.core.config", "config_from_env"),
    "evaluate_field": ("fieldgate.core.api", "evaluate_field"),
    "get_engine": ("fieldgate.core.api", "get_engine"),
    "list_jobs": ("fieldgate.core.api", "list_jobs"),
    "list_validators": ("fieldgate.core.api", "list_validators"),
    "record_job": ("fieldgate.core.api", "record_job"),
    "register_validator": ("fieldgate.core.registry", "register_validator"),
    "run_validation": ("fieldgate.core.api", "run_validation"),
    "ticket_decision": ("fieldgate.core.api", "ticket_decision"),
}

__all__ = sorted(_LAZY_EXPORTS)


def __getattr__(name: str) -> Any:
    target = _LAZY_EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attribute_name = target
    module = __import__(module_name, fromlist=[attribute_name])
    value = getattr(module, attribute_name)
    globals()[name] = value
    return value

"""Public package entrypoint for the Fieldgate validation engine.

This package provides a stable import surface for running field validators,
recording their jobs, and gating ticket submission, plus optional frontend
adapters (CLI and FastAPI server).
"""

from importlib.metadata import PackageNotFoundError, version
from typing import Any

_LAZY_EXPORTS: dict[str, tuple[str, str]] = {
    "ValidatorId": ("fieldgate.core", "ValidatorId"),
    "app": ("fieldgate.server.main", "app"),
    "can_submit": ("fieldgate.core", "can_submit"),
    "create_app": ("fieldgate.server.main", "create_app"),
    "evaluate_field": ("fieldgate.core", "evaluate_field"),
    "list_jobs": ("fieldgate.core", "list_jobs"),
    "list_validators": ("fieldgate.core", "list_validators"),
    "record_job": ("fieldgate.core", "record_job"),
    "run_validation": ("fieldgate.core", "run_validation"),
}

try:
    __version__ = version("fieldgate")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "ValidatorId",
    "__version__",
    "app",
    "can_submit",
    "create_app",
    "evaluate_field",
    "list_jobs",
    "list_validators",
    "record_job",
    "run_validation",
]


def __getattr__(name: str) -> Any:
    target = _LAZY_EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attribute_name = target
    module = __import__(module_name, fromlist=[attribute_name])
    value = getattr(module, attribute_name)
    globals()[name] = value
    return value

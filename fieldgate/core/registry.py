"""Registry binding each known validator id to an executable check."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from .config import CoreConfig, config_from_env
from .errors import UnknownValidator
from .types import ValidatorId, ValidatorInfo, ValidatorInput, ValidatorResult
from .validators import BUILTIN_CATALOG, builtin_checks, gateway_from_settings


@runtime_checkable
class ValidatorCheck(Protocol):
    async def __call__(self, input: ValidatorInput) -> ValidatorResult: ...


@dataclass
class Registry:
    checks: dict[ValidatorId, ValidatorCheck] = field(default_factory=dict)
    catalog: dict[ValidatorId, ValidatorInfo] = field(default_factory=dict)
    sealed: bool = False

    def register(
        self,
        validator_id: ValidatorId | str,
        check: ValidatorCheck,
        info: ValidatorInfo | None = None,
    ) -> None:
        if self.sealed:
            raise RuntimeError("Validator registry is sealed; register checks at startup")
        key = ValidatorId.parse(validator_id)
        self.checks[key] = check
        if info is not None:
            self.catalog[key] = info
        elif key in BUILTIN_CATALOG and key not in self.catalog:
            self.catalog[key] = BUILTIN_CATALOG[key]

    def resolve(self, validator_id: ValidatorId | str) -> ValidatorCheck:
        key = ValidatorId.parse(validator_id)
        check = self.checks.get(key)
        if check is None:
            raise UnknownValidator(validator_id)
        return check

    def missing(self) -> list[ValidatorId]:
        return [member for member in ValidatorId if member not in self.checks]

    def seal(self) -> None:
        unbound = self.missing()
        if unbound:
            names = ", ".join(member.value for member in unbound)
            raise RuntimeError(f"No check registered for: {names}")
        self.sealed = True

    def list_validators(self) -> list[ValidatorInfo]:
        return [self.catalog[key] for key in ValidatorId if key in self.checks and key in self.catalog]


def build_registry(config: CoreConfig | None = None) -> Registry:
    resolved = config or config_from_env()
    gateway = gateway_from_settings(
        resolved.gateway_url,
        resolved.gateway_token,
        resolved.validator_timeout_seconds,
    )
    registry = Registry()
    for key, check in builtin_checks(gateway).items():
        registry.register(key, check, BUILTIN_CATALOG[key])
    return registry


_registry: Registry | None = None


def get_registry() -> Registry:
    global _registry
    if _registry is None:
        _registry = build_registry()
    return _registry


def set_registry(registry: Registry | None) -> None:
    global _registry
    _registry = registry


def register_validator(
    validator_id: ValidatorId | str,
    check: ValidatorCheck,
    info: ValidatorInfo | None = None,
) -> None:
    get_registry().register(validator_id, check, info)


def resolve(validator_id: ValidatorId | str) -> ValidatorCheck:
    return get_registry().resolve(validator_id)


def list_validators() -> list[ValidatorInfo]:
    return get_registry().list_validators()


__all__ = [
    "Registry",
    "ValidatorCheck",
    "build_registry",
    "get_registry",
    "list_validators",
    "register_validator",
    "resolve",
    "set_registry",
]

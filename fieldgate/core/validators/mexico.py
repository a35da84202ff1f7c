"""Mexican national-ID (CURP) and tax-ID (RFC / SAT) checks.

Both checks validate the identifier format locally. A format match does not
prove the identifier exists; that needs the official registry, reached
through the gateway when one is configured.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..types import ValidatorId, ValidatorInput, ValidatorResult, failure, success
from .gateway import Gateway

CURP_RE = re.compile(r"^[A-Z]{4}\d{6}[A-Z]{6}\d{2}$")
RFC_RE = re.compile(r"^[A-ZÑ&]{3,4}\d{6}[A-Z0-9]{3}$")


def _normalized(value: object) -> str:
    return str(value if value is not None else "").strip().upper()


@dataclass(frozen=True)
class CurpLookup:
    validator_id = ValidatorId.CURP_LOOKUP

    gateway: Gateway | None = None

    async def __call__(self, input: ValidatorInput) -> ValidatorResult:
        curp = _normalized(input.value)
        if not CURP_RE.match(curp):
            return failure("Invalid CURP format", {"curp": curp}, ["CURP pattern does not match"])
        if self.gateway is not None:
            return await self.gateway.acall(self.validator_id.value, input)
        return success("CURP format is valid; official registry check not configured", {"curp": curp})


@dataclass(frozen=True)
class RfcSatLookup:
    validator_id = ValidatorId.RFC_SAT_LOOKUP

    gateway: Gateway | None = None

    async def __call__(self, input: ValidatorInput) -> ValidatorResult:
        rfc = _normalized(input.value)
        if not RFC_RE.match(rfc):
            return failure("Invalid RFC format", {"rfc": rfc}, ["RFC pattern does not match"])
        if self.gateway is not None:
            return await self.gateway.acall(self.validator_id.value, input)
        return success("RFC format is valid; SAT verification not configured", {"rfc": rfc})


__all__ = ["CURP_RE", "CurpLookup", "RFC_RE", "RfcSatLookup"]

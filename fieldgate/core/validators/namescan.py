"""NameScan PEP / watchlist screening."""

from __future__ import annotations

from dataclasses import dataclass

from ..types import ValidatorId, ValidatorInput, ValidatorLink, ValidatorResult, failure, success
from .gateway import Gateway

NAMESCAN_URL = "https://www.namescan.io"


@dataclass(frozen=True)
class NameScanPepScreening:
    validator_id = ValidatorId.NAMESCAN_PEP_SCREENING

    gateway: Gateway | None = None

    async def __call__(self, input: ValidatorInput) -> ValidatorResult:
        name = str(input.value if input.value is not None else "").strip()
        if not name:
            return failure("Name missing for screening")
        if self.gateway is not None:
            return await self.gateway.acall(self.validator_id.value, input)
        return success(
            f'No matches found for "{name}"',
            {"matches": []},
            [ValidatorLink(label="NameScan", url=NAMESCAN_URL)],
        )


__all__ = ["NAMESCAN_URL", "NameScanPepScreening"]

"""ZapSign document-signature status."""

from __future__ import annotations

from dataclasses import dataclass

from ..types import ValidatorId, ValidatorInput, ValidatorResult, failure, success
from .gateway import Gateway


@dataclass(frozen=True)
class ZapSignDocSignature:
    validator_id = ValidatorId.ZAPSIGN_DOC_SIGNATURE

    gateway: Gateway | None = None

    async def __call__(self, input: ValidatorInput) -> ValidatorResult:
        document_id = str(input.value if input.value is not None else "").strip()
        if not document_id:
            return failure("ZapSign: document id is missing")
        if self.gateway is not None:
            return await self.gateway.acall(self.validator_id.value, input)
        return success("Document signed", {"documentId": document_id, "status": "signed"})


__all__ = ["ZapSignDocSignature"]

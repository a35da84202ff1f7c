"""Built-in vendor checks."""

from __future__ import annotations

from ..types import ValidatorId, ValidatorInfo
from .gateway import Gateway, gateway_from_settings
from .mexico import CurpLookup, RfcSatLookup
from .namescan import NameScanPepScreening
from .zapsign import ZapSignDocSignature

BUILTIN_CATALOG: dict[ValidatorId, ValidatorInfo] = {
    ValidatorId.NAMESCAN_PEP_SCREENING: ValidatorInfo(
        id=ValidatorId.NAMESCAN_PEP_SCREENING,
        label="NameScan - PEP/Watchlists",
        vendor="NameScan",
        docs_url="https://api.namescan.io/doc/index.html",
    ),
    ValidatorId.CURP_LOOKUP: ValidatorInfo(
        id=ValidatorId.CURP_LOOKUP,
        label="CURP (MX) - Verification",
        vendor="MX-Gob",
        docs_url="https://www.gob.mx/curp/",
    ),
    ValidatorId.RFC_SAT_LOOKUP: ValidatorInfo(
        id=ValidatorId.RFC_SAT_LOOKUP,
        label="RFC SAT (MX) - Verification",
        vendor="SAT",
        docs_url="https://www.sat.gob.mx/",
    ),
    ValidatorId.ZAPSIGN_DOC_SIGNATURE: ValidatorInfo(
        id=ValidatorId.ZAPSIGN_DOC_SIGNATURE,
        label="ZapSign - Signature status",
        vendor="ZapSign",
        docs_url="https://docs.zapsign.com.br/",
    ),
}


def builtin_checks(gateway: Gateway | None = None) -> dict:
    return {
        ValidatorId.NAMESCAN_PEP_SCREENING: NameScanPepScreening(gateway=gateway),
        ValidatorId.CURP_LOOKUP: CurpLookup(gateway=gateway),
        ValidatorId.RFC_SAT_LOOKUP: RfcSatLookup(gateway=gateway),
        ValidatorId.ZAPSIGN_DOC_SIGNATURE: ZapSignDocSignature(gateway=gateway),
    }


__all__ = [
    "BUILTIN_CATALOG",
    "CurpLookup",
    "Gateway",
    "NameScanPepScreening",
    "RfcSatLookup",
    "ZapSignDocSignature",
    "builtin_checks",
    "gateway_from_settings",
]

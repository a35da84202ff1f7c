from typing import Any

from ..config import get_settings

_DEFAULT_SUMMARY_LIMITS = {
    "low": 80,
    "medium": 160,
    "high": 240,
}
_SUPPORTED_VERBOSITIES = {"low", "medium", "high", "extrahigh"}


def _truncate_summary(value: str | None, *, limit: int) -> str:
    text = str(value or "").strip()
    if len(text) <= limit:
        return text
    return f"{text[:limit].rstrip()}... [truncated]"


def _normalize_verbosity(verbosity: str) -> str:
    normalized = str(verbosity or "").strip().lower()
    if normalized in _SUPPORTED_VERBOSITIES:
        return normalized
    return "medium"


def result_to_loggable(payload: dict[str, Any], *, verbosity: str | None = None) -> dict[str, Any]:
    """Shape a result or job payload for debug logs.

    ``low`` keeps status and a short summary, ``medium`` adds evidence keys
    and link labels, ``high`` keeps evidence values, ``extrahigh`` logs the
    payload untouched.
    """
    level = _normalize_verbosity(verbosity if verbosity is not None else get_settings().log_verbosity)
    if level == "extrahigh":
        return dict(payload)

    data: dict[str, Any] = {
        key: payload[key]
        for key in ("ticketId", "fieldId", "validatorId", "level", "status")
        if key in payload
    }
    data["summary"] = _truncate_summary(payload.get("summary"), limit=_DEFAULT_SUMMARY_LIMITS[level])
    if level == "low":
        return data

    evidence = payload.get("evidence")
    links = payload.get("links") or []
    if level == "medium":
        if isinstance(evidence, dict):
            data["evidence_keys"] = sorted(evidence)
        data["links"] = [link.get("label") for link in links if isinstance(link, dict)]
    else:
        if evidence is not None:
            data["evidence"] = evidence
        data["links"] = links
    for key in ("warnings", "errors"):
        if payload.get(key):
            data[key] = payload[key]
    return data


__all__ = ["result_to_loggable"]

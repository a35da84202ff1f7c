"""HTTP bridge to an external verification gateway.

Built-in checks do local pre-validation and, when a gateway is configured,
hand the input over to it. The gateway answers with a ``ValidatorResult``
shaped JSON body. Vendor specifics live behind the gateway.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import requests

from ..types import ValidatorInput, ValidatorResult


def http_session(timeout: float = 15) -> requests.Session:
    s = requests.Session()
    # No adapter-level retries: a failed vendor call is retried by the caller.
    s.headers.update({"Accept": "application/json"})
    s.request_timeout = timeout  # type: ignore[attr-defined]
    return s


@dataclass(frozen=True)
class Gateway:
    base_url: str
    token: str | None = None
    timeout: float = 15

    def endpoint(self, validator_id: str) -> str:
        return f"{self.base_url.rstrip('/')}/{validator_id}"

    def _payload(self, validator_id: str, input: ValidatorInput) -> dict[str, Any]:
        return {
            "validatorId": validator_id,
            "fieldId": input.field_id,
            "fieldLabel": input.field_label,
            "value": input.value,
            "context": dict(input.context or {}),
        }

    def call(self, validator_id: str, input: ValidatorInput) -> ValidatorResult:
        session = http_session(self.timeout)
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = session.post(
                self.endpoint(validator_id),
                json=self._payload(validator_id, input),
                headers=headers,
                timeout=session.request_timeout,  # type: ignore[attr-defined]
            )
            response.raise_for_status()
            body = response.json()
        finally:
            session.close()
        if not isinstance(body, dict):
            raise ValueError(f"Gateway returned a non-object body for {validator_id}")
        if isinstance(body.get("result"), dict):
            body = body["result"]
        return ValidatorResult.from_dict(body)

    async def acall(self, validator_id: str, input: ValidatorInput) -> ValidatorResult:
        return await asyncio.to_thread(self.call, validator_id, input)


def gateway_from_settings(url: str | None, token: str | None, timeout: float) -> Gateway | None:
    if not url:
        return None
    return Gateway(base_url=url, token=token, timeout=timeout)


__all__ = ["Gateway", "gateway_from_settings", "http_session"]

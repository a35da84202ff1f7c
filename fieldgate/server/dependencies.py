"""Request-scoped dependencies: engine access, caller identity, rate limiting."""

from fastapi import Depends, Request

from ..core.api import Engine
from ..core.errors import RateLimitExceeded
from ..core.ratelimit import request_key
from ..core.types import RanBy
from .helpers.errors import rate_limit_response


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


def caller_identity(request: Request) -> RanBy | None:
    uid = (request.headers.get("x-user-id") or "").strip()
    role = (request.headers.get("x-user-role") or "").strip()
    if not uid and not role:
        return None
    return RanBy(uid=uid or None, role=role or None)


def rate_limit_key(request: Request) -> str:
    return request_key(
        request.headers.get("x-forwarded-for"),
        client_host=request.client.host if request.client else None,
        has_credentials=bool(request.headers.get("authorization")),
    )


def enforce_rate_limit(request: Request, engine: Engine = Depends(get_engine)) -> None:
    try:
        engine.limiter.check(rate_limit_key(request))
    except RateLimitExceeded as exc:
        raise rate_limit_response(exc) from exc


__all__ = ["caller_identity", "enforce_rate_limit", "get_engine", "rate_limit_key"]

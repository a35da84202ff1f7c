"""Translate engine errors into HTTP responses."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException

from ...core.errors import InputError, PersistenceFailure, RateLimitExceeded, UnknownValidator

logger = logging.getLogger("uvicorn.error")


def rate_limit_response(exc: RateLimitExceeded) -> HTTPException:
    return HTTPException(
        status_code=429,
        detail=str(exc),
        headers={"Retry-After": str(max(1, math.ceil(exc.retry_after)))},
    )


@contextmanager
def engine_errors() -> Iterator[None]:
    try:
        yield
    except HTTPException:
        raise
    except InputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except UnknownValidator as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RateLimitExceeded as exc:
        raise rate_limit_response(exc) from exc
    except PersistenceFailure as exc:
        raise HTTPException(status_code=503, detail=f"Validation job could not be recorded: {exc}") from exc
    except Exception as exc:
        logger.exception("Unhandled validation error")
        raise HTTPException(status_code=500, detail=f"Internal validation error: {exc}") from exc


__all__ = ["engine_errors", "rate_limit_response"]

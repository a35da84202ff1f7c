"""Error taxonomy for the validation engine.

Vendor execution faults never leave the runner as exceptions; they are
converted into ``status=error`` results. Everything else here is raised to
the caller.
"""


class FieldgateError(Exception):
    """Base class for all engine errors."""


class InputError(FieldgateError, ValueError):
    """A required request field is missing or malformed."""


class UnknownValidator(FieldgateError, LookupError):
    def __init__(self, validator_id: object) -> None:
        self.validator_id = validator_id
        super().__init__(f"Unknown validator: {validator_id}")


class VendorExecutionFault(FieldgateError):
    """A check raised, was rejected, or timed out while executing."""

    def __init__(self, validator_id: str, cause: BaseException) -> None:
        self.validator_id = validator_id
        self.cause = cause
        message = str(cause).strip() or type(cause).__name__
        super().__init__(message)


class PersistenceFailure(FieldgateError):
    """The job store could not record a completed run."""


class RateLimitExceeded(FieldgateError):
    def __init__(self, key: str, *, retry_after: float) -> None:
        self.key = key
        self.retry_after = retry_after
        super().__init__("Too many requests, slow down.")


__all__ = [
    "FieldgateError",
    "InputError",
    "PersistenceFailure",
    "RateLimitExceeded",
    "UnknownValidator",
    "VendorExecutionFault",
]

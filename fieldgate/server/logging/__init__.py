from .job_payloads import result_to_loggable

__all__ = ["result_to_loggable"]

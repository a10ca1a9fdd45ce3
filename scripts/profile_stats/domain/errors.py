from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class ServiceErrorKind(str, Enum):
    NOT_FOUND  = "NOT_FOUND"
    RATE_LIMIT = "RATE_LIMIT"


@dataclass(frozen=True)
class ServiceError:
    """
    The only error shape callers of the profile service ever see.

    RATE_LIMIT means the mandatory repository query was rate limited and
    the caller should try again later. Everything else is NOT_FOUND.
    """
    message: str
    kind:    ServiceErrorKind


class QueryFailedError(Exception):
    """Raised when a query ended in a classified failure."""

    def __init__(self, error: ServiceError) -> None:
        super().__init__(error.message)
        self.error = error


class TransportError(Exception):
    """Network failure or a response body that is not JSON."""
    pass


class MalformedPayloadError(Exception):
    """A `user` payload arrived but does not have the documented shape."""

    def __init__(self, category: str, reason: Exception) -> None:
        super().__init__(f"malformed {category} payload: {reason!r}")
        self.category = category


class ConfigError(Exception):
    pass


def to_service_error(exc: BaseException) -> ServiceError:
    """
    Unwrap a fault raised below the orchestrator.

    A QueryFailedError already carries its classification; any other
    exception collapses to NOT_FOUND.
    """
    if isinstance(exc, QueryFailedError):
        return exc.error
    return ServiceError("not found", ServiceErrorKind.NOT_FOUND)

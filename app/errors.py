"""Error types raised by the place services and mapped onto HTTP responses."""

from enum import Enum
from typing import Any, Dict


class ErrorCode(str, Enum):
    """Stable error codes returned to API clients."""
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    PROVIDER_UNAUTHENTICATED = "PROVIDER_UNAUTHENTICATED"


_HTTP_STATUS = {
    ErrorCode.INVALID_ARGUMENT: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.PROVIDER_UNAVAILABLE: 502,
    ErrorCode.PROVIDER_UNAUTHENTICATED: 503,
}


class PlaceServiceError(Exception):
    """Base class for errors surfaced to callers of the place services."""

    code: ErrorCode = ErrorCode.INVALID_ARGUMENT

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS.get(self.code, 500)

    def model_dump(self) -> Dict[str, Any]:
        """Return dict representation for API responses."""
        return {"error": {"code": self.code.value, "message": self.message}}


class InvalidArgumentError(PlaceServiceError):
    """Malformed id, unknown category or unparseable visited flag."""
    code = ErrorCode.INVALID_ARGUMENT


class NotFoundError(PlaceServiceError):
    """Unknown place id, or no provider record matched a name search."""
    code = ErrorCode.NOT_FOUND


class ProviderUnavailableError(PlaceServiceError):
    """The place provider could not be reached or returned an error."""
    code = ErrorCode.PROVIDER_UNAVAILABLE


class ProviderUnauthenticatedError(PlaceServiceError):
    """No API credential is configured for the place provider."""
    code = ErrorCode.PROVIDER_UNAUTHENTICATED

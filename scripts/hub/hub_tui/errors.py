"""Exception hierarchy for the hub terminal client."""

from __future__ import annotations


class HubError(Exception):
    """Base exception for all hub client errors."""


class TransportError(HubError):
    """Raised when the server cannot be reached or the request timed out."""


class APIError(HubError):
    """Raised for a non-2xx response that has no more specific mapping."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class AuthError(APIError):
    """Raised when the server rejects the bearer token (401)."""

    def __init__(self, message: str = "unauthorized"):
        super().__init__(401, message)


class NotFoundError(APIError):
    """Raised when an entity vanished between a list and a detail fetch (404)."""

    def __init__(self, message: str = "not found"):
        super().__init__(404, message)


class ServerValidationError(APIError):
    """Raised when the server rejects a payload with per-field errors."""

    def __init__(self, field_errors: dict[str, str], message: str = "validation failed", status_code: int = 422):
        super().__init__(status_code, message)
        self.field_errors = dict(field_errors)


class ValidationError(HubError):
    """Raised by client-side validation before any request is issued."""

    def __init__(self, field_errors: dict[str, str]):
        first = next(iter(field_errors.values()), "invalid input")
        super().__init__(first)
        self.field_errors = dict(field_errors)


class ExecutionError(HubError):
    """Raised when the server ran an operation but it failed."""

    def __init__(self, message: str, code: str = ""):
        super().__init__(message)
        self.code = code


class UnsupportedConfigType(HubError):
    """Raised when an integration declares a config type with no known flow."""

    def __init__(self, config_type: str):
        super().__init__(f"unsupported config type: {config_type or '(empty)'}")
        self.config_type = config_type


def describe(exc: BaseException) -> str:
    """Return the short human-facing text for an error."""
    if isinstance(exc, APIError):
        return exc.message
    return str(exc) or exc.__class__.__name__

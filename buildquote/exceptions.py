"""Domain exception hierarchy for structured error responses."""

from __future__ import annotations


class AppException(Exception):
    """Base exception for all domain errors.

    Subclasses set ``code`` and ``status_code`` at the class level; callers
    provide ``message`` and an optional ``details`` list.
    """

    code: str = "APP_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: list[dict] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []


class ValidationException(AppException):
    code = "VALIDATION_ERROR"
    status_code = 400


class UnauthorizedException(AppException):
    code = "UNAUTHORIZED"
    status_code = 401


class ForbiddenException(AppException):
    code = "FORBIDDEN"
    status_code = 403


class NotFoundException(AppException):
    code = "NOT_FOUND"
    status_code = 404


class ConfigurationException(AppException):
    """A required secret or provider key is missing from the settings."""

    code = "CONFIGURATION_ERROR"
    status_code = 500


class UpstreamException(AppException):
    """Mail, spreadsheet or file-storage provider call failed."""

    code = "UPSTREAM_ERROR"
    status_code = 502

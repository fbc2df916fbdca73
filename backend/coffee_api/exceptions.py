"""
Coffee API - Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception carries a client-safe message and an optional context
       dict. Global exception handlers (registered in main.py) catch the
       request-time exceptions and return `{"error": <message>}` responses.
Who:   Raised by services and the startup orchestrator.

Exception Hierarchy:
    CoffeeApiError (base)
    ├── ParameterResolutionError → masked by a fallback default at startup
    ├── StartupError             → process exits with code 1
    ├── ValidationError          → 400 Bad Request
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class CoffeeApiError(Exception):
    """
    Base exception for all Coffee API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ParameterResolutionError(CoffeeApiError):
    """
    Raised when a single parameter cannot be read from the parameter store.

    When:    Parameter missing, access denied, network failure, empty value.
    Handled: By ParameterResolver.resolve_or_default(), which substitutes the
             local fallback value. Never reaches an HTTP client.
    """

    def __init__(
        self,
        name: str,
        reason: str = "unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["parameter"] = name
        super().__init__(
            message=f"Could not resolve parameter '{name}': {reason}",
            context=ctx,
        )
        self.name = name


class StartupError(CoffeeApiError):
    """
    Raised when the boot sequence cannot reach the serving state.

    When:    Parameter resolution aborts, database authentication fails, or
             schema synchronization fails.
    Effect:  The entrypoint logs it and exits with status 1. No retry.
    """

    def __init__(
        self,
        stage: str,
        message: str = "Startup failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["stage"] = stage
        super().__init__(message=message, context=ctx)
        self.stage = stage


class ValidationError(CoffeeApiError):
    """
    Raised when client input fails validation.

    When:    Required field missing or empty, referenced coffee does not exist.
    HTTP:    400 Bad Request

    Example response:
        {"error": "No coffee found with id 999999"}
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DatabaseError(CoffeeApiError):
    """
    Raised when database operations fail unexpectedly during a request.

    When:    Connection lost mid-query, constraint violation, data too long, etc.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. The original
    exception type and operation are kept in `context` and logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

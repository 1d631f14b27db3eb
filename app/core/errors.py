"""
Application error taxonomy.

Each error carries the HTTP status it maps to. The exception handlers
registered in app.main turn them into the JSON envelope
``{"success": false, "message": ...}``.
"""
from typing import Optional


class AppError(Exception):
    """Base class for errors that are safe to report to the client."""
    status_code: int = 500
    default_message: str = "Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class InvalidPlanError(ValidationError):
    default_message = "Invalid subscription plan"


class NoActiveSubscriptionError(ValidationError):
    default_message = "No active subscription found for this user"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "No authentication token, access denied"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class PriceNotFoundError(NotFoundError):
    default_message = "Price ID not found"


class ExternalServiceError(AppError):
    status_code = 500
    default_message = "External service error"


class OrphanEventError(AppError):
    """A billing event that cannot be mapped back to a user record."""
    status_code = 200
    default_message = "Billing event could not be attributed to a user"

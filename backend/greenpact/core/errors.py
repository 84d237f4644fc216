"""Domain errors raised by the account services.

Every error carries the HTTP status it maps to; the handlers registered in
``greenpact.main`` turn them into ``{"message": ...}`` responses. Messages for
credential failures are deliberately generic, validation messages are not.
"""
from __future__ import annotations

from fastapi import status


class GreenpactError(Exception):
    """Base class for errors that are reported to the client."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(GreenpactError):
    default_message = "Please enter all required fields."


class WeakPassword(GreenpactError):
    default_message = (
        "Password must be at least 8 characters long, include uppercase, "
        "lowercase, a number, and a special character."
    )


class DuplicateAccount(GreenpactError):
    default_message = "User already exists."

    @classmethod
    def for_field(cls, field: str) -> "DuplicateAccount":
        if field == "username":
            return cls("Username already exists.")
        return cls("Email is already registered.")


class InvalidOrExpiredCode(GreenpactError):
    default_message = "Invalid or expired OTP."


class ExpiredCode(GreenpactError):
    default_message = "Expired OTP. Please request a new one."


class InvalidCredentials(GreenpactError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid username or password."


class Unauthorized(GreenpactError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "No token, authorization denied."


class InvalidToken(GreenpactError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token is not valid."


class Forbidden(GreenpactError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied."


class NotFound(GreenpactError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class NotificationFailure(GreenpactError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to send OTP email. Please try again."


class PersistenceFailure(GreenpactError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "A database error occurred. Please try again."

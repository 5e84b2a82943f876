"""Custom exception classes and error handling."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": {
                    "code": code,
                    "message": message,
                    "details": details or {},
                },
            },
        )


class AuthenticationError(AppException):
    """Authentication failed.

    The message is always generic; callers never learn which factor failed.
    """

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="AUTH_FAILED",
            message=message,
        )


class ValidationError(AppException):
    """Data validation failed."""

    def __init__(
        self,
        message: str = "Validation error",
        details: dict[str, Any] | None = None,
        code: str = "VALIDATION_ERROR",
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code=code,
            message=message,
            details=details,
        )


class MissingFieldError(ValidationError):
    """One or more required fields are empty."""

    def __init__(self, fields: list[str]):
        super().__init__(
            message=f"Missing required field(s): {', '.join(fields)}",
            details={"fields": fields},
            code="MISSING_FIELD",
        )


class OutOfRangeError(ValidationError):
    """A value lies outside its permitted range."""

    def __init__(self, field: str, value: Any, minimum: int, maximum: int):
        super().__init__(
            message=f"{field} must be between {minimum} and {maximum}",
            details={
                "field": field,
                "value": value,
                "min": minimum,
                "max": maximum,
            },
            code="OUT_OF_RANGE",
        )


class DuplicateRecordError(AppException):
    """A unique constraint would be violated."""

    def __init__(
        self,
        message: str = "Record already exists",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            code="DUPLICATE_RECORD",
            message=message,
            details=details,
        )


class UploadError(AppException):
    """File upload failed."""

    def __init__(
        self,
        message: str = "Upload failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="UPLOAD_FAILED",
            message=message,
            details=details,
        )


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(
        self,
        resource: str = "Resource",
        identifier: str | None = None,
    ):
        details = {}
        if identifier:
            details["identifier"] = identifier
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FOUND",
            message=f"{resource} not found",
            details=details,
        )


class RepositoryUnavailableError(AppException):
    """The record store could not be reached."""

    def __init__(self, message: str = "The record store is temporarily unavailable"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code="REPOSITORY_UNAVAILABLE",
            message=message,
        )

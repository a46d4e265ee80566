"""
TableTalk - Custom Exceptions.

Centralized exception handling with standardized error responses.
"""

from typing import Any
from uuid import UUID


class TableTalkException(Exception):
    """Base exception for TableTalk application."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        request_id: UUID | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.request_id = request_id
        super().__init__(message)


# =============================================================================
# Parsing
# =============================================================================


class ParseError(TableTalkException):
    """Raised when an uploaded file cannot be turned into a dataset."""

    def __init__(
        self,
        message: str,
        code: str = "PARSE_ERROR",
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status_code,
            details=details,
        )


class EmptyFileError(ParseError):
    """Raised when the file holds no non-empty lines."""

    def __init__(self, file_name: str):
        super().__init__(
            code="EMPTY_FILE",
            message="Empty file",
            details={"file_name": file_name},
        )


class UnsupportedFormatError(ParseError):
    """Raised when the file extension is not a recognized tabular format."""

    def __init__(self, file_name: str, extension: str | None, supported: list[str]):
        super().__init__(
            code="UNSUPPORTED_FORMAT",
            message="Unsupported file type. Please upload CSV or Excel files.",
            status_code=415,
            details={
                "file_name": file_name,
                "extension": extension,
                "supported": supported,
            },
        )


# =============================================================================
# Auth
# =============================================================================


class UnauthenticatedError(TableTalkException):
    """Raised when no valid session exists for the caller."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            code="UNAUTHENTICATED",
            message=message,
            status_code=401,
        )


# =============================================================================
# Reasoning service
# =============================================================================


class TransportError(TableTalkException):
    """Raised when the reasoning service call cannot be completed."""

    DEFAULT_MESSAGE = "Failed to call AI function"

    def __init__(self, message: str | None = None, status: int | None = None, service: str = "reasoning"):
        super().__init__(
            code="TRANSPORT_ERROR",
            message=message or self.DEFAULT_MESSAGE,
            status_code=502,
            details={"service": service, "upstream_status": status},
        )


# =============================================================================
# Resources / state
# =============================================================================


class NotFoundException(TableTalkException):
    """Raised when a resource is not found."""

    def __init__(self, resource_type: str, resource_id: str | UUID):
        super().__init__(
            code="NOT_FOUND",
            message=f"{resource_type} not found: {resource_id}",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
        )


class ConversationNotOpenError(TableTalkException):
    """Raised when asking about a file whose conversation was never opened."""

    def __init__(self, file_id: str):
        super().__init__(
            code="CONVERSATION_NOT_OPEN",
            message=f"No active conversation for file {file_id}; open it first",
            status_code=409,
            details={"file_id": file_id},
        )


class ConversationBusyError(TableTalkException):
    """Raised when a question is submitted while another one is in flight."""

    def __init__(self, conversation_id: str | UUID):
        super().__init__(
            code="CONVERSATION_BUSY",
            message="A question is already being answered in this conversation",
            status_code=409,
            details={"conversation_id": str(conversation_id)},
        )


class ValidationException(TableTalkException):
    """Raised for validation errors."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details={"errors": errors} if errors else None,
        )

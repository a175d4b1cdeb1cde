"""Workflow exceptions and error classification utilities."""

from enum import Enum

from pydantic import BaseModel

from panikkar.core.db_client import DatabaseError, DuplicateRecordError, RecordNotFoundError


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Workflow errors
    ERR_INVALID_STATE_TRANSITION = "ERR_INVALID_STATE_TRANSITION"
    ERR_DUPLICATE_APPLICATION = "ERR_DUPLICATE_APPLICATION"
    ERR_CONCURRENT_UPDATE = "ERR_CONCURRENT_UPDATE"

    # Persistence errors
    ERR_RECORD_NOT_FOUND = "ERR_RECORD_NOT_FOUND"
    ERR_DUPLICATE_RECORD = "ERR_DUPLICATE_RECORD"
    ERR_DATABASE = "ERR_DATABASE"

    # Input errors
    ERR_INVALID_INPUT = "ERR_INVALID_INPUT"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class WorkflowError(ValueError):
    """Base class for caller errors raised by the workflow services."""

    code: str = ErrorCode.ERR_UNKNOWN


class InvalidStateTransitionError(WorkflowError):
    """The requested step is not allowed from the record's current state."""

    code = ErrorCode.ERR_INVALID_STATE_TRANSITION


class DuplicateApplicationError(WorkflowError):
    """The worker has already applied to this job."""

    code = ErrorCode.ERR_DUPLICATE_APPLICATION


class ConcurrentUpdateError(WorkflowError):
    """A compare-and-swap update kept losing to concurrent writers."""

    code = ErrorCode.ERR_CONCURRENT_UPDATE


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during execution

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, InvalidStateTransitionError):
        return ErrorResponse(
            code=exception.code,
            message="This step cannot be performed yet.",
            suggestion="Check the job's verification status and complete the earlier steps first.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, DuplicateApplicationError):
        return ErrorResponse(
            code=exception.code,
            message="You have already applied for this job.",
            suggestion="Wait for the poster to respond to your existing application.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, ConcurrentUpdateError):
        return ErrorResponse(
            code=exception.code,
            message="Someone else updated this at the same time.",
            suggestion="Please try again.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, RecordNotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_RECORD_NOT_FOUND,
            message="I couldn't find that record.",
            suggestion="Check the job or application reference and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, DuplicateRecordError):
        return ErrorResponse(
            code=ErrorCode.ERR_DUPLICATE_RECORD,
            message="This has already been recorded.",
            suggestion="No further action is needed.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, DatabaseError):
        return ErrorResponse(
            code=ErrorCode.ERR_DATABASE,
            message="Something went wrong while saving your changes.",
            suggestion="Please try again later. If the problem persists, contact support.",
            severity=ErrorSeverity.HIGH,
        )

    if isinstance(exception, ValueError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_INPUT,
            message="Some of the details provided are not valid.",
            suggestion="Check the values you entered and try again.",
            severity=ErrorSeverity.LOW,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
    )

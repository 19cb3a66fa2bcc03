"""Engine error taxonomy and classification utilities."""

from enum import Enum

from pydantic import BaseModel


class ErrorCategory(Enum):
    """Categories of errors that can occur during engine operations."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    STORAGE = "storage"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Caller errors
    ERR_INVALID_INPUT = "ERR_INVALID_INPUT"
    ERR_PET_NOT_FOUND = "ERR_PET_NOT_FOUND"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"
    ERR_NOT_FOUND = "ERR_NOT_FOUND"

    # Task lifecycle errors
    ERR_INVALID_STATE_TRANSITION = "ERR_INVALID_STATE_TRANSITION"
    ERR_REWARD_ALREADY_CLAIMED = "ERR_REWARD_ALREADY_CLAIMED"
    ERR_TASK_LOCKED = "ERR_TASK_LOCKED"

    # Fatal errors
    ERR_STORAGE_UNAVAILABLE = "ERR_STORAGE_UNAVAILABLE"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class EngineError(Exception):
    """Base class for structured, caller-visible engine errors."""

    category: ErrorCategory = ErrorCategory.UNKNOWN
    default_code: str = ErrorCode.ERR_UNKNOWN

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class InvalidInputError(EngineError):
    """Malformed or out-of-range arguments."""

    category = ErrorCategory.INVALID_INPUT
    default_code = ErrorCode.ERR_INVALID_INPUT


class NotFoundError(EngineError):
    """Referenced pet or task definition does not exist."""

    category = ErrorCategory.NOT_FOUND
    default_code = ErrorCode.ERR_NOT_FOUND


class InvalidTransitionError(EngineError):
    """Action not permitted from the current task state."""

    category = ErrorCategory.INVALID_TRANSITION
    default_code = ErrorCode.ERR_INVALID_STATE_TRANSITION


class StorageError(EngineError):
    """Unexpected repository failure. Fatal for the call and never retried here."""

    category = ErrorCategory.STORAGE
    default_code = ErrorCode.ERR_STORAGE_UNAVAILABLE


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


_SUGGESTIONS: dict[str, tuple[str, ErrorSeverity]] = {
    ErrorCode.ERR_INVALID_INPUT: ("Check the request parameters and try again.", ErrorSeverity.LOW),
    ErrorCode.ERR_PET_NOT_FOUND: ("List your pets to find a valid token id.", ErrorSeverity.LOW),
    ErrorCode.ERR_TASK_NOT_FOUND: ("List the task catalog to find a valid task id.", ErrorSeverity.LOW),
    ErrorCode.ERR_NOT_FOUND: ("Check the identifier and try again.", ErrorSeverity.LOW),
    ErrorCode.ERR_INVALID_STATE_TRANSITION: (
        "Check the task status before retrying this action.",
        ErrorSeverity.LOW,
    ),
    ErrorCode.ERR_REWARD_ALREADY_CLAIMED: ("Rewards can only be claimed once per task.", ErrorSeverity.LOW),
    ErrorCode.ERR_TASK_LOCKED: ("Meet the task requirements to unlock it.", ErrorSeverity.LOW),
    ErrorCode.ERR_STORAGE_UNAVAILABLE: (
        "Please try again later. If the problem persists, contact support.",
        ErrorSeverity.CRITICAL,
    ),
}


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response with recovery suggestions.

    Engine errors keep their own code and message. Anything else is treated as an
    unexpected fault and never leaks its internal message.

    Args:
        exception: The exception raised during execution

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, EngineError):
        suggestion, severity = _SUGGESTIONS.get(
            exception.code,
            ("Please try again later.", ErrorSeverity.MEDIUM),
        )
        return ErrorResponse(
            code=exception.code,
            message=exception.message,
            suggestion=suggestion,
            severity=severity,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.HIGH,
    )

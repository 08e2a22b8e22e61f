"""
cipherquest/errors.py
Centralized error taxonomy

ERROR RESPONSE STRUCTURE:
{
    "success": false,
    "error": "ErrorType",
    "message": "Human-readable description",
    "code": "UNIQUE_ERROR_CODE",
    "details": {} (optional)
}

Services raise these; the FastAPI boundary turns them into JSON with
to_response(). Nothing below the routes knows about HTTP beyond the status
code attached to each type.
"""

import logging
import uuid
from typing import Optional, Dict, Any

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorCode:
    """Unique error codes for machine-readable error handling"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_FIELD = "MISSING_FIELD"
    SCORE_OUT_OF_RANGE = "SCORE_OUT_OF_RANGE"
    INVALID_TOKEN = "INVALID_TOKEN"
    NOT_QUALIFIED = "NOT_QUALIFIED"

    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_EXPIRED = "AUTH_EXPIRED"
    AUTH_INVALID = "AUTH_INVALID"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    FORBIDDEN = "FORBIDDEN"
    DISQUALIFIED = "DISQUALIFIED"

    NOT_FOUND = "NOT_FOUND"
    TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    QUESTION_NOT_FOUND = "QUESTION_NOT_FOUND"
    PROBLEM_NOT_FOUND = "PROBLEM_NOT_FOUND"

    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    ALREADY_SOLVED = "ALREADY_SOLVED"
    ALREADY_VERIFIED = "ALREADY_VERIFIED"
    ATTEMPTS_EXHAUSTED = "ATTEMPTS_EXHAUSTED"
    TIME_EXCEEDED = "TIME_EXCEEDED"

    CONFLICT = "CONFLICT"
    NO_CONTENT_AVAILABLE = "NO_CONTENT_AVAILABLE"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Standard error response model"""
    success: bool = False
    error: str
    message: str
    code: str
    details: Optional[Dict[str, Any]] = None


class APIError(Exception):
    """Base API exception with consistent structure"""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    def to_response(self) -> JSONResponse:
        """Convert to FastAPI JSONResponse"""
        return JSONResponse(status_code=self.status_code, content=self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = {
            "success": False,
            "error": self.error,
            "message": self.message,
            "code": self.code
        }
        if self.details:
            result["details"] = self.details
        return result


class BadRequestError(APIError):
    """400 Bad Request - Invalid input"""
    def __init__(self, message: str, code: str = ErrorCode.INVALID_INPUT, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Bad Request",
            message=message,
            code=code,
            details=details
        )


class UnauthorizedError(APIError):
    """401 Unauthorized - Authentication required or credentials rejected"""
    def __init__(self, message: str = "Authentication required", code: str = ErrorCode.AUTH_REQUIRED,
                 details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="Unauthorized",
            message=message,
            code=code,
            details=details
        )


class ForbiddenError(APIError):
    """403 Forbidden - Access denied"""
    def __init__(self, message: str, code: str = ErrorCode.FORBIDDEN, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="Forbidden",
            message=message,
            code=code,
            details=details
        )


class DisqualifiedError(ForbiddenError):
    """403 - Team has been disqualified from the quest"""
    def __init__(self, message: str = "Team has been disqualified from CipherQuest"):
        super().__init__(message, code=ErrorCode.DISQUALIFIED, details={"disqualified": True})


class NotFoundError(APIError):
    """404 Not Found - Resource does not exist"""
    def __init__(self, resource: str, identifier: Any = None, code: str = ErrorCode.NOT_FOUND):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="Not Found",
            message=message,
            code=code
        )


class QuestStateError(APIError):
    """400 Bad Request - Operation not allowed in the current quest state"""
    def __init__(self, message: str, code: str, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Invalid State",
            message=message,
            code=code,
            details=details
        )


class AlreadyCompletedError(QuestStateError):
    def __init__(self, message: str = "CipherQuest already completed"):
        super().__init__(message, ErrorCode.ALREADY_COMPLETED)


class AlreadySolvedError(QuestStateError):
    def __init__(self, question_id: int):
        super().__init__("Cipher already solved", ErrorCode.ALREADY_SOLVED, {"question_id": question_id})


class AttemptsExhaustedError(QuestStateError):
    def __init__(self, question_id: int, max_attempts: int):
        super().__init__(
            f"No attempts remaining for this cipher (max {max_attempts})",
            ErrorCode.ATTEMPTS_EXHAUSTED,
            {"question_id": question_id, "max_attempts": max_attempts}
        )


class TimeExceededError(QuestStateError):
    """
    Raised after a timed-out session has been force-completed.

    The completion already happened when this is raised; details carry the
    outcome so the caller can show whether the team qualified.
    """
    def __init__(self, time_elapsed: int, qualified: bool, assigned_problem_id: Optional[int] = None):
        self.time_elapsed = time_elapsed
        self.qualified = qualified
        self.assigned_problem_id = assigned_problem_id
        super().__init__(
            "Time limit exceeded for CipherQuest",
            ErrorCode.TIME_EXCEEDED,
            {
                "time_elapsed": time_elapsed,
                "completed": True,
                "qualified": qualified,
                "assigned_problem_id": assigned_problem_id,
            }
        )


class ConflictError(APIError):
    """409 Conflict - Duplicate resource"""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error="Conflict",
            message=message,
            code=ErrorCode.CONFLICT,
            details=details
        )


class NoContentAvailableError(APIError):
    """503 - Reference pool (questions/problems) is empty or too small"""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error="No Content Available",
            message=message,
            code=ErrorCode.NO_CONTENT_AVAILABLE,
            details=details
        )


class InternalError(APIError):
    """500 Internal Server Error - Use sparingly, only for true internal failures"""
    def __init__(self, message: str = "An internal error occurred", log_id: Optional[str] = None):
        details = {"log_id": log_id} if log_id else None
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="Internal Error",
            message=message,
            code=ErrorCode.INTERNAL_ERROR,
            details=details
        )


def validate_not_empty(value: Optional[str], field_name: str) -> str:
    """Validate that a string is not empty"""
    if value is None or value.strip() == "":
        raise BadRequestError(
            f"{field_name} cannot be empty",
            code=ErrorCode.MISSING_FIELD,
            details={"field": field_name}
        )
    return value


def internal_error_from(error: Exception, context: str = "") -> InternalError:
    """Log an unexpected error and build a safe 500 with a short log id"""
    log_id = str(uuid.uuid4())[:8]
    logger.error(f"[{log_id}] Internal error in {context}: {type(error).__name__}: {str(error)}")
    return InternalError("An internal error occurred. Please try again later.", log_id=log_id)


def get_error_summary() -> Dict[str, Any]:
    """Summary of the error contract, served by /api/errors/health"""
    return {
        "service": "cipherquest-api",
        "response_structure": {
            "success": "boolean (always false for errors)",
            "error": "string (error type)",
            "message": "string (human-readable)",
            "code": "string (machine-readable)",
            "details": "object (optional)"
        },
        "status_codes": {
            "400": "Invalid input or action not allowed in the current quest state",
            "401": "Authentication missing, invalid or expired",
            "403": "Team disqualified or acting on another team",
            "404": "Team, session, question or problem does not exist",
            "409": "Team name or email already registered",
            "422": "Validation error (Pydantic)",
            "429": "Rate limit exceeded",
            "500": "Internal error",
            "503": "Question bank or problem pool unavailable"
        },
        "error_codes": [
            attr for attr in dir(ErrorCode)
            if not attr.startswith('_')
        ]
    }

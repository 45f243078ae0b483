"""Application error taxonomy and the middleware that renders it."""

import logging
import time
import traceback
from typing import Any, Callable

from fastapi import HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from src.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for errors returned to the client.

    Subclasses set ``status_code``, ``error_type`` and ``default_message``;
    services raise them and the middleware turns them into ErrorResponse
    bodies.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "api_error"
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            message: Human-readable error message; the class default if omitted.
            details: Optional additional error details.
        """
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"
    default_message = "Resource not found"


class ProfileNotFoundError(NotFoundError):
    """The referenced user has no profile."""

    error_type = "profile_not_found"
    default_message = "This user profile does not exist"


class ValidationError(APIError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_type = "validation_error"
    default_message = "Validation error"


class InvalidPayloadError(ValidationError):
    """Scanned QR data is not a valid connect payload."""

    error_type = "invalid_payload"
    default_message = "This is not a valid connect QR code"


class SelfConnectError(ValidationError):
    error_type = "self_connect"
    default_message = "You can't connect with yourself"


class ConflictError(APIError):
    """The operation conflicts with existing state."""

    status_code = status.HTTP_409_CONFLICT
    error_type = "conflict"
    default_message = "Conflict with existing state"


class InvalidStateTransitionError(ConflictError):
    """A connection request is not in a state that allows the transition."""

    error_type = "invalid_state_transition"
    default_message = "Connection request is no longer pending"


class AuthorizationError(APIError):
    status_code = status.HTTP_403_FORBIDDEN
    error_type = "authorization_error"
    default_message = "Access denied"


class PermissionDeniedError(AuthorizationError):
    """The caller is not a party to, or the owner of, the resource."""

    error_type = "permission_denied"
    default_message = "You are not allowed to perform this action"


class RateLimitError(APIError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_type = "rate_limit_exceeded"
    default_message = "Rate limit exceeded"

    def __init__(
        self,
        message: str | None = None,
        retry_after: int = 60,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.retry_after = retry_after


class TextGenerationError(APIError):
    """The text generation endpoint failed or returned nothing."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_type = "text_generation_failed"
    default_message = "Could not generate AI text at this time"


class TransientIOError(APIError):
    """The database could not be reached. Safe to retry later."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_type = "transient_io_error"
    default_message = "Service temporarily unavailable, please try again"


def create_error_response(
    error_type: str,
    message: str,
    status_code: int,
    details: list[dict[str, Any]] | None = None,
    request_id: str | None = None,
) -> JSONResponse:
    """Create a standardized JSON error response.

    Args:
        error_type: Error category for client handling.
        message: Human-readable error description.
        status_code: HTTP status code.
        details: Optional error details.
        request_id: Optional request ID for tracing.

    Returns:
        JSONResponse: Formatted error response.
    """
    body = ErrorResponse.from_exception(
        error_type=error_type,
        message=message,
        details=details,
        request_id=request_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


async def error_handler_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Render raised errors as ErrorResponse bodies.

    APIErrors keep their status; 5xx ones are logged at ERROR and the rest
    at WARNING. Anything else becomes a 500 with the stack trace logged.

    Args:
        request: The incoming request.
        call_next: Next middleware or route handler.

    Returns:
        Response: Either the successful response or formatted error response.
    """
    request_id = request.headers.get("X-Request-ID")

    try:
        return await call_next(request)

    except APIError as e:
        log = logger.error if e.status_code >= 500 else logger.warning
        log(
            "%s %s failed: %s - %s",
            request.method,
            request.url.path,
            e.error_type,
            e.message,
            extra={"request_id": request_id, "status_code": e.status_code},
        )
        response = create_error_response(
            error_type=e.error_type,
            message=e.message,
            status_code=e.status_code,
            details=e.details,
            request_id=request_id,
        )
        if isinstance(e, RateLimitError):
            response.headers["Retry-After"] = str(e.retry_after)
            response.headers["X-RateLimit-Reset"] = str(int(time.time()) + e.retry_after)
        return response

    except HTTPException as e:
        logger.warning("HTTP exception: %s - %s", e.status_code, e.detail, extra={"request_id": request_id})
        return create_error_response(
            error_type="http_error",
            message=str(e.detail),
            status_code=e.status_code,
            request_id=request_id,
        )

    except Exception as e:
        logger.error(
            "Unhandled exception on %s %s: %s\n%s",
            request.method,
            request.url.path,
            e,
            traceback.format_exc(),
            extra={"request_id": request_id},
        )
        return create_error_response(
            error_type="internal_error",
            message="An unexpected error occurred",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            request_id=request_id,
        )

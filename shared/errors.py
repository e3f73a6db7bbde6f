"""
Shared error handling for the GitHub cache gateway.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from shared.logging import get_request_id


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class GatewayException(Exception):
    """Base exception for gateway services."""

    status_code: int = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=get_request_id(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(GatewayException):
    """Unusable request shape. Never retried."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class StoreError(GatewayException):
    """Key-value store connectivity or timeout failure."""

    status_code = 500

    def __init__(self, message: str = "Key-value store unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORE_ERROR", message, details)


class SerializationError(GatewayException):
    """Payload does not match the shape declared for a route."""

    status_code = 500

    def __init__(self, message: str = "Payload serialization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERIALIZATION_ERROR", message, details)


class RateLimitError(GatewayException):
    """Rate limiting errors."""

    status_code = 429

    def __init__(self, message: str = "Limit of requests exceeded", details: Optional[Dict[str, Any]] = None):
        super().__init__("RATE_LIMIT_ERROR", message, details)


class ExternalServiceError(GatewayException):
    """External service errors."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


def validation_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    """JSON-safe error list of a pydantic validation failure."""
    return exc.errors(include_url=False, include_context=False, include_input=False)

"""Custom exception hierarchy.

Every error carries the HTTP status it maps to at the API boundary, so
services can raise domain errors without knowing about FastAPI.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base exception for application errors."""

    status_code: int = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def to_payload(self) -> Dict[str, Any]:
        """JSON body returned to the client."""
        return {"error": self.message}


class ValidationError(AppError):
    """Raised when input validation fails."""

    status_code = 400


class InvalidSourceFileError(ValidationError):
    """Raised when a stored-file reference is malformed or not owned by the caller."""

    pass


class NotFoundError(AppError):
    """Raised when a record does not exist or is not owned by the caller."""

    status_code = 404


class APIClientError(AppError):
    """Raised when an external API call fails."""

    status_code = 502


class APITimeoutError(APIClientError):
    """Raised when an external API call times out."""

    pass


class StorageError(APIClientError):
    """Raised when object storage rejects an upload or download."""

    pass


class ExtractionParseError(AppError):
    """Raised when the model response cannot be read as a JSON object."""

    status_code = 500

    def __init__(self, message: str, raw_content: Optional[str] = None, original_error: Optional[Exception] = None):
        super().__init__(message, original_error=original_error)
        self.raw_content = raw_content

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "rawContent": self.raw_content}


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""

    pass

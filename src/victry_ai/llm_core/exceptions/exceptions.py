"""
Custom exception classes for the Claude orchestration core.

Two families live here. The tool family covers registration, validation and
execution of locally handled tools. The request family covers everything that
ends an HTTP request early; each of those carries the status code the API
layer responds with.
"""

from typing import Any, Dict, Optional


class LLMToolError(Exception):
    """Base exception for all tool-related errors."""

    pass


class ToolRegistrationError(LLMToolError):
    """Raised when there is an error registering a tool."""

    pass


class ToolNotFoundError(LLMToolError):
    """Raised when a requested tool is not found in the registry."""

    pass


class ToolExecutionError(LLMToolError):
    """Raised when a tool fails during execution."""

    pass


class ToolValidationError(LLMToolError):
    """Raised when tool parameters or definition are invalid."""

    pass


class LLMRequestError(Exception):
    """Base exception for failures that terminate a completion request.

    Attributes:
        message: Human readable error message, returned to API clients.
        status_code: HTTP status the API layer responds with.
        details: Optional extra information (provider status, request id, ...).
    """

    status_code: int = 500

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Render the error as the public ``{"error": ...}`` payload."""
        payload: Dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidRequestError(LLMRequestError):
    """Raised when the request is missing required input. Never retried."""

    status_code = 400


class ProviderError(LLMRequestError):
    """Raised when the model provider rejects or fails a call."""

    status_code = 500


class ProviderAuthError(ProviderError):
    """Raised when the provider rejects the configured credential."""

    status_code = 401


class ProviderRateLimitError(ProviderError):
    """Raised when the provider throttles the request."""

    status_code = 429


class ProviderServiceError(ProviderError):
    """Raised for any other provider-side or transport failure."""

    status_code = 500


class ResponseParsingError(LLMRequestError):
    """Raised when a model response cannot be decoded into the expected structure."""

    status_code = 500

"""Export the tool and request exception hierarchies used across the core."""

from .exceptions import (
    LLMToolError,
    ToolRegistrationError,
    ToolNotFoundError,
    ToolExecutionError,
    ToolValidationError,
    LLMRequestError,
    InvalidRequestError,
    ProviderError,
    ProviderAuthError,
    ProviderRateLimitError,
    ProviderServiceError,
    ResponseParsingError,
)

__all__ = [
    "LLMToolError",
    "ToolRegistrationError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "ToolValidationError",
    "LLMRequestError",
    "InvalidRequestError",
    "ProviderError",
    "ProviderAuthError",
    "ProviderRateLimitError",
    "ProviderServiceError",
    "ResponseParsingError",
]

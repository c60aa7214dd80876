"""Process-wide Anthropic client and provider error classification."""

import threading
from typing import Any, Dict, Optional, Type

import anthropic
from anthropic import AsyncAnthropic

from victry_ai.llm_core.config import DEFAULT_CLAUDE_MODEL, Settings
from victry_ai.llm_core.exceptions import (
    LLMRequestError,
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitError,
    ProviderServiceError,
)
from victry_ai.llm_core.logger import get_logger

logger = get_logger(__name__)

__all__ = ["DEFAULT_CLAUDE_MODEL", "get_anthropic_client", "reset_anthropic_client", "handle_provider_error"]

_client: Optional[AsyncAnthropic] = None
_client_lock = threading.Lock()


def get_anthropic_client(settings: Optional[Settings] = None) -> AsyncAnthropic:
    """Return the shared Anthropic client, creating it on first use.

    The credential is read once, when the client is constructed.

    Args:
        settings: Settings used for construction. Defaults to ``Settings.from_env()``.
            Ignored once the client exists.

    Raises:
        ProviderServiceError: If no API key is configured.
    """
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                settings = settings or Settings.from_env()
                if not settings.anthropic_api_key:
                    msg = "ANTHROPIC_API_KEY is not set in environment variables"
                    logger.error(msg)
                    raise ProviderServiceError(msg)

                _client = AsyncAnthropic(
                    api_key=settings.anthropic_api_key,
                    max_retries=settings.max_retries,
                    timeout=settings.timeout,
                )
                logger.info("Anthropic client initialized (max_retries=%d).", settings.max_retries)
    return _client


def reset_anthropic_client() -> None:
    """Drop the shared client so the next call rebuilds it, e.g. after configuration changes."""
    global _client
    with _client_lock:
        _client = None


def handle_provider_error(error: BaseException) -> LLMRequestError:
    """Map a failure raised while talking to Anthropic onto the request error taxonomy.

    Errors that are already classified pass through unchanged. Everything else becomes a
    ``ProviderRateLimitError`` (429), ``ProviderAuthError`` (401) or ``ProviderServiceError`` (500).

    Args:
        error: The caught exception.

    Returns:
        The classified error, ready to be raised.
    """
    if isinstance(error, LLMRequestError):
        return error

    details: Dict[str, Any] = {}
    status: Optional[int] = None

    if isinstance(error, anthropic.APIStatusError):
        status = error.status_code
        message = f"Anthropic API error ({status}): {error.message}"
        details["status"] = status
        error_type = _error_type(error.body)
        if error_type:
            details["type"] = error_type
        request_id = getattr(error, "request_id", None)
        if request_id:
            details["requestId"] = request_id
    else:
        message = str(error) or "Unknown error"

    kind = _classify(error, status, message)
    logger.error("Anthropic client error (%s): %s", kind.__name__, message)
    return kind(message, details=details)


def _classify(error: BaseException, status: Optional[int], message: str) -> Type[ProviderError]:
    lowered = message.lower()
    if isinstance(error, anthropic.RateLimitError) or status == 429 or "rate limit" in lowered:
        return ProviderRateLimitError
    if isinstance(error, anthropic.AuthenticationError) or status == 401 or "authentication" in lowered:
        return ProviderAuthError
    return ProviderServiceError


def _error_type(body: Any) -> Optional[str]:
    # Anthropic error bodies look like {"type": "error", "error": {"type": "rate_limit_error", ...}}
    if isinstance(body, dict):
        inner = body.get("error")
        if isinstance(inner, dict):
            return inner.get("type")
        return body.get("type")
    return None

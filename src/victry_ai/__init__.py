"""Victry AI - Claude tool-calling and streaming orchestration."""

from .llm_core import (
    InvalidRequestError,
    LLMRequestError,
    ProviderError,
    ResponseParsingError,
    Settings,
    ToolRegistry,
    extract_structured_data,
    get_logger,
    setup_logging,
)
from .llm_core.tools.catalog import DEFAULT_TOOL_HANDLERS, build_default_registry
from .llm_impl import ClaudeCompletion, ClaudeStreaming, CompletionRequest, CompletionResponse

__all__ = [
    "InvalidRequestError",
    "LLMRequestError",
    "ProviderError",
    "ResponseParsingError",
    "Settings",
    "ToolRegistry",
    "extract_structured_data",
    "get_logger",
    "setup_logging",
    "DEFAULT_TOOL_HANDLERS",
    "build_default_registry",
    "ClaudeCompletion",
    "ClaudeStreaming",
    "CompletionRequest",
    "CompletionResponse",
]

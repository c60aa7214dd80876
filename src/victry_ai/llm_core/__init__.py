"""Public exports for the provider-independent core: tools, messages, errors, logging, config."""

from .config import DEFAULT_CLAUDE_MODEL, Settings
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
from .logger import get_logger, setup_logging
from .messages import ConversationMessage, ContentBlock, TextBlock, ImageBlock, ToolUseBlock, ToolResultBlock
from .parsing import extract_structured_data, extract_text
from .tools import (
    ToolCall,
    ToolDefinition,
    ToolDescriptor,
    ToolExecutionResult,
    ToolHandler,
    ToolOutput,
    ToolRegistry,
    SchemaValidator,
    build_tool_result_message,
    convert_to_provider_tool,
    create_tool,
    execute_tool_calls,
    extract_tool_calls,
    format_tool_results,
)

__all__ = [
    "DEFAULT_CLAUDE_MODEL",
    "Settings",
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
    "get_logger",
    "setup_logging",
    "ConversationMessage",
    "ContentBlock",
    "TextBlock",
    "ImageBlock",
    "ToolUseBlock",
    "ToolResultBlock",
    "extract_structured_data",
    "extract_text",
    "ToolCall",
    "ToolDefinition",
    "ToolDescriptor",
    "ToolExecutionResult",
    "ToolHandler",
    "ToolOutput",
    "ToolRegistry",
    "SchemaValidator",
    "build_tool_result_message",
    "convert_to_provider_tool",
    "create_tool",
    "execute_tool_calls",
    "extract_tool_calls",
    "format_tool_results",
]

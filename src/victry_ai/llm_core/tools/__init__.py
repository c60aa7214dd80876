from .models import ToolCall, ToolDefinition, ToolDescriptor, ToolExecutionResult, ToolHandler, ToolOutput
from .registry import ToolRegistry, convert_to_provider_tool, create_tool
from .execution import (
    build_tool_result_message,
    execute_tool_calls,
    extract_tool_calls,
    format_tool_results,
)
from .schema import SchemaValidator

__all__ = [
    "ToolCall",
    "ToolDefinition",
    "ToolDescriptor",
    "ToolExecutionResult",
    "ToolHandler",
    "ToolOutput",
    "ToolRegistry",
    "convert_to_provider_tool",
    "create_tool",
    "build_tool_result_message",
    "execute_tool_calls",
    "extract_tool_calls",
    "format_tool_results",
    "SchemaValidator",
]

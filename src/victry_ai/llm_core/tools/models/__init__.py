"""Tool-related data models."""

from .models import ToolDescriptor, ToolDefinition, ToolHandler
from .tool_call import ToolCall, ToolOutput, ToolExecutionResult

__all__ = ["ToolDescriptor", "ToolDefinition", "ToolHandler", "ToolCall", "ToolOutput", "ToolExecutionResult"]

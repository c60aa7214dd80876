"""Tool descriptors and the tool registry."""

from .base import ToolRegistry, create_tool, convert_to_provider_tool

__all__ = ["ToolRegistry", "create_tool", "convert_to_provider_tool"]

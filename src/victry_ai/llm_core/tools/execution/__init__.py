"""Tool call extraction, execution and result formatting."""

from .extractor import block_to_dict, extract_tool_calls
from .executor import GENERIC_TOOL_ERROR, execute_tool_calls
from .formatter import build_tool_result_message, format_tool_results

__all__ = [
    "block_to_dict",
    "extract_tool_calls",
    "GENERIC_TOOL_ERROR",
    "execute_tool_calls",
    "build_tool_result_message",
    "format_tool_results",
]

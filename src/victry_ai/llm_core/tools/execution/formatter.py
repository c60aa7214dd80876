"""Conversion of tool execution results into the follow-up turn sent to Claude."""

from typing import Any, Dict, Sequence

from ..models import ToolExecutionResult


def format_tool_results(results: Sequence[ToolExecutionResult]) -> Dict[str, Any]:
    """Build the ``tool_result`` content block for a round of tool calls.

    Exactly one entry per result, in input order. Failed calls are reported with a
    ``None`` output.
    """
    return {
        "type": "tool_result",
        "tool_results": [
            {
                "tool_call_id": result.input.name,
                "output": None if result.output.failed else result.output.output,
            }
            for result in results
        ],
    }


def build_tool_result_message(results: Sequence[ToolExecutionResult]) -> Dict[str, Any]:
    """Wrap the formatted results in the user turn that follows the assistant's tool_use turn."""
    return {"role": "user", "content": [format_tool_results(results)]}

"""Extraction of tool invocations from model response content."""

from typing import Any, Dict, List, Mapping, Optional

from ...messages import ToolUseBlock
from ...logger import get_logger
from ..models import ToolCall

logger = get_logger(__name__)


def block_to_dict(block: Any) -> Dict[str, Any]:
    """Return a content block as a plain dict.

    Accepts dicts as well as provider SDK block objects (pydantic models).
    """
    if isinstance(block, Mapping):
        return dict(block)
    if hasattr(block, "model_dump"):
        return block.model_dump(exclude_none=True)
    return {key: value for key, value in vars(block).items() if not key.startswith("_")}


def extract_tool_calls(content: Any) -> Optional[List[ToolCall]]:
    """Parse tool calls out of a Claude response's content.

    Args:
        content: The response content: None, a plain string, or a sequence of content blocks.

    Returns:
        The tool calls in block order, or None when the content holds no ``tool_use`` block.
        An empty list is never returned.
    """
    if not content or isinstance(content, str):
        return None

    tool_calls: List[ToolCall] = []
    for block in content:
        data = block_to_dict(block)
        if data.get("type") != "tool_use":
            continue

        arguments = data.get("input")
        if arguments is not None and not isinstance(arguments, Mapping):
            logger.warning("Skipping tool_use block with non-object input (%s).", type(arguments).__name__)
            continue

        tool_use = ToolUseBlock(id=data.get("id"), name=data.get("name"), input=dict(arguments or {}))
        if tool_use.tool_name is None:
            logger.warning("Skipping tool_use block without name or id.")
            continue
        tool_calls.append(ToolCall(name=tool_use.tool_name, arguments=tool_use.input))

    if not tool_calls:
        return None

    logger.debug("Extracted %d tool call(s): %s", len(tool_calls), [call.name for call in tool_calls])
    return tool_calls

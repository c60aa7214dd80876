"""Structured data extraction from Claude responses."""

import json
import re
from typing import Any, Dict

from .exceptions import ResponseParsingError
from .logger import get_logger
from .tools.execution import block_to_dict

logger = get_logger(__name__)

_JSON_FENCE = re.compile(r"```json\n([\s\S]*?)\n```")


def extract_text(content: Any) -> str:
    """Concatenate the text of all ``text`` blocks. Plain string content is returned as-is."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        data = block_to_dict(block)
        if data.get("type") == "text":
            parts.append(data.get("text") or "")
    return "".join(parts)


def extract_structured_data(content: Any, tool_name: str) -> Dict[str, Any]:
    """Pull a structured payload out of a response.

    The input of the first ``tool_use`` block named ``tool_name`` wins. Otherwise the first
    fenced ```json block of the response text is parsed.

    Args:
        content: Response content (string or content blocks).
        tool_name: Name of the tool Claude was asked to fill in.

    Returns:
        The decoded payload.

    Raises:
        ResponseParsingError: If no payload is present or the fenced JSON does not decode.
    """
    if content and not isinstance(content, str):
        for block in content:
            data = block_to_dict(block)
            if data.get("type") == "tool_use" and data.get("name") == tool_name and data.get("input"):
                return dict(data["input"])

    match = _JSON_FENCE.search(extract_text(content))
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError as exc:
            logger.error("Fenced JSON in Claude response does not decode: %s", exc)
            raise ResponseParsingError("Failed to parse JSON from Claude response") from exc

    raise ResponseParsingError("Failed to extract structured data from Claude response")

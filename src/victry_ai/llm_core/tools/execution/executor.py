"""Concurrent execution of tool calls against locally registered handlers."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Dict, Mapping, Optional, Sequence

from ...exceptions import ToolExecutionError
from ...logger import get_logger
from ..models import ToolCall, ToolExecutionResult, ToolHandler, ToolOutput

logger = get_logger(__name__)

GENERIC_TOOL_ERROR = "Tool execution failed"


async def execute_tool_calls(
    tool_calls: Sequence[ToolCall],
    handlers: Mapping[str, ToolHandler],
    *,
    tool_timeout: Optional[float] = None,
) -> list[ToolExecutionResult]:
    """Execute tool calls concurrently using the registered handlers.

    One failing or missing tool never aborts its siblings: every failure is reported
    as ``ToolOutput(output=None, error=...)`` in the call's slot.

    Args:
        tool_calls: Calls to execute.
        handlers: Mapping of tool names to handlers.
        tool_timeout: Optional timeout in seconds per call.

    Returns:
        One result per call, in the order of ``tool_calls``. Never raises.
    """
    if not tool_calls:
        return []

    logger.info("Executing %d tool call(s).", len(tool_calls))
    outputs = await asyncio.gather(*(_run_tool_call(call, handlers, tool_timeout) for call in tool_calls))
    # gather keeps argument order, so outputs line up with tool_calls by index
    return [ToolExecutionResult(input=call, output=output) for call, output in zip(tool_calls, outputs)]


async def _run_tool_call(
    tool_call: ToolCall, handlers: Mapping[str, ToolHandler], tool_timeout: Optional[float]
) -> ToolOutput:
    handler = handlers.get(tool_call.name)
    if handler is None:
        msg = f"No handler registered for tool: {tool_call.name}"
        logger.warning(msg)
        return ToolOutput(output=None, error=msg)

    try:
        output = await _invoke(handler, tool_call.arguments, tool_timeout)
    except Exception as exc:
        logger.error("Error executing tool %s: %s", tool_call.name, exc, exc_info=True)
        return ToolOutput(output=None, error=str(exc) or GENERIC_TOOL_ERROR)

    logger.debug("Tool '%s' executed successfully.", tool_call.name)
    return ToolOutput(output=output)


async def _invoke(handler: ToolHandler, arguments: Dict[str, Any], tool_timeout: Optional[float]) -> Any:
    """Run a handler, sync or async, honoring the optional timeout.

    Raises:
        ToolExecutionError: If execution times out.
    """
    if inspect.iscoroutinefunction(handler):
        call = handler(arguments)
    else:
        call = asyncio.to_thread(handler, arguments)

    try:
        result = await asyncio.wait_for(call, timeout=tool_timeout)
        if inspect.isawaitable(result):
            result = await asyncio.wait_for(result, timeout=tool_timeout)
    except asyncio.TimeoutError as exc:
        raise ToolExecutionError(f"Tool execution timed out after {tool_timeout} seconds.") from exc
    return result

import asyncio
import time
from types import SimpleNamespace
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest

from victry_ai.llm_core.tools import (
    ToolCall,
    ToolExecutionResult,
    ToolOutput,
    build_tool_result_message,
    execute_tool_calls,
    extract_tool_calls,
    format_tool_results,
)
from victry_ai.llm_core.tools.execution import GENERIC_TOOL_ERROR


# --- extraction ---


def test_extract_tool_calls_from_blocks() -> None:
    content = [
        {"type": "text", "text": "Let me check."},
        {"type": "tool_use", "id": "toolu_1", "name": "match_skills", "input": {"resumeSkills": ["Python"]}},
        {"type": "tool_use", "id": "toolu_2", "name": "extract_keywords", "input": {"text": "abc"}},
    ]

    calls = extract_tool_calls(content)

    assert calls == [
        ToolCall(name="match_skills", arguments={"resumeSkills": ["Python"]}),
        ToolCall(name="extract_keywords", arguments={"text": "abc"}),
    ]


@pytest.mark.parametrize("content", [None, "", "plain text", [], [{"type": "text", "text": "hi"}]])
def test_extract_tool_calls_returns_none_without_tool_use(content: Any) -> None:
    assert extract_tool_calls(content) is None


def test_extract_tool_calls_prefers_name_over_id() -> None:
    calls = extract_tool_calls([{"type": "tool_use", "id": "toolu_9", "name": "calculate_ats_score", "input": {}}])
    assert calls is not None
    assert calls[0].name == "calculate_ats_score"


def test_extract_tool_calls_falls_back_to_id() -> None:
    calls = extract_tool_calls([{"type": "tool_use", "id": "test_tool", "input": {"value": "test"}}])
    assert calls == [ToolCall(name="test_tool", arguments={"value": "test"})]


def test_extract_tool_calls_defaults_missing_input() -> None:
    calls = extract_tool_calls([{"type": "tool_use", "name": "no_args", "input": None}])
    assert calls == [ToolCall(name="no_args", arguments={})]


def test_extract_tool_calls_skips_non_object_input(caplog: pytest.LogCaptureFixture) -> None:
    content = [
        {"type": "tool_use", "id": "toolu_1", "name": "broken", "input": "not an object"},
        {"type": "tool_use", "id": "toolu_2", "name": "listed", "input": [1, 2]},
        {"type": "tool_use", "id": "toolu_3", "name": "fine", "input": {"a": 1}},
    ]

    with caplog.at_level("WARNING"):
        calls = extract_tool_calls(content)

    assert calls == [ToolCall(name="fine", arguments={"a": 1})]
    assert "non-object input (str)" in caplog.text
    assert "non-object input (list)" in caplog.text


def test_extract_tool_calls_accepts_sdk_objects() -> None:
    # Provider SDK blocks are pydantic models; model_dump is what the extractor relies on
    block = MagicMock()
    block.model_dump.return_value = {"type": "tool_use", "id": "toolu_1", "name": "sdk_tool", "input": {"a": 1}}
    text = SimpleNamespace(type="text", text="hello")

    calls = extract_tool_calls([text, block])

    assert calls == [ToolCall(name="sdk_tool", arguments={"a": 1})]


# --- execution ---


@pytest.mark.asyncio
async def test_execute_tool_calls_success() -> None:
    handler = AsyncMock(return_value="Tool result")
    calls = [ToolCall(name="test_tool", arguments={"value": "test"})]

    results = await execute_tool_calls(calls, {"test_tool": handler})

    assert results == [ToolExecutionResult(input=calls[0], output=ToolOutput(output="Tool result"))]
    handler.assert_awaited_once_with({"value": "test"})


@pytest.mark.asyncio
async def test_execute_tool_calls_empty() -> None:
    assert await execute_tool_calls([], {}) == []


@pytest.mark.asyncio
async def test_execute_tool_calls_missing_handler_does_not_abort_siblings() -> None:
    calls = [ToolCall(name="unknown", arguments={}), ToolCall(name="known", arguments={})]

    results = await execute_tool_calls(calls, {"known": AsyncMock(return_value=1)})

    assert results[0].output == ToolOutput(output=None, error="No handler registered for tool: unknown")
    assert results[1].output == ToolOutput(output=1)


@pytest.mark.asyncio
async def test_execute_tool_calls_handler_error_is_captured() -> None:
    async def failing(arguments: Dict[str, Any]) -> Any:
        raise ValueError("X")

    async def ok(arguments: Dict[str, Any]) -> Any:
        return "fine"

    calls = [ToolCall(name="failing", arguments={}), ToolCall(name="ok", arguments={})]
    results = await execute_tool_calls(calls, {"failing": failing, "ok": ok})

    assert results[0].output.to_dict() == {"output": None, "error": "X"}
    assert results[1].output.to_dict() == {"output": "fine"}


@pytest.mark.asyncio
async def test_execute_tool_calls_error_without_message_uses_generic_text() -> None:
    async def failing(arguments: Dict[str, Any]) -> Any:
        raise RuntimeError()

    results = await execute_tool_calls([ToolCall(name="failing")], {"failing": failing})

    assert results[0].output.error == GENERIC_TOOL_ERROR


@pytest.mark.asyncio
async def test_execute_tool_calls_keeps_input_order() -> None:
    finished: List[str] = []

    def make_handler(name: str, delay: float) -> Any:
        async def handler(arguments: Dict[str, Any]) -> str:
            await asyncio.sleep(delay)
            finished.append(name)
            return name

        return handler

    handlers = {"slow": make_handler("slow", 0.05), "fast": make_handler("fast", 0.0)}
    calls = [ToolCall(name="slow"), ToolCall(name="fast")]

    results = await execute_tool_calls(calls, handlers)

    # Completion order differs from call order, results do not
    assert finished == ["fast", "slow"]
    assert [result.output.output for result in results] == ["slow", "fast"]
    assert [result.input for result in results] == calls


@pytest.mark.asyncio
async def test_execute_tool_calls_runs_sync_handlers() -> None:
    def blocking(arguments: Dict[str, Any]) -> int:
        time.sleep(0.01)
        return arguments["x"] + 1

    results = await execute_tool_calls([ToolCall(name="blocking", arguments={"x": 1})], {"blocking": blocking})

    assert results[0].output.output == 2


@pytest.mark.asyncio
async def test_execute_tool_calls_timeout() -> None:
    async def hanging(arguments: Dict[str, Any]) -> None:
        await asyncio.sleep(1)

    results = await execute_tool_calls([ToolCall(name="hanging")], {"hanging": hanging}, tool_timeout=0.01)

    assert results[0].output.failed
    assert "timed out" in results[0].output.error


# --- formatting ---


def test_format_tool_results() -> None:
    results = [
        ToolExecutionResult(input=ToolCall(name="test_tool"), output=ToolOutput(output="Tool result")),
        ToolExecutionResult(input=ToolCall(name="broken"), output=ToolOutput(output=None, error="boom")),
    ]

    block = format_tool_results(results)

    assert block == {
        "type": "tool_result",
        "tool_results": [
            {"tool_call_id": "test_tool", "output": "Tool result"},
            {"tool_call_id": "broken", "output": None},
        ],
    }


def test_format_tool_results_empty() -> None:
    assert format_tool_results([]) == {"type": "tool_result", "tool_results": []}


def test_build_tool_result_message() -> None:
    results = [ToolExecutionResult(input=ToolCall(name="t"), output=ToolOutput(output=3))]

    message = build_tool_result_message(results)

    assert message["role"] == "user"
    assert message["content"] == [format_tool_results(results)]


def test_execution_result_serialization() -> None:
    result = ToolExecutionResult(
        input=ToolCall(name="t", arguments={"a": 1}),
        output=ToolOutput(output=None, error="No handler registered for tool: t"),
    )
    assert result.to_dict() == {
        "input": {"name": "t", "arguments": {"a": 1}},
        "output": {"output": None, "error": "No handler registered for tool: t"},
    }

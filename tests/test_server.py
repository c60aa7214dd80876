import asyncio
import json
import logging
from types import SimpleNamespace
from typing import Any, Callable, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from victry_ai.llm_core import Settings, ToolRegistry
from victry_ai.llm_core.tools import create_tool
from victry_ai.server import create_app


class ScriptedUpstream:
    """Replays a fixed list of stream events."""

    def __init__(self, events: List[Any]) -> None:
        self._events = iter(events)
        self.close = AsyncMock()

    def __aiter__(self) -> "ScriptedUpstream":
        return self

    async def __anext__(self) -> Any:
        try:
            return next(self._events)
        except StopIteration:
            raise StopAsyncIteration


class QueuedUpstream:
    """Upstream whose events are pushed by the test; iteration blocks until one arrives."""

    _END = object()

    def __init__(self) -> None:
        self.events: asyncio.Queue[Any] = asyncio.Queue()
        self.close = AsyncMock(side_effect=self._close)

    async def _close(self) -> None:
        self.events.put_nowait(self._END)

    def text(self, value: str) -> None:
        self.events.put_nowait(SimpleNamespace(type="text", text=value))

    def fail(self, error: BaseException) -> None:
        self.events.put_nowait(error)

    def __aiter__(self) -> "QueuedUpstream":
        return self

    async def __anext__(self) -> Any:
        item = await self.events.get()
        if item is self._END:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item


class StreamManager:
    def __init__(self, upstream: Any = None, enter_error: Exception | None = None) -> None:
        self.upstream = upstream
        self.enter_error = enter_error

    async def __aenter__(self) -> Any:
        if self.enter_error is not None:
            raise self.enter_error
        return self.upstream

    async def __aexit__(self, *exc_info: Any) -> None:
        return None


@pytest.fixture
def registry() -> ToolRegistry:
    registry = ToolRegistry()

    async def test_tool(arguments: Dict[str, Any]) -> str:
        return "Tool result"

    registry.register(create_tool("test_tool", "A test tool", {"type": "object"}), func=test_tool)
    return registry


@pytest.fixture
def client(mock_client: MagicMock, settings: Settings, registry: ToolRegistry) -> TestClient:
    return TestClient(create_app(registry=registry, client=mock_client, settings=settings))


def test_completion_route(client: TestClient, mock_client: MagicMock, make_message: Callable[..., Any]) -> None:
    mock_client.messages.create.return_value = make_message([{"type": "text", "text": "Response from Claude"}])

    response = client.post("/api/ai/claude", json={"prompt": "Hello Claude", "maxTokens": 1000, "temperature": 0.5})

    assert response.status_code == 200
    body = response.json()
    assert body["content"] == "Response from Claude"
    assert body["type"] == "completion"
    assert body["usage"] == {"inputTokens": 10, "outputTokens": 20}
    assert "toolResults" not in body
    kwargs = mock_client.messages.create.call_args.kwargs
    assert kwargs["messages"] == [{"role": "user", "content": "Hello Claude"}]
    assert kwargs["max_tokens"] == 1000
    assert kwargs["temperature"] == 0.5


def test_completion_route_requires_input(client: TestClient, mock_client: MagicMock) -> None:
    response = client.post("/api/ai/claude", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Either prompt or messages is required"}
    mock_client.messages.create.assert_not_awaited()


def test_completion_route_rejects_invalid_body(client: TestClient) -> None:
    response = client.post("/api/ai/claude", json={"prompt": "Hi", "temperature": 2})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"


def test_completion_route_runs_enabled_tools(
    client: TestClient, mock_client: MagicMock, make_message: Callable[..., Any]
) -> None:
    mock_client.messages.create.side_effect = [
        make_message([{"type": "tool_use", "id": "toolu_1", "name": "test_tool", "input": {"value": "test"}}]),
        make_message([{"type": "text", "text": "Used the tool"}]),
    ]

    response = client.post("/api/ai/claude", json={"prompt": "Use the tool", "toolHandlers": ["test_tool"]})

    assert response.status_code == 200
    body = response.json()
    assert body["content"] == "Used the tool"
    assert body["toolResults"] == [
        {"input": {"name": "test_tool", "arguments": {"value": "test"}}, "output": {"output": "Tool result"}}
    ]
    follow_up = mock_client.messages.create.call_args_list[1].kwargs["messages"]
    assert follow_up[-1]["content"] == [
        {"type": "tool_result", "tool_results": [{"tool_call_id": "test_tool", "output": "Tool result"}]}
    ]


def test_completion_route_maps_provider_errors(client: TestClient, mock_client: MagicMock) -> None:
    mock_client.messages.create.side_effect = Exception("Rate limit exceeded")

    response = client.post("/api/ai/claude", json={"prompt": "Hi"})

    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit exceeded"}


def test_stream_route(client: TestClient, mock_client: MagicMock) -> None:
    upstream = ScriptedUpstream(
        [
            SimpleNamespace(type="message_start"),
            SimpleNamespace(type="text", text="Chunk 1"),
            SimpleNamespace(type="text", text="Chunk 2"),
            SimpleNamespace(type="message_stop"),
        ]
    )
    mock_client.messages.stream = MagicMock(return_value=StreamManager(upstream))

    response = client.post("/api/ai/claude-stream", json={"prompt": "Hello Claude"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "text/event-stream"
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["connection"] == "keep-alive"
    assert response.content == b"Chunk 1Chunk 2"
    upstream.close.assert_not_awaited()


def test_stream_route_requires_input(client: TestClient, mock_client: MagicMock) -> None:
    mock_client.messages.stream = MagicMock()

    response = client.post("/api/ai/claude-stream", json={"prompt": ""})

    assert response.status_code == 400
    assert response.json() == {"error": "Either prompt or messages is required"}
    mock_client.messages.stream.assert_not_called()


def test_stream_route_open_failure_is_json(client: TestClient, mock_client: MagicMock) -> None:
    mock_client.messages.stream = MagicMock(return_value=StreamManager(enter_error=Exception("Upstream exploded")))

    response = client.post("/api/ai/claude-stream", json={"prompt": "Hi"})

    assert response.status_code == 500
    assert response.json() == {"error": "Upstream exploded"}


def test_missing_api_key_is_a_server_error() -> None:
    app = create_app(settings=Settings(anthropic_api_key=None))

    with TestClient(app) as client:
        response = client.post("/api/ai/claude", json={"prompt": "Hi"})

    assert response.status_code == 500
    assert response.json() == {"error": "ANTHROPIC_API_KEY is not set in environment variables"}


def test_rejected_requests_log_at_debug(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="victry_ai"):
        client.post("/api/ai/claude", json={})
        client.post("/api/ai/claude", json={"prompt": "Hi", "temperature": 2})

    rejected = [record for record in caplog.records if record.getMessage().startswith("Rejected")]
    assert len(rejected) == 2
    assert all(record.levelno == logging.DEBUG for record in rejected)


# --- job analysis ---


def test_analyze_job_route(client: TestClient, mock_client: MagicMock, make_message: Callable[..., Any]) -> None:
    analysis = {"hardSkills": [{"skill": "Python", "importance": "must_have"}]}
    mock_client.messages.create.return_value = make_message(
        [{"type": "tool_use", "id": "toolu_1", "name": "job_analysis", "input": analysis}], stop_reason="tool_use"
    )

    response = client.post("/api/ai/analyze-job", json={"jobDescription": "Python developer wanted"})

    assert response.status_code == 200
    assert response.json() == {"analysis": analysis}
    kwargs = mock_client.messages.create.call_args.kwargs
    assert kwargs["tools"][0]["name"] == "job_analysis"


def test_analyze_job_route_parse_failure_is_500(
    client: TestClient, mock_client: MagicMock, make_message: Callable[..., Any]
) -> None:
    mock_client.messages.create.return_value = make_message([{"type": "text", "text": "No structured data here"}])

    response = client.post("/api/ai/analyze-job", json={"jobDescription": "Python developer wanted"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to parse job analysis response"}


def test_analyze_job_route_requires_description(client: TestClient, mock_client: MagicMock) -> None:
    response = client.post("/api/ai/analyze-job", json={"jobDescription": ""})

    assert response.status_code == 400
    mock_client.messages.create.assert_not_awaited()


# --- streaming over raw ASGI ---


async def _post_stream(app: Any, payload: Dict[str, Any], sent: List[Dict[str, Any]], disconnect: asyncio.Event) -> None:
    """POST to the streaming route; the client goes away once ``disconnect`` is set."""
    body = json.dumps(payload).encode("utf-8")
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/api/ai/claude-stream",
        "raw_path": b"/api/ai/claude-stream",
        "root_path": "",
        "query_string": b"",
        "headers": [(b"content-type", b"application/json"), (b"content-length", str(len(body)).encode())],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }
    request_sent = False

    async def receive() -> Dict[str, Any]:
        nonlocal request_sent
        if not request_sent:
            request_sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        await disconnect.wait()
        return {"type": "http.disconnect"}

    async def send(message: Dict[str, Any]) -> None:
        sent.append(message)

    await app(scope, receive, send)


async def _wait_until(condition: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() > deadline:
            raise AssertionError("Condition not met in time")
        await asyncio.sleep(0.01)


def _body_chunks(sent: List[Dict[str, Any]]) -> List[bytes]:
    return [message["body"] for message in sent if message["type"] == "http.response.body" and message.get("body")]


@pytest.mark.asyncio
async def test_stream_route_client_disconnect_closes_upstream_once(
    mock_client: MagicMock, settings: Settings, registry: ToolRegistry
) -> None:
    upstream = QueuedUpstream()
    mock_client.messages.stream = MagicMock(return_value=StreamManager(upstream))
    app = create_app(registry=registry, client=mock_client, settings=settings)
    sent: List[Dict[str, Any]] = []
    disconnect = asyncio.Event()

    call = asyncio.create_task(_post_stream(app, {"prompt": "Hello Claude"}, sent, disconnect))
    upstream.text("Chunk 1")
    await _wait_until(lambda: _body_chunks(sent) == [b"Chunk 1"])

    # Upstream is now blocked waiting for its next event
    disconnect.set()
    await asyncio.wait_for(call, timeout=2.0)
    await _wait_until(lambda: upstream.close.await_count > 0)
    await asyncio.sleep(0.05)

    assert sent[0]["type"] == "http.response.start"
    assert sent[0]["status"] == 200
    upstream.close.assert_awaited_once()
    assert _body_chunks(sent) == [b"Chunk 1"]


@pytest.mark.asyncio
async def test_stream_route_upstream_failure_ends_body_with_error(
    mock_client: MagicMock, settings: Settings, registry: ToolRegistry
) -> None:
    upstream = QueuedUpstream()
    mock_client.messages.stream = MagicMock(return_value=StreamManager(upstream))
    app = create_app(registry=registry, client=mock_client, settings=settings)
    sent: List[Dict[str, Any]] = []

    call = asyncio.create_task(_post_stream(app, {"prompt": "Hello Claude"}, sent, asyncio.Event()))
    upstream.text("Chunk 1")
    await _wait_until(lambda: _body_chunks(sent) == [b"Chunk 1"])
    upstream.fail(RuntimeError("Stream failed"))

    # The response has already started, so the failure can only abort the body
    with pytest.raises(Exception) as exc_info:
        await asyncio.wait_for(call, timeout=2.0)
    assert not isinstance(exc_info.value, asyncio.TimeoutError)

    assert sent[0]["status"] == 200
    assert _body_chunks(sent) == [b"Chunk 1"]
    assert not any(message["type"] == "http.response.body" and not message.get("more_body") for message in sent)
    upstream.close.assert_not_awaited()

import os
from types import SimpleNamespace
from typing import Any, Callable, Iterator, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv, find_dotenv

from victry_ai.llm_core import Settings
from victry_ai.llm_impl.anthropic_api import reset_anthropic_client

# Load environment variables from .env file (project root or the current working directory)
env_file = find_dotenv() or os.path.join(os.getcwd(), ".env")
if os.path.exists(env_file):
    load_dotenv(env_file)


@pytest.fixture(autouse=True)
def fresh_anthropic_client() -> Iterator[None]:
    """Every test starts without a shared Anthropic client."""
    reset_anthropic_client()
    yield
    reset_anthropic_client()


@pytest.fixture
def settings() -> Settings:
    # Explicit values so a local .env never leaks into assertions
    return Settings(anthropic_api_key="test-key", default_model="claude-test-model")


@pytest.fixture
def make_message() -> Callable[..., Any]:
    """Factory for provider responses shaped like ``anthropic.types.Message``."""

    def factory(
        content: List[Any],
        *,
        message_id: str = "msg_123",
        model: str = "claude-test-model",
        stop_reason: str = "end_turn",
        input_tokens: int = 10,
        output_tokens: int = 20,
    ) -> SimpleNamespace:
        return SimpleNamespace(
            id=message_id,
            type="message",
            role="assistant",
            content=content,
            model=model,
            stop_reason=stop_reason,
            stop_sequence=None,
            usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
        )

    return factory


@pytest.fixture
def mock_client() -> MagicMock:
    """An Anthropic client double; tests set ``messages.create`` / ``messages.stream`` behaviour."""
    client = MagicMock()
    client.messages.create = AsyncMock()
    return client

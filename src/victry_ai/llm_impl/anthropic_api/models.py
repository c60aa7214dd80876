from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from victry_ai.llm_core.messages import ConversationMessage
from victry_ai.llm_core.tools.models import ToolDescriptor


def _to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class CamelModel(BaseModel):
    """Base model with camelCase JSON serialization."""

    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,  # Allow both snake_case and camelCase in input
    )


class CompletionRequest(CamelModel):
    """
    A completion request, as posted to the API routes.

    Either ``prompt`` or a non-empty ``messages`` list is required. Unset sampling options
    fall back to the configured defaults.

    Attributes:
        prompt: A single user prompt.
        messages: An explicit conversation, sent in order.
        max_tokens: Completion budget.
        temperature: Sampling temperature.
        model: Claude model identifier.
        system: System prompt.
        stop_sequences: Custom stop sequences.
        top_k: Top-k sampling.
        top_p: Nucleus sampling.
        tools: Tools Claude may call.
        tool_handlers: Names of server-side handlers enabled for this request. Only used by
                       the non-streaming route.
    """

    prompt: Optional[str] = None
    messages: Optional[List[ConversationMessage]] = None
    max_tokens: Optional[int] = Field(default=None, ge=1)
    temperature: Optional[float] = Field(default=None, ge=0, le=1)
    model: Optional[str] = None
    system: Optional[str] = None
    stop_sequences: Optional[List[str]] = None
    top_k: Optional[int] = Field(default=None, ge=0)
    top_p: Optional[float] = Field(default=None, ge=0, le=1)
    tools: Optional[List[ToolDescriptor]] = None
    tool_handlers: Optional[List[str]] = None


class JobAnalysisRequest(CamelModel):
    """Body of the job analysis route."""

    job_description: str = Field(min_length=1)
    model: Optional[str] = None


class Usage(CamelModel):
    """Token accounting for one provider response."""

    input_tokens: int = 0
    output_tokens: int = 0


class CompletionResponse(CamelModel):
    """
    Public shape of a finished completion.

    Attributes:
        id: Provider message id.
        type: Always ``"completion"``.
        role: Author of the answer.
        content: Concatenated text of all text blocks.
        model: Model that produced the answer.
        stop_reason: Why generation stopped.
        stop_sequence: The stop sequence that matched, if any.
        usage: Token usage of the final provider call.
        tool_results: Tool execution results, present only when a tool round ran.
    """

    id: str
    type: str = "completion"
    role: str = "assistant"
    content: str
    model: str
    stop_reason: Optional[str] = None
    stop_sequence: Optional[str] = None
    usage: Usage
    tool_results: Optional[List[Dict[str, Any]]] = None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize with camelCase keys; ``toolResults`` only appears after a tool round."""
        payload = self.model_dump(by_alias=True)
        if payload["toolResults"] is None:
            del payload["toolResults"]
        return payload

"""Non-streaming Claude completions with a single round of local tool execution."""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from anthropic import AsyncAnthropic

from victry_ai.llm_core.config import Settings
from victry_ai.llm_core.exceptions import InvalidRequestError, ResponseParsingError
from victry_ai.llm_core.logger import get_logger
from victry_ai.llm_core.messages import (
    ConversationMessage,
    ImageBlock,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from victry_ai.llm_core.parsing import extract_structured_data, extract_text
from victry_ai.llm_core.tools import (
    ToolExecutionResult,
    ToolHandler,
    build_tool_result_message,
    convert_to_provider_tool,
    execute_tool_calls,
    extract_tool_calls,
)
from victry_ai.llm_core.tools.catalog import job_analysis_tool
from victry_ai.llm_core.tools.execution import block_to_dict
from .client import get_anthropic_client, handle_provider_error
from .models import CompletionRequest, CompletionResponse, Usage

logger = get_logger(__name__)

MISSING_INPUT_MESSAGE = "Either prompt or messages is required"

JOB_ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert recruiter. Analyze the job description you are given and record the "
    "required skills, qualifications, keywords, company culture and experience level using the "
    "job_analysis tool."
)


def normalize_messages(request: CompletionRequest) -> List[Dict[str, Any]]:
    """Turn the request's prompt or messages into provider message params.

    Raises:
        InvalidRequestError: If neither a prompt nor a non-empty message list is present.
    """
    if request.messages:
        return convert_to_provider_messages(request.messages)
    if request.prompt:
        return [{"role": "user", "content": request.prompt}]
    logger.debug("Rejected completion request without prompt or messages.")
    raise InvalidRequestError(MISSING_INPUT_MESSAGE)


def convert_to_provider_messages(messages: Sequence[ConversationMessage]) -> List[Dict[str, Any]]:
    """Convert conversation messages to the Anthropic SDK message format, preserving order.

    Raises:
        InvalidRequestError: If an image block does not carry a base64 source.
    """
    converted = []
    for message in messages:
        if isinstance(message.content, str):
            converted.append({"role": message.role, "content": message.content})
            continue
        converted.append({"role": message.role, "content": [_convert_block(block) for block in message.content]})
    return converted


def _convert_block(block: Any) -> Dict[str, Any]:
    if isinstance(block, TextBlock):
        return {"type": "text", "text": block.text}
    if isinstance(block, ImageBlock):
        if block.source.type != "base64":
            raise InvalidRequestError("Unsupported image source type")
        return {"type": "image", "source": block.source.model_dump()}
    if isinstance(block, ToolUseBlock):
        return {"type": "tool_use", **block.model_dump(exclude={"type"}, exclude_none=True)}
    if isinstance(block, ToolResultBlock):
        return block.model_dump()
    raise InvalidRequestError(f"Unsupported content block: {block!r}")


def build_message_params(
    request: CompletionRequest, messages: List[Dict[str, Any]], settings: Settings
) -> Dict[str, Any]:
    """Assemble the ``messages.create`` keyword arguments.

    Optional parameters are only included when the request sets them.
    """
    params: Dict[str, Any] = {
        "model": request.model or settings.default_model,
        "max_tokens": request.max_tokens or settings.max_tokens,
        "temperature": request.temperature if request.temperature is not None else settings.temperature,
        "messages": messages,
    }
    if request.system:
        params["system"] = request.system
    if request.stop_sequences:
        params["stop_sequences"] = list(request.stop_sequences)
    if request.top_k is not None:
        params["top_k"] = request.top_k
    if request.top_p is not None:
        params["top_p"] = request.top_p
    if request.tools:
        params["tools"] = [convert_to_provider_tool(tool) for tool in request.tools]
    return params


def build_completion_response(
    response: Any, tool_results: Optional[Sequence[ToolExecutionResult]] = None
) -> CompletionResponse:
    """Map a provider message onto the public completion shape."""
    usage = response.usage
    return CompletionResponse(
        id=response.id,
        role=getattr(response, "role", None) or "assistant",
        content=extract_text(response.content),
        model=response.model,
        stop_reason=response.stop_reason or None,
        stop_sequence=response.stop_sequence or None,
        usage=Usage(input_tokens=usage.input_tokens, output_tokens=usage.output_tokens),
        tool_results=[result.to_dict() for result in tool_results] if tool_results is not None else None,
    )


class ClaudeCompletion:
    """
    Drives one completion request to a final answer.

    Request flow: validate and normalize, call Claude, and if the response asks for tools,
    execute them locally, append the assistant turn plus the tool results, and call Claude
    once more. Only one tool round is performed.
    """

    def __init__(
        self,
        client: Optional[AsyncAnthropic] = None,
        settings: Optional[Settings] = None,
        tool_timeout: Optional[float] = None,
    ):
        """
        Initializes the completion orchestrator.

        Args:
            client: Anthropic client. Defaults to the shared client from ``get_anthropic_client``,
                    resolved on first use.
            settings: Request defaults and client configuration. Defaults to ``Settings.from_env()``.
            tool_timeout: Optional timeout in seconds for each tool handler.
        """
        self._client = client
        self.settings = settings or Settings.from_env()
        self.tool_timeout = tool_timeout

    @property
    def client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = get_anthropic_client(self.settings)
        return self._client

    async def complete(
        self,
        request: CompletionRequest,
        tool_handlers: Optional[Mapping[str, ToolHandler]] = None,
    ) -> CompletionResponse:
        """
        Run a completion request.

        Args:
            request: The completion request.
            tool_handlers: Handlers for tools Claude may call. Without a mapping, a response
                           that asks for tools is returned as-is.

        Returns:
            The final answer, with ``tool_results`` set when a tool round ran.

        Raises:
            InvalidRequestError: If the request has neither prompt nor messages.
            ProviderError: If a call to Claude fails.
        """
        messages = normalize_messages(request)
        params = build_message_params(request, messages, self.settings)

        response = await self._invoke(params)

        tool_calls = extract_tool_calls(response.content)
        if tool_calls is None:
            return build_completion_response(response)

        if tool_handlers is None:
            logger.info("Claude requested %d tool call(s) but no handlers were supplied.", len(tool_calls))
            return build_completion_response(response)

        results = await execute_tool_calls(tool_calls, tool_handlers, tool_timeout=self.tool_timeout)

        follow_up_messages = [
            *params["messages"],
            {"role": "assistant", "content": [block_to_dict(block) for block in response.content]},
            build_tool_result_message(results),
        ]
        logger.info("Sending %d tool result(s) back to Claude.", len(results))
        final_response = await self._invoke({**params, "messages": follow_up_messages})

        return build_completion_response(final_response, tool_results=results)

    async def analyze_text(self, text: str, system_prompt: str, **options: Any) -> CompletionResponse:
        """Send ``text`` as the prompt under a task-specific system prompt.

        Args:
            text: Text to analyze.
            system_prompt: Instructions steering the analysis.
            **options: Further ``CompletionRequest`` fields (e.g. ``max_tokens``, ``tools``).
        """
        request = CompletionRequest(prompt=text, system=system_prompt, **options)
        return await self.complete(request)

    async def create_message(self, request: CompletionRequest) -> Any:
        """
        Send a request once and return Claude's message untouched.

        No tools are executed and the content blocks are kept, so callers can read
        ``tool_use`` inputs themselves.

        Raises:
            InvalidRequestError: If the request has neither prompt nor messages.
            ProviderError: If the call to Claude fails.
        """
        messages = normalize_messages(request)
        return await self._invoke(build_message_params(request, messages, self.settings))

    async def analyze_job(self, job_description: str, **options: Any) -> Dict[str, Any]:
        """
        Have Claude fill in ``job_analysis_tool`` for a job description.

        Args:
            job_description: The job posting text.
            **options: Further ``CompletionRequest`` fields. ``temperature`` defaults to 0.3
                       and ``max_tokens`` to 2048.

        Returns:
            The structured analysis: the tool input, or fenced JSON from the response text.

        Raises:
            ResponseParsingError: If the response carries no decodable analysis.
            ProviderError: If the call to Claude fails.
        """
        options.setdefault("system", JOB_ANALYSIS_SYSTEM_PROMPT)
        options.setdefault("temperature", 0.3)
        options.setdefault("max_tokens", 2048)
        request = CompletionRequest(prompt=job_description, tools=[job_analysis_tool], **options)

        message = await self.create_message(request)
        try:
            return extract_structured_data(message.content, job_analysis_tool.name)
        except ResponseParsingError as exc:
            logger.error("Error parsing job analysis response: %s", exc.message)
            raise ResponseParsingError("Failed to parse job analysis response") from exc

    async def _invoke(self, params: Dict[str, Any]) -> Any:
        try:
            return await self.client.messages.create(**params)
        except Exception as exc:
            raise handle_provider_error(exc) from exc

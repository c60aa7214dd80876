from .client import DEFAULT_CLAUDE_MODEL, get_anthropic_client, handle_provider_error, reset_anthropic_client
from .core import ClaudeCompletion, convert_to_provider_messages
from .models import CompletionRequest, CompletionResponse, JobAnalysisRequest, Usage
from .streaming import ClaudeStreaming, OutboundChannel, StreamSession

__all__ = [
    "DEFAULT_CLAUDE_MODEL",
    "get_anthropic_client",
    "handle_provider_error",
    "reset_anthropic_client",
    "ClaudeCompletion",
    "convert_to_provider_messages",
    "CompletionRequest",
    "CompletionResponse",
    "JobAnalysisRequest",
    "Usage",
    "ClaudeStreaming",
    "OutboundChannel",
    "StreamSession",
]

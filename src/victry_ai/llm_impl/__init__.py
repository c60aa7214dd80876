"""Provider implementations. Claude is the only supported provider."""

from .anthropic_api import ClaudeCompletion, ClaudeStreaming, CompletionRequest, CompletionResponse

__all__ = ["ClaudeCompletion", "ClaudeStreaming", "CompletionRequest", "CompletionResponse"]

"""Expose the conversation message and content block models."""

from .models import (
    ContentBlock,
    ConversationMessage,
    ImageBlock,
    ImageSource,
    TextBlock,
    ToolResultBlock,
    ToolResultEntry,
    ToolUseBlock,
)

__all__ = [
    "ContentBlock",
    "ConversationMessage",
    "ImageBlock",
    "ImageSource",
    "TextBlock",
    "ToolResultBlock",
    "ToolResultEntry",
    "ToolUseBlock",
]

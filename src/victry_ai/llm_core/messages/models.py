"""Conversation message and content block models for the Claude Messages API."""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class TextBlock(BaseModel):
    """Plain text content."""

    type: Literal["text"] = "text"
    text: str = ""


class ImageSource(BaseModel):
    """Inline image payload. Only base64 sources are accepted by the provider conversion."""

    type: str = "base64"
    media_type: str
    data: str


class ImageBlock(BaseModel):
    """Image content sent by the user."""

    type: Literal["image"] = "image"
    source: ImageSource


class ToolUseBlock(BaseModel):
    """The model's request to run a tool.

    Two provider response shapes are in circulation: one names the tool in ``name``,
    the other only carries an identifier in ``id``. ``tool_name`` resolves the two
    with ``name`` taking precedence.

    Attributes:
        id: Provider-assigned identifier of the call.
        name: Name of the requested tool.
        input: Arguments for the tool.
    """

    type: Literal["tool_use"] = "tool_use"
    id: Optional[str] = None
    name: Optional[str] = None
    input: Dict[str, Any] = Field(default_factory=dict)

    @property
    def tool_name(self) -> Optional[str]:
        """The tool name, falling back to the call id."""
        return self.name or self.id


class ToolResultEntry(BaseModel):
    """Outcome of a single tool call, keyed by the tool call it answers."""

    tool_call_id: str
    output: Any = None


class ToolResultBlock(BaseModel):
    """Results of all tool calls of the preceding assistant turn, in call order."""

    type: Literal["tool_result"] = "tool_result"
    tool_results: List[ToolResultEntry] = Field(default_factory=list)


ContentBlock = Annotated[
    Union[TextBlock, ImageBlock, ToolUseBlock, ToolResultBlock],
    Field(discriminator="type"),
]


class ConversationMessage(BaseModel):
    """A single turn of the conversation sent to Claude.

    Attributes:
        role: Author of the turn.
        content: Either plain text or an ordered list of content blocks.
    """

    role: Literal["user", "assistant"]
    content: Union[str, List[ContentBlock]]

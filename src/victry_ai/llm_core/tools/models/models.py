"""Tool descriptor and registry entry models."""

import copy
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

ToolHandler = Callable[..., Union[Any, Awaitable[Any]]]
"""Handler for a tool call. Receives the call arguments as one dict, may be sync or async."""


class ToolDescriptor(BaseModel):
    """
    Describes a tool Claude may ask to invoke.

    Immutable once constructed; the schema is deep-copied on the way in. On the wire (API
    request bodies) the schema field is accepted as ``inputSchema`` or ``input_schema``.

    Attributes:
        name: The name of the tool, unique within a request.
        description: What the tool does, shown to the model.
        input_schema: JSON schema describing the tool's arguments.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    @field_validator("input_schema", mode="before")
    @classmethod
    def _own_schema(cls, value: Any) -> Any:
        # The descriptor keeps its own copy; later edits to the caller's dict do not leak in
        if isinstance(value, Mapping):
            return copy.deepcopy(dict(value))
        return value


class ToolDefinition(BaseModel):
    """
    A registered tool: its descriptor plus the local handler that executes it.

    Attributes:
        descriptor: The tool as presented to the model.
        func: The callable implementing the tool's logic. Called with the arguments dict.
        args_model: Optional Pydantic model used for validating and coercing arguments.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    descriptor: ToolDescriptor
    func: ToolHandler
    args_model: Optional[Type[BaseModel]] = None

    @property
    def name(self) -> str:
        return self.descriptor.name

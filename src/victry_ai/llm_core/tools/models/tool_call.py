"""Data models for a single round of tool execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ToolCall:
    """Represents a normalized tool invocation extracted from a model response."""

    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments}


@dataclass(frozen=True)
class ToolOutput:
    """Outcome of one tool call. ``error`` is set only when the call did not succeed."""

    output: Any = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"output": self.output}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class ToolExecutionResult:
    """Pairs a tool call with its outcome."""

    input: ToolCall
    output: ToolOutput

    def to_dict(self) -> Dict[str, Any]:
        return {"input": self.input.to_dict(), "output": self.output.to_dict()}

"""Runtime configuration for the Claude client and request defaults."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_CLAUDE_MODEL = "claude-3-7-sonnet-20250219"


class Settings(BaseModel):
    """
    Configuration parameters for talking to the Anthropic API.

    Attributes:
        anthropic_api_key: Credential used to build the provider client. Read once, when the
                           client singleton is first constructed.
        default_model: Model used when a request does not name one.
        max_retries: Retry budget handed to the provider SDK. The orchestrators never retry.
        timeout: Per-request transport timeout in seconds, handed to the provider SDK.
        max_tokens: Default completion budget when a request does not set ``maxTokens``.
        temperature: Default sampling temperature. Must be between 0 and 1, inclusive.
    """

    anthropic_api_key: Optional[str] = None
    default_model: str = DEFAULT_CLAUDE_MODEL
    max_retries: int = Field(default=3, ge=0)
    timeout: float = Field(default=60.0, gt=0)
    max_tokens: int = Field(default=1024, ge=1)
    temperature: float = Field(default=0.7, ge=0, le=1)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and a ``.env`` file, if present)."""
        load_dotenv()

        values = {
            "anthropic_api_key": os.getenv("ANTHROPIC_API_KEY") or None,
            "default_model": os.getenv("VICTRY_CLAUDE_MODEL"),
            "max_retries": os.getenv("VICTRY_ANTHROPIC_MAX_RETRIES"),
            "timeout": os.getenv("VICTRY_ANTHROPIC_TIMEOUT"),
        }
        # Unset variables fall back to the field defaults
        return cls(**{key: value for key, value in values.items() if value is not None})

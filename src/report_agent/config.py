"""Run configuration, built once before a run and immutable afterwards."""

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from report_agent.agent_core.exceptions import ConfigError
from report_agent.agent_core.logger import get_logger

logger = get_logger(__name__)

Provider = Literal["openai", "gemini"]

DEFAULT_MODELS: Dict[str, str] = {
    "openai": "gpt-4o",
    "gemini": "gemini-2.5-flash",
}

_ENV_PREFIX = "REPORT_AGENT_"
_ENV_FIELDS = {
    "LOCATION": "location",
    "TOPIC": "topic",
    "PROVIDER": "provider",
    "MODEL": "model_name",
    "SEARCH_MODEL": "search_model_name",
    "OUTPUT": "output_path",
    "MAX_ITERATIONS": "max_iterations",
    "MAX_TOKENS": "max_tokens",
    "TEMPERATURE": "temperature",
    "TOOL_TIMEOUT": "tool_timeout",
}


class AgentConfig(BaseModel):
    """
    Settings of one agent run.

    Attributes:
        location: Location the survey data describes.
        topic: Survey topic.
        provider: Model provider, ``openai`` or ``gemini``.
        model_name: Model used for the conversation. Defaults per provider.
        search_model_name: Model used for web searches. Defaults to ``model_name``.
        output_path: Where the report document is written.
        max_iterations: Iteration budget of the agent loop.
        max_tokens: Maximum tokens per model turn.
        temperature: Sampling temperature.
        tool_timeout: Optional deadline in seconds for asynchronous tool handlers.
        base_url: Optional base URL of an OpenAI-compatible endpoint.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", protected_namespaces=())

    location: str = "Boston, MA"
    topic: str = "Ever marijuana use"
    provider: Provider = "openai"
    model_name: str = ""
    search_model_name: str = ""
    output_path: Path = Path("weekly_report.md")
    max_iterations: int = Field(default=15, ge=1)
    max_tokens: int = Field(default=4096, ge=1)
    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    tool_timeout: Optional[float] = Field(default=None, gt=0)
    base_url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _fill_model_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        provider = data.get("provider") or "openai"
        if not data.get("model_name"):
            data["model_name"] = DEFAULT_MODELS.get(provider, "")
        if not data.get("search_model_name"):
            data["search_model_name"] = data["model_name"]
        return data

    @classmethod
    def from_env(cls, **overrides: Any) -> "AgentConfig":
        """Build a configuration from ``REPORT_AGENT_*`` variables (and a .env file).

        Args:
            **overrides: Values that win over the environment; ``None`` values are ignored.

        Raises:
            ConfigError: If a value is invalid.
        """
        load_dotenv(find_dotenv(usecwd=True))

        values: Dict[str, Any] = {}
        for suffix, field_name in _ENV_FIELDS.items():
            raw = os.getenv(f"{_ENV_PREFIX}{suffix}")
            if raw:
                values[field_name] = raw
        base_url = os.getenv("OPENAI_BASE_URL")
        if base_url:
            values["base_url"] = base_url

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.create(**values)

    @classmethod
    def create(cls, **values: Any) -> "AgentConfig":
        """Validate values into a configuration, raising ConfigError instead of ValidationError."""
        try:
            return cls(**values)
        except ValidationError as exc:
            msg = f"Invalid configuration: {exc}"
            logger.error(msg)
            raise ConfigError(msg) from exc

    def api_key(self) -> str:
        """Return the API key of the configured provider.

        Raises:
            ConfigError: If the key is not set.
        """
        if self.provider == "openai":
            key = os.getenv("OPENAI_API_KEY")
            name = "OPENAI_API_KEY"
        else:
            key = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
            name = "GOOGLE_API_KEY or GEMINI_API_KEY"
        if not key:
            raise ConfigError(f"{name} environment variable not set")
        return key

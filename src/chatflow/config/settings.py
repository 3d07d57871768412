"""Settings configuration models.

Global settings for the AI collaborator, outbound HTTP, runner pacing and
logging. Loaded from YAML by :class:`chatflow.config.loader.SettingsLoader`.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class AISettings(BaseModel):
    """AI completion collaborator configuration."""

    provider: str = Field(default="gemini", description="Model provider (gemini, openai, anthropic, etc.)")
    model: str = Field(default="gemini-2.5-flash", description="Model identifier")
    api_key_env: str = Field(
        default="API_KEY", description="Environment variable holding the provider API key"
    )
    system_instruction: str = Field(
        default="You are a helpful assistant for a chatbot.",
        description="Instruction prepended to every completion",
    )
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Temperature for generation")
    max_tokens: int | None = Field(default=None, gt=0, description="Completion length cap")
    missing_key_message: str = Field(
        default="Configuration error: the AI API key is not set on the server.",
        description="Reply used when no API key is configured",
    )
    error_message: str = Field(
        default=(
            "Sorry, I couldn't process your AI request right now. "
            "Please check the API configuration."
        ),
        description="Reply used when the completion call fails",
    )


class HttpSettings(BaseModel):
    """Outbound HTTP collaborator configuration."""

    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    follow_redirects: bool = True


class RunnerSettings(BaseModel):
    """Flow runner behavior."""

    step_delay: float = Field(
        default=0.3, ge=0.0, description="Pause before each block, in seconds (UI pacing)"
    )
    welcome_message: str | None = Field(
        default=None, description="Synthetic bot message shown before the flow starts"
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: LogLevel = "INFO"
    json_file: str | None = Field(default=None, description="Rotating JSON log file path")


class Settings(BaseModel):
    """Root settings model."""

    ai: AISettings = Field(default_factory=AISettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file or directory."""
        from chatflow.config.loader import SettingsLoader

        return SettingsLoader.load(path)

"""Configuration models.

Pydantic v2 models; ``load_config()`` in :mod:`kubeconverge.config` fills
them from ``KUBECONVERGE_*`` environment variables.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

_VALID_LOG_LEVELS: frozenset[str] = frozenset({"debug", "info", "warning", "error"})


class LogConfig(BaseModel):
    """Logging settings."""

    level: str = "info"
    json_output: bool = True

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        normalised = value.lower()
        if normalised not in _VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value!r}")
        return normalised


class PollConfig(BaseModel):
    """Retry parameters for one convergence poll.

    Delay before attempt ``n`` (0-based) completes is
    ``initial_delay * backoff_factor ** n``; ``initial_get_delay`` is
    slept once before the first fetch. ``timeout`` bounds the whole poll
    in seconds; None disables the deadline.
    """

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default=5, ge=1)
    initial_delay: float = Field(default=1.0, ge=0.0)
    backoff_factor: float = Field(default=2.0, ge=1.0)
    initial_get_delay: float = Field(default=0.5, ge=0.0)
    timeout: float | None = Field(default=300.0, gt=0.0)

    def backoff(self, attempt: int) -> float:
        """Return the sleep after 0-based ``attempt``."""
        return self.initial_delay * self.backoff_factor**attempt


class KubeConvergeConfig(BaseModel):
    """Top-level configuration."""

    log: LogConfig = Field(default_factory=LogConfig)
    poll: PollConfig = Field(default_factory=PollConfig)
    kube_context: str = ""

"""Pydantic models describing blockon configuration."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RetryConfig(BaseModel):
    """Executor behaviour shared by all four retry variants."""

    model_config = ConfigDict(extra="allow")

    interval_ms: int = Field(default=50, ge=0)
    track_caller: bool = False
    compare: Literal["equality", "text"] = "equality"
    retry_on: List[str] = Field(default_factory=lambda: ["builtins.Exception"])

    @field_validator("retry_on")
    @classmethod
    def _validate_retry_on(cls, value: List[str]) -> List[str]:
        """Ensure every entry names an importable exception type."""

        if not value:
            raise ValueError("retry_on must name at least one exception type.")
        for dotted in value:
            _resolve_exception(dotted)
        return value

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000

    def exception_types(self) -> tuple[type[Exception], ...]:
        """Return the exception classes treated as retryable failures."""

        return tuple(_resolve_exception(dotted) for dotted in self.retry_on)


class LoggingConfig(BaseModel):
    """Handlers installed by the CLI."""

    model_config = ConfigDict(extra="allow")

    level: str = "INFO"
    log_path: Optional[Path] = None


class ProbeConfig(BaseModel):
    """Timeouts and expectations for the bundled resource probes."""

    model_config = ConfigDict(extra="allow")

    http_timeout_seconds: float = Field(default=5.0, gt=0)
    connect_timeout_seconds: float = Field(default=2.0, gt=0)
    expect_status: Optional[int] = Field(default=None, ge=100, le=599)


class BlockOnConfig(BaseModel):
    """Root configuration object."""

    model_config = ConfigDict(extra="allow")

    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    probes: ProbeConfig = Field(default_factory=ProbeConfig)


def _resolve_exception(dotted: str) -> type[Exception]:
    module_name, _, attr = dotted.rpartition(".")
    if not module_name:
        module_name = "builtins"
    try:
        candidate = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as exc:
        raise ValueError(f"Cannot import exception type '{dotted}'.") from exc
    if not (isinstance(candidate, type) and issubclass(candidate, Exception)):
        raise ValueError(f"'{dotted}' is not an Exception subclass.")
    return candidate


__all__ = [
    "BlockOnConfig",
    "LoggingConfig",
    "ProbeConfig",
    "RetryConfig",
]

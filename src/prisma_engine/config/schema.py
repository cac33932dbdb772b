"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from the environment, ``pyproject.toml`` and programmatic overrides into
the correct types with proper defaults.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from prisma_engine.constants import (
    BUSY_RETRY_DELAY,
    DEFAULT_RETRY,
    MAX_BUFFER,
    READINESS_RETRY_DELAY,
)


class EngineSettings(BaseSettings):
    """Pydantic settings schema for the query engine command layer.

    Environment variables use the ``PRISMA_ENGINE_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="PRISMA_ENGINE_",
        env_file=None,
        case_sensitive=False,
        extra="ignore",
    )

    query_engine_path: str | None = Field(
        default=None,
        description="Explicit path to the query engine binary",
    )

    engine_dir: str | None = Field(
        default=None,
        description="Directory holding query-engine-<platform> binaries",
    )

    retry: int = Field(
        default=DEFAULT_RETRY,
        description="Retries allowed for transient engine failures",
        ge=0,
    )

    readiness_delay: float = Field(
        default=READINESS_RETRY_DELAY,
        description="Seconds to wait after a 'please wait' response",
        ge=0,
    )

    busy_delay: float = Field(
        default=BUSY_RETRY_DELAY,
        description="Seconds to wait after an ETXTBSY launch failure",
        ge=0,
    )

    max_buffer: int = Field(
        default=MAX_BUFFER,
        description="Maximum bytes captured from engine stdout or stderr",
        ge=1,
    )

    rust_backtrace: bool = Field(
        default=True,
        description="Set RUST_BACKTRACE=1 for engine processes",
    )

    @field_validator("query_engine_path", "engine_dir", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Treat empty strings as unset paths."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def defaults(cls) -> dict[str, Any]:
        """Return schema defaults without consulting the environment."""
        return {name: field.default for name, field in cls.model_fields.items()}

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary suitable for SourceMap annotation."""
        return {name: getattr(self, name) for name in type(self).model_fields}

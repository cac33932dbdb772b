"""Core configuration data types.

Configuration follows a resolve-once, freeze-then-flow pattern: sources are
merged into a ``ResolvedConfig`` carrying audit metadata, which is frozen into
a ``FrozenConfig`` before it reaches the engine commands.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

from prisma_engine.constants import (
    BUSY_RETRY_DELAY,
    DEFAULT_RETRY,
    MAX_BUFFER,
    READINESS_RETRY_DELAY,
)

# --- Source Tracking Types ---

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]

FIELD_ORDER = (
    "query_engine_path",
    "engine_dir",
    "retry",
    "readiness_delay",
    "busy_delay",
    "max_buffer",
    "rust_backtrace",
)


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing."""

    query_engine_path: str | None
    engine_dir: str | None
    retry: int
    readiness_delay: float
    busy_delay: float
    max_buffer: int
    rust_backtrace: bool

    # Audit metadata - tracks where each field value came from
    origin: SourceMap

    def to_frozen(self) -> "FrozenConfig":
        """Convert to the immutable configuration used by engine commands."""
        return FrozenConfig(**{field: getattr(self, field) for field in FIELD_ORDER})

    def with_overrides(self, **overrides: object) -> "ResolvedConfig":
        """Create a new ResolvedConfig with programmatic overrides applied.

        Unknown fields are ignored.
        """
        new_values = self._asdict()
        new_origin = dict(self.origin)

        for field, value in overrides.items():
            if field in FIELD_ORDER:
                new_values[field] = value
                new_origin[field] = "programmatic"

        new_values["origin"] = new_origin
        return ResolvedConfig(**new_values)

    def audit(self) -> str:
        """Human-readable report of where each field came from."""
        lines = []
        for field in FIELD_ORDER:
            if field not in self.origin:
                continue
            origin = self.origin[field]
            value = getattr(self, field)
            if origin == "env":
                lines.append(f"{field}: env:PRISMA_ENGINE_{field.upper()}={value}")
            else:
                lines.append(f"{field}: {origin}:{value}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration attached to an engine client.

    Any attempt to modify this object will raise an exception.
    """

    query_engine_path: str | None = None
    engine_dir: str | None = None
    retry: int = DEFAULT_RETRY
    readiness_delay: float = READINESS_RETRY_DELAY
    busy_delay: float = BUSY_RETRY_DELAY
    max_buffer: int = MAX_BUFFER
    rust_backtrace: bool = True

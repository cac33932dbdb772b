"""Public API for the configuration system."""

from pathlib import Path
from typing import Any

from .resolver import ConfigResolver
from .scope import get_ambient_resolved_config
from .types import ResolvedConfig

# Global resolver instance for efficient reuse
_resolver = ConfigResolver()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    project_root: Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Precedence: Programmatic > Environment > pyproject.toml > Defaults.
    Inside a ``config_scope`` the scoped configuration replaces the lower
    three sources and ``programmatic`` is applied on top of it.

    Args:
        programmatic: Dictionary of programmatic overrides. Only known
                     configuration fields are used.
        project_root: Directory to search for pyproject.toml. If None,
                     searches the current directory and parents.

    Returns:
        ResolvedConfig with merged values and source tracking for audit.

    Raises:
        ValueError: If configuration validation fails.
        ConfigFileError: If pyproject.toml exists but is malformed.

    Example:
        config = resolve_config({"retry": 2, "readiness_delay": 1.0})
        print(config.audit())
    """
    ambient = get_ambient_resolved_config()
    if ambient is not None:
        if programmatic:
            return ambient.with_overrides(**programmatic)
        return ambient

    return _resolver.resolve(programmatic=programmatic, project_root=project_root)

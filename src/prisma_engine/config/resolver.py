"""Configuration resolution with precedence handling.

Merges configuration according to the documented precedence order:
Programmatic > Environment > Project file > Defaults
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .env_loader import EnvironmentConfigLoader
from .file_loader import FileConfigLoader
from .schema import EngineSettings
from .types import ConfigOrigin, ResolvedConfig

log = logging.getLogger(__name__)


class ConfigResolver:
    """Resolves configuration from multiple sources with proper precedence."""

    def __init__(self) -> None:
        """Initialize the configuration resolver."""
        self.file_loader = FileConfigLoader()
        self.env_loader = EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources with proper precedence.

        Args:
            programmatic: Programmatic overrides (highest precedence)
            project_root: Directory to search for pyproject.toml

        Returns:
            ResolvedConfig with merged values and source tracking.

        Raises:
            ValueError: If validation fails.
            ConfigFileError: If pyproject.toml is malformed.
        """
        merged: dict[str, Any] = {}
        origins: dict[str, ConfigOrigin] = {}

        def apply(values: dict[str, Any], origin: ConfigOrigin) -> None:
            for field, value in values.items():
                if field in merged:  # Only override known fields
                    merged[field] = value
                    origins[field] = origin

        # Step 1: schema defaults
        for field, value in EngineSettings.defaults().items():
            merged[field] = value
            origins[field] = "default"

        # Step 2: project file
        apply(self.file_loader.load_project_config(project_root=project_root), "file")

        # Step 3: environment
        apply(self.env_loader.load_env_config(), "env")

        # Step 4: programmatic overrides
        if programmatic:
            apply(programmatic, "programmatic")

        try:
            validated = EngineSettings(**merged).to_dict()
        except ValidationError as e:
            raise ValueError(f"Configuration validation failed: {e}") from e

        log.debug("Resolved engine configuration from %s", origins)
        return ResolvedConfig(**validated, origin=origins)

"""File-based configuration loading.

Reads the ``[tool.prisma_engine]`` table from the nearest ``pyproject.toml``.
"""

import os
from pathlib import Path
import tomllib
from typing import Any

PYPROJECT_PATH_ENV = "PRISMA_ENGINE_PYPROJECT_PATH"


class ConfigFileError(Exception):
    """Raised when configuration file loading fails."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        """Initialize with file path, message, and optional cause.

        Args:
            file_path: The file that failed to load
            message: Human-readable error message
            cause: The underlying exception that caused the failure
        """
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


class FileConfigLoader:
    """Loads configuration from ``pyproject.toml``."""

    def load_project_config(self, project_root: Path | None = None) -> dict[str, Any]:
        """Load the ``[tool.prisma_engine]`` table.

        Args:
            project_root: Directory to search for pyproject.toml. If None,
                         searches the current directory and its parents.

        Returns:
            Dictionary of configuration values from the file.
            Empty dict if no file exists or it has no prisma_engine section.

        Raises:
            ConfigFileError: If the file exists but cannot be parsed or the
                section is not a table.
        """
        pyproject_path = self._find_pyproject_toml(project_root)
        if not pyproject_path:
            return {}

        try:
            with Path(pyproject_path).open(mode="rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(
                pyproject_path, f"Failed to parse TOML: {e}", cause=e
            ) from e

        section = data.get("tool", {}).get("prisma_engine", {})
        if not isinstance(section, dict):
            raise ConfigFileError(
                pyproject_path, "[tool.prisma_engine] must be a table"
            )
        return dict(section)

    def _find_pyproject_toml(self, start_dir: Path | None = None) -> Path | None:
        """Find pyproject.toml by searching up the directory tree.

        ``PRISMA_ENGINE_PYPROJECT_PATH`` pins an explicit file when set.
        """
        explicit = os.getenv(PYPROJECT_PATH_ENV)
        if explicit:
            path = Path(explicit)
            return path if path.exists() else None

        current = Path(start_dir or Path.cwd()).resolve()
        while current != current.parent:
            pyproject_path = current / "pyproject.toml"
            if pyproject_path.exists():
                return pyproject_path
            current = current.parent

        return None

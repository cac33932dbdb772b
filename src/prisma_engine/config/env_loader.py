"""Environment variable configuration loading.

Reads ``PRISMA_ENGINE_*`` variables, plus the engine-path variable the rest of
the Prisma toolchain already honours (``PRISMA_QUERY_ENGINE_BINARY``).
"""

import os
from typing import Any

from pydantic import ValidationError

from prisma_engine.constants import ENGINE_BINARY_ENV

from .schema import EngineSettings

# Later entries win when several variables map to the same field
ENV_VARS: dict[str, str] = {
    ENGINE_BINARY_ENV: "query_engine_path",
    "PRISMA_ENGINE_QUERY_ENGINE_PATH": "query_engine_path",
    "PRISMA_ENGINE_ENGINE_DIR": "engine_dir",
    "PRISMA_ENGINE_RETRY": "retry",
    "PRISMA_ENGINE_READINESS_DELAY": "readiness_delay",
    "PRISMA_ENGINE_BUSY_DELAY": "busy_delay",
    "PRISMA_ENGINE_MAX_BUFFER": "max_buffer",
    "PRISMA_ENGINE_RUST_BACKTRACE": "rust_backtrace",
}


class EnvironmentConfigLoader:
    """Loads configuration from environment variables with type coercion."""

    def load_env_config(self) -> dict[str, Any]:
        """Load configuration from environment variables.

        Returns:
            Dictionary of configuration values found in the environment.
            Only includes fields that are actually set (not defaults).

        Raises:
            ValueError: If environment variables contain invalid values.
        """
        env_values: dict[str, Any] = {}
        for env_var, field_name in ENV_VARS.items():
            if env_var in os.environ:
                env_values[field_name] = os.environ[env_var]

        if not env_values:
            return {}

        try:
            settings = EngineSettings(**env_values)
        except ValidationError as e:
            offending = [
                f"{env_var}={os.environ[env_var]}"
                for env_var in ENV_VARS
                if env_var in os.environ
            ]
            raise ValueError(
                f"Invalid environment configuration ({', '.join(offending)}): {e}"
            ) from e

        return {field_name: getattr(settings, field_name) for field_name in env_values}

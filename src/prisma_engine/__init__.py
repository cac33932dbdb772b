"""Query engine commands for Prisma schemas.

Runs the platform-specific query engine binary to turn schema text into its
document model (DMMF) or configuration metadata, and to render a DMMF back to
schema text.
"""

import importlib.metadata
import logging

from prisma_engine.commands import (
    EngineClient,
    create_client,
    dmmf_to_dml,
    get_config,
    get_dmmf,
)
from prisma_engine.config import FrozenConfig, ResolvedConfig, resolve_config
from prisma_engine.exceptions import (
    DecodeError,
    EngineError,
    EngineLaunchError,
    EngineOutputTooLargeError,
    EngineReportedError,
    PlatformDetectionError,
    RetriesExhaustedError,
    StagingError,
    TransientBusyError,
    TransientError,
    TransientReadinessError,
)
from prisma_engine.models import (
    ConfigMetaFormat,
    DataSource,
    Datamodel,
    DMMFDocument,
    GeneratorConfig,
    WholeDMMF,
)
from prisma_engine.platforms import get_engine_path, get_platform
from prisma_engine.telemetry import TelemetryContext, TelemetryReporter

try:
    __version__ = importlib.metadata.version("prisma-engine-commands")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Prevents 'No handler found' warnings when the host app has no logging set up.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Commands
    "get_dmmf",
    "get_config",
    "dmmf_to_dml",
    "EngineClient",
    "create_client",
    # Binary location
    "get_platform",
    "get_engine_path",
    # Configuration
    "resolve_config",
    "ResolvedConfig",
    "FrozenConfig",
    # Result types
    "DMMFDocument",
    "Datamodel",
    "ConfigMetaFormat",
    "DataSource",
    "GeneratorConfig",
    "WholeDMMF",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
    # Exceptions
    "EngineError",
    "PlatformDetectionError",
    "StagingError",
    "EngineReportedError",
    "EngineOutputTooLargeError",
    "EngineLaunchError",
    "DecodeError",
    "TransientError",
    "TransientReadinessError",
    "TransientBusyError",
    "RetriesExhaustedError",
]

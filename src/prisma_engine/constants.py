"""
Project-wide constants for the query engine command layer
"""  # noqa: D200, D212, D415

# ==============================================================================
# Engine Binary
# ==============================================================================

ENGINE_BINARY_PREFIX = "query-engine"
WINDOWS_EXTENSION = ".exe"

# Engine CLI flags per operation
CLI_SUBCOMMAND = "cli"
DMMF_FLAG = "--dmmf"
GET_CONFIG_FLAG = "--get_config"
DMMF_TO_DML_FLAG = "--dmmf_to_dml"

# ==============================================================================
# Subprocess Environment
# ==============================================================================

DATAMODEL_PATH_ENV = "PRISMA_DML_PATH"
BACKTRACE_ENV = "RUST_BACKTRACE"
ENGINE_BINARY_ENV = "PRISMA_QUERY_ENGINE_BINARY"

_MB = 1000 * 1000
_GB = 1000 * _MB

MAX_BUFFER = 1 * _GB  # Ceiling for captured stdout/stderr, in bytes
READ_CHUNK_SIZE = 64 * 1024

# ==============================================================================
# Retry Configuration
# ==============================================================================

DEFAULT_RETRY = 4
READINESS_RETRY_DELAY = 5.0  # seconds
BUSY_RETRY_DELAY = 0.5  # seconds

# Printed by the engine while it is still warming up
READINESS_MARKER = "Please wait until the"

# ==============================================================================
# Platform Detection
# ==============================================================================

OS_RELEASE_PATH = "/etc/os-release"
DEFAULT_OPENSSL_VERSION = "1.1.x"
DEFAULT_LINUX_DISTRO = "debian"

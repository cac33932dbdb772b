"""Host platform detection and query engine binary resolution.

Engine binaries are published per platform as ``query-engine-<platform>``
(``.exe`` on Windows). Linux platforms are further split by distro family and
the OpenSSL version the binary links against, e.g. ``debian-openssl-1.1.x``.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
import platform as _platform
import re
import subprocess
import sys

from prisma_engine.constants import (
    DEFAULT_LINUX_DISTRO,
    DEFAULT_OPENSSL_VERSION,
    ENGINE_BINARY_PREFIX,
    OS_RELEASE_PATH,
    WINDOWS_EXTENSION,
)
from prisma_engine.exceptions import PlatformDetectionError

log = logging.getLogger(__name__)

_OPENSSL_VERSION_RE = re.compile(r"^\s*OpenSSL\s+(\d+)\.(\d+)")
_BSD_NAMES = ("freebsd", "openbsd", "netbsd")
_RHEL_IDS = frozenset({"rhel", "centos", "fedora", "amzn"})
_DEBIAN_IDS = frozenset({"debian", "ubuntu", "arch"})


def get_os_name(sys_platform: str | None = None) -> str:
    """Map ``sys.platform`` to the engine's OS naming."""
    plat = sys_platform or sys.platform
    if plat == "darwin":
        return "darwin"
    if plat in ("win32", "cygwin"):
        return "windows"
    if plat.startswith("linux"):
        return "linux"
    for bsd in _BSD_NAMES:
        if plat.startswith(bsd):
            return bsd
    raise PlatformDetectionError(f"Unsupported platform for the query engine: {plat}")


def read_os_release(path: str | Path = OS_RELEASE_PATH) -> dict[str, str]:
    """Parse an ``os-release`` file into a dict; empty when unreadable."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError:
        return {}

    values: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip().strip("\"'")
    return values


def detect_distro(os_release: dict[str, str]) -> str:
    """Classify a Linux distribution into the engine's distro families."""
    ids = {os_release.get("ID", "").lower()}
    ids.update(os_release.get("ID_LIKE", "").lower().split())

    if "alpine" in ids:
        return "musl"
    if "nixos" in ids:
        return "nixos"
    if ids & _RHEL_IDS:
        return "rhel"
    if ids & _DEBIAN_IDS:
        return "debian"
    return DEFAULT_LINUX_DISTRO


def parse_openssl_version(output: str) -> str | None:
    """Turn ``openssl version`` output into ``1.0.x``, ``1.1.x`` or ``3.0.x``."""
    match = _OPENSSL_VERSION_RE.match(output)
    if not match:
        return None
    major, minor = match.groups()
    if major == "3":
        return "3.0.x"
    return f"{major}.{minor}.x"


def get_openssl_version() -> str:
    """Ask the local ``openssl`` binary for its version."""
    try:
        result = subprocess.run(
            ["openssl", "version", "-v"],  # noqa: S607
            capture_output=True,
            text=True,
            check=True,
            timeout=10,
        )
    except (OSError, subprocess.SubprocessError) as e:
        log.warning(
            "Could not determine OpenSSL version (%s); assuming %s",
            e,
            DEFAULT_OPENSSL_VERSION,
        )
        return DEFAULT_OPENSSL_VERSION

    version = parse_openssl_version(result.stdout)
    if version is None:
        log.warning(
            "Unrecognised OpenSSL version output %r; assuming %s",
            result.stdout.strip(),
            DEFAULT_OPENSSL_VERSION,
        )
        return DEFAULT_OPENSSL_VERSION
    return version


@functools.cache
def get_platform() -> str:
    """Return the platform identity used in engine binary names.

    The result is cached for the lifetime of the process.

    Raises:
        PlatformDetectionError: If the host OS has no engine build.
    """
    os_name = get_os_name()
    if os_name != "linux":
        return os_name

    distro = detect_distro(read_os_release())
    if distro == "musl":
        return "linux-musl"
    if distro == "nixos":
        return "linux-nixos"

    openssl = get_openssl_version()
    machine = _platform.machine().lower()
    if machine in ("aarch64", "arm64") or machine.startswith("arm"):
        return f"linux-arm-openssl-{openssl}"
    return f"{distro}-openssl-{openssl}"


def engine_binary_name(platform: str) -> str:
    """Binary file name for ``platform``."""
    extension = WINDOWS_EXTENSION if platform == "windows" else ""
    return f"{ENGINE_BINARY_PREFIX}-{platform}{extension}"


def get_engine_path(
    platform: str | None = None, engine_dir: str | Path | None = None
) -> str:
    """Absolute path of the engine binary for ``platform``.

    ``engine_dir`` defaults to this package's install directory. The path is
    not checked for existence; a missing binary surfaces at launch.
    """
    platform = platform or get_platform()
    base = Path(engine_dir) if engine_dir else Path(__file__).resolve().parent
    return str((base / engine_binary_name(platform)).absolute())

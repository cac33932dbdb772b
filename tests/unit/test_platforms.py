from pathlib import Path
import subprocess
from unittest.mock import Mock

import pytest

from prisma_engine import platforms
from prisma_engine.exceptions import PlatformDetectionError
from prisma_engine.platforms import (
    detect_distro,
    engine_binary_name,
    get_engine_path,
    get_os_name,
    get_platform,
    parse_openssl_version,
    read_os_release,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("sys_platform", "expected"),
    [
        ("darwin", "darwin"),
        ("win32", "windows"),
        ("linux", "linux"),
        ("freebsd13", "freebsd"),
        ("openbsd7", "openbsd"),
    ],
)
def test_get_os_name(sys_platform, expected):
    assert get_os_name(sys_platform) == expected


@pytest.mark.unit
def test_unsupported_platform_raises():
    with pytest.raises(PlatformDetectionError, match="sunos5"):
        get_os_name("sunos5")


@pytest.mark.unit
def test_read_os_release_strips_quotes(tmp_path):
    path = tmp_path / "os-release"
    path.write_text('# comment\nID="ubuntu"\nID_LIKE=debian\n\nNAME=\'Ubuntu\'\n')

    assert read_os_release(path) == {"ID": "ubuntu", "ID_LIKE": "debian", "NAME": "Ubuntu"}


@pytest.mark.unit
def test_read_os_release_missing_file(tmp_path):
    assert read_os_release(tmp_path / "missing") == {}


@pytest.mark.unit
@pytest.mark.parametrize(
    ("os_release", "expected"),
    [
        ({"ID": "alpine"}, "musl"),
        ({"ID": "nixos"}, "nixos"),
        ({"ID": "centos", "ID_LIKE": "rhel fedora"}, "rhel"),
        ({"ID": "amzn"}, "rhel"),
        ({"ID": "pop", "ID_LIKE": "ubuntu debian"}, "debian"),
        ({"ID": "something-new"}, "debian"),
        ({}, "debian"),
    ],
)
def test_detect_distro(os_release, expected):
    assert detect_distro(os_release) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    ("output", "expected"),
    [
        ("OpenSSL 1.1.1f  31 Mar 2020", "1.1.x"),
        ("OpenSSL 1.0.2k-fips  26 Jan 2017", "1.0.x"),
        ("OpenSSL 3.0.2 15 Mar 2022 (Library: OpenSSL 3.0.2 15 Mar 2022)", "3.0.x"),
        ("LibreSSL 3.3.6", None),
    ],
)
def test_parse_openssl_version(output, expected):
    assert parse_openssl_version(output) == expected


@pytest.mark.unit
def test_openssl_failure_falls_back(monkeypatch, caplog):
    monkeypatch.setattr(
        platforms.subprocess,
        "run",
        Mock(side_effect=FileNotFoundError("openssl")),
    )

    assert platforms.get_openssl_version() == "1.1.x"
    assert "Could not determine OpenSSL version" in caplog.text


@pytest.mark.unit
def test_linux_platform_combines_distro_and_openssl(monkeypatch):
    monkeypatch.setattr(platforms.sys, "platform", "linux")
    monkeypatch.setattr(platforms, "read_os_release", lambda: {"ID": "fedora"})
    monkeypatch.setattr(
        platforms.subprocess,
        "run",
        Mock(
            return_value=subprocess.CompletedProcess(
                args=[], returncode=0, stdout="OpenSSL 1.0.2k  26 Jan 2017\n"
            )
        ),
    )
    monkeypatch.setattr(platforms._platform, "machine", lambda: "x86_64")

    assert get_platform() == "rhel-openssl-1.0.x"


@pytest.mark.unit
def test_linux_arm_platform(monkeypatch):
    monkeypatch.setattr(platforms.sys, "platform", "linux")
    monkeypatch.setattr(platforms, "read_os_release", lambda: {"ID": "debian"})
    monkeypatch.setattr(platforms, "get_openssl_version", lambda: "1.1.x")
    monkeypatch.setattr(platforms._platform, "machine", lambda: "aarch64")

    assert get_platform() == "linux-arm-openssl-1.1.x"


@pytest.mark.unit
def test_alpine_platform_skips_openssl(monkeypatch):
    monkeypatch.setattr(platforms.sys, "platform", "linux")
    monkeypatch.setattr(platforms, "read_os_release", lambda: {"ID": "alpine"})
    openssl = Mock()
    monkeypatch.setattr(platforms, "get_openssl_version", openssl)

    assert get_platform() == "linux-musl"
    openssl.assert_not_called()


@pytest.mark.unit
def test_get_platform_is_cached(monkeypatch):
    monkeypatch.setattr(platforms.sys, "platform", "darwin")
    assert get_platform() == "darwin"

    monkeypatch.setattr(platforms.sys, "platform", "win32")
    assert get_platform() == "darwin"


@pytest.mark.unit
def test_engine_binary_name_adds_exe_on_windows_only():
    assert engine_binary_name("windows") == "query-engine-windows.exe"
    assert engine_binary_name("darwin") == "query-engine-darwin"


@pytest.mark.unit
def test_engine_path_defaults_to_package_directory():
    path = Path(get_engine_path("debian-openssl-1.1.x"))

    assert path.is_absolute()
    assert path.name == "query-engine-debian-openssl-1.1.x"
    assert path.parent == Path(platforms.__file__).resolve().parent


@pytest.mark.unit
def test_engine_path_with_engine_dir_is_not_checked(tmp_path):
    path = get_engine_path("windows", tmp_path / "nowhere")

    assert path == str(tmp_path / "nowhere" / "query-engine-windows.exe")

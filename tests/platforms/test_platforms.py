import subprocess
from types import SimpleNamespace

import pytest
from lumea_release.errors import UnsupportedPlatformError
from lumea_release.platforms.platforms import (
    get_platform_path,
    is_platform_supported,
    is_rosetta_translated,
    resolve_platform,
)


@pytest.mark.parametrize("os_name,platform,launcher_path", [
    ("darwin", "darwin", "Lumea.app/Contents/MacOS/Lumea"),
    ("mas", "darwin", "Lumea.app/Contents/MacOS/Lumea"),
    ("mas-dev", "darwin", "Lumea.app/Contents/MacOS/Lumea"),
    ("linux", "linux", "lumea"),
    ("freebsd", "freebsd", "lumea"),
    ("openbsd", "openbsd", "lumea"),
    ("win32", "win32", "lumea.exe"),
    ("windows", "win32", "lumea.exe"),
])
def test_resolve_platform(os_name, platform, launcher_path):
    target = resolve_platform(os_name, "x64")

    assert target.os_name == os_name
    assert target.platform == platform
    assert target.launcher_path == launcher_path
    assert target.registry_id == f"{platform}-x64"


@pytest.mark.parametrize("machine,arch", [("x86_64", "x64"), ("amd64", "x64"), ("aarch64", "arm64"), ("arm64", "arm64")])
def test_resolve_platform_normalizes_arch(machine, arch):
    assert resolve_platform("linux", machine).arch == arch


@pytest.mark.parametrize("os_name", ["aix", "sunos", "android", ""])
def test_resolve_platform_unsupported(os_name):
    with pytest.raises(UnsupportedPlatformError) as exc:
        resolve_platform(os_name)

    assert exc.value.platform == os_name
    assert "not available on platform" in str(exc.value)


def test_get_platform_path():
    assert get_platform_path("win32") == "lumea.exe"
    assert get_platform_path("darwin") == "Lumea.app/Contents/MacOS/Lumea"


def test_is_platform_supported():
    assert is_platform_supported("linux")
    assert not is_platform_supported("aix")


@pytest.mark.parametrize("stdout,expected", [("1\n", True), ("0\n", False), ("", False)])
def test_is_rosetta_translated(monkeypatch, stdout, expected):
    monkeypatch.setattr(
        "lumea_release.platforms.platforms.subprocess.run",
        lambda *args, **kwargs: SimpleNamespace(stdout=stdout),
    )
    assert is_rosetta_translated() is expected


@pytest.mark.parametrize("error", [
    FileNotFoundError("sysctl"),
    subprocess.CalledProcessError(1, ["sysctl"]),
])
def test_is_rosetta_translated_probe_failure(monkeypatch, error):
    def fail(*args, **kwargs):
        raise error

    monkeypatch.setattr("lumea_release.platforms.platforms.subprocess.run", fail)
    assert is_rosetta_translated() is False

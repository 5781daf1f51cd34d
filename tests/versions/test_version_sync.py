import json
from pathlib import Path

import pytest
from lumea_release.errors import (
    MissingArgumentError,
    VersionMismatchError,
    VersionNotFoundError,
)
from lumea_release.types import VersionReading, VersionSourceKind
from lumea_release.versions.sources import (
    read_json_version,
    read_tag_version,
    read_toml_version,
)
from lumea_release.versions.sync import (
    check_versions,
    collect_readings,
    stamp_version,
    write_version,
)


def fake_git(monkeypatch, returncode=0, stdout="v1.2.0\n", stderr=""):
    calls = []

    async def run(*args, cwd=None):
        calls.append((args, cwd))
        return returncode, stdout, stderr

    monkeypatch.setattr("lumea_release.versions.sources.async_subprocess_run", run)
    return calls


def test_read_json_version(repo_root: Path):
    reading = read_json_version(repo_root / "package" / "package.json", root=repo_root)

    assert reading.source == "package/package.json"
    assert reading.kind is VersionSourceKind.JSON
    assert reading.normalized == "v1.2.0"


def test_read_toml_version_ignores_dependency_versions(repo_root: Path):
    reading = read_toml_version(repo_root / "core" / "Cargo.toml", root=repo_root)

    assert reading.source == "core/Cargo.toml"
    assert reading.raw == "1.2.0"


def test_read_json_version_missing_field(tmp_path: Path):
    manifest = tmp_path / "package.json"
    manifest.write_text(json.dumps({"name": "lumea"}))

    with pytest.raises(VersionNotFoundError):
        read_json_version(manifest)


@pytest.mark.asyncio
async def test_read_tag_version(monkeypatch, tmp_path: Path):
    calls = fake_git(monkeypatch)

    reading = await read_tag_version(tmp_path)

    assert reading.kind is VersionSourceKind.TAG
    assert reading.raw == "v1.2.0"
    assert calls == [(("git", "describe", "--tags", "--abbrev=0"), tmp_path)]


@pytest.mark.asyncio
async def test_read_tag_version_without_tag(monkeypatch, tmp_path: Path):
    fake_git(monkeypatch, returncode=128, stdout="", stderr="fatal: No names found")

    with pytest.raises(VersionNotFoundError) as exc:
        await read_tag_version(tmp_path)

    assert "please tag your commit" in str(exc.value)


@pytest.mark.parametrize("raw,normalized", [("1.2.0", "v1.2.0"), ("v1.2.0", "v1.2.0"), (" 1.2.0\n", "v1.2.0")])
def test_normalized_version(raw, normalized):
    assert VersionReading("x", VersionSourceKind.JSON, raw).normalized == normalized


@pytest.mark.asyncio
async def test_check_versions_match(monkeypatch, repo_root: Path):
    fake_git(monkeypatch, stdout="v1.2.0\n")

    readings = await collect_readings(repo_root, include_tag=True)

    assert [r.source for r in readings] == [
        "package/package.json",
        "api/package.json",
        "core/Cargo.toml",
        "git tag",
    ]
    assert check_versions(readings) == "v1.2.0"


@pytest.mark.asyncio
async def test_check_versions_tag_mismatch(monkeypatch, repo_root: Path):
    fake_git(monkeypatch, stdout="v1.3.0\n")
    readings = await collect_readings(repo_root, include_tag=True)

    with pytest.raises(VersionMismatchError) as exc:
        check_versions(readings)

    assert exc.value.mismatched == ["git tag"]
    message = str(exc.value)
    assert message.startswith("Version mismatch:")
    assert "package/package.json" in message
    assert "v1.3.0" in message


def test_check_versions_requires_readings():
    with pytest.raises(ValueError):
        check_versions([])


def test_write_version(repo_root: Path):
    json_paths = [repo_root / "package" / "package.json", repo_root / "api" / "package.json"]
    toml_path = repo_root / "core" / "Cargo.toml"

    written = write_version("2.0.0", json_paths, [toml_path])

    assert written == json_paths + [toml_path]
    package = json.loads(json_paths[0].read_text())
    assert package == {"name": "lumea", "version": "2.0.0", "main": "index.js"}
    assert not json_paths[0].read_text().endswith("\n")

    cargo = toml_path.read_text()
    assert 'version = "2.0.0"' in cargo
    # only the first version line is the package version
    assert 'serde = { version = "1.0" }' in cargo


def test_write_version_requires_version(repo_root: Path):
    with pytest.raises(MissingArgumentError) as exc:
        write_version(None, [repo_root / "package" / "package.json"])

    assert str(exc.value) == "Missing version"


def test_write_version_toml_without_version_line(tmp_path: Path):
    cargo = tmp_path / "Cargo.toml"
    cargo.write_text('[package]\nname = "core"\n')

    with pytest.raises(VersionNotFoundError):
        write_version("2.0.0", toml_paths=[cargo])


def test_stamp_version(tmp_path: Path):
    script = tmp_path / "install.js"
    script.write_text('const version = "CI_INPUT_VERSION";\nlog("CI_INPUT_VERSION");\n')

    assert stamp_version(script, "1.4.0") == 2
    assert script.read_text() == 'const version = "1.4.0";\nlog("1.4.0");\n'


def test_stamp_version_requires_version(tmp_path: Path):
    script = tmp_path / "install.js"
    script.write_text("CI_INPUT_VERSION")

    with pytest.raises(MissingArgumentError):
        stamp_version(script, "")
    assert script.read_text() == "CI_INPUT_VERSION"

"""Readers for the places a release version is recorded."""

import json
import tomllib
from pathlib import Path
from typing import Optional

from lumea_release.errors import VersionNotFoundError
from lumea_release.logging import get_logger
from lumea_release.types import VersionReading, VersionSourceKind
from lumea_release.utils.fs import async_subprocess_run

logger = get_logger(__name__)

TAG_SOURCE = "git tag"


def _label(path: Path, root: Optional[Path]) -> str:
    if root is not None:
        try:
            return Path(path).relative_to(root).as_posix()
        except ValueError:
            pass
    return Path(path).as_posix()


def read_json_version(path: Path, field: str = "version", root: Optional[Path] = None) -> VersionReading:
    """Read a version field from a JSON package descriptor."""
    source = _label(path, root)
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise VersionNotFoundError(source, f"cannot read manifest ({e})") from e

    value = data.get(field) if isinstance(data, dict) else None
    if not isinstance(value, str) or not value.strip():
        raise VersionNotFoundError(source, f"no '{field}' field")

    return VersionReading(source=source, kind=VersionSourceKind.JSON, raw=value)


def read_toml_version(path: Path, root: Optional[Path] = None) -> VersionReading:
    """Read ``package.version`` (or a top-level ``version``) from a TOML file."""
    source = _label(path, root)
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise VersionNotFoundError(source, f"cannot read manifest ({e})") from e

    package = data.get("package")
    value = package.get("version") if isinstance(package, dict) else None
    if value is None:
        value = data.get("version")

    if not isinstance(value, str) or not value.strip():
        raise VersionNotFoundError(source)

    return VersionReading(source=source, kind=VersionSourceKind.TOML, raw=value)


async def read_tag_version(repo: Path) -> VersionReading:
    """Read the nearest reachable git tag of a repository."""
    returncode, stdout, stderr = await async_subprocess_run(
        "git", "describe", "--tags", "--abbrev=0", cwd=repo
    )
    tag = stdout.strip()
    if returncode != 0 or not tag:
        logger.error({"event": "tag_lookup_failed", "repo": str(repo), "stderr": stderr.strip()})
        raise VersionNotFoundError(TAG_SOURCE, "no tag reachable, please tag your commit")

    return VersionReading(source=TAG_SOURCE, kind=VersionSourceKind.TAG, raw=tag)

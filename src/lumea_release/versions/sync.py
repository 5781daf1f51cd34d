"""Version consistency checks and version bumps across manifests."""

import re
from pathlib import Path
from typing import Iterable, Optional, Sequence

from lumea_release.constants import (
    DEFAULT_JSON_MANIFESTS,
    DEFAULT_TOML_MANIFESTS,
    VERSION_PLACEHOLDER,
)
from lumea_release.errors import (
    MissingArgumentError,
    VersionMismatchError,
    VersionNotFoundError,
)
from lumea_release.logging import get_logger
from lumea_release.types import VersionReading
from lumea_release.utils.fs import read_json, write_json
from lumea_release.versions.sources import (
    read_json_version,
    read_tag_version,
    read_toml_version,
)

logger = get_logger(__name__)

TOML_VERSION_RE = re.compile(r'version = "([^"]+)"')


def check_versions(readings: Sequence[VersionReading]) -> str:
    """Return the shared ``v``-prefixed version or raise on any disagreement."""
    if not readings:
        raise ValueError("No version sources to compare")

    expected = readings[0].normalized
    mismatched = [r.source for r in readings if r.normalized != expected]

    if mismatched:
        logger.error(
            {
                "event": "version_mismatch",
                "versions": {r.source: r.normalized for r in readings},
                "mismatched": mismatched,
            }
        )
        raise VersionMismatchError(
            [(r.source, r.normalized) for r in readings], mismatched
        )

    logger.info({"event": "versions_match", "version": expected, "sources": len(readings)})
    return expected


async def collect_readings(
    root: Path,
    json_paths: Iterable[Path] = DEFAULT_JSON_MANIFESTS,
    toml_paths: Iterable[Path] = DEFAULT_TOML_MANIFESTS,
    include_tag: bool = False,
) -> list[VersionReading]:
    """Read every requested version source below a repository root."""
    root = Path(root)
    readings = [read_json_version(root / p, root=root) for p in json_paths]
    readings += [read_toml_version(root / p, root=root) for p in toml_paths]
    if include_tag:
        readings.append(await read_tag_version(root))
    return readings


def _rewrite_json(path: Path, version: str) -> None:
    write_json(path, {**read_json(path), "version": version})


def _rewrite_toml(path: Path, version: str) -> None:
    text = path.read_text(encoding="utf-8")
    updated, count = TOML_VERSION_RE.subn(lambda _: f'version = "{version}"', text, count=1)
    if count == 0:
        raise VersionNotFoundError(path.as_posix())
    path.write_text(updated, encoding="utf-8")


def write_version(
    version: Optional[str],
    json_paths: Iterable[Path] = (),
    toml_paths: Iterable[Path] = (),
) -> list[Path]:
    """Overwrite the version of every given manifest."""
    if not version:
        raise MissingArgumentError("version", "Missing version")

    written = []
    for path in json_paths:
        _rewrite_json(Path(path), version)
        written.append(Path(path))
    for path in toml_paths:
        _rewrite_toml(Path(path), version)
        written.append(Path(path))

    logger.info({"event": "version_written", "version": version, "files": [str(p) for p in written]})
    return written


def stamp_version(path: Path, version: Optional[str], placeholder: str = VERSION_PLACEHOLDER) -> int:
    """Replace every version placeholder in a file, returning the count."""
    if not version:
        raise MissingArgumentError("version", "Not pushing from a tag. Please tag your commit.")

    path = Path(path)
    text = path.read_text(encoding="utf-8")
    count = text.count(placeholder)
    path.write_text(text.replace(placeholder, version), encoding="utf-8")

    logger.info({"event": "version_stamped", "file": str(path), "version": version, "count": count})
    return count

"""Distribute per-target release binaries into npm platform sub-packages."""

import asyncio
import shutil
from collections import defaultdict
from pathlib import Path
from typing import Optional

from lumea_release.constants import BINARY_PREFIX, SKIP_DIRS
from lumea_release.errors import NoMatchingTargetError
from lumea_release.logging import get_logger
from lumea_release.platforms.triples import parse_build_triple
from lumea_release.types import CollectedArtifact
from lumea_release.utils.fs import read_json, write_json

logger = get_logger(__name__)


def list_artifact_files(root: Path) -> list[Path]:
    """Recursively list files below ``root``, skipping dependency caches."""
    files = []
    for entry in sorted(Path(root).iterdir()):
        if entry.is_dir():
            if entry.name not in SKIP_DIRS:
                files.extend(list_artifact_files(entry))
        elif entry.is_file():
            files.append(entry)
    return files


def artifact_triple(path: Path, prefix: str = BINARY_PREFIX) -> Optional[str]:
    """Extract the target triple from ``[name.]<prefix><triple>[.ext]``.

    Returns ``None`` when the triple segment does not carry ``prefix``.
    """
    segment = Path(path).stem.split(".")[-1]
    if not segment.startswith(prefix):
        return None
    return segment[len(prefix):]


def find_target_dir(npm_root: Path, registry_id: str) -> Optional[Path]:
    for entry in sorted(Path(npm_root).iterdir()):
        if entry.is_dir() and registry_id in entry.name:
            return entry
    return None


class ArtifactCollector:
    """Copies artifacts into npm sub-packages, one manifest writer per target."""

    def __init__(self, npm_root: Path, prefix: str = BINARY_PREFIX):
        self.npm_root = Path(npm_root)
        self.prefix = prefix
        self._manifest_locks: dict[Path, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def collect_one(self, path: Path) -> Optional[CollectedArtifact]:
        triple = artifact_triple(path, self.prefix)
        if triple is None:
            logger.warning({"event": "artifact_skipped", "file": str(path), "expected_prefix": self.prefix})
            return None

        try:
            registry_id = parse_build_triple(triple).registry_id
        except ValueError as e:
            logger.error({"event": "artifact_triple_invalid", "file": str(path), "triple": triple})
            raise NoMatchingTargetError(triple, str(path)) from e

        target_dir = find_target_dir(self.npm_root, registry_id)
        if target_dir is None:
            raise NoMatchingTargetError(registry_id, str(path))

        destination = target_dir / path.name
        await asyncio.to_thread(shutil.copyfile, path, destination)
        logger.info({"event": "artifact_copied", "source": str(path), "dest": str(destination)})

        async with self._manifest_locks[target_dir]:
            await asyncio.to_thread(self._append_file_entry, target_dir / "package.json", path.name)

        return CollectedArtifact(source=path, destination=destination, registry_id=registry_id)

    def _append_file_entry(self, manifest: Path, filename: str) -> None:
        data = read_json(manifest)
        data.setdefault("files", []).append(filename)
        write_json(manifest, data, indent=4)
        logger.debug({"event": "manifest_updated", "manifest": str(manifest), "file": filename})


async def collect_artifacts(
    artifacts_root: Path, npm_root: Path, prefix: str = BINARY_PREFIX
) -> list[CollectedArtifact]:
    """Copy every prefixed artifact into its matching npm sub-package."""
    collector = ArtifactCollector(npm_root, prefix)
    files = list_artifact_files(artifacts_root)

    logger.info({"event": "collect_start", "artifacts": len(files), "npm_root": str(npm_root)})

    results = await asyncio.gather(*(collector.collect_one(f) for f in files))
    return [r for r in results if r is not None]

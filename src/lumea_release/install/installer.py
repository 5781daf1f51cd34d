"""Post-install download of the prebuilt Lumea binary."""

import asyncio
import os
from pathlib import Path
from typing import Optional

import aiohttp

from lumea_release.constants import (
    ARTIFACT_NAME,
    DIST_DIR,
    INSTALL_MARKER,
    PLATFORM_ARCH_TO_NAME,
    RELEASE_HOST,
    RELEASE_HOST_ENV,
    RELEASE_OWNER,
    RELEASE_REPO,
    RELEASES_DOWNLOAD_PATH,
    TYPES_ASSET,
)
from lumea_release.errors import UnsupportedPlatformError, VersionNotFoundError
from lumea_release.install.downloader import download_file
from lumea_release.logging import get_logger
from lumea_release.platforms.platforms import (
    current_os_name,
    is_rosetta_translated,
    resolve_platform,
)
from lumea_release.utils.fs import read_json

logger = get_logger(__name__)


def read_package_version(package_dir: Path) -> str:
    manifest = Path(package_dir) / "package.json"
    try:
        data = read_json(manifest)
    except ValueError as e:
        raise VersionNotFoundError(manifest.as_posix(), f"cannot read manifest ({e})") from e

    version = data.get("version") if isinstance(data, dict) else None
    if not isinstance(version, str) or not version.strip():
        raise VersionNotFoundError(manifest.as_posix(), "no 'version' field")
    return version.strip()


def is_installed(package_dir: Path, version: str, launcher_path: str) -> bool:
    """Check the install marker and the binary it refers to."""
    dist = Path(package_dir) / DIST_DIR
    try:
        recorded = (dist / INSTALL_MARKER).read_text(encoding="utf-8").strip()
    except OSError:
        return False

    if recorded.removeprefix("v") != f"{version}-{launcher_path}":
        return False

    return (dist / launcher_path).exists()


def resolve_download_name(platform: str, arch: str, check_rosetta: bool = True) -> str:
    """Map an npm platform/arch pair to the name of its release asset."""
    if check_rosetta and platform == "darwin" and arch == "x64" and is_rosetta_translated():
        logger.info({"event": "rosetta_detected", "arch": "arm64"})
        arch = "arm64"

    name = PLATFORM_ARCH_TO_NAME.get(f"{platform}-{arch}")
    if not name:
        raise UnsupportedPlatformError(f"{platform}-{arch}")
    return name


def get_release_host() -> str:
    return os.getenv(RELEASE_HOST_ENV, RELEASE_HOST).rstrip("/")


def release_url(version: str, asset: str, host: Optional[str] = None) -> str:
    host = (host or get_release_host()).rstrip("/")
    return f"{host}/{RELEASE_OWNER}/{RELEASE_REPO}/{RELEASES_DOWNLOAD_PATH}/v{version}/{asset}"


async def install(
    package_dir: Path,
    os_name: Optional[str] = None,
    arch: Optional[str] = None,
    host: Optional[str] = None,
    with_types: bool = True,
) -> bool:
    """Download the binary for this platform unless it is already installed.

    Returns ``False`` when an up-to-date install was found.
    """
    package_dir = Path(package_dir)
    version = read_package_version(package_dir)
    target = resolve_platform(os_name or current_os_name(), arch)

    logger.info({"event": "install_start", "version": version, "path": target.launcher_path})

    if is_installed(package_dir, version, target.launcher_path):
        logger.info({"event": "already_installed", "path": target.launcher_path})
        return False

    download_name = resolve_download_name(target.platform, target.arch)

    dist = package_dir / DIST_DIR
    binary_dest = dist / target.launcher_path
    binary_dest.parent.mkdir(parents=True, exist_ok=True)

    downloads = [(release_url(version, f"{ARTIFACT_NAME}-{download_name}", host), binary_dest)]
    if with_types:
        downloads.append((release_url(version, TYPES_ASSET, host), dist / TYPES_ASSET))

    async with aiohttp.ClientSession() as session:
        results = await asyncio.gather(
            *(download_file(session, url, dest) for url, dest in downloads),
            return_exceptions=True,
        )

    for result in results:
        if isinstance(result, BaseException):
            raise result

    if target.platform != "win32":
        binary_dest.chmod(0o755)

    (dist / INSTALL_MARKER).write_text(f"v{version}-{target.launcher_path}", encoding="utf-8")
    logger.info({"event": "install_complete", "version": version, "path": str(binary_dest)})
    return True

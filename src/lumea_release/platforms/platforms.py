"""Platform detection and mapping."""

import platform
import subprocess
import sys
from typing import NamedTuple, Optional

from lumea_release.constants import MACHINE_TO_NODE_ARCH
from lumea_release.errors import UnsupportedPlatformError
from lumea_release.logging import get_logger
from lumea_release.types import PlatformTarget

logger = get_logger(__name__)


class PlatformMapping(NamedTuple):
    """Platform-specific values."""
    registry_platform: str
    launcher_path: str


MACOS_MAPPING = PlatformMapping(
    registry_platform="darwin",
    launcher_path="Lumea.app/Contents/MacOS/Lumea",
)
UNIX_MAPPING = PlatformMapping(registry_platform="", launcher_path="lumea")
WINDOWS_MAPPING = PlatformMapping(registry_platform="win32", launcher_path="lumea.exe")

PLATFORM_MAPPINGS = {
    "darwin": MACOS_MAPPING,
    # Mac App Store builds
    "mas": MACOS_MAPPING,
    "mas-dev": MACOS_MAPPING,
    "linux": UNIX_MAPPING._replace(registry_platform="linux"),
    "freebsd": UNIX_MAPPING._replace(registry_platform="freebsd"),
    "openbsd": UNIX_MAPPING._replace(registry_platform="openbsd"),
    "windows": WINDOWS_MAPPING,
    "win32": WINDOWS_MAPPING,
}


def current_os_name() -> str:
    """Map ``sys.platform`` onto the names accepted by :func:`resolve_platform`."""
    name = sys.platform
    for bsd in ("freebsd", "openbsd"):
        if name.startswith(bsd):
            return bsd
    if name in ("cygwin", "msys"):
        return "win32"
    return name


def current_arch() -> str:
    """Return the running machine architecture in npm vocabulary."""
    machine = platform.machine().lower()
    return MACHINE_TO_NODE_ARCH.get(machine, machine)


def resolve_platform(os_name: str, arch: Optional[str] = None) -> PlatformTarget:
    """Resolve the launcher path and registry platform for an OS name."""
    mapping = PLATFORM_MAPPINGS.get(os_name)
    if mapping is None:
        raise UnsupportedPlatformError(os_name)

    if arch is None:
        arch = current_arch()
    arch = MACHINE_TO_NODE_ARCH.get(arch, arch)

    return PlatformTarget(
        os_name=os_name,
        platform=mapping.registry_platform,
        arch=arch,
        launcher_path=mapping.launcher_path,
    )


def get_platform_path(os_name: Optional[str] = None) -> str:
    """Relative path of the Lumea executable for an OS (default: current)."""
    return resolve_platform(os_name or current_os_name()).launcher_path


def is_rosetta_translated() -> bool:
    """Check whether the current process runs under Rosetta translation."""
    try:
        output = subprocess.run(
            ["sysctl", "-in", "sysctl.proc_translated"],
            capture_output=True,
            text=True,
            check=True,
        ).stdout
    except (OSError, subprocess.CalledProcessError):
        return False

    translated = output.strip() == "1"
    logger.debug({"event": "rosetta_probe", "translated": translated})
    return translated


def is_platform_supported(os_name: Optional[str] = None) -> bool:
    """Check if an OS (default: current) has a Lumea launcher."""
    try:
        resolve_platform(os_name or current_os_name())
        return True
    except UnsupportedPlatformError:
        return False

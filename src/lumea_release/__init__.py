"""Release and packaging tooling for Lumea."""

from lumea_release.errors import (
    DownloadError,
    ExternalProcessError,
    MissingArgumentError,
    NoMatchingTargetError,
    ReleaseError,
    UnsupportedPlatformError,
    VersionMismatchError,
    VersionNotFoundError,
)
from lumea_release.platforms import parse_build_triple, resolve_platform
from lumea_release.types import BuildTriple, PlatformTarget, VersionReading

__version__ = "0.1.0"

__all__ = [
    # Platform resolution
    "parse_build_triple",
    "resolve_platform",
    "BuildTriple",
    "PlatformTarget",
    "VersionReading",

    # Error types
    "ReleaseError",
    "MissingArgumentError",
    "VersionMismatchError",
    "VersionNotFoundError",
    "UnsupportedPlatformError",
    "NoMatchingTargetError",
    "DownloadError",
    "ExternalProcessError",
]

"""Platform and build triple resolution."""
from lumea_release.platforms.platforms import (
    current_arch,
    current_os_name,
    get_platform_path,
    is_platform_supported,
    is_rosetta_translated,
    resolve_platform,
)
from lumea_release.platforms.triples import parse_build_triple, registry_id_for

__all__ = [
    "current_arch",
    "current_os_name",
    "get_platform_path",
    "is_platform_supported",
    "is_rosetta_translated",
    "resolve_platform",
    "parse_build_triple",
    "registry_id_for",
]

"""Version synchronization across manifests and tags."""
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

__all__ = [
    "read_json_version",
    "read_tag_version",
    "read_toml_version",
    "check_versions",
    "collect_readings",
    "stamp_version",
    "write_version",
]

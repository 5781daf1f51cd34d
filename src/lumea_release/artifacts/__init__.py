"""Release artifact collection."""
from lumea_release.artifacts.collector import (
    ArtifactCollector,
    artifact_triple,
    collect_artifacts,
    list_artifact_files,
)

__all__ = ["ArtifactCollector", "artifact_triple", "collect_artifacts", "list_artifact_files"]

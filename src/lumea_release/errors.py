"""Error types for the release tooling."""

import logging
from typing import Any, Dict, List, Optional, Sequence


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger("lumea_release")

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error),
    }
    if context:
        error_info["context"] = context
    if isinstance(error, ReleaseError):
        error_info["details"] = error.details

    logger.error("Release tooling error", extra={"data": error_info})


class ReleaseError(Exception):
    """Base error class for every release tool failure."""

    exit_code = 1

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class MissingArgumentError(ReleaseError):
    """A required command line flag or positional value was not supplied."""

    def __init__(self, flag: str, message: Optional[str] = None):
        super().__init__(message or f"Missing argument: {flag}", details={"flag": flag})
        self.flag = flag


class VersionMismatchError(ReleaseError):
    """Version sources disagree."""

    def __init__(self, versions: Sequence[tuple[str, str]], mismatched: List[str]):
        width = max(len(source) for source, _ in versions) + 1
        lines = [f"  {(source + ':').ljust(width)} {value}" for source, value in versions]
        super().__init__(
            "Version mismatch:\n" + "\n".join(lines),
            details={"versions": dict(versions), "mismatched": mismatched},
        )
        self.versions = list(versions)
        self.mismatched = mismatched


class VersionNotFoundError(ReleaseError):
    """A version source does not contain a version."""

    def __init__(self, source: str, reason: str = "no version found"):
        super().__init__(f"{source}: {reason}", details={"source": source})
        self.source = source


class UnsupportedPlatformError(ReleaseError):
    """No build exists for the requested OS / architecture."""

    def __init__(self, platform: str):
        super().__init__(
            f"Lumea builds are not available on platform: {platform}",
            details={"platform": platform},
        )
        self.platform = platform


class NoMatchingTargetError(ReleaseError):
    """No npm platform sub-package matches a build artifact."""

    def __init__(self, registry_id: str, artifact: str):
        super().__init__(
            f"No dist dir found for {artifact} ({registry_id})",
            details={"registry_id": registry_id, "artifact": artifact},
        )
        self.registry_id = registry_id


class DownloadError(ReleaseError):
    """A release download failed."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        super().__init__(
            f"Failed to download {url}: {reason}",
            details={"url": url, "status": status, "reason": reason},
        )
        self.url = url
        self.status = status


class ExternalProcessError(ReleaseError):
    """An external tool (esbuild, packer, git, cargo) exited non-zero."""

    def __init__(self, command: Sequence[str], returncode: int, stdout: str = "", stderr: str = ""):
        message = f"Command failed with code {returncode}: {' '.join(map(str, command))}"
        if stdout:
            message += f"\nstdout: {stdout}"
        if stderr:
            message += f"\nstderr: {stderr}"
        super().__init__(
            message,
            details={"command": list(map(str, command)), "returncode": returncode},
        )
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

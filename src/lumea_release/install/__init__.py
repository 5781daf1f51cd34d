"""Post-install binary download."""
from lumea_release.install.downloader import download_file
from lumea_release.install.installer import (
    install,
    is_installed,
    release_url,
    resolve_download_name,
)

__all__ = ["download_file", "install", "is_installed", "release_url", "resolve_download_name"]

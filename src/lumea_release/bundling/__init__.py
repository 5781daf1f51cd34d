"""Bundling, staging and packing of Lumea applications."""
from lumea_release.bundling.assets import stage_assets, stage_flat
from lumea_release.bundling.esbuild import bundle
from lumea_release.bundling.packer import embed_assets, pack, read_embedded_assets
from lumea_release.bundling.pipeline import (
    build_api,
    build_with_packer,
    create_binary,
    pack_directory,
)

__all__ = [
    "stage_assets",
    "stage_flat",
    "bundle",
    "embed_assets",
    "pack",
    "read_embedded_assets",
    "build_api",
    "build_with_packer",
    "create_binary",
    "pack_directory",
]

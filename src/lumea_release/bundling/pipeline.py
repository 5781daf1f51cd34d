"""End-to-end packaging flows built from the bundler, stager and packers."""

from pathlib import Path
from typing import Iterable, Optional

from lumea_release.bundling.assets import stage_assets, stage_flat
from lumea_release.bundling.esbuild import bundle
from lumea_release.bundling.packer import PackerCommand, embed_assets, pack
from lumea_release.constants import (
    DEFAULT_APP_NAME,
    DIST_DIR,
    LEGACY_LOADERS,
    STAGING_DIR,
)
from lumea_release.logging import get_logger
from lumea_release.platforms.platforms import current_os_name, get_platform_path
from lumea_release.types import BundleFormat, BundleOptions
from lumea_release.utils.fs import remove_tree

logger = get_logger(__name__)

LEGACY_OPTIONS = BundleOptions(
    format=BundleFormat.ESM,
    target="esnext",
    externals=("node:*", "core:*"),
    loaders=LEGACY_LOADERS,
)


def default_output_path(os_name: Optional[str] = None) -> Path:
    suffix = ".exe" if (os_name or current_os_name()) in ("win32", "windows") else ""
    return Path(".") / DIST_DIR / f"{DEFAULT_APP_NAME}{suffix}"


def default_launcher_path(os_name: Optional[str] = None) -> Path:
    return Path(DIST_DIR) / get_platform_path(os_name)


async def build_with_packer(
    binary: Path,
    assets_dir: Path,
    js_entry: Path,
    output: Path,
    packer: PackerCommand,
    work_dir: Path = Path("."),
) -> Path:
    """Bundle an entry script, stage it with the assets and run the external packer."""
    work_dir = Path(work_dir)
    bundle_file = work_dir / "bundle.js"
    staging = work_dir / "assets"

    await bundle(js_entry, bundle_file, LEGACY_OPTIONS)
    stage_flat(bundle_file, assets_dir, staging)

    # pack() removes the staging directory once the packer succeeds
    result = await pack(binary, staging, output, packer)
    remove_tree(bundle_file)
    return result


async def pack_directory(
    binary: Path,
    source_dir: Path,
    output: Path,
    work_dir: Path = Path("."),
) -> Path:
    """Bundle ``<dir>/index.js``, stage it with ``<dir>/assets`` and embed in-process."""
    source_dir = Path(source_dir)
    work_dir = Path(work_dir)
    bundle_file = work_dir / "bundle.js"
    staging = work_dir / "assets"

    await bundle(source_dir / "index.js", bundle_file, LEGACY_OPTIONS)
    stage_flat(bundle_file, source_dir / "assets", staging)

    result = embed_assets(binary, staging, output)
    remove_tree(staging)
    remove_tree(bundle_file)
    return result


async def create_binary(
    source_dir: Path,
    output: Optional[Path] = None,
    launcher: Optional[Path] = None,
    staging_dir: Path = STAGING_DIR,
) -> Path:
    """Stage an app directory and embed it into the platform launcher."""
    launcher = Path(launcher) if launcher else default_launcher_path()
    output = Path(output) if output else default_output_path()

    logger.info({"event": "create_binary", "launcher": str(launcher), "output": str(output)})

    staged = await stage_assets(source_dir, staging_dir)
    result = embed_assets(launcher, staged.root, output)
    remove_tree(staged.root)
    return result


async def build_api(api_root: Path, modules: Iterable[str] = ("main",)) -> list[Path]:
    """Bundle each ``api/<module>/index.ts`` into ``api/dist/api_<module>.cjs``."""
    api_root = Path(api_root).resolve()
    dist = api_root / DIST_DIR
    outputs = []

    for module in modules:
        logger.info({"event": "api_build", "module": module})
        options = BundleOptions(
            format=BundleFormat.CJS,
            target="es2020",
            sourcemap=True,
            force_node_protocol=False,
            working_dir=api_root / module,
        )
        outputs.append(await bundle(Path("index.ts"), dist / f"api_{module}.cjs", options))

    return outputs

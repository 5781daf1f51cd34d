"""Staging of bundled scripts and static assets ahead of packing."""

import json
import shutil
from pathlib import Path
from typing import Optional

from lumea_release.bundling.esbuild import bundle
from lumea_release.logging import get_logger
from lumea_release.types import BundleFormat, BundleOptions, StagedBundle
from lumea_release.utils.fs import recreate_dir

logger = get_logger(__name__)

DEFAULT_MAIN = "index.js"
STAGED_SCRIPT = "index.js"
ASSETS_DIRNAME = "assets"


def read_main_entry(manifest: Path) -> str:
    """Return the ``main`` field of a package manifest (default ``index.js``)."""
    try:
        data = json.loads(Path(manifest).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return DEFAULT_MAIN
    return data.get("main") or DEFAULT_MAIN


async def stage_assets(
    source_dir: Path, output_dir: Path, manifest: Optional[Path] = None
) -> StagedBundle:
    """Rebuild ``output_dir`` from scratch with the bundle and a copy of the assets."""
    source_dir = Path(source_dir)
    output_dir = recreate_dir(Path(output_dir))
    assets_out = output_dir / ASSETS_DIRNAME
    assets_out.mkdir(parents=True, exist_ok=True)

    shutil.copytree(source_dir / ASSETS_DIRNAME, assets_out, dirs_exist_ok=True)
    logger.info({"event": "assets_copied", "source": str(source_dir / ASSETS_DIRNAME), "dest": str(assets_out)})

    main_file = read_main_entry(manifest or source_dir / "package.json")
    script = await bundle(
        source_dir / main_file,
        output_dir / STAGED_SCRIPT,
        BundleOptions(format=BundleFormat.CJS, target="es2020", sourcemap=True),
    )

    sourcemap = script.with_name(script.name + ".map")
    return StagedBundle(
        root=output_dir,
        script=script,
        sourcemap=sourcemap if sourcemap.exists() else None,
        assets_dir=assets_out,
    )


def stage_flat(bundle_file: Path, assets_dir: Path, output_dir: Path) -> StagedBundle:
    """Stage an already-built ``bundle.js`` next to an ``assets`` copy."""
    output_dir = recreate_dir(Path(output_dir))

    script = output_dir / Path(bundle_file).name
    shutil.copyfile(bundle_file, script)

    assets_out = output_dir / ASSETS_DIRNAME
    shutil.copytree(assets_dir, assets_out)

    logger.info({"event": "flat_staged", "root": str(output_dir)})
    return StagedBundle(root=output_dir, script=script, sourcemap=None, assets_dir=assets_out)

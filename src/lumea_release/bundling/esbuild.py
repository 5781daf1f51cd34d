"""esbuild invocation for the Lumea JavaScript runtime."""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from lumea_release.constants import ESBUILD_ENV, NODE_BUILTINS
from lumea_release.errors import ExternalProcessError
from lumea_release.logging import get_logger
from lumea_release.types import BundleOptions
from lumea_release.utils.fs import async_subprocess_run

logger = get_logger(__name__)


def get_esbuild_command() -> list[str]:
    """Resolve the esbuild command: env override, then PATH, then npx."""
    env_command = os.getenv(ESBUILD_ENV)
    if env_command:
        return env_command.split()

    esbuild_path = shutil.which("esbuild")
    if esbuild_path:
        return [esbuild_path]

    return ["npx", "--yes", "esbuild"]


def node_protocol_aliases() -> dict[str, str]:
    """Map bare built-in module names to their ``node:`` form."""
    return {name: f"node:{name}" for name in sorted(NODE_BUILTINS)}


def build_esbuild_args(entry: Path, output: Path, options: BundleOptions) -> list[str]:
    """Build the esbuild argument list (without the command itself)."""
    args = [
        str(entry),
        "--bundle",
        f"--outfile={output}",
        "--platform=node",
        f"--format={options.format.value}",
        f"--target={options.target}",
    ]
    if options.minify:
        args.append("--minify")
    if options.sourcemap:
        args.append("--sourcemap")
    for pattern in options.externals:
        args.append(f"--external:{pattern}")
    if options.force_node_protocol:
        # Rewritten imports match the node:* external and stay unbundled
        for name, target in node_protocol_aliases().items():
            args.append(f"--alias:{name}={target}")
    for ext, loader in options.loaders.items():
        args.append(f"--loader:{ext}={loader}")
    return args


def rewrite_sourcemap(map_path: Path, base_dir: Path) -> None:
    """Make the ``sources`` of a sourcemap relative to ``base_dir``."""
    data = json.loads(map_path.read_text(encoding="utf-8"))
    map_dir = map_path.resolve().parent
    base_dir = Path(base_dir).resolve()

    sources = []
    for source in data.get("sources", []):
        absolute = (map_dir / source).resolve()
        sources.append(Path(os.path.relpath(absolute, base_dir)).as_posix())
    data["sources"] = sources

    map_path.write_text(json.dumps(data), encoding="utf-8")
    logger.debug({"event": "sourcemap_rewritten", "map": str(map_path), "base": str(base_dir)})


async def bundle(entry: Path, output: Path, options: Optional[BundleOptions] = None) -> Path:
    """Bundle ``entry`` into a single minified script at ``output``."""
    options = options or BundleOptions()
    original_cwd = Path.cwd()

    working_dir = Path(options.working_dir) if options.working_dir else original_cwd
    output = Path(output)
    if not output.is_absolute():
        output = original_cwd / output
    output.parent.mkdir(parents=True, exist_ok=True)

    command = get_esbuild_command() + build_esbuild_args(entry, output, options)

    logger.info({"event": "bundle_start", "entry": str(entry), "output": str(output)})

    returncode, stdout, stderr = await async_subprocess_run(*command, cwd=working_dir)
    if returncode != 0:
        logger.error({"event": "bundle_failed", "returncode": returncode, "stderr": stderr})
        raise ExternalProcessError(command, returncode, stdout, stderr)

    if options.sourcemap:
        map_path = output.with_name(output.name + ".map")
        if map_path.exists():
            rewrite_sourcemap(map_path, original_cwd)

    logger.info({"event": "bundle_complete", "output": str(output)})
    return output

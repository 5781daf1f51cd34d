"""Build the Rust core library and copy it next to the core crate."""

import shutil
from pathlib import Path
from typing import Optional

from lumea_release.errors import ExternalProcessError
from lumea_release.logging import get_logger
from lumea_release.platforms.platforms import current_os_name
from lumea_release.utils.fs import async_subprocess_run

logger = get_logger(__name__)


def library_extension(os_name: Optional[str] = None) -> str:
    match os_name or current_os_name():
        case "win32" | "windows":
            return ".exe"
        case "linux":
            return ".so"
        case _:
            return ".dylib"


async def compile_core(core_dir: Path, release: bool = False, os_name: Optional[str] = None) -> Path:
    """Run ``cargo build`` in ``core_dir`` and copy the output to ``../bin<ext>``."""
    core_dir = Path(core_dir)
    command = ["cargo", "build"] + (["--release"] if release else [])

    returncode, stdout, stderr = await async_subprocess_run(*command, cwd=core_dir)
    if returncode != 0:
        raise ExternalProcessError(command, returncode, stdout, stderr)

    extension = library_extension(os_name)
    profile = "release" if release else "debug"
    built = core_dir / "target" / profile / f"core{extension}"
    dest = core_dir.parent / f"bin{extension}"
    shutil.copyfile(built, dest)

    logger.info({"event": "core_copied", "source": str(built), "dest": str(dest)})
    return dest

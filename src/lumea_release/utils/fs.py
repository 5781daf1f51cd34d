import asyncio
import json
import shutil
from pathlib import Path
from typing import Any, Optional

from lumea_release.logging import get_logger

logger = get_logger(__name__)


async def async_subprocess_run(*args, cwd: Optional[Path] = None) -> tuple[int, str, str]:
    """
    Run a command asynchronously and return its exit code, stdout, and stderr.

    :param args: Command and arguments to run
    :param cwd: Working directory for the command
    :return: Tuple of (returncode, stdout, stderr)
    """
    logger.debug({"event": "subprocess_exec", "cmd": [str(a) for a in args], "cwd": str(cwd)})

    proc = await asyncio.create_subprocess_exec(
        *[str(a) for a in args],
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()

    logger.debug({"event": "subprocess_complete", "cmd": str(args[0]), "returncode": proc.returncode})

    return proc.returncode, stdout.decode(errors="replace"), stderr.decode(errors="replace")


def read_json(path: Path) -> dict[str, Any]:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def write_json(path: Path, data: Any, indent: int = 2) -> None:
    Path(path).write_text(json.dumps(data, indent=indent, ensure_ascii=False), encoding="utf-8")


def recreate_dir(path: Path) -> Path:
    """Remove a directory tree if present and create it empty."""
    path = Path(path)
    if path.exists():
        logger.debug({"event": "removing_dir", "path": str(path)})
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def remove_tree(path: Path) -> None:
    """Best-effort removal of a file or directory tree."""
    path = Path(path)
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning({"event": "cleanup_failed", "path": str(path), "error": str(e)})

"""Embedding of staged assets into a Lumea launcher binary.

Two packers produce the same artifact layout:

- an external packer executable, called as ``packer <launcher> <staged> <out>``;
- :func:`embed_assets`, which appends the zipped staging directory to a copy
  of the launcher, followed by a footer of ``b"ASST"`` and the zip size as an
  unsigned 64-bit little-endian integer.
"""

import io
import shutil
import struct
import time
import zipfile
from pathlib import Path
from typing import Sequence, Union

from lumea_release.errors import ExternalProcessError
from lumea_release.logging import get_logger
from lumea_release.utils.fs import async_subprocess_run, remove_tree

logger = get_logger(__name__)

MAGIC = b"ASST"
FOOTER = struct.Struct("<4sQ")
ZIP_DATE = (1980, 1, 1, 0, 0, 0)

PackerCommand = Union[str, Path, Sequence[Union[str, Path]]]


def _packer_argv(packer: PackerCommand) -> list[str]:
    if isinstance(packer, (str, Path)):
        return [str(packer)]
    return [str(part) for part in packer]


async def pack(launcher: Path, staged_dir: Path, output: Path, packer: PackerCommand) -> Path:
    """Run the external packer, then remove the staging directory.

    A failing packer leaves ``staged_dir`` untouched for inspection.
    """
    command = _packer_argv(packer) + [str(launcher), str(staged_dir), str(output)]

    logger.info({"event": "pack_start", "launcher": str(launcher), "output": str(output)})

    returncode, stdout, stderr = await async_subprocess_run(*command)
    if stdout:
        logger.debug({"event": "packer_stdout", "output": stdout})
    if returncode != 0:
        logger.error({"event": "pack_failed", "returncode": returncode, "stderr": stderr})
        raise ExternalProcessError(command, returncode, stdout, stderr)

    remove_tree(staged_dir)

    logger.info({"event": "pack_complete", "output": str(output)})
    return Path(output)


def zip_directory(directory: Path) -> bytes:
    """Zip every file below ``directory`` with posix relative names."""
    directory = Path(directory)
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for path in sorted(p for p in directory.rglob("*") if p.is_file()):
            info = zipfile.ZipInfo(path.relative_to(directory).as_posix(), date_time=ZIP_DATE)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o100644 << 16
            archive.writestr(info, path.read_bytes())
    return buffer.getvalue()


def embed_assets(launcher: Path, assets_dir: Path, output: Path) -> Path:
    """Write ``launcher + zip(assets_dir) + footer`` to ``output``."""
    start = time.monotonic()
    payload = zip_directory(assets_dir)

    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(launcher, output)
    shutil.copymode(launcher, output)

    with open(output, "ab") as f:
        f.write(payload)
        f.write(FOOTER.pack(MAGIC, len(payload)))

    logger.info(
        {
            "event": "assets_embedded",
            "assets": str(assets_dir),
            "zip_size": len(payload),
            "output": str(output),
            "elapsed_ms": int((time.monotonic() - start) * 1000),
        }
    )
    return output


def read_embedded_assets(path: Path) -> zipfile.ZipFile:
    """Open the asset archive appended to a packed binary."""
    data = Path(path).read_bytes()
    if len(data) < FOOTER.size:
        raise ValueError(f"{path} is too small to contain embedded assets")

    magic, size = FOOTER.unpack(data[-FOOTER.size:])
    if magic != MAGIC:
        raise ValueError(f"{path} has no embedded assets footer")

    end = len(data) - FOOTER.size
    return zipfile.ZipFile(io.BytesIO(data[end - size:end]))

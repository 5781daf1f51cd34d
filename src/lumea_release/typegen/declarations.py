"""Merge per-module declaration files into a single ``types.d.ts``."""

from pathlib import Path
from typing import Iterable

from lumea_release.constants import TYPES_ASSET
from lumea_release.logging import get_logger

logger = get_logger(__name__)


def wrap_declarations(dist_dir: Path, modules: Iterable[str] = ("main",)) -> Path:
    """Wrap ``api_<m>.d.ts`` files in ``declare module "lumea/<m>"`` blocks."""
    dist_dir = Path(dist_dir)
    output = ""

    for module in modules:
        path = dist_dir / f"api_{module}.d.ts"
        content = path.read_text(encoding="utf-8")
        output += f'declare module "lumea/{module}" {{\n{content}\n}}\n\n'
        path.unlink()

    target = dist_dir / TYPES_ASSET
    target.write_text(output, encoding="utf-8")
    logger.info({"event": "types_written", "path": str(target)})
    return target

import sys
import textwrap
from pathlib import Path

import pytest
from lumea_release.bundling.packer import (
    FOOTER,
    MAGIC,
    embed_assets,
    pack,
    read_embedded_assets,
)
from lumea_release.errors import ExternalProcessError

PACKER_SCRIPT = textwrap.dedent(
    """
    import pathlib
    import sys

    launcher, staged, output = (pathlib.Path(a) for a in sys.argv[1:4])
    if (staged / "fail").exists():
        print("packer exploded", file=sys.stderr)
        sys.exit(3)
    names = sorted(p.relative_to(staged).as_posix() for p in staged.rglob("*") if p.is_file())
    output.write_bytes(launcher.read_bytes() + "\\n".join(names).encode())
    print("packed")
    """
)


@pytest.fixture
def launcher(tmp_path: Path) -> Path:
    path = tmp_path / "lumea"
    path.write_bytes(b"\x7fELF launcher")
    return path


@pytest.fixture
def staged(tmp_path: Path) -> Path:
    root = tmp_path / "staged"
    (root / "assets").mkdir(parents=True)
    (root / "index.js").write_text("console.log(1)")
    (root / "assets" / "index.html").write_text("<p>hi</p>")
    return root


@pytest.fixture
def packer(tmp_path: Path) -> list[str]:
    script = tmp_path / "packer.py"
    script.write_text(PACKER_SCRIPT)
    return [sys.executable, str(script)]


@pytest.mark.asyncio
async def test_pack_removes_staging(launcher, staged, packer, tmp_path):
    output = tmp_path / "app"

    result = await pack(launcher, staged, output, packer)

    assert result == output
    assert output.read_bytes() == b"\x7fELF launcher" + b"assets/index.html\nindex.js"
    assert not staged.exists()


@pytest.mark.asyncio
async def test_pack_failure_keeps_staging(launcher, staged, packer, tmp_path):
    (staged / "fail").write_text("")

    with pytest.raises(ExternalProcessError) as exc:
        await pack(launcher, staged, tmp_path / "app", packer)

    assert exc.value.returncode == 3
    assert "packer exploded" in str(exc.value)
    assert staged.exists()
    assert not (tmp_path / "app").exists()


@pytest.mark.asyncio
async def test_pack_missing_packer(launcher, staged, tmp_path):
    with pytest.raises(OSError):
        await pack(launcher, staged, tmp_path / "app", tmp_path / "no-such-packer")

    assert staged.exists()


def test_embed_assets_layout(launcher, staged, tmp_path):
    output = embed_assets(launcher, staged, tmp_path / "dist" / "app")

    data = output.read_bytes()
    assert data.startswith(b"\x7fELF launcher")
    magic, size = FOOTER.unpack(data[-FOOTER.size:])
    assert magic == MAGIC
    assert len(data) == len(b"\x7fELF launcher") + size + FOOTER.size

    with read_embedded_assets(output) as archive:
        assert archive.namelist() == ["assets/index.html", "index.js"]
        assert archive.read("index.js") == b"console.log(1)"


def test_embed_assets_is_reproducible(launcher, staged, tmp_path):
    first = embed_assets(launcher, staged, tmp_path / "a").read_bytes()
    second = embed_assets(launcher, staged, tmp_path / "b").read_bytes()

    assert first == second


def test_read_embedded_assets_without_footer(launcher):
    with pytest.raises(ValueError):
        read_embedded_assets(launcher)

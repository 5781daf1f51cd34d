import asyncio
import json
import logging
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

ASSETS_KEY = web.AppKey("assets", dict)


async def _release_asset(request: web.Request) -> web.Response:
    # GitHub answers release downloads with a redirect to its asset CDN
    raise web.HTTPFound(f"/cdn/{request.match_info['asset']}")


async def _cdn_asset(request: web.Request) -> web.Response:
    body = request.app[ASSETS_KEY].get(request.match_info["asset"])
    if body is None:
        raise web.HTTPNotFound()
    return web.Response(body=body)


async def _hop(request: web.Request) -> web.Response:
    remaining = int(request.match_info["count"])
    if remaining == 0:
        return web.Response(body=b"arrived")
    raise web.HTTPFound(f"/hop/{remaining - 1}")


@pytest_asyncio.fixture
async def release_server():
    """In-process release host serving ``/cdn/<asset>`` behind a redirect"""
    app = web.Application()
    app[ASSETS_KEY] = {
        "lumea-x86_64-pc-windows-msvc": b"MZ fake windows launcher",
        "types.d.ts": b'declare module "lumea/main" {}\n',
    }
    app.router.add_get("/lumeajs/lumea/releases/download/{tag}/{asset}", _release_asset)
    app.router.add_get("/cdn/{asset}", _cdn_asset)
    app.router.add_get("/hop/{count}", _hop)

    server = TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture
def server_assets(release_server) -> dict:
    return release_server.app[ASSETS_KEY]


@pytest.fixture
def base_url(release_server) -> str:
    return f"http://{release_server.host}:{release_server.port}"


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """A repository with package, api and core manifests at version 1.2.0"""
    (tmp_path / "package").mkdir()
    (tmp_path / "api").mkdir()
    (tmp_path / "core").mkdir()
    (tmp_path / "package" / "package.json").write_text(
        json.dumps({"name": "lumea", "version": "1.2.0", "main": "index.js"}, indent=2)
    )
    (tmp_path / "api" / "package.json").write_text(
        json.dumps({"name": "lumea-api", "version": "1.2.0"}, indent=2)
    )
    (tmp_path / "core" / "Cargo.toml").write_text(
        '[package]\nname = "core"\nversion = "1.2.0"\nedition = "2021"\n\n'
        '[dependencies]\nserde = { version = "1.0" }\n'
    )
    return tmp_path


@pytest.fixture
def fake_esbuild(monkeypatch):
    """Replace the esbuild subprocess with one that writes the outfile and its map"""
    calls = []

    async def run(*args, cwd=None):
        calls.append({"args": list(args), "cwd": cwd})
        outfile = Path(next(a for a in args if a.startswith("--outfile=")).split("=", 1)[1])
        outfile.parent.mkdir(parents=True, exist_ok=True)
        outfile.write_text("(()=>{console.log('bundled')})();\n")
        if "--sourcemap" in args:
            entry = (Path(cwd) / args[1]).resolve()
            sources = [str(entry)]
            outfile.with_name(outfile.name + ".map").write_text(
                json.dumps({"version": 3, "sources": sources, "mappings": ""})
            )
        return 0, "", ""

    monkeypatch.setenv("LUMEA_ESBUILD", "esbuild")
    monkeypatch.setattr("lumea_release.bundling.esbuild.async_subprocess_run", run)
    return calls


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers attached by configure_logging() during a test"""
    logger = logging.getLogger("lumea_release")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest_asyncio.fixture
async def truncating_server():
    """Raw HTTP server that promises 100000 bytes, sends 20000 and hangs up"""

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        await reader.readuntil(b"\r\n\r\n")
        writer.write(b"HTTP/1.1 200 OK\r\nContent-Length: 100000\r\nConnection: close\r\n\r\n")
        writer.write(b"x" * 20000)
        await writer.drain()
        writer.close()
        await writer.wait_closed()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    host, port = server.sockets[0].getsockname()[:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        server.close()
        await server.wait_closed()

"""Streaming release downloads."""

from pathlib import Path

import aiohttp
from yarl import URL

from lumea_release.errors import DownloadError
from lumea_release.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 8192


async def download_file(
    session: aiohttp.ClientSession, url: str, dest: Path, max_redirects: int = 1
) -> Path:
    """Stream ``url`` into ``dest``, following at most ``max_redirects`` hops.

    On any failure the destination file is closed, then deleted.
    """
    dest = Path(dest)
    logger.info({"event": "download_start", "url": url, "destination": str(dest)})

    try:
        async with session.get(url, allow_redirects=False) as response:
            location = response.headers.get("Location")
            if location:
                if max_redirects <= 0:
                    raise DownloadError(url, "too many redirects", response.status)
                redirect_url = str(response.url.join(URL(location)))
                logger.info({"event": "download_redirect", "url": url, "location": redirect_url})
                return await download_file(session, redirect_url, dest, max_redirects - 1)

            if not 200 <= response.status < 300:
                logger.error(
                    {"event": "download_request_failed", "url": url, "status": response.status, "reason": response.reason}
                )
                raise DownloadError(url, f"HTTP {response.status} {response.reason}", response.status)

            downloaded = 0
            try:
                with open(dest, "wb") as f:
                    async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                        f.write(chunk)
                        downloaded += len(chunk)
            except BaseException:
                # the with-block has closed the handle by now
                dest.unlink(missing_ok=True)
                raise

    except aiohttp.ClientError as e:
        dest.unlink(missing_ok=True)
        logger.error({"event": "download_failed", "url": url, "error": str(e)})
        raise DownloadError(url, str(e), getattr(e, "status", None)) from e

    logger.info({"event": "download_complete", "url": url, "size": downloaded})
    return dest

"""
Static asset server for the map generator.

Serves the generator's files over local HTTP so the headless browser can
load them as a normal web page. Built on aiohttp.web; every path is checked
against the root before the filesystem is touched.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote

from aiohttp import web

from ..core.exceptions import StaticServerError

logger = logging.getLogger(__name__)

ENTRY_DOCUMENT = "/index.html"

CONTENT_TYPES = {
    ".html": "text/html; charset=utf-8",
    ".js": "text/javascript; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".svg": "image/svg+xml",
    ".json": "application/json; charset=utf-8",
    ".webmanifest": "application/manifest+json; charset=utf-8",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".ico": "image/x-icon",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".txt": "text/plain; charset=utf-8",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

NO_CACHE_HEADERS = {"Cache-Control": "no-store"}


def content_type_for(path: Union[str, Path]) -> str:
    """Content type by file extension, falling back to a generic binary type"""
    return CONTENT_TYPES.get(Path(path).suffix.lower(), DEFAULT_CONTENT_TYPE)


def resolve_request_path(root: Path, raw_path: str) -> Path:
    """
    Resolve a raw (percent-encoded) request path against ``root``.

    Args:
        root: Resolved root directory
        raw_path: Path component of the request URL, still percent-encoded

    Returns:
        Absolute file path inside ``root``

    Raises:
        StaticServerError: 403 if the path escapes the root, 404 if it cannot name a file
    """
    pathname = unquote(raw_path or "/")
    if pathname == "/":
        pathname = ENTRY_DOCUMENT

    try:
        candidate = (root / ("." + pathname)).resolve()
    except (ValueError, OSError):
        # Embedded NUL bytes and the like
        raise StaticServerError(404, pathname)
    if candidate != root and root not in candidate.parents:
        raise StaticServerError(403, pathname)
    return candidate


class StaticAssetServer:
    """Local HTTP server rooted at the generator's directory"""

    def __init__(self, root_dir: Union[str, Path], host: str = "127.0.0.1", port: int = 0):
        """
        Args:
            root_dir: Directory holding the generator's index.html
            host: Interface to bind
            port: Port to bind; 0 picks an ephemeral port
        """
        self.root = Path(root_dir).resolve()
        self.host = host
        self.port = port
        self.base_url: Optional[str] = None
        self._runner: Optional[web.AppRunner] = None

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/{tail:.*}", self.handle_request)
        return app

    async def start(self) -> str:
        """
        Bind the listener and start serving.

        Returns:
            Base URL, e.g. ``http://127.0.0.1:54321``
        """
        if self._runner is not None:
            return self.base_url

        runner = web.AppRunner(self.create_app(), access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            raise

        self._runner = runner
        actual_port = runner.addresses[0][1]
        self.base_url = f"http://{self.host}:{actual_port}"
        logger.info("Static asset server serving %s at %s", self.root, self.base_url)
        return self.base_url

    async def close(self) -> None:
        """Stop the listener; returns once fully stopped"""
        if self._runner is None:
            return
        runner, self._runner = self._runner, None
        await runner.cleanup()
        logger.info("Static asset server at %s stopped", self.base_url)
        self.base_url = None

    async def handle_request(self, request: web.Request) -> web.Response:
        try:
            file_path = resolve_request_path(self.root, request.rel_url.raw_path)
            body = await asyncio.to_thread(self._read_file, file_path)
        except StaticServerError as e:
            if e.status == 403:
                logger.warning("Rejected path outside root: %s", request.rel_url.raw_path)
            return web.Response(status=e.status, text=str(e), headers=NO_CACHE_HEADERS)

        headers = dict(NO_CACHE_HEADERS)
        headers["Content-Type"] = content_type_for(file_path)
        return web.Response(status=200, body=body, headers=headers)

    @staticmethod
    def _read_file(file_path: Path) -> bytes:
        if not file_path.is_file():
            raise StaticServerError(404, str(file_path))
        try:
            return file_path.read_bytes()
        except OSError as e:
            logger.error("Failed to read %s: %s", file_path, e)
            raise StaticServerError(500, str(file_path)) from e

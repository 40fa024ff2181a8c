"""
Browser session manager for map exports.

Owns the two shared resources of the process: the static asset server that
hosts the generator and one long-lived Chromium process. Both are started
lazily on first use and reused by every export; each export gets its own
isolated browsing context.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional, Union

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright

from ...core.exceptions import StartupError
from ..static_server import StaticAssetServer

logger = logging.getLogger(__name__)

BROWSER_REMEDIATION = "Install the browser runtime with: playwright install chromium"
VIEWPORT = {"width": 1280, "height": 720}


class BrowserSessionManager:
    """Lazily started browser process plus static asset server"""

    def __init__(
        self,
        root_dir: Union[str, Path],
        headless: bool = True,
        static_host: str = "127.0.0.1",
        static_port: int = 0,
    ):
        """
        Initialize session manager.

        Args:
            root_dir: Generator directory served to the browser
            headless: Whether to run Chromium headless
            static_host: Interface for the static asset server
            static_port: Port for the static asset server (0 = ephemeral)
        """
        self.root_dir = Path(root_dir)
        self.headless = headless
        self.static_host = static_host
        self.static_port = static_port

        # Session state
        self._static: Optional[StaticAssetServer] = None
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    @property
    def is_started(self) -> bool:
        return self._static is not None and self._browser is not None

    async def ensure_started(self) -> str:
        """
        Start the static server and the browser if they are not running.

        Returns:
            Base URL of the static asset server

        Raises:
            StartupError: If Chromium cannot be launched
        """
        if self._static is None:
            static = StaticAssetServer(self.root_dir, host=self.static_host, port=self.static_port)
            await static.start()
            self._static = static

        if self._browser is None:
            await self._launch_browser()

        return self._static.base_url

    async def _launch_browser(self) -> None:
        try:
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=["--disable-dev-shm-usage"],
            )
        except Exception as e:
            logger.error("Chromium launch failed: %s", e)
            raise StartupError(
                "Playwright Chromium is not available",
                remediation=BROWSER_REMEDIATION,
                cause=str(e),
            ) from e
        logger.info("Chromium launched (headless=%s)", self.headless)

    @asynccontextmanager
    async def browsing_context(self) -> AsyncIterator[BrowserContext]:
        """
        Fresh isolated browsing context for one export.

        The context is closed when the block exits, on success and on failure.
        """
        if self._browser is None:
            raise StartupError("Browser session is not started")

        context = await self._browser.new_context(viewport=VIEWPORT)
        try:
            yield context
        finally:
            await context.close()
            logger.debug("Browsing context closed")

    async def close(self) -> None:
        """
        Close the browser, then the static server.

        Safe to call repeatedly or when nothing was started.
        """
        try:
            if self._browser is not None:
                browser, self._browser = self._browser, None
                await browser.close()
                logger.info("Chromium closed")

            if self._playwright is not None:
                playwright, self._playwright = self._playwright, None
                await playwright.stop()
        finally:
            if self._static is not None:
                static, self._static = self._static, None
                await static.close()

    async def __aenter__(self) -> 'BrowserSessionManager':
        await self.ensure_started()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

"""
Generator page loader.

Navigates a fresh browsing context to the generator and polls until the
in-page generation has produced usable state. Navigation and readiness
share a single timeout budget.
"""

import logging
import time
from typing import Any, List, Optional
from urllib.parse import urlencode

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ...core.exceptions import NavigationError, ReadinessTimeoutError
from .generation_session import PlaywrightGenerationSession

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 180_000

READINESS_JS = """() => {
  return Boolean(document.getElementById("map")) &&
    typeof seed === "string" &&
    seed.length > 0 &&
    typeof pack === "object" &&
    Boolean(pack) &&
    typeof grid === "object" &&
    Boolean(grid) &&
    Boolean(grid.cells) &&
    Boolean(grid.cells.h) &&
    Boolean(pack.cells) &&
    Boolean(pack.cells.i);
}"""

# Same checks as READINESS_JS, one flag per field, used to explain a timeout
READINESS_PROBE_JS = """() => ({
  "#map": Boolean(document.getElementById("map")),
  "seed": typeof seed === "string" && seed.length > 0,
  "pack": typeof pack === "object" && Boolean(pack),
  "grid": typeof grid === "object" && Boolean(grid),
  "grid.cells.h": typeof grid === "object" && Boolean(grid && grid.cells && grid.cells.h),
  "pack.cells.i": typeof pack === "object" && Boolean(pack && pack.cells && pack.cells.i)
})"""


def build_generator_url(base_url: str, seed: Optional[str] = None) -> str:
    """Entry document URL, with the seed as a query parameter when given"""
    url = base_url.rstrip("/") + "/index.html"
    if seed:
        url += "?" + urlencode({"seed": str(seed)})
    return url


class GenerationPageLoader:
    """Loads the generator into a browsing context and waits for readiness"""

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS, poll_interval_ms: Optional[int] = None):
        """
        Args:
            timeout_ms: Budget shared by navigation and readiness polling
            poll_interval_ms: Readiness polling interval; None polls on animation frames
        """
        self.timeout_ms = timeout_ms
        self.poll_interval_ms = poll_interval_ms

    async def load(self, context: Any, base_url: str, seed: Optional[str]) -> PlaywrightGenerationSession:
        """
        Open a page, navigate to the generator and wait until it is ready.

        Raises:
            NavigationError: If the page fails to load within the budget
            ReadinessTimeoutError: If generation does not finish within the budget
        """
        deadline = time.monotonic() + self.timeout_ms / 1000
        url = build_generator_url(base_url, seed)

        page = await context.new_page()

        logger.debug("Navigating to %s", url)
        try:
            await page.goto(url, wait_until="load", timeout=self.timeout_ms)
        except PlaywrightError as e:
            raise NavigationError(f"Failed to load generator at {url}: {e.message}", url=url) from e

        remaining_ms = max(1, int((deadline - time.monotonic()) * 1000))
        polling = self.poll_interval_ms if self.poll_interval_ms is not None else "raf"
        try:
            await page.wait_for_function(READINESS_JS, timeout=remaining_ms, polling=polling)
        except PlaywrightTimeoutError as e:
            missing = await self._missing_fields(page)
            raise ReadinessTimeoutError(self.timeout_ms, missing_fields=missing, url=url) from e
        except PlaywrightError as e:
            # e.g. the execution context was destroyed by a reload
            raise NavigationError(f"Generator page failed while generating: {e.message}", url=url) from e

        logger.debug("Generator ready for seed %s", seed or "<random>")
        return PlaywrightGenerationSession(page)

    async def _missing_fields(self, page: Any) -> Optional[List[str]]:
        try:
            probe = await page.evaluate(READINESS_PROBE_JS)
        except PlaywrightError as e:
            logger.debug("Readiness probe failed: %s", e.message)
            return None
        return [field for field, present in probe.items() if not present]

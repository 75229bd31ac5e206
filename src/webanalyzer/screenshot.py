"""Page screenshots with a headless Chromium (Playwright)."""

import logging
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from webanalyzer.crawler import ensure_public_url
from webanalyzer.exceptions import ScreenshotError

logger = logging.getLogger(__name__)

DEFAULT_VIEWPORT = {"width": 1280, "height": 800}
DEFAULT_NAVIGATION_TIMEOUT_MS = 30000


async def capture_screenshot(
    url: str,
    full_page: bool = False,
    viewport: Optional[dict] = None,
    timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
) -> bytes:
    """Capture a PNG screenshot of a page once the network is idle.

    Args:
        url: Public http(s) URL
        full_page: Capture the whole scrollable page instead of the viewport
        viewport: Viewport size, default 1280x800
        timeout_ms: Navigation timeout in milliseconds

    Returns:
        PNG bytes

    Raises:
        InvalidURLError / BlockedHostError: For bad or internal URLs
        ScreenshotError: If the browser fails to load or capture the page
    """
    url = ensure_public_url(url)
    logger.info(f"Capturing screenshot of {url}")

    try:
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=True)
            try:
                context = await browser.new_context(viewport=viewport or DEFAULT_VIEWPORT)
                page = await context.new_page()
                await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
                screenshot = await page.screenshot(type="png", full_page=full_page)
            finally:
                await browser.close()

    except PlaywrightError as e:
        logger.error(f"Error capturing screenshot of {url}: {e}")
        raise ScreenshotError(f"Failed to capture screenshot: {e}", details={"url": url})

    logger.debug(f"Captured {len(screenshot)} bytes for {url}")
    return screenshot

"""reader/navigation.py — Decide when the reader app has actually shown a chapter.

The reader is a single-page application: the HTTP load can settle long before
(or long after) its router switches to the requested chapter. Readiness is a
two-phase wait:

  1. address match: the main frame's URL equals the target URL, observed
     through framenavigated events (or already true before we start);
  2. content marker: the content root exists in the DOM,

followed by a fixed settle delay for images, fonts and reflow.
"""

import asyncio
import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from config import PipelineConfig
from errors import AddressMatchTimeout, ContentMarkerTimeout

logger = logging.getLogger(__name__)


async def navigate(page, url: str, timeout: float) -> None:
    """Issue the navigation. Transport failures are logged; the address match decides."""
    try:
        await page.goto(url, wait_until="networkidle", timeout=timeout * 1000)
    except PlaywrightTimeoutError as e:
        # SPAs that keep streaming assets never reach networkidle.
        logger.warning("Navigation timeout, but continuing: %s", e)
    except PlaywrightError as e:
        # The reader's router redirecting mid-load aborts goto (ERR_ABORTED, interrupted).
        logger.warning("Navigation error, but continuing: %s", e)


async def wait_for_address(page, url: str, timeout: float) -> None:
    """
    Navigate to url and block until the main frame reports exactly that address.
    Resolves immediately if the page is already there. Raises AddressMatchTimeout.
    """
    matched = asyncio.get_running_loop().create_future()

    def _check(current: str) -> None:
        if current == url and not matched.done():
            logger.debug("URL matched target: %s", url)
            matched.set_result(None)

    def _on_frame_navigated(frame) -> None:
        if frame == page.main_frame:
            _check(frame.url)

    page.on("framenavigated", _on_frame_navigated)
    try:
        _check(page.url)
        await navigate(page, url, timeout)
        _check(page.url)
        try:
            await asyncio.wait_for(matched, timeout=timeout)
        except asyncio.TimeoutError:
            raise AddressMatchTimeout(url, timeout) from None
    finally:
        page.remove_listener("framenavigated", _on_frame_navigated)


async def wait_for_marker(page, selector: str, timeout: float) -> None:
    """Poll for the content marker element. Raises ContentMarkerTimeout."""
    try:
        await page.wait_for_selector(selector, state="attached", timeout=timeout * 1000)
    except PlaywrightTimeoutError:
        raise ContentMarkerTimeout(selector, timeout) from None


async def wait_for_chapter(page, url: str, config: PipelineConfig, is_first_in_run: bool = False) -> None:
    """Return once the chapter at url is routed, present in the DOM, and settled."""
    timeout = config.timeout_for(is_first_in_run)
    logger.info("Navigating to %s", url)
    await wait_for_address(page, url, timeout)

    logger.debug("Waiting for %s to appear", config.content_selector)
    await wait_for_marker(page, config.content_selector, config.marker_timeout)

    if config.settle_delay:
        await asyncio.sleep(config.settle_delay)

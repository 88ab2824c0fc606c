"""
Playwright-based page preparation: navigation, consent banners, lazy loading.
"""
import asyncio
import logging
import random
from typing import Sequence

from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from .config import SiteConfig
from .snapshot import POSITION_ATTR, PageSnapshot


# Constants
NAVIGATION_ATTEMPTS = 3
NAVIGATION_BACKOFF_S = 5
NAVIGATION_TIMEOUT_MS = 30_000
READY_TIMEOUT_MS = 15_000
SCROLL_STEPS = 10
SCROLL_DISTANCE_PX = 300

CONSENT_BUTTON_WORDS = ("akzeptieren", "zustimmen", "accept")

# Record each element's page-relative top offset before the DOM is serialized
ANNOTATE_POSITIONS_JS = """
(attr) => {
    const offset = window.scrollY || 0;
    const elements = document.body ? document.body.querySelectorAll('*') : [];
    for (const el of elements) {
        const rect = el.getBoundingClientRect();
        el.setAttribute(attr, String(Math.round(rect.top + offset)));
    }
    return elements.length;
}
"""

CLICK_CONSENT_BY_TEXT_JS = """
(words) => {
    const buttons = Array.from(document.querySelectorAll('button'));
    const button = buttons.find(b => {
        const text = (b.textContent || '').toLowerCase();
        return words.some(w => text.includes(w));
    });
    if (button) {
        button.click();
        return true;
    }
    return false;
}
"""

logger = logging.getLogger(__name__)


class NavigationError(RuntimeError):
    """The search page could not be loaded or never rendered its content."""


async def navigate_with_retries(page, url: str, attempts: int = NAVIGATION_ATTEMPTS,
                                backoff_s: float = NAVIGATION_BACKOFF_S) -> None:
    """Open the search page, retrying with a fixed backoff."""
    last_error = None
    for attempt in range(1, attempts + 1):
        logger.info(f">>> Navigation attempt {attempt}/{attempts}: {url}")
        try:
            await page.goto(url, timeout=NAVIGATION_TIMEOUT_MS, wait_until="domcontentloaded")
            return
        except PlaywrightError as e:
            last_error = e
            logger.warning(f"Navigation attempt {attempt} failed: {e}")
            if attempt < attempts:
                await asyncio.sleep(backoff_s)
    raise NavigationError(f"Failed to load {url} after {attempts} attempts: {last_error}") from last_error


async def dismiss_cookie_banner(page, selectors: Sequence[str]) -> bool:
    """Try to accept cookie/consent banners in different locales."""
    for sel in selectors:
        try:
            loc = page.locator(sel).first
            if await loc.is_visible():
                await loc.click(timeout=2000)
                logger.info(f">>> Cookie banner accepted with selector: {sel}")
                await asyncio.sleep(random.uniform(1.5, 2.5))
                return True
        except PlaywrightError:
            continue

    try:
        clicked = await page.evaluate(CLICK_CONSENT_BY_TEXT_JS, list(CONSENT_BUTTON_WORDS))
    except PlaywrightError as e:
        logger.debug(f"Consent text search failed: {e}")
        return False
    if clicked:
        logger.info(">>> Cookie banner accepted via button text")
        await asyncio.sleep(random.uniform(1.5, 2.5))
    else:
        logger.info(">>> No cookie banner found")
    return bool(clicked)


async def ensure_page_ready(page, site: SiteConfig, timeout_ms: int = READY_TIMEOUT_MS) -> None:
    """Wait until the site's required content is attached to the DOM."""
    try:
        await page.wait_for_selector(site.ready_selector, timeout=timeout_ms, state="attached")
    except PlaywrightTimeout as e:
        raise NavigationError(f"Content {site.ready_selector!r} never appeared on {page.url}") from e


async def scroll_page(page, steps: int = SCROLL_STEPS, distance: int = SCROLL_DISTANCE_PX) -> None:
    """Scroll down in steps to trigger lazy-loaded results, then back to the top."""
    for _ in range(steps):
        try:
            at_bottom = await page.evaluate(
                "(d) => { window.scrollBy(0, d); "
                "return window.innerHeight + window.scrollY >= document.body.scrollHeight; }",
                distance,
            )
        except PlaywrightError:
            # If the page suddenly crashes, stop and let extraction use what rendered
            break
        await asyncio.sleep(random.uniform(0.6, 1.0))
        if at_bottom:
            break

    try:
        await page.evaluate("window.scrollTo(0, 0)")
    except PlaywrightError as e:
        logger.debug(f"Scroll to top failed: {e}")


async def capture_snapshot(page) -> PageSnapshot:
    """Annotate element positions and serialize the rendered DOM."""
    count = await page.evaluate(ANNOTATE_POSITIONS_JS, POSITION_ATTR)
    html = await page.content()
    logger.debug(f"Captured snapshot: {count} elements, {len(html)} bytes")
    return PageSnapshot.from_html(html, base_url=page.url)


async def prepare_and_capture(page, site: SiteConfig, url: str) -> PageSnapshot:
    """Navigate, dismiss banners, wait for content, lazy-load, then snapshot."""
    await navigate_with_retries(page, url)
    await dismiss_cookie_banner(page, site.cookie_selectors)
    await ensure_page_ready(page, site)
    await asyncio.sleep(random.uniform(2.0, 4.0))
    await scroll_page(page)
    await asyncio.sleep(random.uniform(1.0, 2.0))
    logger.info(">>> Page preparation completed, extracting data...")
    return await capture_snapshot(page)

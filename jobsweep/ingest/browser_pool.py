"""Stealth browser sessions for headless scraping."""
import logging
import random
from typing import List, Optional, Sequence

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright, Route
from playwright_stealth import stealth_async

from ..models import ScraperConfig

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENTS: List[str] = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
]

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
}

VIEWPORT = {"width": 1920, "height": 1080}

BLOCKED_RESOURCE_TYPES = frozenset({"image", "font", "media", "stylesheet"})

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-setuid-sandbox",
    "--no-first-run",
    "--disable-gpu",
]

WEBDRIVER_PATCH = """
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined
    });
"""


async def block_heavy_resources(route: Route) -> None:
    """Abort image, font, media and stylesheet requests; continue the rest."""
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


class StealthSession:
    """Owns one lazily launched browser for a single adapter.

    Sessions are never shared between adapters; concurrent scrapes of the same
    source need their own adapter and therefore their own session.
    """

    def __init__(self, config: ScraperConfig):
        """Initialize the session.

        Args:
            config: Scraper policy (headless flag, user agent pool, stealth flag)
        """
        self.config = config
        self.user_agents: Sequence[str] = config.user_agents or DEFAULT_USER_AGENTS
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.contexts: List[BrowserContext] = []

    @property
    def is_open(self) -> bool:
        return self.browser is not None

    def random_user_agent(self) -> str:
        return random.choice(list(self.user_agents))

    async def get_browser(self) -> Browser:
        """Launch the browser on first use and return the cached instance.

        A cached browser that has crashed or disconnected is dropped together
        with its contexts and a new one is launched.
        """
        if self.browser is not None:
            if self.browser.is_connected():
                return self.browser
            logger.warning(f"Browser for {self.config.name} disconnected, relaunching")
            self.browser = None
            self.contexts = []

        logger.info(f"Launching browser for {self.config.name} (headless={self.config.headless})")
        if self.playwright is None:
            self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(
            headless=self.config.headless,
            args=LAUNCH_ARGS,
        )
        return self.browser

    async def new_page(self) -> Page:
        """Create a page with a realistic fingerprint and resource blocking.

        Returns:
            A fresh page in its own browser context
        """
        browser = await self.get_browser()
        user_agent = self.random_user_agent()

        context = await browser.new_context(
            user_agent=user_agent,
            viewport=VIEWPORT,
            extra_http_headers=DEFAULT_HEADERS,
            locale="en-US",
        )
        await context.add_init_script(WEBDRIVER_PATCH)
        self.contexts.append(context)

        page = await context.new_page()
        if self.config.stealth:
            await stealth_async(page)
        await page.route("**/*", block_heavy_resources)

        logger.debug(f"Opened page for {self.config.name} with UA {user_agent[:50]}...")
        return page

    async def release_page(self, page: Page) -> None:
        """Close a page and its context, logging close failures."""
        context = page.context
        try:
            await context.close()
        except Exception as e:
            logger.warning(f"Error closing browser context for {self.config.name}: {e}")
        if context in self.contexts:
            self.contexts.remove(context)

    async def close(self) -> None:
        """Close all contexts, the browser and Playwright.

        Safe to call when nothing is open. Close failures are logged, never raised.
        """
        if self.browser is None and self.playwright is None:
            return

        logger.info(f"Closing browser for {self.config.name}")

        for context in self.contexts:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")
        self.contexts = []

        if self.browser is not None:
            try:
                await self.browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser for {self.config.name}: {e}")
            self.browser = None

        if self.playwright is not None:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")
            self.playwright = None

    close_browser = close

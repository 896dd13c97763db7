"""Base adapter implementing the shared scraping contract for job boards."""
import asyncio
import logging
import random
import re
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from ...domain.normalize import collapse_whitespace, is_remote_location, normalize_job_type, parse_posted_date
from ...exceptions import BotDetectedError, NavigationTimeoutError, RetryExhaustedError
from ...metrics import MetricsCollector, metrics as default_metrics
from ...models import JobType, RawPosting, ScrapeOptions, ScrapeResult, ScraperConfig
from ..browser_pool import StealthSession
from ..rate_limiter import RateLimiter
from ..retry import RetryExecutor

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_MARKERS: Tuple[str, ...] = (
    "captcha",
    "verify you are human",
    "security check",
    "unusual activity",
)

SALARY_PATTERN = re.compile(r"\$[\d,]+[kK]?\s*[-–—]\s*\$[\d,]+[kK]?")


class ScrapeState(Enum):
    """Lifecycle of a single scrape attempt."""
    IDLE = "idle"
    RATE_LIMIT_WAIT = "rate_limit_wait"
    NAVIGATING = "navigating"
    EXTRACTING = "extracting"
    DONE = "done"
    FAILED = "failed"


def clean_text(text: Optional[str]) -> str:
    return collapse_whitespace(text)


def select_text(element: Tag, selector: str) -> str:
    """Cleaned text of the first element matching ``selector``, or ''."""
    found = element.select_one(selector)
    return clean_text(found.get_text(" ")) if found else ""


def select_attr(element: Tag, selector: str, attr: str) -> str:
    """Attribute of the first element matching ``selector``, or ''."""
    found = element.select_one(selector)
    if found is None:
        return ""
    value = found.get(attr, "")
    if isinstance(value, list):
        value = " ".join(value)
    return value or ""


def absolute_url(base_url: str, href: Optional[str]) -> str:
    """Resolve a possibly relative link against the board's base URL."""
    if not href:
        return ""
    return urljoin(base_url + "/", href)


def extract_salary(text: Optional[str]) -> Optional[str]:
    """Find a "$100,000 - $150,000" or "$100K-$150K" range in text."""
    if not text:
        return None
    match = SALARY_PATTERN.search(text)
    return match.group(0) if match else None


def slugify(text: str) -> str:
    """Lowercase and hyphenate a query for path-style board URLs."""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


class BaseAdapter(ABC):
    """Scraping contract shared by every job board.

    Each instance exclusively owns its rate limiter, retry executor and stealth
    session. Subclasses only supply URL building and HTML extraction.

    Per page the adapter goes through admission, a humanizing delay,
    navigation (bounded by ``config.timeout``) and extraction. A missing result
    selector ends the scrape with whatever was collected; block markers in the
    page body raise BotDetectedError.
    """

    source_id: str = ""
    default_config: ScraperConfig = ScraperConfig(name="Base", base_url="")
    result_selector: str = ""
    block_markers: Tuple[str, ...] = DEFAULT_BLOCK_MARKERS
    # Only treat block markers as a block when no result was rendered
    block_only_without_results: bool = False

    def __init__(self, config: Optional[ScraperConfig] = None,
                 session: Optional[StealthSession] = None,
                 rate_limiter: Optional[RateLimiter] = None,
                 retry_executor: Optional[RetryExecutor] = None,
                 metrics: Optional[MetricsCollector] = None):
        """Initialize the adapter.

        Args:
            config: Scraper policy, defaults to the board's own config
            session: Stealth session, created from the config when omitted
            rate_limiter: Rate limiter, created from the config when omitted
            retry_executor: Retry executor, created with default backoff when omitted
            metrics: Metrics collector, defaults to the global one
        """
        self.config = config or self.default_config
        self.metrics = metrics or default_metrics
        self.session = session or StealthSession(self.config)
        self.rate_limiter = rate_limiter or RateLimiter(
            max_requests_per_window=self.config.max_requests_per_window,
            window_duration=self.config.window_duration,
            name=self.source_id,
            metrics=self.metrics,
        )
        self.retry_executor = retry_executor or RetryExecutor(max_attempts=self.config.max_retries)
        self.state = ScrapeState.IDLE

    @abstractmethod
    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        """Build the search URL for a zero-based result page."""

    @abstractmethod
    def parse_listings(self, soup: BeautifulSoup) -> List[RawPosting]:
        """Extract raw postings from a rendered search page."""

    def filter_postings(self, postings: List[RawPosting], query: str) -> List[RawPosting]:
        """Hook for boards whose search page ignores the query."""
        return postings

    def page_count(self, options: ScrapeOptions) -> int:
        requested = options.max_pages or self.config.max_pages
        return max(1, min(requested, self.config.max_pages))

    def _transition(self, state: ScrapeState) -> None:
        logger.debug(f"[{self.source_id}] {self.state.value} -> {state.value}")
        self.state = state

    async def scrape(self, query: str, options: Optional[ScrapeOptions] = None) -> ScrapeResult:
        """Scrape the board for ``query``.

        Never raises for scraping failures: an exhausted retry budget is
        reported as an unsuccessful ScrapeResult.

        Args:
            query: Search keywords
            options: Location, remote flag, job type, limit and page count

        Returns:
            ScrapeResult with up to ``options.limit`` valid postings
        """
        options = options or ScrapeOptions()
        start_time = time.monotonic()
        logger.info(f"[{self.source_id}] Starting scrape for '{query}'")

        try:
            postings = await self.retry_executor.run(
                lambda: self._scrape_attempt(query, options),
                label=f"{self.config.name} scrape",
                max_attempts=self.config.max_retries,
            )
        except RetryExhaustedError as e:
            self._transition(ScrapeState.FAILED)
            duration = time.monotonic() - start_time
            self.metrics.record_scrape_error(self.source_id, self._error_type(e.last_error))
            logger.error(f"[{self.source_id}] Scrape failed: {e}")
            return ScrapeResult(success=False, source=self.source_id, error=str(e), duration=duration)

        duration = time.monotonic() - start_time
        self.metrics.record_jobs_scraped(self.source_id, len(postings), duration)
        logger.info(f"[{self.source_id}] Scraped {len(postings)} jobs in {duration:.2f}s")
        return ScrapeResult(
            success=True,
            source=self.source_id,
            data=postings,
            items_scraped=len(postings),
            duration=duration,
        )

    async def _scrape_attempt(self, query: str, options: ScrapeOptions) -> List[RawPosting]:
        """One attempt over all result pages."""
        self._transition(ScrapeState.IDLE)
        postings: List[RawPosting] = []
        pages = self.page_count(options)

        for page_number in range(pages):
            self._transition(ScrapeState.RATE_LIMIT_WAIT)
            await self.rate_limiter.admit()
            await asyncio.sleep(self.config.request_delay + random.random())

            url = self.build_search_url(query, options, page_number)
            logger.info(f"[{self.source_id}] Loading page {page_number + 1}/{pages}: {url}")
            html = await self._load_page(url)

            self._transition(ScrapeState.EXTRACTING)
            if html is None:
                break

            page_postings = self.extract(html, query)
            if not page_postings:
                break
            postings.extend(page_postings)

            if len(postings) >= options.limit:
                break
            if page_number < pages - 1:
                low, high = self.config.page_delay
                await asyncio.sleep(random.uniform(low, high))

        self._transition(ScrapeState.DONE)
        return postings[:options.limit]

    async def _load_page(self, url: str) -> Optional[str]:
        """Navigate to ``url`` and return its HTML, or None when no results rendered."""
        self._transition(ScrapeState.NAVIGATING)
        page = await self.session.new_page()
        try:
            try:
                await asyncio.wait_for(
                    page.goto(url, wait_until="domcontentloaded", timeout=self.config.timeout * 1000),
                    timeout=self.config.timeout,
                )
            except (asyncio.TimeoutError, PlaywrightTimeoutError) as e:
                raise NavigationTimeoutError(
                    f"Timed out loading {url} after {self.config.timeout:.0f}s",
                    source=self.source_id,
                ) from e

            has_results = await self._wait_for_results(page)
            try:
                body_text = await asyncio.wait_for(page.inner_text("body"), timeout=self.config.timeout)
                self.check_for_block(body_text, has_results)
                if not has_results:
                    logger.info(f"[{self.source_id}] No results selector found on {url}")
                    return None
                return await asyncio.wait_for(page.content(), timeout=self.config.timeout)
            except asyncio.TimeoutError as e:
                raise NavigationTimeoutError(
                    f"Timed out extracting {url} after {self.config.timeout:.0f}s",
                    source=self.source_id,
                ) from e
        finally:
            await self.session.release_page(page)

    async def _wait_for_results(self, page: Page) -> bool:
        if not self.result_selector:
            return True
        try:
            await page.wait_for_selector(self.result_selector, timeout=self.config.timeout * 1000)
            return True
        except PlaywrightTimeoutError:
            return False

    def check_for_block(self, body_text: str, has_results: bool) -> None:
        """Raise BotDetectedError if the page body carries block markers.

        Args:
            body_text: Visible text of the page body
            has_results: Whether the result selector rendered
        """
        if self.block_only_without_results and has_results:
            return
        lower = (body_text or "").lower()
        for marker in self.block_markers:
            if marker in lower:
                logger.warning(f"[{self.source_id}] Bot detection page ('{marker}')")
                raise BotDetectedError(
                    f"{self.config.name} returned a verification page ({marker})",
                    source=self.source_id,
                    retryable=self.config.retry_on_bot_detection,
                )

    def extract(self, html: str, query: str = "") -> List[RawPosting]:
        """Parse HTML and keep only postings with a title and company.

        Args:
            html: Rendered page HTML
            query: Search keywords, passed to filter_postings

        Returns:
            Valid postings tagged with this adapter's source id
        """
        soup = BeautifulSoup(html, "html.parser")
        parsed = self.filter_postings(self.parse_listings(soup), query)

        valid = []
        for posting in parsed:
            if not posting.is_valid():
                continue
            posting.source = posting.source or self.source_id
            valid.append(posting)

        dropped = len(parsed) - len(valid)
        if dropped:
            logger.debug(f"[{self.source_id}] Dropped {dropped} postings missing title or company")
        return valid

    def posting_date(self, text: Optional[str]) -> str:
        return parse_posted_date(text)

    def link(self, href: Optional[str]) -> str:
        return absolute_url(self.config.base_url, href)

    @staticmethod
    def _error_type(error: Optional[BaseException]) -> str:
        if isinstance(error, NavigationTimeoutError):
            return "timeout"
        if isinstance(error, BotDetectedError):
            return "bot_detected"
        return "exception"

    async def close(self) -> None:
        """Release the adapter's browser."""
        await self.session.close()


JOB_TYPE_KEYS = {
    JobType.FULL_TIME: "fulltime",
    JobType.PART_TIME: "parttime",
    JobType.CONTRACT: "contract",
    JobType.TEMPORARY: "temporary",
    JobType.INTERNSHIP: "internship",
}


def job_type_key(job_type: Optional[str]) -> Optional[str]:
    """Map free-text job type to a board-neutral key like 'fulltime', or None."""
    if not job_type:
        return None
    return JOB_TYPE_KEYS[normalize_job_type(job_type)]


class CardAdapter(BaseAdapter):
    """Adapter for boards that render results as repeated cards.

    ``card_fields`` maps posting fields to CSS selectors inside a card:
    ``title``, ``company``, ``location``, ``salary``, ``description``,
    ``posted``, ``link``, ``job_type`` and ``tags`` (all matches are used).
    Missing keys are simply not extracted.
    """

    card_fields: Dict[str, str] = {}

    def parse_listings(self, soup: BeautifulSoup) -> List[RawPosting]:
        return [self.parse_card(card) for card in soup.select(self.result_selector)]

    def parse_card(self, card: Tag) -> RawPosting:
        """Read one result card into a RawPosting."""
        fields = self.card_fields

        def text(name: str) -> str:
            return select_text(card, fields[name]) if name in fields else ""

        description = text("description")
        location = text("location")
        posted = ""
        if "posted" in fields:
            posted = select_attr(card, fields["posted"], "datetime") or text("posted")
        tags = []
        if "tags" in fields:
            tags = [clean_text(tag.get_text(" ")) for tag in card.select(fields["tags"])]

        return RawPosting(
            title=text("title"),
            company=text("company"),
            location=location,
            description=description,
            url=self.link(select_attr(card, fields["link"], "href")) if "link" in fields else "",
            source=self.source_id,
            salary=text("salary") or extract_salary(description),
            posted_date=self.posting_date(posted),
            job_type=text("job_type") or None,
            tags=[tag for tag in tags if tag],
            remote=is_remote_location(location),
        )

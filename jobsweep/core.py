"""Main orchestration logic: source selection, fan-out scraping and deduplication."""
import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from .domain.deduplication import JobDeduplicator
from .exceptions import JobSearchError, UnknownSourceError
from .ingest.adapters import BaseAdapter, create_adapter
from .ingest.locations import LocationSourceSelector, merge_sources
from .metrics import MetricsCollector, metrics as default_metrics
from .models import RawPosting, ScrapeOptions, ScrapeResult, SearchFilters, SearchOptions, SearchResult

logger = logging.getLogger(__name__)

# Pages requested per source; adapters cap this at their own max_pages
REQUESTED_PAGES: Dict[str, int] = {
    "linkedin": 5,
    "stackoverflow": 3,
    "dice": 5,
    "monster": 5,
    "ziprecruiter": 5,
    "careerbuilder": 5,
    "simplyhired": 5,
}

# Query sent to adapters when the caller gives no keywords
DEFAULT_KEYWORDS = "jobs"

AdapterFactory = Callable[[str], BaseAdapter]


class ScrapeOrchestrator:
    """Resolves sources for a search, runs their adapters and deduplicates results.

    One adapter instance is created per source and reused across searches;
    concurrent searches on the same orchestrator take turns per source so a
    browser session is never driven by two scrapes at once.
    """

    def __init__(self, selector: Optional[LocationSourceSelector] = None,
                 deduplicator: Optional[JobDeduplicator] = None,
                 adapter_factory: Optional[AdapterFactory] = None,
                 metrics: Optional[MetricsCollector] = None,
                 adapter_options: Optional[Dict[str, Any]] = None):
        """Initialize the orchestrator.

        Args:
            selector: Location source-selector
            deduplicator: Job deduplicator
            adapter_factory: Callable creating an adapter for a source id
            metrics: Metrics collector, defaults to the global one
            adapter_options: ScraperConfig overrides (headless, user_agents, ...)
                applied by the default factory
        """
        self.selector = selector or LocationSourceSelector()
        self.deduplicator = deduplicator or JobDeduplicator()
        self.metrics = metrics or default_metrics
        self.adapter_options = adapter_options or {}
        self.adapter_factory = adapter_factory or self._create_adapter
        self.adapters: Dict[str, BaseAdapter] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _create_adapter(self, source_id: str) -> BaseAdapter:
        kwargs = dict(self.adapter_options)
        kwargs["metrics"] = self.metrics
        if source_id == "indeed":
            kwargs["domain_resolver"] = self.selector.indeed_domain
        return create_adapter(source_id, **kwargs)

    def get_adapter(self, source_id: str) -> Optional[BaseAdapter]:
        """Adapter for a source, created on first use; None for unknown sources."""
        if source_id not in self.adapters:
            try:
                self.adapters[source_id] = self.adapter_factory(source_id)
            except UnknownSourceError as e:
                logger.debug(f"Skipping source without adapter: {e}")
                return None
        return self.adapters[source_id]

    def resolve_sources(self, filters: SearchFilters, options: SearchOptions) -> List[str]:
        """Source ids to query, explicit ones first, else by location.

        Raises:
            JobSearchError: If location resolution fails
        """
        if options.sources:
            return merge_sources(options.sources)
        try:
            return self.selector.sources_for(filters.location)
        except Exception as e:
            raise JobSearchError(f"Could not resolve sources for location '{filters.location}': {e}") from e

    def scrape_options(self, source_id: str, filters: SearchFilters, options: SearchOptions) -> ScrapeOptions:
        return ScrapeOptions(
            location=filters.location,
            remote=filters.remote,
            job_type=filters.job_type,
            experience_level=filters.experience_level,
            limit=options.max_results_per_source,
            max_pages=REQUESTED_PAGES.get(source_id),
        )

    async def _scrape_source(self, source_id: str, adapter: BaseAdapter,
                             filters: SearchFilters, options: SearchOptions) -> ScrapeResult:
        lock = self._locks.setdefault(source_id, asyncio.Lock())
        async with lock:
            keywords = filters.keywords or DEFAULT_KEYWORDS
            return await adapter.scrape(keywords, self.scrape_options(source_id, filters, options))

    def _collect(self, source_id: str, result: Any, postings: List[RawPosting]) -> None:
        """Add a source's postings if it succeeded, log it otherwise."""
        if isinstance(result, BaseException):
            logger.warning(f"Source {source_id} raised {type(result).__name__}: {result}")
            self.metrics.record_scrape_error(source_id, "exception")
        elif not result.success:
            logger.warning(f"Source {source_id} failed: {result.error}")
        else:
            logger.info(f"Source {source_id} returned {result.items_scraped} jobs")
            postings.extend(result.data)

    async def _run_parallel(self, dispatch: List[Tuple[str, BaseAdapter]], filters: SearchFilters,
                            options: SearchOptions) -> List[RawPosting]:
        tasks = [
            asyncio.create_task(self._scrape_source(source_id, adapter, filters, options))
            for source_id, adapter in dispatch
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        postings: List[RawPosting] = []
        for (source_id, _), result in zip(dispatch, results):
            self._collect(source_id, result, postings)
        return postings

    async def _run_sequential(self, dispatch: List[Tuple[str, BaseAdapter]], filters: SearchFilters,
                              options: SearchOptions) -> List[RawPosting]:
        postings: List[RawPosting] = []
        for source_id, adapter in dispatch:
            try:
                result = await self._scrape_source(source_id, adapter, filters, options)
            except Exception as e:
                result = e
            self._collect(source_id, result, postings)
        return postings

    async def search_jobs(self, filters: SearchFilters, options: Optional[SearchOptions] = None) -> SearchResult:
        """Search every resolved source and return deduplicated jobs.

        Per-source failures never propagate; a failed source contributes no
        postings but is still listed in ``sources_used``.

        Args:
            filters: Keywords, location, remote flag, job type, experience level
            options: Explicit sources, dispatch mode and per-source limit

        Returns:
            SearchResult with unique jobs and deduplication statistics

        Raises:
            JobSearchError: If sources could not be resolved before dispatch
        """
        options = options or SearchOptions()
        start_time = time.monotonic()

        requested = self.resolve_sources(filters, options)
        dispatch = []
        for source_id in requested:
            adapter = self.get_adapter(source_id)
            if adapter is None:
                if options.sources:
                    logger.warning(f"Unknown source '{source_id}', skipping")
                continue
            dispatch.append((source_id, adapter))

        sources_used = [source_id for source_id, _ in dispatch]
        mode = "parallel" if options.parallel else "sequential"
        logger.info(f"Searching '{filters.keywords}' on {len(sources_used)} sources ({mode}): {', '.join(sources_used)}")

        if options.parallel:
            postings = await self._run_parallel(dispatch, filters, options)
        else:
            postings = await self._run_sequential(dispatch, filters, options)

        jobs, stats = self.deduplicator.deduplicate(postings)
        duration = time.monotonic() - start_time

        self.metrics.record_duplicates_removed(stats.duplicates_removed)
        self.metrics.record_search(duration)
        logger.info(f"Search finished in {duration:.1f}s: {len(jobs)} unique jobs from {len(postings)} postings")

        return SearchResult(
            jobs=jobs,
            total=len(jobs),
            stats=stats,
            sources_used=sources_used,
            scrape_duration=duration,
        )

    async def close(self) -> None:
        """Close every adapter's browser session."""
        for source_id, adapter in self.adapters.items():
            try:
                await adapter.close()
            except Exception as e:
                logger.warning(f"Error closing adapter {source_id}: {e}")
        self.adapters = {}
        self._locks = {}

    def search_jobs_sync(self, filters: SearchFilters, options: Optional[SearchOptions] = None) -> SearchResult:
        """Run a search in a fresh event loop and close the browsers afterwards."""
        async def _run() -> SearchResult:
            try:
                return await self.search_jobs(filters, options)
            finally:
                await self.close()

        return asyncio.run(_run())

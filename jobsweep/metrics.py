"""In-process metrics for scrape success rates, errors and deduplication."""
import time
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from collections import defaultdict, deque
import logging

logger = logging.getLogger(__name__)

@dataclass
class MetricsCollector:
    """Collects and stores scraping metrics."""

    # Scrape metrics
    jobs_scraped_total: int = 0
    jobs_scraped_by_source: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    scrapes_succeeded_total: int = 0
    scrapes_succeeded_by_source: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    scrape_errors_total: int = 0
    scrape_errors_by_source: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    scrape_errors_by_type: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    # Rate limiting metrics
    rate_limit_hits: int = 0
    rate_limit_hits_by_source: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    # Scrape and search durations (last 100 of each)
    scrape_durations: deque = field(default_factory=lambda: deque(maxlen=100))
    search_durations: deque = field(default_factory=lambda: deque(maxlen=100))
    searches_total: int = 0

    # Duplicate detection metrics
    duplicates_removed: int = 0

    start_time: float = field(default_factory=time.time)

    def record_jobs_scraped(self, source: str, count: int, duration: float = 0.0) -> None:
        """Record a successful scrape.

        Args:
            source: Job board identifier
            count: Number of postings scraped
            duration: Scrape wall time in seconds
        """
        self.jobs_scraped_total += count
        self.jobs_scraped_by_source[source] += count
        self.scrapes_succeeded_total += 1
        self.scrapes_succeeded_by_source[source] += 1
        self.scrape_durations.append(duration)

    def record_scrape_error(self, source: str, error_type: str = "generic") -> None:
        """Record a failed scrape.

        Args:
            source: Job board identifier
            error_type: Type of error (timeout, bot_detected, exception, ...)
        """
        self.scrape_errors_total += 1
        self.scrape_errors_by_source[source] += 1
        self.scrape_errors_by_type[error_type] += 1

    def record_rate_limit_hit(self, source: str) -> None:
        """Record a caller suspended by a rate limiter.

        Args:
            source: Job board identifier
        """
        self.rate_limit_hits += 1
        self.rate_limit_hits_by_source[source] += 1

    def record_duplicates_removed(self, count: int) -> None:
        self.duplicates_removed += count

    def record_search(self, duration: float) -> None:
        self.searches_total += 1
        self.search_durations.append(duration)

    def get_success_rate(self, source: Optional[str] = None) -> float:
        """Calculate the share of scrape attempts that succeeded.

        Counts scrapes, not postings: an empty result page is still a success.

        Args:
            source: Optional source to calculate rate for

        Returns:
            Success rate as percentage (0-100)
        """
        if source:
            succeeded = self.scrapes_succeeded_by_source.get(source, 0)
            errors = self.scrape_errors_by_source.get(source, 0)
        else:
            succeeded = self.scrapes_succeeded_total
            errors = self.scrape_errors_total

        total = succeeded + errors
        if total == 0:
            return 100.0

        return (succeeded / total) * 100.0

    def get_average_search_time(self) -> float:
        if not self.search_durations:
            return 0.0
        return sum(self.search_durations) / len(self.search_durations)

    def get_uptime(self) -> float:
        return time.time() - self.start_time

    def get_summary(self) -> Dict[str, Any]:
        """Get all metrics as a JSON-serializable dictionary."""
        sources = set(self.scrapes_succeeded_by_source) | set(self.scrape_errors_by_source)
        return {
            "jobs": {
                "scraped_total": self.jobs_scraped_total,
                "scraped_by_source": dict(self.jobs_scraped_by_source),
                "duplicates_removed": self.duplicates_removed,
            },
            "errors": {
                "scrape_errors_total": self.scrape_errors_total,
                "scrape_errors_by_source": dict(self.scrape_errors_by_source),
                "scrape_errors_by_type": dict(self.scrape_errors_by_type),
            },
            "rate_limiting": {
                "rate_limit_hits": self.rate_limit_hits,
                "rate_limit_hits_by_source": dict(self.rate_limit_hits_by_source),
            },
            "performance": {
                "searches_total": self.searches_total,
                "average_search_time_ms": self.get_average_search_time() * 1000,
                "uptime_seconds": self.get_uptime(),
            },
            "success_rates": {
                "overall": self.get_success_rate(),
                "by_source": {source: self.get_success_rate(source) for source in sorted(sources)},
            },
        }

    def reset(self) -> None:
        """Reset all metrics (for testing/debugging)."""
        self.__init__()
        logger.info("Metrics reset")

# Global metrics collector
metrics = MetricsCollector()

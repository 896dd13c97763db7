"""Data models for the jobsweep aggregator."""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, Any, List, Tuple


class JobType(str, Enum):
    """Canonical employment types."""
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    TEMPORARY = "Temporary"
    INTERNSHIP = "Internship"


@dataclass
class RawPosting:
    """A job posting exactly as a job board adapter scraped it.

    Attributes:
        title: Job title text
        company: Company name text
        location: Location text (free form, may be empty)
        description: Description or snippet text
        url: Link to the posting
        source: Identifier of the job board it came from
        id: Board-specific identifier, when the board exposes one
        salary: Salary text (e.g., "$100K - $150K")
        posted_date: Posting date, ISO timestamp or relative text ("2 days ago")
        job_type: Free-text employment type
        tags: Skill or category tags
        company_rating: Employer rating, where the board shows one
        remote: Remote flag reported by the board
        experience_level: Seniority text
    """
    title: str
    company: str
    location: str = ""
    description: str = ""
    url: str = ""
    source: str = ""
    id: Optional[str] = None
    salary: Optional[str] = None
    posted_date: Optional[str] = None
    job_type: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    company_rating: Optional[float] = None
    remote: Optional[bool] = None
    experience_level: Optional[str] = None

    def is_valid(self) -> bool:
        """A posting is usable only when both title and company are present."""
        return bool(self.title and self.title.strip() and self.company and self.company.strip())


@dataclass
class NormalizedJob:
    """Canonical job record produced by the deduplicator.

    Attributes:
        id: Deterministic id derived from title, company and location
        title: Cleaned job title
        company: Company name without legal-entity suffix
        location: Location, or "Remote" for remote-only postings
        type: Employment type
        description: Whitespace-collapsed description, capped at 1000 chars
        url: Link to the posting
        posted_date: ISO timestamp
        source: Job board the record came from
        remote: Whether the job is remote
        salary: Salary text
        tags: Skill or category tags
        company_rating: Employer rating
        duplicate_ids: Ids of postings merged into this one
        primary_source: Source of the representative within its group
    """
    id: str
    title: str
    company: str
    location: str
    type: JobType
    description: str
    url: str
    posted_date: str
    source: str
    remote: bool = False
    salary: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    company_rating: Optional[float] = None
    duplicate_ids: List[str] = field(default_factory=list)
    primary_source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass
class ScrapeResult:
    """Outcome of one adapter scrape.

    Attributes:
        success: Whether the scrape completed
        source: Job board identifier
        data: Postings collected (possibly partial on failure)
        error: Error message when success is False
        items_scraped: Number of postings in data
        duration: Wall time in seconds
    """
    success: bool
    source: str
    data: List[RawPosting] = field(default_factory=list)
    error: Optional[str] = None
    items_scraped: int = 0
    duration: float = 0.0


@dataclass
class DeduplicationStats:
    """Counters describing a deduplication pass."""
    total_jobs: int = 0
    unique_jobs: int = 0
    duplicates_removed: int = 0
    duplicate_rate: float = 0.0
    source_breakdown: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScraperConfig:
    """Static scraping policy for one job board.

    Attributes:
        name: Display name of the board
        base_url: Root URL of the board
        request_delay: Base humanization delay before each request, seconds
        max_retries: Attempts allowed by the retry executor
        timeout: Navigation and extraction timeout, seconds
        headless: Launch the browser headless
        user_agents: User agent pool; empty means the built-in pool
        max_pages: Upper bound on result pages per scrape
        page_delay: (min, max) seconds to wait between result pages
        stealth: Apply playwright-stealth patches to new pages
        retry_on_bot_detection: Retry when a CAPTCHA/verification page is seen
        max_requests_per_window: Rate limiter quota
        window_duration: Rate limiter window, seconds
    """
    name: str
    base_url: str
    request_delay: float = 1.0
    max_retries: int = 3
    timeout: float = 30.0
    headless: bool = True
    user_agents: Tuple[str, ...] = ()
    max_pages: int = 1
    page_delay: Tuple[float, float] = (0.0, 0.0)
    stealth: bool = True
    retry_on_bot_detection: bool = True
    max_requests_per_window: int = 10
    window_duration: float = 60.0


@dataclass
class ScrapeOptions:
    """Per-call options passed to an adapter scrape."""
    location: Optional[str] = None
    remote: bool = False
    job_type: Optional[str] = None
    experience_level: Optional[str] = None
    limit: int = 20
    max_pages: Optional[int] = None


@dataclass
class SearchFilters:
    """Search criteria coming from the caller."""
    keywords: str = ""
    location: Optional[str] = None
    remote: bool = False
    job_type: Optional[str] = None
    experience_level: Optional[str] = None


@dataclass
class SearchOptions:
    """Orchestration options for a search.

    Attributes:
        sources: Explicit source ids; None means resolve from location
        parallel: Dispatch adapters concurrently (default) or one by one
        max_results_per_source: Posting limit passed to each adapter
    """
    sources: Optional[List[str]] = None
    parallel: bool = True
    max_results_per_source: int = 20


@dataclass
class SearchResult:
    """Aggregated, deduplicated search output."""
    jobs: List[NormalizedJob]
    total: int
    stats: DeduplicationStats
    sources_used: List[str]
    scrape_duration: float
    page: int = 1
    has_more: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "jobs": [job.to_dict() for job in self.jobs],
            "total": self.total,
            "page": self.page,
            "has_more": self.has_more,
            "stats": self.stats.to_dict(),
            "sources_used": list(self.sources_used),
            "scrape_duration": self.scrape_duration,
        }


@dataclass
class LocationConfig:
    """Job board recommendations for a country or region.

    Attributes:
        region: Region key (e.g., "europe", "north_america")
        country: Country display name
        keywords: Lowercase substrings that identify the location
        indeed_domain: Country-specific Indeed host
        linkedin_region: LinkedIn region label
        recommended_sources: Source ids ordered by preference
        priority: Higher priority configs are matched first
        is_active: Inactive configs are ignored by lookups
        id: Store identifier, if the config came from a store
    """
    region: str
    country: str
    keywords: List[str] = field(default_factory=list)
    indeed_domain: str = "indeed.com"
    linkedin_region: str = "global"
    recommended_sources: List[str] = field(default_factory=list)
    priority: int = 0
    is_active: bool = True
    id: Optional[str] = None

    def matches(self, location: str) -> bool:
        """Check whether any keyword is contained in the lowercased location."""
        loc = location.lower().strip()
        return any(keyword.lower() in loc for keyword in self.keywords)

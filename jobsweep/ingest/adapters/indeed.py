"""Indeed adapter, with the country domain chosen from the location."""
from typing import Callable, List, Optional
from urllib.parse import urlencode

from bs4 import BeautifulSoup

from ...models import RawPosting, ScrapeOptions, ScraperConfig
from ..locations import static_indeed_domain
from .base import CardAdapter, job_type_key, select_attr, select_text

EXPERIENCE_LEVELS = {
    "entry": "entry_level",
    "mid": "mid_level",
    "senior": "senior_level",
}


class IndeedAdapter(CardAdapter):
    """Scrapes indeed.com or its country site (ca.indeed.com, uk.indeed.com, ...)."""

    source_id = "indeed"
    default_config = ScraperConfig(
        name="Indeed",
        base_url="https://www.indeed.com",
        request_delay=2.0,
        max_retries=3,
        timeout=30.0,
    )
    result_selector = ".job_seen_beacon"
    card_fields = {
        "title": ".jobTitle span[title], .jobTitle a, .jcs-JobTitle",
        "company": '[data-testid="company-name"], .companyName',
        "location": '[data-testid="text-location"], .companyLocation',
        "salary": ".salary-snippet, .metadata.salary-snippet-container",
        "description": ".job-snippet, .jobCardShelfContainer",
        "posted": '[data-testid="myJobsStateDate"], .date',
    }

    def __init__(self, *args, domain_resolver: Optional[Callable[[Optional[str]], str]] = None, **kwargs):
        """Initialize the adapter.

        Args:
            domain_resolver: Maps a location to an Indeed host; defaults to the
                static location table
        """
        super().__init__(*args, **kwargs)
        self.domain_resolver = domain_resolver or static_indeed_domain
        # Host of the most recent search; job links point back at it
        self.search_base_url = self.config.base_url

    def base_url_for(self, location: Optional[str]) -> str:
        domain = self.domain_resolver(location)
        return f"https://{domain}" if domain.count(".") > 1 else f"https://www.{domain}"

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        params = {"q": query}
        if options.location:
            params["l"] = options.location
        if options.remote:
            params["remotejob"] = "1"
        job_type = job_type_key(options.job_type)
        if job_type:
            params["jt"] = job_type
        if options.experience_level:
            level = EXPERIENCE_LEVELS.get(options.experience_level.split("_")[0].lower())
            if level:
                params["explvl"] = level
        if page:
            params["start"] = str(page * 10)
        params["sort"] = "date"
        self.search_base_url = self.base_url_for(options.location)
        return f"{self.search_base_url}/jobs?{urlencode(params)}"

    def parse_listings(self, soup: BeautifulSoup) -> List[RawPosting]:
        postings = []
        for card in soup.select(self.result_selector):
            posting = self.parse_card(card)
            job_key = select_attr(card, ".jcs-JobTitle", "data-jk") or select_attr(card, "a[data-jk]", "data-jk")
            if job_key:
                posting.url = f"{self.search_base_url}/viewjob?jk={job_key}"
            if not posting.description and posting.title and posting.company:
                posting.description = f"{posting.title} at {posting.company}"
            posting.job_type = self._job_type(select_text(card, ".metadata"))
            postings.append(posting)
        return postings

    @staticmethod
    def _job_type(metadata: str) -> Optional[str]:
        lower = metadata.lower()
        for marker, label in (("full", "Full-time"), ("part", "Part-time"), ("contract", "Contract"),
                              ("temporary", "Temporary"), ("internship", "Internship")):
            if marker in lower:
                return label
        return None

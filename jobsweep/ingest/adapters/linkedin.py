"""LinkedIn public job search adapter."""
from typing import List
from urllib.parse import urlencode

from bs4 import BeautifulSoup

from ...models import RawPosting, ScrapeOptions, ScraperConfig
from .base import CardAdapter, job_type_key

JOB_TYPES = {
    "fulltime": "F",
    "parttime": "P",
    "contract": "C",
    "temporary": "T",
    "internship": "I",
}

EXPERIENCE_LEVELS = {
    "entry": "1",
    "associate": "2",
    "mid": "3",
    "senior": "3",
    "director": "4",
    "executive": "5",
}

RESULTS_PER_PAGE = 25


class LinkedInAdapter(CardAdapter):
    """Highest-risk board: two pages at most, long pauses between them."""

    source_id = "linkedin"
    default_config = ScraperConfig(
        name="LinkedIn",
        base_url="https://www.linkedin.com",
        request_delay=5.0,
        max_retries=2,
        timeout=30.0,
        max_pages=2,
        page_delay=(8.0, 12.0),
    )
    result_selector = ".job-search-card, .base-card"
    block_markers = ("security check", "unusual activity")
    card_fields = {
        "title": ".base-search-card__title, .job-search-card__title",
        "company": ".base-search-card__subtitle, .job-search-card__company-name",
        "location": ".job-search-card__location, .base-search-card__location",
        "description": ".job-search-card__snippet",
        "posted": "time",
        "link": 'a[href*="/jobs/view/"]',
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        params = {"keywords": query}
        if options.location:
            params["location"] = options.location
        if options.experience_level:
            level = EXPERIENCE_LEVELS.get(options.experience_level.split("-")[0].split("_")[0].lower())
            if level:
                params["f_E"] = level
        job_type = job_type_key(options.job_type)
        if job_type:
            params["f_JT"] = JOB_TYPES[job_type]
        if options.remote:
            params["f_WT"] = "2"
        if page > 0:
            params["start"] = str(page * RESULTS_PER_PAGE)
        params["sortBy"] = "DD"
        return f"{self.config.base_url}/jobs/search?{urlencode(params)}"

    def parse_listings(self, soup: BeautifulSoup) -> List[RawPosting]:
        postings = []
        for card in soup.select(self.result_selector):
            posting = self.parse_card(card)
            urn = card.get("data-entity-urn") or ""
            job_id = urn.split(":")[-1] if urn else card.get("data-job-id")
            if job_id:
                posting.id = f"linkedin-{job_id}"
            postings.append(posting)
        return postings

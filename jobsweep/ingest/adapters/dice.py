"""Dice (tech jobs) adapter."""
from urllib.parse import urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter, job_type_key

EMPLOYMENT_TYPES = {
    "fulltime": "FULLTIME",
    "parttime": "PARTTIME",
    "contract": "CONTRACTS",
    "temporary": "CONTRACTS",
    "internship": "THIRD_PARTY",
}


class DiceAdapter(CardAdapter):
    source_id = "dice"
    default_config = ScraperConfig(
        name="Dice",
        base_url="https://www.dice.com",
        request_delay=2.0,
        max_retries=3,
        timeout=30.0,
        max_pages=5,
        page_delay=(2.5, 4.5),
    )
    result_selector = 'div[data-cy="card"], div.card, div.search-card, dhi-search-card, article.job-card'
    card_fields = {
        "title": 'a[data-cy="card-title-link"], h5 a, a.card-title-link, h4 a, a[id*="title"]',
        "company": 'span[data-cy="search-result-company-name"], .card-company, a.employer, span.company-name',
        "location": 'span[data-cy="search-result-location"], .location, span.job-location, div.search-card-location',
        "salary": 'span[data-cy="search-result-salary"], .salary, span.compensation, div.pay',
        "description": 'div[data-cy="card-summary"], .card-description, .summary, p.description',
        "posted": 'span[data-cy="posted-date"], time, .posted-date, span.date-posted',
        "link": 'a[data-cy="card-title-link"], h5 a, a.card-title-link, h4 a',
        "job_type": 'span[data-cy="employment-type"], .employment-type, span.job-type',
        "tags": 'span.skill-tag, span.chip, a.skill-badge, span[data-cy="skill-tag"]',
    }
    remote_selector = 'span[data-cy="search-result-remote"], .remote-badge, span.remote'

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        params = {"q": query}
        if options.location:
            params["location"] = options.location
        if options.remote:
            params["filters.isRemote"] = "true"
        job_type = job_type_key(options.job_type)
        if job_type:
            params["filters.employmentType"] = EMPLOYMENT_TYPES[job_type]
        params["page"] = str(page + 1)
        return f"{self.config.base_url}/jobs?{urlencode(params)}"

    def parse_card(self, card):
        posting = super().parse_card(card)
        if card.select_one(self.remote_selector) is not None:
            posting.remote = True
        return posting

"""CareerBuilder adapter."""
from urllib.parse import urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter, job_type_key

EMPLOYMENT_TYPES = {
    "fulltime": "JTFT",
    "parttime": "JTPT",
    "contract": "JTCT",
    "temporary": "JTTP",
    "internship": "JTIN",
}


class CareerBuilderAdapter(CardAdapter):
    source_id = "careerbuilder"
    default_config = ScraperConfig(
        name="CareerBuilder",
        base_url="https://www.careerbuilder.com",
        request_delay=2.0,
        max_retries=3,
        timeout=30.0,
        max_pages=5,
        page_delay=(2.5, 4.5),
    )
    result_selector = "div[data-job-id], li.data-results-content, article.job-listing"
    card_fields = {
        "title": "h2.job-title a, a.data-results-title, h4 a",
        "company": '.data-details span[data-testid="company-name"], .company-name, h4.data-results-company',
        "location": '.data-details span[data-testid="job-location"], .job-location, .data-results-location',
        "salary": '.estimated-salary, .pay-range, [data-testid="salary"]',
        "description": '.job-description, .data-snapshot, [data-testid="job-snippet"]',
        "posted": '.job-age, time[data-testid="posted-date"], .posted-date',
        "link": 'a[href*="/job/"]',
        "job_type": '.job-type, [data-testid="job-type"]',
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        params = {"keywords": query}
        if options.remote:
            params["location"] = "Remote"
        elif options.location:
            params["location"] = options.location
        job_type = job_type_key(options.job_type)
        if job_type:
            params["emp"] = EMPLOYMENT_TYPES[job_type]
        params["page_number"] = str(page + 1)
        return f"{self.config.base_url}/jobs?{urlencode(params)}"

"""ZipRecruiter adapter."""
from urllib.parse import urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter


class ZipRecruiterAdapter(CardAdapter):
    source_id = "ziprecruiter"
    default_config = ScraperConfig(
        name="ZipRecruiter",
        base_url="https://www.ziprecruiter.com",
        request_delay=2.0,
        max_retries=3,
        timeout=30.0,
        max_pages=5,
        page_delay=(3.0, 5.0),
    )
    result_selector = "article.job-card, div.job_content, [data-job-id]"
    card_fields = {
        "title": ".job-title, h2 a, .job_link",
        "company": ".job-company, .hiring_company_text, a.company_name",
        "location": ".job-location, .location, .job_location",
        "salary": ".job-salary, .compensation, .salary",
        "description": ".job-snippet, .job_desc, .job-description",
        "posted": ".job-age, time, .posted-date",
        "link": 'a[href*="/jobs/"]',
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        params = {"search": query}
        if options.location:
            params["location"] = options.location
        if options.remote:
            params["refine_by_location_type"] = "remote"
        params["page"] = str(page + 1)
        return f"{self.config.base_url}/jobs-search?{urlencode(params)}"

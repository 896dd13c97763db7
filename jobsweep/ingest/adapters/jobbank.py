"""Job Bank (Government of Canada) adapter."""
from urllib.parse import urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter


class JobBankAdapter(CardAdapter):
    source_id = "jobbank"
    default_config = ScraperConfig(
        name="JobBank",
        base_url="https://www.jobbank.gc.ca",
        request_delay=2.0,
        max_retries=3,
        timeout=30.0,
    )
    result_selector = "article.resultJobItem, .job-result-tile"
    card_fields = {
        "title": ".jobTitle, h3 a.resultJobItem-title, a.jobTitle-link",
        "company": '.employer, .business-name, span[property="name"]',
        "location": '.location, span.city, span[property="addressLocality"]',
        "salary": ".salary, .wage, span.salary",
        "description": ".description, .job-description-snippet",
        "posted": ".date-posted, .posted-date, time",
        "link": "a.resultJobItem-title, a.jobTitle-link",
        "job_type": ".job-type, .employment-terms, .duration",
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        params = {"searchstring": f"{query} remote" if options.remote else query}
        if options.location:
            params["locationstring"] = options.location
        params["sort"] = "D"
        return f"{self.config.base_url}/jobsearch/jobsearch?{urlencode(params)}"

"""Stack Overflow jobs adapter."""
from urllib.parse import urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter


class StackOverflowAdapter(CardAdapter):
    source_id = "stackoverflow"
    default_config = ScraperConfig(
        name="StackOverflow",
        base_url="https://stackoverflow.com",
        request_delay=2.0,
        max_retries=2,
        timeout=30.0,
        max_pages=3,
        page_delay=(3.0, 5.0),
    )
    result_selector = "div[data-jobid], div.-job, article.job-listing, div.listResults > div"
    card_fields = {
        "title": "h2 a.s-link, a.job-link, h2.job-title a, a[title]",
        "company": ".fc-black-700.fs-body1, .company-name, h3.fc-black-800",
        "location": ".fc-black-500.fs-body1, .job-location, .fc-black-500",
        "salary": ".salary, .job-salary, .fc-green-600",
        "description": ".mb12.fc-black-700, .job-summary, .job-description",
        "posted": ".fc-black-400, time, .posted-date",
        "link": "a.s-link, a.job-link",
        "job_type": ".job-type, .employment-type",
        "tags": ".post-tag, .tech-tag, a.job-link--tag",
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        params = {"q": query}
        if options.location:
            params["l"] = options.location
        if options.remote:
            params["r"] = "true"
        if options.experience_level:
            params["e"] = options.experience_level
        params["pg"] = str(page + 1)
        return f"{self.config.base_url}/jobs?{urlencode(params)}"

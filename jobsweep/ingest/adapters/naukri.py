"""Naukri (India) adapter."""
from urllib.parse import urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter, slugify


class NaukriAdapter(CardAdapter):
    source_id = "naukri"
    default_config = ScraperConfig(
        name="Naukri",
        base_url="https://www.naukri.com",
        request_delay=2.5,
        max_retries=3,
        timeout=30.0,
    )
    result_selector = "article.jobTuple, .tuple, .jobTuple"
    card_fields = {
        "title": "a.title, .title, .jobTitle a, .row1 a",
        "company": ".companyInfo, .comp-name, a.comp-name, .subTitle",
        "location": ".location, .locWdth, li.location, span.location",
        "salary": ".salary, span.salary",
        "description": ".job-description, .job-desc, .row3",
        "posted": ".job-post-day, span.date",
        "link": "a.title, .title a, .row1 a",
        "job_type": ".job-type",
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        url = f"{self.config.base_url}/{slugify(query)}-jobs"
        if options.location:
            url += f"-in-{slugify(options.location)}"

        params = {}
        if options.remote:
            params["qp"] = "remote"
            params["remote"] = "1"
        params["sort"] = "date"
        return f"{url}?{urlencode(params)}"

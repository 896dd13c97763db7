"""SimplyHired adapter."""
from urllib.parse import urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter, job_type_key


class SimplyHiredAdapter(CardAdapter):
    source_id = "simplyhired"
    default_config = ScraperConfig(
        name="SimplyHired",
        base_url="https://www.simplyhired.com",
        request_delay=2.0,
        max_retries=3,
        timeout=30.0,
        max_pages=5,
        page_delay=(2.5, 4.5),
    )
    result_selector = "div[data-jobkey], li.SerpJob-listItem, article.jobposting"
    card_fields = {
        "title": "h2 a.card-link, a.SerpJob-link, h3.jobposting-title a",
        "company": "span.JobPosting-labelWithIcon.company, span.company-name, .jobposting-company",
        "location": "span.JobPosting-labelWithIcon.location, span.job-location, .jobposting-location",
        "salary": "p.SerpJob-metaInfo.SerpJob-salary, .salary-snippet, .jobposting-salary",
        "description": "p.SerpJob-snippet, .jobposting-snippet, .job-description",
        "posted": "time.SerpJob-postedDate, .posted-date, .jobposting-date",
        "link": "a.card-link, a.SerpJob-link",
        "job_type": ".job-type, .employment-type",
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        params = {"q": query}
        if options.remote:
            params["l"] = "Remote"
        elif options.location:
            params["l"] = options.location
        job_type = job_type_key(options.job_type)
        if job_type:
            params["jt"] = job_type
        params["pn"] = str(page + 1)
        return f"{self.config.base_url}/search?{urlencode(params)}"

"""Monster adapter."""
from urllib.parse import urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter, job_type_key

JOB_TYPES = {
    "fulltime": "full-time",
    "parttime": "part-time",
    "contract": "contract",
    "temporary": "temporary",
    "internship": "internship",
}


class MonsterAdapter(CardAdapter):
    source_id = "monster"
    default_config = ScraperConfig(
        name="Monster",
        base_url="https://www.monster.com",
        request_delay=2.0,
        max_retries=3,
        timeout=30.0,
        max_pages=5,
        page_delay=(2.5, 4.5),
    )
    result_selector = "section.card-content, div.job-cardstyle__JobCardComponent, article[data-job-id]"
    card_fields = {
        "title": 'h2.title a, a.job-title, h3 a[data-test-id="svx-job-title"]',
        "company": '.company span, .company-name, [data-test-id="svx-job-company"]',
        "location": '.location span, .job-location, [data-test-id="svx-job-location"]',
        "salary": '.salary, .estimated-salary, [data-test-id="svx-job-salary"]',
        "description": '.job-description, .summary, [data-test-id="svx-job-description"]',
        "posted": '.posted-date, time, [data-test-id="svx-job-date"]',
        "link": 'a[href*="/job-opening/"]',
        "job_type": '.job-type, .employment-type, [data-test-id="svx-job-type"]',
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        params = {"q": query}
        if options.remote:
            params["where"] = "Remote"
        elif options.location:
            params["where"] = options.location
        job_type = job_type_key(options.job_type)
        if job_type:
            params["jobtype"] = JOB_TYPES[job_type]
        params["page"] = str(page + 1)
        return f"{self.config.base_url}/jobs/search?{urlencode(params)}"

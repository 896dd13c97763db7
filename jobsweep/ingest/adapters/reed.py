"""Reed (UK) adapter."""
from urllib.parse import urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter, job_type_key, slugify

CONTRACT_TYPES = {
    "fulltime": "permanent",
    "parttime": "parttime",
    "contract": "contract",
    "temporary": "temp",
}


class ReedAdapter(CardAdapter):
    source_id = "reed"
    default_config = ScraperConfig(
        name="Reed",
        base_url="https://www.reed.co.uk",
        request_delay=2.0,
        max_retries=3,
        timeout=30.0,
    )
    result_selector = "article.job-result"
    card_fields = {
        "title": "h2.job-result-heading__title, a.job-title",
        "company": ".gtmJobListingPostedBy, a.posted-by",
        "location": ".location, .job-metadata-item--location",
        "salary": ".salary, .job-metadata-item--salary",
        "description": ".job-result-description, .description",
        "posted": ".posted-date, .job-posted-date",
        "link": "h2.job-result-heading__title a, a.job-title",
        "job_type": ".job-metadata, .job-type",
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        url = f"{self.config.base_url}/jobs/{slugify(query)}-jobs"
        if options.location:
            url += f"-in-{slugify(options.location)}"

        params = {}
        if options.remote:
            params["proximity"] = "0"
            params["locationtype"] = "HomeWorking"
        job_type = job_type_key(options.job_type)
        if job_type in CONTRACT_TYPES:
            params["contractType"] = CONTRACT_TYPES[job_type]
        return f"{url}?{urlencode(params)}" if params else url

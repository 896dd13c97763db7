"""Seek (Australia) adapter."""
from urllib.parse import quote, urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter, slugify

WORK_FROM_HOME = "242"


class SeekAdapter(CardAdapter):
    source_id = "seek"
    default_config = ScraperConfig(
        name="Seek",
        base_url="https://www.seek.com.au",
        request_delay=2.0,
        max_retries=3,
        timeout=30.0,
    )
    result_selector = '[data-search-sol-meta], article[data-card-type="JobCard"]'
    card_fields = {
        "title": 'a[data-automation="jobTitle"], h3 a, .job-title',
        "company": 'a[data-automation="jobCompany"], .advertiser-name, .company-name',
        "location": 'a[data-automation="jobLocation"], .location, [data-automation="jobLocation"]',
        "salary": '[data-automation="jobSalary"], .salary, .job-salary',
        "description": '[data-automation="jobShortDescription"], .job-abstract, .snippet',
        "posted": '[data-automation="jobListingDate"], .listed-date',
        "link": 'a[data-automation="jobTitle"], h3 a',
        "job_type": '[data-automation="jobClassification"], .metadata, .job-type',
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        url = f"{self.config.base_url}/{slugify(query)}-jobs"
        if options.location:
            url += f"/in-All-{quote(options.location.replace(' ', '-'))}"

        params = {}
        if options.remote:
            params["worktype"] = WORK_FROM_HOME
        params["sortmode"] = "ListedDate"
        return f"{url}?{urlencode(params)}"

"""Glassdoor adapter."""
from urllib.parse import urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter


class GlassdoorAdapter(CardAdapter):
    """Glassdoor listings carry employer ratings, used when scoring duplicates."""

    source_id = "glassdoor"
    default_config = ScraperConfig(
        name="Glassdoor",
        base_url="https://www.glassdoor.com",
        request_delay=3.0,
        max_retries=2,
        timeout=40.0,
    )
    result_selector = (
        'li[data-test="jobListing"], .react-job-listing, '
        '.JobsList_jobListItem__wjTHv, article[data-test="job-listing"]'
    )
    block_markers = ("captcha", "verify you are human")
    block_only_without_results = True
    card_fields = {
        "title": '[data-test="job-title"], .JobCard_jobTitle__GLrsT, .jobLink',
        "company": '[data-test="employer-name"], .EmployerProfile_employerName__Xemli, .jobHeader',
        "location": '[data-test="emp-location"], .JobCard_location__N_iYE, .loc',
        "salary": '[data-test="detailSalary"], .JobCard_salaryEstimate__arV5J, .salaryText',
        "description": '[data-test="job-description"], .JobCard_jobDescriptionSnippet__yWW8q',
        "posted": '[data-test="job-age"], .JobCard_listingAge__KuaxP, .minor',
        "link": 'a[data-test="job-link"], a.jobLink',
    }
    rating_selector = '[data-test="rating"], .EmployerProfile_ratingNum__MnGSb'

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        params = {"sc.keyword": query}
        if options.location:
            params["locT"] = "C"
            params["locKeyword"] = options.location
        if options.remote:
            params["remoteWorkType"] = "1"
        params["sortBy"] = "date_desc"
        return f"{self.config.base_url}/Job/jobs.htm?{urlencode(params)}"

    def parse_card(self, card):
        posting = super().parse_card(card)
        rating = card.select_one(self.rating_selector)
        if rating is not None:
            try:
                posting.company_rating = float(rating.get_text(strip=True).rstrip("★").strip())
            except ValueError:
                posting.company_rating = None
        return posting

"""We Work Remotely adapter."""
from urllib.parse import urlencode

from ...models import ScrapeOptions, ScraperConfig
from .base import CardAdapter


class WeWorkRemotelyAdapter(CardAdapter):
    source_id = "weworkremotely"
    default_config = ScraperConfig(
        name="WeWorkRemotely",
        base_url="https://weworkremotely.com",
        request_delay=2.0,
        max_retries=3,
        timeout=30.0,
    )
    result_selector = "li.feature, section.jobs li"
    card_fields = {
        "title": ".title, span.title, a.title",
        "company": ".company, span.company, a.company",
        "location": ".region, .location, span.region",
        "salary": ".salary",
        "description": ".tooltip, .description",
        "posted": "time, .date, span.date",
        "link": "a",
        "tags": ".category",
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        return f"{self.config.base_url}/remote-jobs/search?{urlencode({'term': query})}"

    def parse_card(self, card):
        posting = super().parse_card(card)
        posting.location = posting.location or "Remote"
        posting.remote = True
        return posting

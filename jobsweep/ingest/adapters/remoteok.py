"""RemoteOK adapter.

RemoteOK has no usable search endpoint, so the front page is scraped and
filtered locally by query keywords.
"""
from typing import List

from ...models import RawPosting, ScrapeOptions, ScraperConfig
from .base import CardAdapter


class RemoteOKAdapter(CardAdapter):
    source_id = "remoteok"
    default_config = ScraperConfig(
        name="RemoteOK",
        base_url="https://remoteok.com",
        request_delay=1.5,
        max_retries=3,
        timeout=30.0,
    )
    result_selector = "tr.job"
    card_fields = {
        "title": "h2",
        "company": "h3",
        "salary": ".salary",
        "description": ".description",
        "posted": "time",
        "link": 'a[href*="/remote-jobs/"]',
        "tags": ".tags .tag",
    }

    def build_search_url(self, query: str, options: ScrapeOptions, page: int = 0) -> str:
        return self.config.base_url

    def parse_card(self, card):
        posting = super().parse_card(card)
        posting.location = "Remote"
        posting.remote = True
        job_id = card.get("data-id")
        if job_id:
            posting.id = f"remoteok-{job_id}"
        return posting

    def filter_postings(self, postings: List[RawPosting], query: str) -> List[RawPosting]:
        """Keep postings mentioning any query keyword longer than two characters."""
        keywords = [word for word in query.lower().split() if len(word) > 2]
        if not keywords:
            return postings

        matched = []
        for posting in postings:
            text = " ".join([posting.title, posting.company, posting.description] + posting.tags).lower()
            if any(keyword in text for keyword in keywords):
                matched.append(posting)
        return matched

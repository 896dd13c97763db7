"""jobsweep: multi-board job search with location-aware source selection and deduplication."""
from .core import ScrapeOrchestrator
from .domain.deduplication import JobDeduplicator
from .ingest.locations import LocationSourceSelector
from .models import NormalizedJob, RawPosting, SearchFilters, SearchOptions, SearchResult

__version__ = "0.3.0"

__all__ = [
    "ScrapeOrchestrator",
    "JobDeduplicator",
    "LocationSourceSelector",
    "NormalizedJob",
    "RawPosting",
    "SearchFilters",
    "SearchOptions",
    "SearchResult",
]

"""Location-aware job board selection."""
import logging
import time
from typing import Iterable, List, Optional, Sequence

from ..exceptions import LocationConfigError
from ..models import LocationConfig

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 300.0

# Boards with location-blind coverage, appended to every recommendation
GLOBAL_SOURCES = ("remoteok", "linkedin", "stackoverflow", "weworkremotely")

DEFAULT_LOCATION = LocationConfig(
    region="global",
    country="Global",
    keywords=[],
    indeed_domain="indeed.com",
    linkedin_region="global",
    recommended_sources=["indeed", "remoteok", "linkedin", "stackoverflow"],
    priority=0,
)

STATIC_LOCATION_TABLE: List[LocationConfig] = [
    LocationConfig(
        region="north_america",
        country="Canada",
        keywords=["canada", "toronto", "vancouver", "montreal", "calgary", "ottawa", "edmonton"],
        indeed_domain="ca.indeed.com",
        linkedin_region="Canada",
        recommended_sources=["indeed", "linkedin", "jobbank", "workopolis", "eluta"],
        priority=100,
    ),
    LocationConfig(
        region="europe",
        country="United Kingdom",
        keywords=["uk", "united kingdom", "london", "manchester", "birmingham", "england", "scotland", "wales"],
        indeed_domain="uk.indeed.com",
        linkedin_region="United Kingdom",
        recommended_sources=["indeed", "linkedin", "reed", "totaljobs", "cwjobs"],
        priority=100,
    ),
    LocationConfig(
        region="oceania",
        country="Australia",
        keywords=["australia", "sydney", "melbourne", "brisbane", "perth"],
        indeed_domain="au.indeed.com",
        linkedin_region="Australia",
        recommended_sources=["indeed", "linkedin", "seek", "jora"],
        priority=100,
    ),
    LocationConfig(
        region="europe",
        country="Germany",
        keywords=["germany", "berlin", "munich", "hamburg", "deutschland"],
        indeed_domain="de.indeed.com",
        linkedin_region="Germany",
        recommended_sources=["indeed", "linkedin", "stepstone", "xing"],
        priority=90,
    ),
    LocationConfig(
        region="europe",
        country="France",
        keywords=["france", "paris", "lyon", "marseille"],
        indeed_domain="fr.indeed.com",
        linkedin_region="France",
        recommended_sources=["indeed", "linkedin", "apec", "jobteaser"],
        priority=90,
    ),
    LocationConfig(
        region="asia",
        country="India",
        keywords=["india", "bangalore", "mumbai", "delhi", "hyderabad"],
        indeed_domain="in.indeed.com",
        linkedin_region="India",
        recommended_sources=["indeed", "linkedin", "naukri", "monsterindia"],
        priority=90,
    ),
    LocationConfig(
        region="asia",
        country="Singapore",
        keywords=["singapore"],
        indeed_domain="sg.indeed.com",
        linkedin_region="Singapore",
        recommended_sources=["indeed", "linkedin", "jobstreet", "jobsdb"],
        priority=90,
    ),
    LocationConfig(
        region="north_america",
        country="United States",
        keywords=["usa", "united states", "america", "new york", "san francisco", "los angeles",
                  "chicago", "boston", "seattle", "austin", "denver"],
        indeed_domain="indeed.com",
        linkedin_region="United States",
        recommended_sources=["indeed", "linkedin", "glassdoor", "dice", "monster", "ziprecruiter"],
        priority=80,
    ),
    LocationConfig(
        region="global",
        country="Remote",
        keywords=["remote", "anywhere", "worldwide"],
        indeed_domain="indeed.com",
        linkedin_region="global",
        recommended_sources=["remoteok", "weworkremotely", "linkedin", "stackoverflow", "indeed"],
        priority=50,
    ),
]


def by_priority(configs: Iterable[LocationConfig]) -> List[LocationConfig]:
    """Active configs, highest priority first (stable for equal priorities)."""
    return sorted((c for c in configs if c.is_active), key=lambda c: c.priority, reverse=True)


def match_location(location: str, configs: Iterable[LocationConfig]) -> Optional[LocationConfig]:
    """First config (in the given order) with a keyword contained in ``location``."""
    for config in configs:
        if config.matches(location):
            return config
    return None


def static_indeed_domain(location: Optional[str]) -> str:
    """Indeed host for a location using only the built-in table."""
    if not location:
        return DEFAULT_LOCATION.indeed_domain
    config = match_location(location, by_priority(STATIC_LOCATION_TABLE))
    return config.indeed_domain if config else DEFAULT_LOCATION.indeed_domain


def merge_sources(*groups: Sequence[str]) -> List[str]:
    """Concatenate source id lists, dropping repeats but keeping first-seen order."""
    merged: List[str] = []
    for group in groups:
        for source in group:
            key = source.lower().strip()
            if key and key not in merged:
                merged.append(key)
    return merged


class LocationSourceSelector:
    """Maps free-text locations to recommended job boards.

    Lookup order:
    1. Active configs from the backing store, cached for ``cache_ttl`` seconds
    2. The built-in static table (store down, empty or no match)
    3. The global default

    A failing store degrades to the stale cache, then to the static table.
    """

    def __init__(self, store=None, cache_ttl: float = DEFAULT_CACHE_TTL,
                 static_table: Optional[List[LocationConfig]] = None,
                 global_sources: Sequence[str] = GLOBAL_SOURCES):
        """Initialize the selector.

        Args:
            store: Object with ``active_configs()``; None uses the static table only
            cache_ttl: Seconds before store configs are re-read
            static_table: Fallback table, defaults to STATIC_LOCATION_TABLE
            global_sources: Sources appended to every recommendation
        """
        self.store = store
        self.cache_ttl = cache_ttl
        self.static_table = STATIC_LOCATION_TABLE if static_table is None else static_table
        self.global_sources = tuple(global_sources)
        self._cache: Optional[List[LocationConfig]] = None
        self._cache_time = 0.0

        if store is not None and hasattr(store, "add_listener"):
            store.add_listener(self.invalidate)

    def invalidate(self) -> None:
        """Drop cached store configs so the next lookup re-reads the store."""
        logger.debug("Location config cache invalidated")
        self._cache = None
        self._cache_time = 0.0

    def _load_configs(self) -> Optional[List[LocationConfig]]:
        """Store configs by descending priority, or None when unavailable."""
        now = time.monotonic()
        if self._cache is not None and now - self._cache_time < self.cache_ttl:
            return self._cache

        if self.store is None:
            return None

        try:
            configs = by_priority(self.store.active_configs())
        except Exception as e:
            logger.warning(f"Location config store unavailable: {e}")
            if self._cache is not None:
                logger.warning("Using stale location config cache")
                return self._cache
            return None

        logger.info(f"Loaded {len(configs)} location configs from store")
        self._cache = configs
        self._cache_time = now
        return configs

    def _static_match(self, location: str) -> Optional[LocationConfig]:
        if not self.static_table:
            raise LocationConfigError("Static location table is empty")
        try:
            return match_location(location, by_priority(self.static_table))
        except (AttributeError, TypeError) as e:
            raise LocationConfigError(f"Static location table is corrupted: {e}") from e

    def detect(self, location: Optional[str] = None) -> LocationConfig:
        """Resolve the location config for a free-text location.

        Args:
            location: User location such as "Toronto", "London, UK" or "Remote"

        Returns:
            Matching LocationConfig, or DEFAULT_LOCATION

        Raises:
            LocationConfigError: If the static fallback table is unusable
        """
        if not location or not location.strip():
            return DEFAULT_LOCATION

        configs = self._load_configs()
        if configs:
            config = match_location(location, configs)
            if config:
                logger.info(f"Matched '{location}' to {config.country} (priority {config.priority})")
                return config

        config = self._static_match(location)
        if config:
            logger.info(f"Matched '{location}' to {config.country} from static table")
            return config

        logger.info(f"No location match for '{location}', using global defaults")
        return DEFAULT_LOCATION

    def sources_for(self, location: Optional[str] = None) -> List[str]:
        """Ordered, de-duplicated source ids: recommended boards, then global ones."""
        config = self.detect(location)
        return merge_sources(config.recommended_sources, self.global_sources)

    def indeed_domain(self, location: Optional[str] = None) -> str:
        return self.detect(location).indeed_domain

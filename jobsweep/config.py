"""Configuration loading from environment variables, .env files and YAML."""
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union
import os
import logging
from dotenv import load_dotenv

from .ingest.location_store import LocationStore, SqlLocationStore, YamlLocationStore, load_location_file

logger = logging.getLogger(__name__)

__all__ = ["Config", "config", "load_location_file", "build_location_store"]

ENV_PREFIX = "JOBSWEEP_"
TRUE_VALUES = ('true', '1', 'yes', 'on')

N = TypeVar("N", int, float)


class Config:
    """Settings read from ``JOBSWEEP_*`` environment variables.

    A ``.env`` file (explicit path, else one in the working directory) is
    loaded first; variables already set in the environment win over it.
    """

    def __init__(self, env_file: Optional[Union[str, Path]] = None, prefix: str = ENV_PREFIX):
        """Initialize configuration.

        Args:
            env_file: Optional path to .env file
            prefix: Prefix prepended to every key
        """
        self.prefix = prefix
        candidate = Path(env_file) if env_file else Path(".env")
        if candidate.is_file():
            load_dotenv(candidate)
            logger.info(f"Loaded configuration from {candidate}")
        else:
            logger.debug("No .env file found, using environment variables only")

    def env_name(self, key: str) -> str:
        return key if key.startswith(self.prefix) else f"{self.prefix}{key}"

    def get(self, key: str, default: Any = None, required: bool = False) -> Any:
        """Get a raw configuration value.

        Args:
            key: Key with or without the prefix ("HEADLESS" or "JOBSWEEP_HEADLESS")
            default: Value when the variable is unset or empty
            required: Raise instead of returning a missing value

        Raises:
            ValueError: If a required key is missing
        """
        name = self.env_name(key)
        value = os.environ.get(name) or default
        if required and value is None:
            raise ValueError(f"Required configuration key '{name}' is missing")
        return value

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return str(value).strip().lower() in TRUE_VALUES

    def _get_number(self, key: str, default: N, cast: Callable[[str], N]) -> N:
        value = self.get(key)
        if value is None:
            return default
        try:
            return cast(value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid {cast.__name__} value for {self.env_name(key)}: {value}, using default {default}")
            return default

    def get_int(self, key: str, default: int = 0) -> int:
        return self._get_number(key, default, int)

    def get_float(self, key: str, default: float = 0.0) -> float:
        return self._get_number(key, default, float)

    def get_list(self, key: str, separator: str = ",") -> List[str]:
        """Split a delimited value into stripped, non-empty items."""
        value = self.get(key, "")
        return [item.strip() for item in str(value).split(separator) if item.strip()]

    def get_scraper_config(self) -> Dict[str, Any]:
        """Scraping and orchestration settings."""
        return {
            'headless': self.get_bool('HEADLESS', True),
            'parallel': self.get_bool('PARALLEL', True),
            'max_results_per_source': self.get_int('MAX_RESULTS_PER_SOURCE', 20),
            'sources': [source.lower() for source in self.get_list('SOURCES')],
            # User agents contain commas, so they are separated by '|'
            'user_agents': self.get_list('USER_AGENTS', separator='|'),
        }

    def get_location_config(self) -> Dict[str, Any]:
        """Location store settings: database URL, YAML file and cache TTL."""
        return {
            'db_url': self.get('LOCATION_DB_URL'),
            'file': self.get('LOCATION_FILE'),
            'cache_ttl': self.get_float('LOCATION_CACHE_TTL', 300.0),
        }

    def get_dedup_config(self) -> Dict[str, Any]:
        return {'similarity_threshold': self.get_float('SIMILARITY_THRESHOLD', 0.85)}

    def get_all_config(self) -> Dict[str, Any]:
        return {
            'scraper': self.get_scraper_config(),
            'location': self.get_location_config(),
            'dedup': self.get_dedup_config(),
        }


def build_location_store(cfg: Optional[Config] = None) -> Optional[LocationStore]:
    """Create the configured location store.

    A database URL wins over a YAML file; with neither, the selector runs on
    its static table alone.

    Args:
        cfg: Configuration, defaults to the global instance

    Returns:
        A LocationStore, or None
    """
    location_config = (cfg or config).get_location_config()
    if location_config['db_url']:
        logger.info("Using SQL location store")
        return SqlLocationStore(location_config['db_url'])
    if location_config['file']:
        logger.info(f"Using YAML location store {location_config['file']}")
        return YamlLocationStore(location_config['file'])
    return None

# Global configuration instance
config = Config()

"""Backing stores for location configs (SQL database or YAML file)."""
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
import logging

import yaml
from sqlalchemy import create_engine, Column, Integer, String, DateTime, Boolean, JSON
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import LocationConfigError
from ..models import LocationConfig
from .locations import STATIC_LOCATION_TABLE

logger = logging.getLogger(__name__)

Base = declarative_base()

REQUIRED_LOCATION_KEYS = ("country", "keywords", "recommended_sources")


class LocationConfigModel(Base):
    """SQLAlchemy model for location configs."""
    __tablename__ = 'location_configs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    region = Column(String(50), nullable=False, index=True)
    country = Column(String(100), nullable=False, unique=True)
    keywords = Column(JSON, nullable=False, default=list)
    indeed_domain = Column(String(100), nullable=False, default="indeed.com")
    linkedin_region = Column(String(100), nullable=False, default="global")
    recommended_sources = Column(JSON, nullable=False, default=list)
    priority = Column(Integer, nullable=False, default=0, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_config(self) -> LocationConfig:
        return LocationConfig(
            region=self.region,
            country=self.country,
            keywords=list(self.keywords or []),
            indeed_domain=self.indeed_domain,
            linkedin_region=self.linkedin_region,
            recommended_sources=list(self.recommended_sources or []),
            priority=self.priority,
            is_active=self.is_active,
            id=str(self.id),
        )


class LocationStore(ABC):
    """Read interface consumed by LocationSourceSelector."""

    def __init__(self):
        self._listeners: List[Callable[[], None]] = []

    @abstractmethod
    def active_configs(self) -> List[LocationConfig]:
        """Active configs ordered by priority, highest first."""

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register a callback invoked after every write (cache invalidation)."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in self._listeners:
            callback()


class SqlLocationStore(LocationStore):
    """Location configs persisted with SQLAlchemy."""

    def __init__(self, db_url: str = "sqlite:///locations.db"):
        """Initialize database connection.

        Args:
            db_url: Database connection URL
        """
        super().__init__()
        self.engine = create_engine(db_url)
        self.Session = sessionmaker(bind=self.engine)
        self._create_tables()

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    def active_configs(self) -> List[LocationConfig]:
        with self.Session() as session:
            rows = (
                session.query(LocationConfigModel)
                .filter_by(is_active=True)
                .order_by(LocationConfigModel.priority.desc(), LocationConfigModel.id)
                .all()
            )
            return [row.to_config() for row in rows]

    def all_configs(self) -> List[LocationConfig]:
        """Every config, including inactive ones, highest priority first."""
        with self.Session() as session:
            rows = (
                session.query(LocationConfigModel)
                .order_by(LocationConfigModel.priority.desc(), LocationConfigModel.id)
                .all()
            )
            return [row.to_config() for row in rows]

    def add_config(self, config: LocationConfig) -> LocationConfig:
        """Insert a config.

        Args:
            config: Config to store (its ``id`` is ignored)

        Returns:
            The stored config with its new id

        Raises:
            LocationConfigError: If the insert fails (e.g., duplicate country)
        """
        try:
            with self.Session() as session:
                row = LocationConfigModel(
                    region=config.region,
                    country=config.country,
                    keywords=[k.lower() for k in config.keywords],
                    indeed_domain=config.indeed_domain,
                    linkedin_region=config.linkedin_region,
                    recommended_sources=list(config.recommended_sources),
                    priority=config.priority,
                    is_active=config.is_active,
                )
                session.add(row)
                session.commit()
                stored = row.to_config()
        except SQLAlchemyError as e:
            logger.error(f"Error adding location config {config.country}: {e}")
            raise LocationConfigError(f"Could not add location config {config.country}: {e}") from e

        logger.info(f"Added location config {stored.country} (id {stored.id})")
        self._notify()
        return stored

    def update_config(self, config_id: Union[int, str], **changes: Any) -> LocationConfig:
        """Update fields of an existing config.

        Args:
            config_id: Id of the config
            **changes: LocationConfig field values to set

        Returns:
            The updated config

        Raises:
            LocationConfigError: If the config does not exist or the update fails
        """
        unknown = set(changes) - {c.name for c in LocationConfigModel.__table__.columns}
        if unknown:
            raise LocationConfigError(f"Unknown location config fields: {', '.join(sorted(unknown))}")

        try:
            with self.Session() as session:
                row = session.get(LocationConfigModel, int(config_id))
                if row is None:
                    raise LocationConfigError(f"Location config {config_id} not found")
                for name, value in changes.items():
                    setattr(row, name, value)
                row.updated_at = datetime.utcnow()
                session.commit()
                updated = row.to_config()
        except SQLAlchemyError as e:
            logger.error(f"Error updating location config {config_id}: {e}")
            raise LocationConfigError(f"Could not update location config {config_id}: {e}") from e

        logger.info(f"Updated location config {updated.country}")
        self._notify()
        return updated

    def deactivate_config(self, config_id: Union[int, str]) -> LocationConfig:
        """Soft-delete a config so lookups ignore it."""
        return self.update_config(config_id, is_active=False)

    def seed_defaults(self, configs: Optional[List[LocationConfig]] = None) -> int:
        """Insert the built-in table, skipping countries already stored.

        Returns:
            Number of configs inserted
        """
        if configs is None:
            configs = STATIC_LOCATION_TABLE

        existing = {config.country for config in self.all_configs()}
        added = 0
        for config in configs:
            if config.country in existing:
                continue
            self.add_config(config)
            added += 1

        logger.info(f"Seeded {added} location configs")
        return added


def _config_from_dict(item: Dict[str, Any]) -> LocationConfig:
    missing = [key for key in REQUIRED_LOCATION_KEYS if not item.get(key)]
    if missing:
        raise ValueError(f"Location config missing {', '.join(missing)}: {item}")
    return LocationConfig(
        region=item.get("region", "global"),
        country=item["country"],
        keywords=[str(k).lower() for k in item["keywords"]],
        indeed_domain=item.get("indeed_domain", "indeed.com"),
        linkedin_region=item.get("linkedin_region", "global"),
        recommended_sources=[str(s).lower() for s in item["recommended_sources"]],
        priority=int(item.get("priority", 0)),
        is_active=bool(item.get("is_active", True)),
        id=str(item["id"]) if item.get("id") is not None else None,
    )


def load_location_file(path: Union[str, Path]) -> List[LocationConfig]:
    """Load location configs from a YAML file.

    Accepts either a top-level list or a mapping with a ``locations`` key.

    Args:
        path: Path to the YAML file

    Returns:
        List of LocationConfig objects

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If an entry lacks country, keywords or recommended_sources
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Location file not found: {path}")
    with open(path, "r") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict) and 'locations' in data:
        data = data['locations']
    return [_config_from_dict(item) for item in data]


class YamlLocationStore(LocationStore):
    """Read-only store backed by a YAML file, re-read on every lookup."""

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)

    def active_configs(self) -> List[LocationConfig]:
        configs = [c for c in load_location_file(self.path) if c.is_active]
        return sorted(configs, key=lambda c: c.priority, reverse=True)

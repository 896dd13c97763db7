"""Tests for the SQL and YAML location stores."""
import pytest

from jobsweep.exceptions import LocationConfigError
from jobsweep.ingest.location_store import SqlLocationStore, YamlLocationStore, load_location_file
from jobsweep.ingest.locations import STATIC_LOCATION_TABLE, LocationSourceSelector
from jobsweep.models import LocationConfig


@pytest.fixture
def store():
    return SqlLocationStore("sqlite:///:memory:")


def make_config(country="Narnia", keywords=None, sources=None, priority=10):
    return LocationConfig(
        region="fantasy",
        country=country,
        keywords=keywords or [country.lower()],
        recommended_sources=sources or ["indeed", "linkedin"],
        priority=priority,
    )


class TestSqlLocationStore:
    def test_seed_defaults_is_idempotent(self, store):
        assert store.seed_defaults() == len(STATIC_LOCATION_TABLE)
        assert store.seed_defaults() == 0
        assert len(store.all_configs()) == len(STATIC_LOCATION_TABLE)

    def test_active_configs_ordered_by_priority(self, store):
        store.add_config(make_config("Low", priority=1))
        store.add_config(make_config("High", priority=100))
        store.add_config(make_config("Mid", priority=50))

        assert [c.country for c in store.active_configs()] == ["High", "Mid", "Low"]

    def test_add_config_round_trips_fields(self, store):
        stored = store.add_config(LocationConfig(
            region="europe",
            country="Netherlands",
            keywords=["Amsterdam", "netherlands"],
            indeed_domain="nl.indeed.com",
            linkedin_region="Netherlands",
            recommended_sources=["indeed", "linkedin"],
            priority=90,
        ))

        assert stored.id is not None
        loaded = store.active_configs()[0]
        assert loaded.keywords == ["amsterdam", "netherlands"]
        assert loaded.indeed_domain == "nl.indeed.com"
        assert loaded.recommended_sources == ["indeed", "linkedin"]
        assert loaded.matches("Amsterdam, NL")

    def test_duplicate_country_is_rejected(self, store):
        store.add_config(make_config("Narnia"))
        with pytest.raises(LocationConfigError):
            store.add_config(make_config("Narnia"))

    def test_deactivate_hides_config(self, store):
        stored = store.add_config(make_config("Narnia"))

        deactivated = store.deactivate_config(stored.id)

        assert deactivated.is_active is False
        assert store.active_configs() == []
        assert [c.country for c in store.all_configs()] == ["Narnia"]

    def test_update_config(self, store):
        stored = store.add_config(make_config("Narnia"))
        updated = store.update_config(stored.id, priority=500, recommended_sources=["dice"])
        assert updated.priority == 500
        assert updated.recommended_sources == ["dice"]

    def test_update_unknown_field(self, store):
        stored = store.add_config(make_config("Narnia"))
        with pytest.raises(LocationConfigError):
            store.update_config(stored.id, favourite_colour="blue")

    def test_update_missing_config(self, store):
        with pytest.raises(LocationConfigError):
            store.update_config(999, priority=1)

    def test_writes_invalidate_selector_cache(self, store):
        selector = LocationSourceSelector(store=store, cache_ttl=3600)
        assert selector.detect("Narnia") is not None
        assert selector.detect("Narnia").country == "Global"

        store.add_config(make_config("Narnia", sources=["dice"]))

        assert selector.detect("Narnia").country == "Narnia"
        assert selector.sources_for("Narnia")[0] == "dice"

    def test_deactivation_reaches_selector(self, store):
        stored = store.add_config(make_config("Canada Override", keywords=["toronto"], sources=["dice"],
                                              priority=1000))
        selector = LocationSourceSelector(store=store)
        assert selector.detect("Toronto").country == "Canada Override"

        store.deactivate_config(stored.id)

        assert selector.detect("Toronto").country == "Canada"


LOCATIONS_YAML = """
locations:
  - country: Narnia
    region: fantasy
    keywords: [Narnia, cair paravel]
    recommended_sources: [indeed, remoteok]
    priority: 10
  - country: Mordor
    keywords: [mordor]
    recommended_sources: [linkedin]
    priority: 20
  - country: Atlantis
    keywords: [atlantis]
    recommended_sources: [dice]
    is_active: false
"""


class TestYamlLocations:
    def test_load_location_file(self, tmp_path):
        path = tmp_path / "locations.yml"
        path.write_text(LOCATIONS_YAML)

        configs = load_location_file(path)

        assert [c.country for c in configs] == ["Narnia", "Mordor", "Atlantis"]
        assert configs[0].keywords == ["narnia", "cair paravel"]
        assert configs[1].region == "global"
        assert configs[1].indeed_domain == "indeed.com"
        assert configs[2].is_active is False

    def test_top_level_list(self, tmp_path):
        path = tmp_path / "locations.yml"
        path.write_text("- {country: Narnia, keywords: [narnia], recommended_sources: [indeed]}\n")
        assert load_location_file(path)[0].country == "Narnia"

    def test_missing_keys(self, tmp_path):
        path = tmp_path / "locations.yml"
        path.write_text("- {country: Narnia}\n")
        with pytest.raises(ValueError):
            load_location_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_location_file(tmp_path / "nope.yml")

    def test_yaml_store_drives_selector(self, tmp_path):
        path = tmp_path / "locations.yml"
        path.write_text(LOCATIONS_YAML)
        store = YamlLocationStore(path)

        assert [c.country for c in store.active_configs()] == ["Mordor", "Narnia"]
        selector = LocationSourceSelector(store=store)
        assert selector.sources_for("Cair Paravel")[:2] == ["indeed", "remoteok"]
        assert selector.detect("Atlantis").country == "Global"

    def test_broken_yaml_store_falls_back_to_static(self, tmp_path):
        selector = LocationSourceSelector(store=YamlLocationStore(tmp_path / "missing.yml"))
        assert selector.detect("Toronto").country == "Canada"

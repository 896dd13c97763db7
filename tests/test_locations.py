"""Tests for location detection and source selection."""
from unittest.mock import MagicMock, patch

import pytest

from jobsweep.exceptions import LocationConfigError
from jobsweep.ingest.locations import (
    DEFAULT_LOCATION,
    GLOBAL_SOURCES,
    STATIC_LOCATION_TABLE,
    LocationSourceSelector,
    match_location,
    merge_sources,
    static_indeed_domain,
)
from jobsweep.models import LocationConfig


def location(country, keywords, sources, priority=0, is_active=True):
    return LocationConfig(region="test", country=country, keywords=keywords,
                          recommended_sources=sources, priority=priority, is_active=is_active)


@pytest.fixture
def clock():
    with patch("jobsweep.ingest.locations.time") as mock_time:
        mock_time.monotonic.return_value = 1000.0
        yield mock_time


class TestStaticTable:
    def test_toronto_resolves_to_canadian_boards(self):
        selector = LocationSourceSelector()
        config = selector.detect("Toronto, ON")

        assert config.country == "Canada"
        assert config.indeed_domain == "ca.indeed.com"

        sources = selector.sources_for("Toronto, ON")
        assert sources[:3] == ["indeed", "linkedin", "jobbank"]
        for source in GLOBAL_SOURCES:
            assert source in sources
        assert len(sources) == len(set(sources))

    @pytest.mark.parametrize("text,country", [
        ("London, UK", "United Kingdom"),
        ("Sydney NSW", "Australia"),
        ("Berlin", "Germany"),
        ("Bangalore, India", "India"),
        ("Singapore", "Singapore"),
        ("Austin, TX, USA", "United States"),
        ("Remote", "Remote"),
        ("MONTREAL", "Canada"),
    ])
    def test_known_locations(self, text, country):
        assert LocationSourceSelector().detect(text).country == country

    def test_uk_recommends_reed(self):
        assert "reed" in LocationSourceSelector().sources_for("Manchester, England")

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_location_uses_default(self, text):
        selector = LocationSourceSelector()
        assert selector.detect(text) is DEFAULT_LOCATION
        assert selector.sources_for(text) == ["indeed", "remoteok", "linkedin", "stackoverflow", "weworkremotely"]

    def test_unknown_location_uses_default(self):
        assert LocationSourceSelector().detect("Atlantis") is DEFAULT_LOCATION

    def test_static_indeed_domain(self):
        assert static_indeed_domain("Melbourne") == "au.indeed.com"
        assert static_indeed_domain("Atlantis") == "indeed.com"
        assert static_indeed_domain(None) == "indeed.com"

    def test_empty_static_table_is_fatal(self):
        selector = LocationSourceSelector(static_table=[])
        with pytest.raises(LocationConfigError):
            selector.detect("Toronto")

    def test_corrupt_static_table_is_fatal(self):
        selector = LocationSourceSelector(static_table=[None])
        with pytest.raises(LocationConfigError):
            selector.detect("Toronto")


class TestStore:
    def test_store_configs_take_precedence(self, clock):
        store = MagicMock()
        store.active_configs.return_value = [
            location("Toronto Low", ["toronto"], ["indeed"], priority=10),
            location("Toronto High", ["toronto"], ["dice"], priority=200),
        ]
        selector = LocationSourceSelector(store=store)

        config = selector.detect("Toronto")

        assert config.country == "Toronto High"
        assert selector.sources_for("Toronto")[0] == "dice"

    def test_inactive_store_configs_are_ignored(self, clock):
        store = MagicMock()
        store.active_configs.return_value = [location("Hidden", ["toronto"], ["dice"], 500, is_active=False)]

        assert LocationSourceSelector(store=store).detect("Toronto").country == "Canada"

    def test_store_miss_falls_through_to_static_table(self, clock):
        store = MagicMock()
        store.active_configs.return_value = [location("Narnia", ["narnia"], ["dice"])]

        assert LocationSourceSelector(store=store).detect("London").country == "United Kingdom"

    def test_unreachable_store_falls_back(self, clock):
        store = MagicMock()
        store.active_configs.side_effect = ConnectionError("database is down")
        selector = LocationSourceSelector(store=store)

        assert selector.detect("Toronto").country == "Canada"
        assert selector.sources_for("Atlantis") == list(DEFAULT_LOCATION.recommended_sources) + ["weworkremotely"]

    def test_configs_are_cached_for_ttl(self, clock):
        store = MagicMock()
        store.active_configs.return_value = [location("Narnia", ["narnia"], ["dice"])]
        selector = LocationSourceSelector(store=store, cache_ttl=300)

        selector.detect("Narnia")
        clock.monotonic.return_value = 1200.0
        selector.detect("Narnia")
        assert store.active_configs.call_count == 1

        clock.monotonic.return_value = 1301.0
        selector.detect("Narnia")
        assert store.active_configs.call_count == 2

    def test_stale_cache_survives_store_outage(self, clock):
        store = MagicMock()
        store.active_configs.return_value = [location("Narnia", ["narnia"], ["dice"])]
        selector = LocationSourceSelector(store=store, cache_ttl=300)
        selector.detect("Narnia")

        store.active_configs.side_effect = ConnectionError("down")
        clock.monotonic.return_value = 2000.0

        assert selector.detect("Narnia").country == "Narnia"

    def test_invalidate_forces_reload(self, clock):
        store = MagicMock()
        store.active_configs.return_value = []
        selector = LocationSourceSelector(store=store)
        selector.detect("Toronto")

        selector.invalidate()
        selector.detect("Toronto")

        assert store.active_configs.call_count == 2

    def test_selector_registers_for_store_writes(self):
        store = MagicMock()
        selector = LocationSourceSelector(store=store)
        store.add_listener.assert_called_once_with(selector.invalidate)


def test_match_location_respects_order():
    configs = [location("First", ["york"], []), location("Second", ["new york"], [])]
    assert match_location("New York, NY", configs).country == "First"
    assert match_location("Paris", configs) is None


def test_merge_sources_keeps_first_occurrence():
    assert merge_sources(["Indeed", "linkedin"], ["linkedin", "remoteok", ""], ["INDEED"]) == \
        ["indeed", "linkedin", "remoteok"]


def test_static_table_is_ordered_by_priority_when_matching():
    # "Remote" (priority 50) must not shadow a higher priority country
    assert LocationSourceSelector().detect("Remote, Canada").country == "Canada"
    assert len(STATIC_LOCATION_TABLE) == 9

"""Tests for the scrape orchestrator."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from jobsweep.core import ScrapeOrchestrator
from jobsweep.exceptions import JobSearchError, LocationConfigError, UnknownSourceError
from jobsweep.ingest.locations import LocationSourceSelector
from jobsweep.models import ScrapeResult, SearchFilters, SearchOptions, SearchResult

from conftest import posting


def fake_adapter(source_id, postings=None, error=None, exception=None):
    """Adapter double whose scrape returns a canned ScrapeResult or raises."""
    adapter = MagicMock()
    adapter.source_id = source_id
    if exception is not None:
        adapter.scrape = AsyncMock(side_effect=exception)
    elif error is not None:
        adapter.scrape = AsyncMock(return_value=ScrapeResult(success=False, source=source_id, error=error))
    else:
        data = list(postings or [])
        adapter.scrape = AsyncMock(return_value=ScrapeResult(
            success=True, source=source_id, data=data, items_scraped=len(data)))
    adapter.close = AsyncMock()
    return adapter


class FakeFactory:
    """Adapter factory serving prebuilt doubles and recording requests."""

    def __init__(self, **adapters):
        self.adapters = adapters
        self.requested = []

    def __call__(self, source_id):
        self.requested.append(source_id)
        if source_id not in self.adapters:
            raise UnknownSourceError(f"No adapter registered for source '{source_id}'")
        return self.adapters[source_id]


@pytest.fixture
def factory():
    return FakeFactory(
        indeed=fake_adapter("indeed", [posting("Python Developer", source="indeed", id="indeed-1")]),
        linkedin=fake_adapter("linkedin", exception=RuntimeError("browser crashed")),
        remoteok=fake_adapter("remoteok", [
            posting("Data Engineer", "Globex", "Remote", source="remoteok", id="remoteok-1"),
            posting("QA Analyst", "Initech", "Remote", source="remoteok", id="remoteok-2"),
        ]),
        glassdoor=fake_adapter("glassdoor", error="Glassdoor scrape failed after 2 attempts: captcha"),
    )


@pytest.fixture
def orchestrator(factory, metrics):
    return ScrapeOrchestrator(adapter_factory=factory, metrics=metrics)


@pytest.mark.asyncio
@pytest.mark.parametrize("parallel", [True, False])
async def test_one_failing_source_does_not_sink_the_search(orchestrator, metrics, parallel):
    result = await orchestrator.search_jobs(
        SearchFilters(keywords="python"),
        SearchOptions(sources=["indeed", "linkedin", "remoteok"], parallel=parallel),
    )

    assert isinstance(result, SearchResult)
    assert sorted(job.id for job in result.jobs) == ["indeed-1", "remoteok-1", "remoteok-2"]
    assert result.total == 3
    assert result.sources_used == ["indeed", "linkedin", "remoteok"]
    assert result.stats.total_jobs == 3
    assert metrics.scrape_errors_by_source["linkedin"] == 1


@pytest.mark.asyncio
async def test_unsuccessful_results_contribute_nothing(orchestrator):
    result = await orchestrator.search_jobs(
        SearchFilters(keywords="qa"),
        SearchOptions(sources=["glassdoor", "indeed"]),
    )

    assert [job.id for job in result.jobs] == ["indeed-1"]
    assert result.sources_used == ["glassdoor", "indeed"]


@pytest.mark.asyncio
async def test_all_sources_failing_returns_empty_result(orchestrator):
    result = await orchestrator.search_jobs(
        SearchFilters(keywords="qa"),
        SearchOptions(sources=["linkedin", "glassdoor"]),
    )

    assert result.jobs == []
    assert result.total == 0
    assert result.stats.duplicate_rate == 0.0


@pytest.mark.asyncio
async def test_duplicates_across_sources_are_merged(metrics):
    factory = FakeFactory(
        indeed=fake_adapter("indeed", [posting(source="indeed", id="indeed-1", salary="$100K - $120K")]),
        linkedin=fake_adapter("linkedin", [posting(source="linkedin", id="linkedin-1")]),
    )
    orchestrator = ScrapeOrchestrator(adapter_factory=factory, metrics=metrics)

    result = await orchestrator.search_jobs(SearchFilters(keywords="python"),
                                            SearchOptions(sources=["linkedin", "indeed"]))

    assert len(result.jobs) == 1
    assert result.jobs[0].source == "indeed"
    assert result.jobs[0].duplicate_ids == ["linkedin-1"]
    assert result.stats.duplicates_removed == 1
    assert result.stats.source_breakdown == {"indeed": 1, "linkedin": 1}
    assert metrics.duplicates_removed == 1
    assert metrics.searches_total == 1


@pytest.mark.asyncio
async def test_unknown_explicit_source_is_skipped(orchestrator, factory, caplog):
    result = await orchestrator.search_jobs(
        SearchFilters(keywords="python"),
        SearchOptions(sources=["indeed", "bogus"]),
    )

    assert result.sources_used == ["indeed"]
    assert "bogus" in caplog.text


@pytest.mark.asyncio
async def test_sources_resolved_from_location(metrics):
    factory = FakeFactory(
        indeed=fake_adapter("indeed"),
        linkedin=fake_adapter("linkedin"),
        jobbank=fake_adapter("jobbank", [posting(source="jobbank")]),
        remoteok=fake_adapter("remoteok"),
        stackoverflow=fake_adapter("stackoverflow"),
        weworkremotely=fake_adapter("weworkremotely"),
    )
    orchestrator = ScrapeOrchestrator(selector=LocationSourceSelector(), adapter_factory=factory, metrics=metrics)

    result = await orchestrator.search_jobs(SearchFilters(keywords="python", location="Toronto"))

    # workopolis and eluta have no adapter and are skipped
    assert result.sources_used == ["indeed", "linkedin", "jobbank", "remoteok", "stackoverflow", "weworkremotely"]
    assert "workopolis" in factory.requested
    assert len(result.jobs) == 1


@pytest.mark.asyncio
async def test_explicit_sources_are_deduplicated(orchestrator, factory):
    result = await orchestrator.search_jobs(
        SearchFilters(keywords="python"),
        SearchOptions(sources=["Indeed", "indeed", "remoteok"]),
    )
    assert result.sources_used == ["indeed", "remoteok"]
    assert factory.adapters["indeed"].scrape.await_count == 1


@pytest.mark.asyncio
async def test_scrape_options_passed_to_adapters(orchestrator, factory):
    filters = SearchFilters(keywords="data engineer", location="London", remote=True,
                            job_type="Contract", experience_level="senior")

    await orchestrator.search_jobs(filters, SearchOptions(sources=["linkedin", "indeed"], max_results_per_source=7))

    query, options = factory.adapters["linkedin"].scrape.await_args.args
    assert query == "data engineer"
    assert options.location == "London"
    assert options.remote is True
    assert options.job_type == "Contract"
    assert options.experience_level == "senior"
    assert options.limit == 7
    assert options.max_pages == 5

    _, indeed_options = factory.adapters["indeed"].scrape.await_args.args
    assert indeed_options.max_pages is None


@pytest.mark.asyncio
async def test_location_failure_raises_job_search_error(factory, metrics):
    selector = MagicMock()
    selector.sources_for.side_effect = LocationConfigError("Static location table is empty")
    orchestrator = ScrapeOrchestrator(selector=selector, adapter_factory=factory, metrics=metrics)

    with pytest.raises(JobSearchError):
        await orchestrator.search_jobs(SearchFilters(keywords="python", location="Toronto"))


@pytest.mark.asyncio
async def test_adapters_are_reused_and_closed(orchestrator, factory):
    options = SearchOptions(sources=["indeed"])
    await orchestrator.search_jobs(SearchFilters(keywords="python"), options)
    await orchestrator.search_jobs(SearchFilters(keywords="java"), options)

    assert factory.requested == ["indeed"]
    assert factory.adapters["indeed"].scrape.await_count == 2

    await orchestrator.close()

    factory.adapters["indeed"].close.assert_awaited_once()
    assert orchestrator.adapters == {}


@pytest.mark.asyncio
async def test_close_errors_are_logged(orchestrator, factory, caplog):
    factory.adapters["indeed"].close.side_effect = RuntimeError("already closed")
    await orchestrator.search_jobs(SearchFilters(keywords="python"), SearchOptions(sources=["indeed", "remoteok"]))

    await orchestrator.close()

    assert "already closed" in caplog.text
    factory.adapters["remoteok"].close.assert_awaited_once()


def test_search_jobs_sync(orchestrator, factory):
    result = orchestrator.search_jobs_sync(SearchFilters(keywords="python"), SearchOptions(sources=["remoteok"]))

    assert len(result.jobs) == 2
    assert result.scrape_duration >= 0
    factory.adapters["remoteok"].close.assert_awaited_once()


def test_result_to_dict(orchestrator):
    result = orchestrator.search_jobs_sync(SearchFilters(keywords="python"), SearchOptions(sources=["indeed"]))
    data = result.to_dict()

    assert data["total"] == 1
    assert data["page"] == 1
    assert data["has_more"] is False
    assert data["jobs"][0]["type"] == "Full-time"
    assert data["sources_used"] == ["indeed"]


@pytest.mark.asyncio
async def test_empty_keywords_fall_back_to_generic_query(orchestrator, factory):
    await orchestrator.search_jobs(SearchFilters(keywords=""), SearchOptions(sources=["indeed"]))

    query, _ = factory.adapters["indeed"].scrape.await_args.args
    assert query == "jobs"


def gated_adapter(source_id, scrape):
    adapter = fake_adapter(source_id)
    adapter.scrape = AsyncMock(side_effect=scrape)
    return adapter


@pytest.mark.asyncio
async def test_parallel_dispatch_runs_sources_concurrently(metrics):
    started = []
    both_started = asyncio.Event()

    def waits_for_sibling(source_id):
        async def scrape(keywords, options):
            started.append(source_id)
            if len(started) == 2:
                both_started.set()
            # Only completes if the other source is already running
            await asyncio.wait_for(both_started.wait(), timeout=2.0)
            return ScrapeResult(success=True, source=source_id, items_scraped=1,
                                data=[posting(f"{source_id} engineer", source=source_id, id=f"{source_id}-1")])
        return gated_adapter(source_id, scrape)

    factory = FakeFactory(indeed=waits_for_sibling("indeed"), reed=waits_for_sibling("reed"))
    orchestrator = ScrapeOrchestrator(adapter_factory=factory, metrics=metrics)

    result = await orchestrator.search_jobs(
        SearchFilters(keywords="engineer"),
        SearchOptions(sources=["indeed", "reed"], parallel=True),
    )

    assert sorted(started) == ["indeed", "reed"]
    assert sorted(job.id for job in result.jobs) == ["indeed-1", "reed-1"]
    assert metrics.scrape_errors_total == 0


@pytest.mark.asyncio
async def test_slow_source_does_not_hold_back_fast_sibling(metrics):
    fast_done = asyncio.Event()

    async def fast(keywords, options):
        fast_done.set()
        return ScrapeResult(success=True, source="indeed", items_scraped=1,
                            data=[posting("Python Developer", source="indeed", id="indeed-1")])

    async def slow(keywords, options):
        await fast_done.wait()
        raise RuntimeError("navigation hung")

    factory = FakeFactory(linkedin=gated_adapter("linkedin", slow), indeed=gated_adapter("indeed", fast))
    orchestrator = ScrapeOrchestrator(adapter_factory=factory, metrics=metrics)

    result = await orchestrator.search_jobs(
        SearchFilters(keywords="python"),
        SearchOptions(sources=["linkedin", "indeed"], parallel=True),
    )

    assert [job.id for job in result.jobs] == ["indeed-1"]
    assert result.sources_used == ["linkedin", "indeed"]
    assert metrics.scrape_errors_by_source["linkedin"] == 1

"""Shared fixtures for jobsweep tests."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from jobsweep.metrics import MetricsCollector
from jobsweep.models import RawPosting


@pytest.fixture
def metrics():
    """A fresh metrics collector so tests never touch the global one."""
    return MetricsCollector()


@pytest.fixture
def no_sleep():
    """Make asyncio.sleep return immediately and record its calls."""
    with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


def make_page(html: str = "", body_text: str = "", has_results: bool = True):
    """Build a mock Playwright page serving the given HTML."""
    from playwright.async_api import TimeoutError as PlaywrightTimeoutError

    page = MagicMock()
    page.goto = AsyncMock()
    if has_results:
        page.wait_for_selector = AsyncMock()
    else:
        page.wait_for_selector = AsyncMock(side_effect=PlaywrightTimeoutError("selector not found"))
    page.inner_text = AsyncMock(return_value=body_text)
    page.content = AsyncMock(return_value=html)
    return page


def make_session(*pages):
    """Mock StealthSession handing out the given pages in order."""
    session = MagicMock()
    session.new_page = AsyncMock(side_effect=list(pages))
    session.release_page = AsyncMock()
    session.close = AsyncMock()
    return session


def posting(title="Python Developer", company="Acme", location="Toronto, ON", source="indeed", **kwargs):
    """RawPosting with sensible defaults."""
    return RawPosting(title=title, company=company, location=location, source=source, **kwargs)

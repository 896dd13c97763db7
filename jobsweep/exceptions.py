"""Exception hierarchy for scraping, location resolution and search."""
from typing import Optional


class JobSweepError(Exception):
    """Base class for all jobsweep errors."""


class ScraperError(JobSweepError):
    """A single scrape attempt against a job board failed.

    Attributes:
        source: Identifier of the job board that failed
        retryable: Whether the retry executor may try the operation again
    """

    def __init__(self, message: str, source: str = "", retryable: bool = True):
        super().__init__(message)
        self.source = source
        self.retryable = retryable


class NavigationTimeoutError(ScraperError):
    """Navigation or extraction exceeded the adapter timeout."""


class BotDetectedError(ScraperError):
    """The page body contained CAPTCHA or verification markers."""


class RetryExhaustedError(JobSweepError):
    """Every attempt of a retried operation failed.

    Attributes:
        label: Human readable name of the operation
        attempts: Number of attempts made
        last_error: Exception raised by the final attempt
    """

    def __init__(self, label: str, attempts: int, last_error: Optional[BaseException]):
        self.label = label
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{label} failed after {attempts} attempts: {last_error}")


class UnknownSourceError(JobSweepError, KeyError):
    """No adapter is registered for the requested source id."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "unknown source"


class LocationConfigError(JobSweepError):
    """The location tables could not produce any source set."""


class JobSearchError(JobSweepError):
    """A search failed before any source was dispatched."""

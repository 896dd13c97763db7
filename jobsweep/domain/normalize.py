"""Field normalization helpers shared by adapters and the deduplicator."""
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from dateutil import parser as date_parser

from jobsweep.models import JobType

REMOTE_PATTERN = re.compile(r"remote|work from home|wfh|anywhere", re.IGNORECASE)
COMPANY_SUFFIX_PATTERN = re.compile(r",?\s*(Inc\.?|LLC|Ltd\.?|Corp\.?|Corporation)$", re.IGNORECASE)
TITLE_NOISE_PATTERN = re.compile(r"[^\w\s\-/+#.]")
WHITESPACE_PATTERN = re.compile(r"\s+")

MAX_DESCRIPTION_LENGTH = 1000


def collapse_whitespace(text: Optional[str]) -> str:
    """Trim text and collapse internal whitespace runs to single spaces."""
    if not text:
        return ""
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def normalize_title(title: Optional[str]) -> str:
    """Collapse whitespace and drop characters job titles never need.

    Keeps word characters plus ``- / + # .`` so "C++", "C#" and "Sr." survive.
    """
    return collapse_whitespace(TITLE_NOISE_PATTERN.sub("", title or ""))


def normalize_company(company: Optional[str]) -> str:
    """Strip a trailing legal-entity suffix (Inc., LLC, Ltd., Corp.)."""
    cleaned = collapse_whitespace(company)
    return COMPANY_SUFFIX_PATTERN.sub("", cleaned).strip()


def is_remote_location(location: Optional[str]) -> bool:
    return bool(location and REMOTE_PATTERN.search(location))


def normalize_location(location: Optional[str]) -> str:
    """Map remote-work phrasing to the literal "Remote"; otherwise clean up."""
    cleaned = collapse_whitespace(location)
    if is_remote_location(cleaned):
        return "Remote"
    return cleaned


def normalize_job_type(job_type: Optional[str]) -> JobType:
    """Map free-text employment phrasing onto a JobType, defaulting to full-time."""
    if isinstance(job_type, JobType):
        return job_type
    lower = (job_type or "").lower()

    if "full" in lower:
        return JobType.FULL_TIME
    if "part" in lower:
        return JobType.PART_TIME
    if "contract" in lower:
        return JobType.CONTRACT
    if "temp" in lower:
        return JobType.TEMPORARY
    if "intern" in lower:
        return JobType.INTERNSHIP

    return JobType.FULL_TIME


def clean_description(description: Optional[str]) -> str:
    return collapse_whitespace(description)[:MAX_DESCRIPTION_LENGTH]


def generate_job_id(title: str, company: str, location: str) -> str:
    """Derive a stable id from title, company and location.

    Uses the classic 31-multiplier string hash truncated to a signed 32-bit
    integer, so the same posting always hashes to the same id.

    Args:
        title: Job title
        company: Company name
        location: Job location

    Returns:
        Decimal string of the absolute hash value
    """
    text = f"{title}-{company}-{location}".lower()
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return str(abs(value))


def parse_posted_date(text: Optional[str], now: Optional[datetime] = None) -> str:
    """Turn board date text into a UTC ISO timestamp.

    Understands "3 days ago", "5 hours ago", "today", "just posted" and any
    absolute date dateutil can parse. Unparseable or missing text maps to now.

    Args:
        text: Raw date text from the board
        now: Reference time, defaults to the current UTC time

    Returns:
        ISO 8601 timestamp string
    """
    now = now or datetime.now(timezone.utc)
    if not text:
        return now.isoformat()

    lower = text.lower().strip()

    days_match = re.search(r"(\d+)\+?\s*day", lower)
    if days_match:
        return (now - timedelta(days=int(days_match.group(1)))).isoformat()

    hours_match = re.search(r"(\d+)\+?\s*(hour|hr)", lower)
    if hours_match:
        return (now - timedelta(hours=int(hours_match.group(1)))).isoformat()

    weeks_match = re.search(r"(\d+)\+?\s*week", lower)
    if weeks_match:
        return (now - timedelta(weeks=int(weeks_match.group(1)))).isoformat()

    months_match = re.search(r"(\d+)\+?\s*month", lower)
    if months_match:
        return (now - timedelta(days=30 * int(months_match.group(1)))).isoformat()

    if "today" in lower or "just posted" in lower or "just now" in lower:
        return now.isoformat()
    if "yesterday" in lower:
        return (now - timedelta(days=1)).isoformat()

    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError):
        return now.isoformat()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.isoformat()


def days_since(iso_date: Optional[str], now: Optional[datetime] = None) -> float:
    """Age of an ISO timestamp in fractional days (0 when unparseable)."""
    now = now or datetime.now(timezone.utc)
    if not iso_date:
        return 0.0
    try:
        posted = date_parser.isoparse(iso_date)
    except (ValueError, OverflowError):
        return 0.0
    if posted.tzinfo is None:
        posted = posted.replace(tzinfo=timezone.utc)
    return (now - posted).total_seconds() / 86400.0

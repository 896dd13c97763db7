"""Fuzzy duplicate detection across job boards."""
import logging
from typing import Any, Dict, Iterable, List, Tuple

from rapidfuzz.distance import Levenshtein

from jobsweep.models import DeduplicationStats, NormalizedJob
from jobsweep.domain.normalize import (
    clean_description,
    days_since,
    generate_job_id,
    is_remote_location,
    normalize_company,
    normalize_job_type,
    normalize_location,
    normalize_title,
    parse_posted_date,
)

logger = logging.getLogger(__name__)

# Trust ranking used when picking a group representative
SOURCE_PRIORITY: Dict[str, int] = {
    "indeed": 30,
    "glassdoor": 25,
    "remoteok": 20,
    "linkedin": 15,
    "weworkremotely": 10,
}
DEFAULT_SOURCE_PRIORITY = 5


def levenshtein_distance(first: str, second: str) -> int:
    """Edit distance (insertions, deletions, substitutions) between two strings."""
    return Levenshtein.distance(first, second)


def string_similarity(first: str, second: str) -> float:
    """Case-insensitive similarity in [0, 1]: ``1 - distance / longer length``."""
    s1 = first.lower()
    s2 = second.lower()

    if s1 == s2:
        return 1.0

    max_length = max(len(s1), len(s2))
    return 1.0 - levenshtein_distance(s1, s2) / max_length


def _get(posting: Any, name: str, default: Any = None) -> Any:
    """Read a field from a dataclass posting or a plain dict."""
    if isinstance(posting, dict):
        value = posting.get(name, default)
    else:
        value = getattr(posting, name, default)
    return default if value is None else value


class JobDeduplicator:
    """Collapses near-identical postings scraped from different boards.

    Strategy:
    1. Normalize every posting into a NormalizedJob
    2. Group postings by company, title similarity and location
    3. Keep the highest scoring member of each group
    4. Report statistics against the original input
    """

    def __init__(self, similarity_threshold: float = 0.85):
        """Initialize the deduplicator.

        Args:
            similarity_threshold: Minimum title similarity (0-1) for a duplicate
        """
        self.similarity_threshold = similarity_threshold

    def deduplicate(self, postings: Iterable[Any]) -> Tuple[List[NormalizedJob], DeduplicationStats]:
        """Normalize, group and collapse postings.

        Args:
            postings: RawPosting, NormalizedJob or dict records from any source

        Returns:
            Tuple of (unique normalized jobs, deduplication statistics)
        """
        originals = list(postings)
        logger.info(f"Deduplicating {len(originals)} jobs...")

        normalized = [self.normalize_job(posting) for posting in originals]
        groups = self.group_similar_jobs(normalized)
        unique_jobs = [self.select_best_job(group) for group in groups]
        stats = self.calculate_stats(originals, unique_jobs)

        logger.info(
            f"Deduplication complete: {stats.unique_jobs} unique jobs, "
            f"removed {stats.duplicates_removed} duplicates ({stats.duplicate_rate:.1f}%)"
        )
        return unique_jobs, stats

    def normalize_job(self, posting: Any) -> NormalizedJob:
        """Convert a scraped posting into the canonical shape.

        Args:
            posting: RawPosting, NormalizedJob or dict

        Returns:
            NormalizedJob with a deterministic id when the source gave none
        """
        title = normalize_title(_get(posting, "title", ""))
        company = normalize_company(_get(posting, "company", ""))
        raw_location = _get(posting, "location", "")
        location = normalize_location(raw_location)

        job_type = _get(posting, "type") or _get(posting, "job_type")
        remote = bool(_get(posting, "remote", False)) or is_remote_location(raw_location)

        return NormalizedJob(
            id=_get(posting, "id") or generate_job_id(title, company, location),
            title=title,
            company=company,
            location=location,
            type=normalize_job_type(job_type),
            salary=_get(posting, "salary") or None,
            description=clean_description(_get(posting, "description", "")),
            url=_get(posting, "url", ""),
            posted_date=parse_posted_date(_get(posting, "posted_date")),
            source=_get(posting, "source", "") or "Unknown",
            remote=remote,
            tags=list(_get(posting, "tags", [])),
            company_rating=_get(posting, "company_rating"),
            duplicate_ids=list(_get(posting, "duplicate_ids", [])),
            primary_source=_get(posting, "primary_source"),
        )

    def are_similar(self, job1: NormalizedJob, job2: NormalizedJob) -> bool:
        """Check whether two normalized jobs describe the same opening.

        Jobs match when the company is equal (case-insensitive), the title
        similarity reaches the threshold and the locations are compatible.
        """
        if job1.company.lower() != job2.company.lower():
            return False

        if string_similarity(job1.title, job2.title) < self.similarity_threshold:
            return False

        loc1 = job1.location.lower()
        loc2 = job2.location.lower()
        return (
            loc1 == loc2
            or (job1.remote and job2.remote)
            or ("remote" in loc1 and "remote" in loc2)
        )

    def group_similar_jobs(self, jobs: List[NormalizedJob]) -> List[List[NormalizedJob]]:
        """Group jobs in one pass, comparing candidates to each group's seed only.

        Args:
            jobs: Normalized jobs in input order

        Returns:
            Groups in order of their seed's first appearance
        """
        groups: List[List[NormalizedJob]] = []
        grouped = [False] * len(jobs)

        for i, seed in enumerate(jobs):
            if grouped[i]:
                continue
            grouped[i] = True
            group = [seed]

            for j in range(i + 1, len(jobs)):
                if not grouped[j] and self.are_similar(seed, jobs[j]):
                    group.append(jobs[j])
                    grouped[j] = True

            groups.append(group)

        return groups

    def score_job(self, job: NormalizedJob) -> int:
        """Score a job on completeness (50), source trust (30) and recency (20)."""
        score = 0

        if job.salary:
            score += 15
        if job.description and len(job.description) > 100:
            score += 15
        if job.url:
            score += 10
        if job.company_rating:
            score += 5
        if job.tags:
            score += 5

        score += SOURCE_PRIORITY.get(job.source.lower(), DEFAULT_SOURCE_PRIORITY)

        days_old = days_since(job.posted_date)
        if days_old < 1:
            score += 20
        elif days_old < 7:
            score += 15
        elif days_old < 30:
            score += 10
        else:
            score += 5

        return score

    def select_best_job(self, group: List[NormalizedJob]) -> NormalizedJob:
        """Pick the highest scoring member and record the rest on it.

        Args:
            group: Non-empty duplicate group

        Returns:
            The representative job, annotated with duplicate ids
        """
        if len(group) == 1:
            return group[0]

        # max() keeps the earliest member on ties
        best = max(group, key=self.score_job)
        best.duplicate_ids = best.duplicate_ids + [job.id for job in group if job.id != best.id]
        best.primary_source = best.source
        logger.debug(f"Merged {len(group)} postings of '{best.title}' at {best.company} into {best.source}")
        return best

    def calculate_stats(self, originals: List[Any], unique_jobs: List[NormalizedJob]) -> DeduplicationStats:
        """Compute counters; the source breakdown uses the pre-dedup postings."""
        total = len(originals)
        duplicates_removed = total - len(unique_jobs)

        source_breakdown: Dict[str, int] = {}
        for posting in originals:
            source = _get(posting, "source", "") or "Unknown"
            source_breakdown[source] = source_breakdown.get(source, 0) + 1

        return DeduplicationStats(
            total_jobs=total,
            unique_jobs=len(unique_jobs),
            duplicates_removed=duplicates_removed,
            duplicate_rate=(duplicates_removed / total * 100) if total > 0 else 0.0,
            source_breakdown=source_breakdown,
        )


def deduplicate(postings: Iterable[Any], similarity_threshold: float = 0.85) -> Tuple[List[NormalizedJob], DeduplicationStats]:
    """Convenience wrapper around JobDeduplicator.deduplicate."""
    return JobDeduplicator(similarity_threshold).deduplicate(postings)

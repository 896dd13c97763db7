"""Domain module for normalization and deduplication logic."""

from .deduplication import JobDeduplicator, deduplicate, levenshtein_distance, string_similarity
from .normalize import generate_job_id, normalize_company, normalize_location, normalize_title

__all__ = [
    'JobDeduplicator', 'deduplicate', 'levenshtein_distance', 'string_similarity',
    'generate_job_id', 'normalize_company', 'normalize_location', 'normalize_title',
]

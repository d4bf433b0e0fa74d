"""Pydantic schemas for records flowing through resolution."""

from kinolink.schemas.movie import CandidateMatch, EnrichedRecord, MergedRecord, SourceRecord

__all__ = [
    "SourceRecord",
    "CandidateMatch",
    "EnrichedRecord",
    "MergedRecord",
]

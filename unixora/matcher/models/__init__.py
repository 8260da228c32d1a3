"""Matcher Pydantic models."""

from .match import (
    CardSection, FeePreference, Importance, LocationPreference, MatchForm,
    MatchLocation, MatchRecord, MatchResults, Scholarship, UniversityRanking
)

__all__ = [
    "CardSection", "FeePreference", "Importance", "LocationPreference", "MatchForm",
    "MatchLocation", "MatchRecord", "MatchResults", "Scholarship", "UniversityRanking",
]

"""University matcher Pydantic models."""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, field_validator


class Importance(str, Enum):
    NOT_IMPORTANT = "not_important"
    SOMEWHAT_IMPORTANT = "somewhat_important"
    VERY_IMPORTANT = "very_important"


class LocationPreference(str, Enum):
    NOT_IMPORTANT = "not_important"
    SPECIFIC = "specific"


class FeePreference(str, Enum):
    NOT_IMPORTANT = "not_important"
    MAX_LIMIT = "max_limit"


class MatchForm(BaseModel):
    """Preference form as the student fills it in (raw text fields)."""
    field_of_study: str = ""
    degree_level: str = "PG"
    interests: str = ""
    location_preference: LocationPreference = LocationPreference.NOT_IMPORTANT
    preferred_locations: str = ""
    fee_preference: FeePreference = FeePreference.NOT_IMPORTANT
    max_fees: str = ""
    ranking_importance: Importance = Importance.SOMEWHAT_IMPORTANT
    scholarship_importance: Importance = Importance.SOMEWHAT_IMPORTANT
    research_importance: Importance = Importance.SOMEWHAT_IMPORTANT
    faculty_importance: Importance = Importance.SOMEWHAT_IMPORTANT
    student_life_importance: Importance = Importance.SOMEWHAT_IMPORTANT

    class Config:
        use_enum_values = True
        validate_default = True

    @field_validator("field_of_study", "degree_level", "interests", "preferred_locations", "max_fees", mode="before")
    @classmethod
    def text_field(cls, value):
        return "" if value is None else str(value)


class MatchLocation(BaseModel):
    city: Optional[str] = None
    region: Optional[str] = None


class UniversityRanking(BaseModel):
    uk_rank: Optional[int] = None


class Scholarship(BaseModel):
    name: str
    amount: Optional[str] = None


class MatchRecord(BaseModel):
    """One ranked university. Every enrichment field may be missing."""
    rank: Optional[int] = None
    name: str = ""
    location: Optional[MatchLocation] = None
    university_ranking: Optional[UniversityRanking] = None
    total_score: Optional[float] = None
    justification: str = ""
    matching_programs: List[str] = []
    score_breakdown: Dict[str, float] = {}
    scholarships: List[Scholarship] = []
    research_highlights: List[str] = []
    faculty_highlights: List[str] = []


class CardSection(BaseModel):
    """A titled list shown in an expanded result card."""
    title: str
    items: List[str]


class MatchResults(BaseModel):
    """Unpacked Match Service response plus which card is expanded."""
    total_evaluated: int = 0
    summary: Optional[str] = None
    matches: List[MatchRecord] = []
    expanded_rank: Optional[int] = None

    def toggle(self, rank: int) -> None:
        """Expand a card, or collapse it if it is already expanded."""
        self.expanded_rank = None if self.expanded_rank == rank else rank

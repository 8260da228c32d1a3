"""Form state to Match Service payload, and ranked results back to cards.

Payload building follows the matcher page rules. Response unpacking is
deliberately forgiving: a missing or malformed field drops that part of the
card instead of failing the whole result list.
"""

import math
import re
from typing import Any, Dict, List, Mapping, Optional, Union

from ..models.match import (
    CardSection, FeePreference, LocationPreference, MatchForm, MatchLocation,
    MatchRecord, MatchResults, Scholarship, UniversityRanking
)

LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def split_csv(value: str) -> List[str]:
    """Comma-split, trim, and drop empty tokens."""
    return [token.strip() for token in value.split(",") if token.strip()]


def parse_int_prefix(value: str) -> Optional[int]:
    """Leading integer of a string (``"30000 GBP"`` -> 30000), else None."""
    match = LEADING_INT_RE.match(value)
    return int(match.group(1)) if match else None


def build_match_payload(form: Union[MatchForm, Mapping[str, Any]]) -> Dict[str, Any]:
    """Normalize the preference form into the Match Service request body."""
    if not isinstance(form, MatchForm):
        form = MatchForm.model_validate(dict(form))

    specific = form.location_preference == LocationPreference.SPECIFIC.value
    wants_fee_limit = form.fee_preference != FeePreference.NOT_IMPORTANT.value

    return {
        "field_of_study": form.field_of_study,
        "degree_level": form.degree_level,
        "interests": split_csv(form.interests),
        "location_preference": form.location_preference,
        "preferred_locations": split_csv(form.preferred_locations) if specific else [],
        "fee_preference": form.fee_preference,
        "max_fees": parse_int_prefix(form.max_fees) if wants_fee_limit and form.max_fees else None,
        "ranking_importance": form.ranking_importance,
        "scholarship_importance": form.scholarship_importance,
        "research_importance": form.research_importance,
        "faculty_importance": form.faculty_importance,
        "student_life_importance": form.student_life_importance,
    }


# ─────────────────────────── response unpacking ───────────────────────────
def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _int(value: Any) -> Optional[int]:
    number = _number(value)
    return int(number) if number is not None else None


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def _text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [text for text in (_text(item) for item in value) if text]


def _scholarships(value: Any) -> List[Scholarship]:
    if not isinstance(value, list):
        return []
    scholarships = []
    for item in value:
        if isinstance(item, dict) and _text(item.get("name")):
            scholarships.append(Scholarship(name=_text(item["name"]), amount=_text(item.get("amount")) or None))
        elif _text(item):
            scholarships.append(Scholarship(name=_text(item)))
    return scholarships


def _breakdown(value: Any) -> Dict[str, float]:
    if not isinstance(value, dict):
        return {}
    return {str(key): score for key, score in ((k, _number(v)) for k, v in value.items()) if score is not None}


def unpack_match_record(data: Any) -> Optional[MatchRecord]:
    if not isinstance(data, dict):
        return None

    location = data.get("location")
    ranking = data.get("university_ranking")
    return MatchRecord(
        rank=_int(data.get("rank")),
        name=_text(data.get("name")) or "",
        location=MatchLocation(city=_text(location.get("city")), region=_text(location.get("region")))
        if isinstance(location, dict) else None,
        university_ranking=UniversityRanking(uk_rank=_int(ranking.get("uk_rank")))
        if isinstance(ranking, dict) else None,
        total_score=_number(data.get("total_score")),
        justification=_text(data.get("justification")) or "",
        matching_programs=_text_list(data.get("matching_programs")),
        score_breakdown=_breakdown(data.get("score_breakdown")),
        scholarships=_scholarships(data.get("scholarships")),
        research_highlights=_text_list(data.get("research_highlights")),
        faculty_highlights=_text_list(data.get("faculty_highlights")),
    )


def unpack_match_response(data: Any) -> MatchResults:
    """Turn a Match Service body into results; the first card starts expanded."""
    if not isinstance(data, dict):
        data = {}
    raw_matches = data.get("matches")
    matches = [
        record for record in (unpack_match_record(item) for item in raw_matches)
        if record is not None
    ] if isinstance(raw_matches, list) else []

    return MatchResults(
        total_evaluated=_int(data.get("total_evaluated")) or 0,
        summary=_text(data.get("summary")) or None,
        matches=matches,
        expanded_rank=matches[0].rank if matches else None,
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def card_subtitle(record: MatchRecord) -> str:
    """``City • Region  UK Rank #n`` with absent parts left out."""
    parts = []
    if record.location and record.location.city:
        parts.append(record.location.city)
    if record.location and record.location.region:
        parts.append(record.location.region)
    subtitle = " • ".join(parts)
    if record.university_ranking and record.university_ranking.uk_rank:
        rank = f"UK Rank #{record.university_ranking.uk_rank}"
        subtitle = f"{subtitle}  {rank}" if subtitle else rank
    return subtitle


def card_sections(record: MatchRecord) -> List[CardSection]:
    """Sections of an expanded card; empty ones are omitted."""
    sections = []
    if record.matching_programs:
        sections.append(CardSection(title="Matching Programs", items=record.matching_programs))
    if record.score_breakdown:
        sections.append(CardSection(
            title="Score Breakdown",
            # only the first underscore becomes a space, as on the web page
            items=[f"{key.replace('_', ' ', 1)}: {_round_half_up(value)}" for key, value in record.score_breakdown.items()]
        ))
    if record.scholarships:
        sections.append(CardSection(
            title="Scholarships",
            items=[f"{s.name} - {s.amount}" if s.amount else s.name for s in record.scholarships]
        ))
    if record.research_highlights:
        sections.append(CardSection(title="Research", items=record.research_highlights))
    if record.faculty_highlights:
        sections.append(CardSection(title="Notable Faculty", items=record.faculty_highlights))
    return sections

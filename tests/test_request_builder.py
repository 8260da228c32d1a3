import json

import pytest

from unixora.matcher.models import MatchForm, MatchRecord
from unixora.matcher.services.request_builder import (
    build_match_payload, card_sections, card_subtitle, parse_int_prefix, split_csv,
    unpack_match_response
)


def test_interests_split_and_defaults():
    payload = build_match_payload({
        "interests": "AI, ML, ",
        "location_preference": "not_important",
        "fee_preference": "not_important",
    })
    assert payload["interests"] == ["AI", "ML"]
    assert payload["preferred_locations"] == []
    assert payload["max_fees"] is None


def test_other_fields_pass_through():
    payload = build_match_payload(MatchForm(
        field_of_study="Computer Science",
        degree_level="UG",
        research_importance="very_important",
    ))
    assert payload["field_of_study"] == "Computer Science"
    assert payload["degree_level"] == "UG"
    assert payload["location_preference"] == "not_important"
    assert payload["fee_preference"] == "not_important"
    assert payload["ranking_importance"] == "somewhat_important"
    assert payload["research_importance"] == "very_important"
    assert payload["student_life_importance"] == "somewhat_important"
    assert set(payload) == {
        "field_of_study", "degree_level", "interests", "location_preference",
        "preferred_locations", "fee_preference", "max_fees", "ranking_importance",
        "scholarship_importance", "research_importance", "faculty_importance",
        "student_life_importance",
    }


def test_locations_only_sent_for_specific_preference():
    form = {"location_preference": "specific", "preferred_locations": "London, Manchester ,,"}
    assert build_match_payload(form)["preferred_locations"] == ["London", "Manchester"]

    form["location_preference"] = "not_important"
    assert build_match_payload(form)["preferred_locations"] == []


@pytest.mark.parametrize("fee_preference,max_fees,expected", [
    ("max_limit", "30000", 30000),
    ("max_limit", " 25000 GBP", 25000),
    ("max_limit", "abc", None),
    ("max_limit", "", None),
    ("not_important", "30000", None),
    ("max_limit", 18000, 18000),
])
def test_max_fees(fee_preference, max_fees, expected):
    payload = build_match_payload({"fee_preference": fee_preference, "max_fees": max_fees})
    assert payload["max_fees"] == expected


def test_helpers():
    assert split_csv(" a ,, b,") == ["a", "b"]
    assert split_csv("") == []
    assert parse_int_prefix("12.5k") == 12
    assert parse_int_prefix("k12") is None


FULL_RESPONSE = {
    "total_evaluated": 120,
    "summary": "Strong AI options in London.",
    "matches": [
        {
            "rank": 1,
            "name": "Imperial College London",
            "location": {"city": "London", "region": "Greater London"},
            "university_ranking": {"uk_rank": 3},
            "total_score": 91.5,
            "justification": "Leading AI research.",
            "matching_programs": ["MSc AI", "MSc Computing"],
            "score_breakdown": {"academic_fit": 92.5, "location_match": 100},
            "scholarships": [{"name": "President's Scholarship", "amount": "£10,000"}, {"name": "Dean's Award"}],
            "research_highlights": ["Data Science Institute"],
            "faculty_highlights": ["Prof. A"],
        },
        {"rank": 2, "name": "UCL", "total_score": 88, "justification": "Broad programs."},
    ],
}


def test_unpack_full_response():
    results = unpack_match_response(FULL_RESPONSE)

    assert results.total_evaluated == 120
    assert results.summary == "Strong AI options in London."
    assert [m.name for m in results.matches] == ["Imperial College London", "UCL"]
    assert results.expanded_rank == 1

    top = results.matches[0]
    assert card_subtitle(top) == "London • Greater London  UK Rank #3"
    sections = {s.title: s.items for s in card_sections(top)}
    assert sections["Matching Programs"] == ["MSc AI", "MSc Computing"]
    assert sections["Score Breakdown"] == ["academic fit: 93", "location match: 100"]
    assert sections["Scholarships"] == ["President's Scholarship - £10,000", "Dean's Award"]
    assert sections["Research"] == ["Data Science Institute"]
    assert sections["Notable Faculty"] == ["Prof. A"]


def test_sparse_record_omits_sections():
    results = unpack_match_response(FULL_RESPONSE)
    ucl = results.matches[1]
    assert card_sections(ucl) == []
    assert card_subtitle(ucl) == ""


def test_score_key_only_first_underscore_replaced():
    record = MatchRecord(rank=1, score_breakdown={"student_life_score": 70.4})
    assert card_sections(record)[0].items == ["student life_score: 70"]


def test_malformed_fields_degrade_instead_of_failing():
    results = unpack_match_response({
        "total_evaluated": "many",
        "matches": [
            "not a record",
            {
                "rank": 4,
                "name": "Leeds",
                "location": "Leeds",
                "university_ranking": [1],
                "total_score": "high",
                "matching_programs": "MSc AI",
                "score_breakdown": ["a", "b"],
                "scholarships": [None, 5, {"amount": "no name"}],
                "research_highlights": None,
                "faculty_highlights": [{"name": "x"}, "Dr. B"],
            },
        ],
    })

    assert results.total_evaluated == 0
    assert len(results.matches) == 1
    leeds = results.matches[0]
    assert leeds.location is None
    assert leeds.university_ranking is None
    assert leeds.total_score is None
    assert [s.name for s in leeds.scholarships] == ["5"]
    assert [s.title for s in card_sections(leeds)] == ["Scholarships", "Notable Faculty"]
    assert results.expanded_rank == 4


def test_oversized_numbers_are_dropped():
    results = unpack_match_response(json.loads(
        '{"total_evaluated": 1' + "0" * 400 + ', "matches": [{"rank": 1, "name": "X", '
        '"total_score": 1' + "0" * 400 + ', "score_breakdown": {"fees": 1e999, "ranking": 7.5}}]}'
    ))

    assert results.total_evaluated == 0
    match = results.matches[0]
    assert match.total_score is None
    assert match.score_breakdown == {"ranking": 7.5}
    assert results.expanded_rank == 1


@pytest.mark.parametrize("body", [None, [], "oops", {"matches": None}, {"matches": {"rank": 1}}])
def test_unusable_bodies_give_empty_results(body):
    results = unpack_match_response(body)
    assert results.matches == []
    assert results.expanded_rank is None


def test_toggle_expands_and_collapses():
    results = unpack_match_response(FULL_RESPONSE)
    results.toggle(2)
    assert results.expanded_rank == 2
    results.toggle(2)
    assert results.expanded_rank is None

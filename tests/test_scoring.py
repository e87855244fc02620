import math

import pytest

from hometour.scoring import (
    build_summary,
    compute_overall_score,
    compute_section_scores,
    normalize,
    score_record,
)
from hometour.survey import NEGATIVE_HIGH_FIELDS, RATING_FIELDS, SCORE_SECTIONS, new_record


def test_normalize_keeps_positive_high_values():
    assert normalize("firstWelcomeRating", 4) == 4


@pytest.mark.parametrize("field", sorted(NEGATIVE_HIGH_FIELDS))
@pytest.mark.parametrize("value", [1, 2, 3, 4, 5])
def test_negative_high_inversion_is_involutive(field, value):
    inverted = normalize(field, value)
    assert inverted == 6 - value
    assert normalize(field, inverted) == value


@pytest.mark.parametrize("value", [None, 0, float("nan"), "abc", "", True])
def test_unanswered_values_normalize_to_none(value):
    assert normalize("bathroomWaterPressure", value) is None


def test_numeric_strings_are_accepted():
    assert normalize("bedroomNoise", "4") == 2


def test_overall_score_example():
    record = {"firstWelcomeRating": 5, "bathroomWaterPressure": 5}
    assert compute_overall_score(record) == 3.0


def test_overall_score_of_empty_record_is_zero():
    score = compute_overall_score(new_record())
    assert score == 0
    assert not math.isnan(score)


@pytest.mark.parametrize("value", [1, 2, 3, 4, 5])
def test_overall_score_is_bounded_for_full_records(value):
    record = {field: value for field in RATING_FIELDS}
    assert 1.0 <= compute_overall_score(record) <= 5.0


def test_overall_score_rounds_half_up():
    record = {
        "firstWelcomeRating": 5,
        "firstEntranceRating": 4,
        "livingComfortRating": 4,
        "kitchenOverallRating": 4,
    }
    assert compute_overall_score(record) == 4.3


def test_section_scores_keep_declaration_order(sample_record):
    sections = compute_section_scores(sample_record)
    assert [item["section"] for item in sections] == list(SCORE_SECTIONS)
    assert sections == compute_section_scores(sample_record)


def test_section_scores_for_sample(sample_record):
    scores = {item["section"]: item["score"] for item in compute_section_scores(sample_record)}
    assert scores == {
        "First Impressions": 5,
        "Living": 2,
        "Kitchen": 4,
        "Bathroom": 0,
        "Bedroom": 1,
        "Surroundings": 0,
        "Final Thoughts": 0,
    }


def test_summary_lists_strengths_and_watchouts(sample_record):
    assert build_summary(sample_record) == (
        "Overall score: 3.4/5 for Kerkstraat 1 on 2024-05-01. "
        "Strong areas: Kitchen & First Impressions. "
        "Keep an eye on: Bedroom & Living when pricing and planning fixes."
    )


def test_summary_for_empty_record_has_only_the_score_sentence():
    assert build_summary(new_record()) == "Overall score: 0/5 for this property on ."


def test_summary_allows_overlap_with_few_scored_sections():
    summary = build_summary({"address": "Dorpsweg 2", "date": "2024-02-02", "firstWelcomeRating": 5})
    assert "Strong areas: First Impressions." in summary
    assert "Keep an eye on: First Impressions when pricing and planning fixes." in summary


def test_summary_never_names_unscored_sections(sample_record):
    summary = build_summary(sample_record)
    for section in ("Bathroom", "Surroundings", "Final Thoughts"):
        assert section not in summary


def test_score_record_bundles_everything(sample_record):
    scored = score_record(sample_record)
    assert scored["overallScore"] == 3.4
    assert len(scored["sections"]) == len(SCORE_SECTIONS)
    assert scored["summary"].startswith("Overall score: 3.4/5")

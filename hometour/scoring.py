from __future__ import annotations

import math
from typing import Dict, Iterable, List, Mapping, Optional

from .survey import NEGATIVE_HIGH_FIELDS, RATING_FIELDS, SCORE_SECTIONS


def rating_value(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or number == 0:
        return None
    return number


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def format_score(score: float) -> str:
    """Render 3.0 as "3" and 3.5 as "3.5", matching the summary text."""
    return f"{score:g}"


def normalize(field: str, value: object) -> Optional[float]:
    number = rating_value(value)
    if number is None:
        return None
    return 6 - number if field in NEGATIVE_HIGH_FIELDS else number


def _average(fields: Iterable[str], record: Mapping[str, object]) -> float:
    values = [
        normalized
        for normalized in (normalize(field, record.get(field)) for field in fields)
        if normalized is not None
    ]
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def compute_overall_score(record: Mapping[str, object]) -> float:
    return _average(RATING_FIELDS, record)


def compute_section_scores(record: Mapping[str, object]) -> List[Dict[str, object]]:
    return [
        {"section": section, "score": _average(fields, record)}
        for section, fields in SCORE_SECTIONS.items()
    ]


def build_summary(record: Mapping[str, object]) -> str:
    overall = compute_overall_score(record)
    ranked = sorted(compute_section_scores(record), key=lambda item: item["score"])
    scored = [item["section"] for item in ranked if item["score"] > 0]

    # The same section may show up in both lists when fewer than four are scored.
    watchouts = scored[:2]
    strengths = scored[-2:]

    address = record.get("address") or "this property"
    date = record.get("date") or ""
    sentences = [f"Overall score: {format_score(overall)}/5 for {address} on {date}."]
    if strengths:
        sentences.append(f"Strong areas: {' & '.join(strengths)}.")
    if watchouts:
        sentences.append(
            f"Keep an eye on: {' & '.join(watchouts)} when pricing and planning fixes."
        )
    return " ".join(sentences)


def score_record(record: Mapping[str, object]) -> Dict[str, object]:
    return {
        "overallScore": compute_overall_score(record),
        "sections": compute_section_scores(record),
        "summary": build_summary(record),
    }

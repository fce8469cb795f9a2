"""
Health assessment score.

Each of the sixteen assessment answers contributes a fixed number of points: categorical
answers are looked up in a per-question table, numeric answers fall into threshold bands.
The function is total over validated answers; anything unrecognised contributes 0.
"""

from __future__ import annotations

from collections.abc import Mapping

_FREQUENCY_GOOD_WHEN_RARE = {"never": 6, "rarely": 4, "sometimes": 2, "often": 0}

# Categorical questions: answer -> points.
CHOICE_POINTS: dict[str, dict[str, int]] = {
    "overall_health": {"excellent": 10, "good": 7, "fair": 4, "poor": 0},
    "fatigue_after_sleep": _FREQUENCY_GOOD_WHEN_RARE,
    "sugary_drinks_snacks": {"no": 6, "yes": 0},
    "breaks_from_sitting": {"yes": 6, "no": 0},
    "wake_refreshed": {"often": 6, "sometimes": 4, "rarely": 2, "never": 0},
    "stress_anxiety": _FREQUENCY_GOOD_WHEN_RARE,
    "relaxation_techniques": {"yes": 6, "no": 0},
    "chronic_conditions": {"no": 6, "yes": 0},
    "family_history": {"no": 5, "yes": 0},
    "smoking_vaping": {"no": 6, "yes": 0},
    "headaches_body_aches": _FREQUENCY_GOOD_WHEN_RARE,
    "weight_changes": {"no": 5, "yes": 0},
}

# Numeric "more is better" questions: (minimum, points) bands, checked top-down.
AT_LEAST_BANDS: dict[str, tuple[tuple[int, int], ...]] = {
    "fruit_veggie_servings": ((5, 8), (3, 5), (1, 2)),
    "exercise_days": ((5, 8), (3, 5), (1, 2)),
}

# Weekly alcohol: (maximum, points) bands, checked top-down.
ALCOHOL_BANDS: tuple[tuple[int, int], ...] = ((0, 6), (7, 4), (14, 2))

SLEEP_MAX_POINTS = 8


def _int_answer(answers: Mapping[str, object], key: str) -> int | None:
    try:
        return int(str(answers.get(key, "")).strip())
    except ValueError:
        return None


def _sleep_points(hours: int | None) -> int:
    if hours is None:
        return 0
    if 7 <= hours <= 9:
        return SLEEP_MAX_POINTS
    if 5 <= hours < 7 or 9 < hours <= 11:
        return 4
    return 0


def _alcohol_points(drinks: int | None) -> int:
    if drinks is None or drinks < 0:
        return 0
    for maximum, points in ALCOHOL_BANDS:
        if drinks <= maximum:
            return points
    return 0


def _at_least_points(value: int | None, bands: tuple[tuple[int, int], ...]) -> int:
    if value is None:
        return 0
    for minimum, points in bands:
        if value >= minimum:
            return points
    return 0


def _max_score() -> int:
    total = sum(max(table.values()) for table in CHOICE_POINTS.values())
    total += sum(bands[0][1] for bands in AT_LEAST_BANDS.values())
    total += ALCOHOL_BANDS[0][1]
    total += SLEEP_MAX_POINTS
    return total


MAX_SCORE = _max_score()


def calculate_health_score(answers: Mapping[str, object]) -> int:
    score = 0
    for key, table in CHOICE_POINTS.items():
        score += table.get(str(answers.get(key, "")).strip().lower(), 0)
    for key, bands in AT_LEAST_BANDS.items():
        score += _at_least_points(_int_answer(answers, key), bands)
    score += _sleep_points(_int_answer(answers, "sleep_hours"))
    score += _alcohol_points(_int_answer(answers, "alcohol_drinks"))
    return score

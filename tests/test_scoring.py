from __future__ import annotations

import itertools

from aliya.core.flows import ASSESSMENT
from aliya.core.scoring import MAX_SCORE, calculate_health_score

SCENARIO = {
    "overall_health": "good",
    "fatigue_after_sleep": "rarely",
    "fruit_veggie_servings": "3",
    "sugary_drinks_snacks": "no",
    "exercise_days": "4",
    "breaks_from_sitting": "yes",
    "sleep_hours": "7",
    "wake_refreshed": "often",
    "stress_anxiety": "sometimes",
    "relaxation_techniques": "yes",
    "chronic_conditions": "no",
    "family_history": "no",
    "smoking_vaping": "no",
    "alcohol_drinks": "2",
    "headaches_body_aches": "rarely",
    "weight_changes": "no",
}

BEST = {
    "overall_health": "excellent",
    "fatigue_after_sleep": "never",
    "fruit_veggie_servings": "5",
    "sugary_drinks_snacks": "no",
    "exercise_days": "7",
    "breaks_from_sitting": "yes",
    "sleep_hours": "8",
    "wake_refreshed": "often",
    "stress_anxiety": "never",
    "relaxation_techniques": "yes",
    "chronic_conditions": "no",
    "family_history": "no",
    "smoking_vaping": "no",
    "alcohol_drinks": "0",
    "headaches_body_aches": "never",
    "weight_changes": "no",
}

WORST = {
    "overall_health": "poor",
    "fatigue_after_sleep": "often",
    "fruit_veggie_servings": "0",
    "sugary_drinks_snacks": "yes",
    "exercise_days": "0",
    "breaks_from_sitting": "no",
    "sleep_hours": "2",
    "wake_refreshed": "never",
    "stress_anxiety": "often",
    "relaxation_techniques": "no",
    "chronic_conditions": "yes",
    "family_history": "yes",
    "smoking_vaping": "yes",
    "alcohol_drinks": "30",
    "headaches_body_aches": "often",
    "weight_changes": "yes",
}


def test_scenario_scores_85():
    assert calculate_health_score(SCENARIO) == 85


def test_max_score_is_sum_of_per_question_maxima():
    assert MAX_SCORE == 104
    assert calculate_health_score(BEST) == MAX_SCORE


def test_worst_answers_score_zero():
    assert calculate_health_score(WORST) == 0


def test_choice_answers_are_case_insensitive():
    shouted = {k: v.upper() for k, v in SCENARIO.items()}
    assert calculate_health_score(shouted) == 85


def test_identical_answers_give_identical_scores():
    assert calculate_health_score(dict(SCENARIO)) == calculate_health_score(dict(SCENARIO))


def test_numeric_bands():
    def score_with(**overrides):
        return calculate_health_score({**WORST, **overrides})

    assert score_with(sleep_hours="7") == 8
    assert score_with(sleep_hours="9") == 8
    assert score_with(sleep_hours="5") == 4
    assert score_with(sleep_hours="10") == 4
    assert score_with(sleep_hours="12") == 0
    assert score_with(alcohol_drinks="0") == 6
    assert score_with(alcohol_drinks="7") == 4
    assert score_with(alcohol_drinks="14") == 2
    assert score_with(alcohol_drinks="15") == 0
    assert score_with(exercise_days="1") == 2
    assert score_with(fruit_veggie_servings="3") == 5


def test_scores_stay_within_bounds_for_valid_answers():
    # Sweep every accepted value of the numeric questions against both categorical extremes.
    for base in (BEST, WORST):
        for sleep, alcohol, days in itertools.product(range(0, 25, 3), (0, 5, 10, 50, 100), range(8)):
            answers = {**base, "sleep_hours": str(sleep), "alcohol_drinks": str(alcohol), "exercise_days": str(days)}
            assert 0 <= calculate_health_score(answers) <= MAX_SCORE


def test_every_assessment_field_is_scored():
    fields = {step.field for step in ASSESSMENT.steps}
    assert fields == set(SCENARIO)

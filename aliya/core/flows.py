"""
Declarative data-collection flows.

A flow is an ordered tuple of steps. Each step names the answer field it fills, the prompt
shown to the user, and a pure validator that returns None when the raw input is accepted or
the user-facing error text otherwise.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date

from aliya.core.i18n import t
from aliya.core.state import FlowState
from aliya.core.timeparse import local_today, parse_clock_time, parse_iso_date, parse_weekdays

Validator = Callable[[str], str | None]

_RE_INT = re.compile(r"^-?[0-9]+$")


@dataclass(frozen=True)
class FlowStep:
    field: str
    prompt: str
    validate: Validator


@dataclass(frozen=True)
class Flow:
    name: str
    steps: tuple[FlowStep, ...]
    # Pure function of the answers collected so far; returns steps appended after `steps`.
    extension: Callable[[Mapping[str, str]], tuple[FlowStep, ...]] | None = None

    def resolve_steps(self, answers: Mapping[str, str]) -> tuple[FlowStep, ...]:
        if self.extension is None:
            return self.steps
        return self.steps + self.extension(answers)


def parse_int(text: str) -> int | None:
    raw = (text or "").strip()
    if not _RE_INT.match(raw):
        return None
    return int(raw)


# -----------------------
# Validators
# -----------------------


def _required(error: str) -> Validator:
    def validate(raw: str) -> str | None:
        return None if (raw or "").strip() else error

    return validate


def _any_text(raw: str) -> str | None:
    return None


def _one_of(options: tuple[str, ...], error: str) -> Validator:
    def validate(raw: str) -> str | None:
        return None if (raw or "").strip().lower() in options else error

    return validate


def _int_between(low: int, high: int, error: str) -> Validator:
    def validate(raw: str) -> str | None:
        value = parse_int(raw)
        if value is None or value < low or value > high:
            return error
        return None

    return validate


def _past_date(error: str, *, today: Callable[[], date] = local_today) -> Validator:
    def validate(raw: str) -> str | None:
        parsed = parse_iso_date(raw)
        if parsed is None or parsed > today():
            return error
        return None

    return validate


def _clock_time(error: str) -> Validator:
    def validate(raw: str) -> str | None:
        return None if parse_clock_time(raw) is not None else error

    return validate


def _weekdays(error: str) -> Validator:
    def validate(raw: str) -> str | None:
        return None if parse_weekdays(raw) is not None else error

    return validate


# -----------------------
# Flow definitions
# -----------------------

RATING = ("excellent", "good", "fair", "poor")
FREQUENCY = ("often", "sometimes", "rarely", "never")
YES_NO = ("yes", "no")
SEVERITY = ("mild", "moderate", "severe")
SEX = ("male", "female", "other")
CYCLE_TYPES = ("regular", "irregular", "none")

MENSTRUAL_CYCLE_STEP = FlowStep(
    field="menstrual_cycle_type",
    prompt=t("onboarding.cycle_type.prompt"),
    validate=_one_of(CYCLE_TYPES, t("onboarding.cycle_type.bad")),
)


def _onboarding_extension(answers: Mapping[str, str]) -> tuple[FlowStep, ...]:
    if (answers.get("sex") or "").strip().lower() == "female":
        return (MENSTRUAL_CYCLE_STEP,)
    return ()


ONBOARDING = Flow(
    name="onboarding",
    steps=(
        FlowStep("name", t("onboarding.name.prompt"), _required(t("onboarding.name.bad"))),
        FlowStep("age", t("onboarding.age.prompt"), _int_between(1, 120, t("onboarding.age.bad"))),
        FlowStep("sex", t("onboarding.sex.prompt"), _one_of(SEX, t("onboarding.sex.bad"))),
        FlowStep("height_cm", t("onboarding.height.prompt"), _int_between(50, 300, t("onboarding.height.bad"))),
        FlowStep("weight_kg", t("onboarding.weight.prompt"), _int_between(20, 500, t("onboarding.weight.bad"))),
        FlowStep("location", t("onboarding.location.prompt"), _required(t("onboarding.location.bad"))),
        FlowStep("medical_history", t("onboarding.medical_history.prompt"), _any_text),
        FlowStep("chronic_conditions", t("onboarding.chronic_conditions.prompt"), _any_text),
        FlowStep("allergies", t("onboarding.allergies.prompt"), _any_text),
        FlowStep("medications", t("onboarding.medications.prompt"), _any_text),
    ),
    extension=_onboarding_extension,
)

DIAGNOSIS = Flow(
    name="diagnosis",
    steps=(
        FlowStep("symptoms", t("diagnosis.symptoms.prompt"), _required(t("diagnosis.symptoms.bad"))),
        FlowStep("severity", t("diagnosis.severity.prompt"), _one_of(SEVERITY, t("diagnosis.severity.bad"))),
        FlowStep("duration", t("diagnosis.duration.prompt"), _required(t("diagnosis.duration.bad"))),
    ),
)


def _assessment_step(field: str, validate: Validator) -> FlowStep:
    return FlowStep(field, t(f"assessment.{field}.prompt"), validate)


_rating = _one_of(RATING, t("assessment.rating.bad"))
_frequency = _one_of(FREQUENCY, t("assessment.frequency.bad"))
_yes_no = _one_of(YES_NO, t("assessment.yes_no.bad"))


def _count(low: int, high: int) -> Validator:
    return _int_between(low, high, t("assessment.number.bad", low=low, high=high))


ASSESSMENT = Flow(
    name="assessment",
    steps=(
        _assessment_step("overall_health", _rating),
        _assessment_step("fatigue_after_sleep", _frequency),
        _assessment_step("fruit_veggie_servings", _count(0, 20)),
        _assessment_step("sugary_drinks_snacks", _yes_no),
        _assessment_step("exercise_days", _count(0, 7)),
        _assessment_step("breaks_from_sitting", _yes_no),
        _assessment_step("sleep_hours", _count(0, 24)),
        _assessment_step("wake_refreshed", _frequency),
        _assessment_step("stress_anxiety", _frequency),
        _assessment_step("relaxation_techniques", _yes_no),
        _assessment_step("chronic_conditions", _yes_no),
        _assessment_step("family_history", _yes_no),
        _assessment_step("smoking_vaping", _yes_no),
        _assessment_step("alcohol_drinks", _count(0, 100)),
        _assessment_step("headaches_body_aches", _frequency),
        _assessment_step("weight_changes", _yes_no),
    ),
)

FITNESS = Flow(
    name="fitness",
    steps=(
        FlowStep(
            "fitness_goal",
            t("fitness.goal.prompt"),
            _one_of(("weight loss", "muscle gain", "general fitness"), t("fitness.goal.bad")),
        ),
        FlowStep(
            "activity_level",
            t("fitness.activity_level.prompt"),
            _one_of(("beginner", "intermediate", "advanced"), t("fitness.activity_level.bad")),
        ),
        FlowStep("available_days", t("fitness.days.prompt"), _int_between(0, 7, t("fitness.days.bad"))),
        FlowStep("available_minutes", t("fitness.minutes.prompt"), _int_between(10, 180, t("fitness.minutes.bad"))),
    ),
)

MEAL = Flow(
    name="meal",
    steps=(
        FlowStep(
            "dietary_preference",
            t("meal.preference.prompt"),
            _one_of(("vegetarian", "vegan", "omnivore"), t("meal.preference.bad")),
        ),
        FlowStep(
            "health_goal",
            t("meal.goal.prompt"),
            _one_of(("weight loss", "muscle gain", "general health"), t("meal.goal.bad")),
        ),
        FlowStep("meals_per_day", t("meal.count.prompt"), _int_between(2, 5, t("meal.count.bad"))),
    ),
)

CYCLE = Flow(
    name="cycle",
    steps=(
        FlowStep("last_period_date", t("cycle.last_period.prompt"), _past_date(t("cycle.last_period.bad"))),
        FlowStep("average_cycle_length", t("cycle.length.prompt"), _int_between(21, 35, t("cycle.length.bad"))),
    ),
)

MEDICATION = Flow(
    name="medication",
    steps=(
        FlowStep("medication_name", t("medication.name.prompt"), _required(t("medication.name.bad"))),
        FlowStep("dosage", t("medication.dosage.prompt"), _required(t("medication.dosage.bad"))),
        FlowStep("schedule_time", t("medication.time.prompt"), _clock_time(t("medication.time.bad"))),
        FlowStep("days_of_week", t("medication.days.prompt"), _weekdays(t("medication.days.bad"))),
    ),
)

# Step flows by the session state that drives them. Choice states are not listed here.
FLOWS: dict[FlowState, Flow] = {
    FlowState.ONBOARDING: ONBOARDING,
    FlowState.DIAGNOSING: DIAGNOSIS,
    FlowState.ASSESSING: ASSESSMENT,
    FlowState.FITNESS: FITNESS,
    FlowState.MEAL: MEAL,
    FlowState.CYCLE_TRACKING: CYCLE,
    FlowState.MEDICATION_SETUP: MEDICATION,
}

from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from aliya.core import timeparse
from aliya.core.flows import (
    ASSESSMENT,
    CYCLE,
    DIAGNOSIS,
    FLOWS,
    MEDICATION,
    MENSTRUAL_CYCLE_STEP,
    ONBOARDING,
    parse_int,
)
from aliya.core.i18n import t
from aliya.core.timeparse import local_today


def _step(flow, field):
    return next(s for s in flow.steps if s.field == field)


def test_onboarding_is_extended_for_female_users_only():
    base = len(ONBOARDING.steps)
    assert len(ONBOARDING.resolve_steps({"sex": "female"})) == base + 1
    assert ONBOARDING.resolve_steps({"sex": "Female"})[-1] is MENSTRUAL_CYCLE_STEP
    assert len(ONBOARDING.resolve_steps({"sex": "male"})) == base
    assert len(ONBOARDING.resolve_steps({})) == base


@pytest.mark.parametrize(
    ("raw", "ok"),
    [("29", True), (" 1 ", True), ("120", True), ("0", False), ("121", False), ("abc", False), ("7.5", False), ("", False)],
)
def test_age_validation(raw, ok):
    error = _step(ONBOARDING, "age").validate(raw)
    assert (error is None) is ok
    if not ok:
        assert error == t("onboarding.age.bad")


def test_validation_is_idempotent():
    validate = _step(ONBOARDING, "height_cm").validate
    assert validate("tall") == validate("tall") == t("onboarding.height.bad")


def test_choice_steps_ignore_case_and_whitespace():
    assert _step(DIAGNOSIS, "severity").validate("  SEVERE ") is None
    assert _step(DIAGNOSIS, "severity").validate("very bad") == t("diagnosis.severity.bad")


def test_free_text_steps_accept_anything():
    assert _step(ONBOARDING, "allergies").validate("") is None
    assert _step(DIAGNOSIS, "symptoms").validate("   ") == t("diagnosis.symptoms.bad")


def test_last_period_must_be_a_past_iso_date():
    validate = _step(CYCLE, "last_period_date").validate
    assert validate("2025-04-01") is None
    assert validate((local_today() + timedelta(days=1)).isoformat()) == t("cycle.last_period.bad")
    assert validate("01/04/2025") == t("cycle.last_period.bad")
    assert validate("2025-02-30") == t("cycle.last_period.bad")


def test_medication_schedule_validation():
    time_step = _step(MEDICATION, "schedule_time")
    days_step = _step(MEDICATION, "days_of_week")
    assert time_step.validate("08:00") is None
    assert time_step.validate("24:00") == t("medication.time.bad")
    assert days_step.validate("Daily") is None
    assert days_step.validate("Mon, Wed,Fri") is None
    assert days_step.validate("Mon,Funday") == t("medication.days.bad")


def test_assessment_number_error_names_the_range():
    assert _step(ASSESSMENT, "exercise_days").validate("8") == t("assessment.number.bad", low=0, high=7)


def test_every_step_flow_has_prompts():
    for flow in FLOWS.values():
        assert flow.steps
        assert all(step.prompt for step in flow.steps)


def test_parse_int_is_strict():
    assert parse_int("42") == 42
    assert parse_int("-3") == -3
    assert parse_int("4.2") is None
    assert parse_int("4 2") is None


@pytest.mark.parametrize("raw", ["--5", "²", "-", "+5", "5-", "٣"])
def test_malformed_numbers_are_rejected_not_raised(raw):
    assert parse_int(raw) is None
    assert _step(ONBOARDING, "age").validate(raw) == t("onboarding.age.bad")
    assert _step(ASSESSMENT, "exercise_days").validate(raw) == t("assessment.number.bad", low=0, high=7)


def test_last_period_is_judged_in_the_configured_zone(monkeypatch):
    # 23:30 UTC on April 10th is already April 11th on Kiritimati (UTC+14).
    monkeypatch.setattr(timeparse, "now_utc", lambda: datetime(2025, 4, 10, 23, 30, tzinfo=ZoneInfo("UTC")))
    monkeypatch.setattr(timeparse, "_local_zone", ZoneInfo("UTC"))
    validate = _step(CYCLE, "last_period_date").validate
    assert validate("2025-04-11") == t("cycle.last_period.bad")

    timeparse.set_local_timezone("Pacific/Kiritimati")
    assert local_today().isoformat() == "2025-04-11"
    assert validate("2025-04-11") is None
    assert validate("2025-04-12") == t("cycle.last_period.bad")

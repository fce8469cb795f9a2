"""
Shared fixtures: a real SQLite database per test, and in-memory fakes for the text
generator, the job queue and the outbound transport.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from aliya.bot.engine import DialogueEngine
from aliya.bot.router import CommandRouter
from aliya.bot.transport import ReminderDeliveryError
from aliya.core.state import SessionStore
from aliya.db.session import init_db
from aliya.services.records import HealthRecords
from aliya.services.reminders import ReminderScheduler

NOW = datetime(2025, 4, 10, 8, 0, tzinfo=ZoneInfo("UTC"))

ONBOARDING_ANSWERS = ["Jane", "29", "female", "165", "60", "Boston", "none", "none", "none", "none"]


class FakeAdvisor:
    def __init__(self) -> None:
        self.fail = False
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def _reply(self, name: str, text: str, **kwargs: Any) -> str | None:
        self.calls.append((name, kwargs))
        return None if self.fail else text

    def analyze_symptoms(self, *, symptoms: str, severity: str, duration: str) -> str | None:
        return self._reply(
            "analyze_symptoms",
            "Possible Conditions: common cold",
            symptoms=symptoms,
            severity=severity,
            duration=duration,
        )

    def analyze_assessment(self, answers, *, score: int, max_score: int) -> str | None:
        return self._reply("analyze_assessment", "Analysis: solid habits", score=score, max_score=max_score)

    def generate_fitness_plan(self, **kwargs: Any) -> str | None:
        return self._reply("generate_fitness_plan", "Weekly Plan: walk daily", **kwargs)

    def generate_meal_plan(self, **kwargs: Any) -> str | None:
        return self._reply("generate_meal_plan", "Daily Meal Plan: oats", **kwargs)

    def answer_question(self, question: str) -> str | None:
        return self._reply("answer_question", "Answer: plenty of vegetables", question=question)


class FakeJob:
    def __init__(self, kind: str, callback, *, data: Any, name: str, **schedule: Any) -> None:
        self.kind = kind
        self.callback = callback
        self.data = data
        self.name = name
        self.schedule = schedule
        self.removed = False

    def schedule_removal(self) -> None:
        self.removed = True


class FakeJobQueue:
    def __init__(self) -> None:
        self.jobs: list[FakeJob] = []

    def run_once(self, callback, when, data=None, name=None, **kwargs: Any) -> FakeJob:
        job = FakeJob("once", callback, data=data, name=name, when=when)
        self.jobs.append(job)
        return job

    def run_daily(self, callback, time, days=tuple(range(7)), data=None, name=None, **kwargs: Any) -> FakeJob:
        job = FakeJob("daily", callback, data=data, name=name, time=time, days=days)
        self.jobs.append(job)
        return job

    def get_jobs_by_name(self, name: str) -> tuple[FakeJob, ...]:
        return tuple(j for j in self.jobs if j.name == name and not j.removed)

    @property
    def active(self) -> list[FakeJob]:
        return [j for j in self.jobs if not j.removed]


class FakeTransport:
    def __init__(self) -> None:
        self.fail = False
        self.sent: list[tuple[str, str]] = []

    async def send(self, user_id: str, text: str) -> None:
        if self.fail:
            raise ReminderDeliveryError(f"send to {user_id} failed")
        self.sent.append((user_id, text))


@pytest.fixture
def db(tmp_path):
    init_db(None, str(tmp_path / "test.db"))
    return tmp_path / "test.db"


@pytest.fixture
def records(db) -> HealthRecords:
    return HealthRecords()


@pytest.fixture
def advisor() -> FakeAdvisor:
    return FakeAdvisor()


@pytest.fixture
def job_queue() -> FakeJobQueue:
    return FakeJobQueue()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def scheduler(job_queue, transport, records) -> ReminderScheduler:
    return ReminderScheduler(job_queue, transport, records, timezone="UTC", clock=lambda: NOW)


@pytest.fixture
def sessions() -> SessionStore:
    return SessionStore()


@pytest.fixture
def engine(records, advisor, scheduler) -> DialogueEngine:
    return DialogueEngine(records=records, advisor=advisor, reminders=scheduler)


@pytest.fixture
def router(sessions, engine, records, advisor) -> CommandRouter:
    return CommandRouter(sessions=sessions, engine=engine, records=records, advisor=advisor)


@pytest.fixture
def onboard(router):
    """Drive a user through /start, the terms and every onboarding step."""

    async def _onboard(user_id: str = "100", *, sex: str = "female", cycle_type: str = "regular") -> str:
        await router.route(user_id, "/start")
        await router.route(user_id, "accept")
        answers = list(ONBOARDING_ANSWERS)
        answers[2] = sex
        if sex == "female":
            answers.append(cycle_type)
        reply = ""
        for answer in answers:
            reply = await router.route(user_id, answer)
        return reply

    return _onboard


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def profile_answers() -> dict[str, str]:
    fields = [
        "name",
        "age",
        "sex",
        "height_cm",
        "weight_kg",
        "location",
        "medical_history",
        "chronic_conditions",
        "allergies",
        "medications",
    ]
    return {**dict(zip(fields, ONBOARDING_ANSWERS)), "menstrual_cycle_type": "regular"}

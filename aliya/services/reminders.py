"""
Reminder scheduling on python-telegram-bot's JobQueue.

A reminder is an immutable snapshot of what is needed to render its message. One-shot
reminders fire once at a UTC instant; recurring reminders fire at a local time of day on a
set of weekdays. Jobs carry a stable name per (kind, user[, medication]) so re-scheduling
replaces the previous job instead of stacking duplicates. Jobs live in memory only.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Protocol
from zoneinfo import ZoneInfo

from telegram.ext import ContextTypes

from aliya.bot.transport import ReminderDeliveryError
from aliya.core.cycle import period_reminder_date
from aliya.core.i18n import t
from aliya.core.timeparse import EVERY_DAY, local_datetime, now_utc

logger = logging.getLogger("aliya-bot")

PERIOD_REMINDER_AT = time(9, 0)
FITNESS_REMINDER_AT = time(7, 0)
MEAL_REMINDER_AT = time(8, 0)
ASSESSMENT_NUDGE_DELAY = timedelta(hours=48)
DIAGNOSIS_FOLLOW_UP_DELAY = timedelta(days=2)


class ReminderKind(str, Enum):
    PERIOD = "period"
    MEDICATION = "medication"
    FITNESS = "fitness"
    MEAL = "meal"
    ASSESSMENT_NUDGE = "assessment_nudge"
    DIAGNOSIS_FOLLOW_UP = "diagnosis_follow_up"


@dataclass(frozen=True)
class Reminder:
    kind: ReminderKind
    user_id: str
    params: Mapping[str, str] = field(default_factory=dict)

    @property
    def job_name(self) -> str:
        if self.kind is ReminderKind.MEDICATION:
            return f"{self.kind.value}:{self.user_id}:{self.params.get('name', '').strip().casefold()}"
        return f"{self.kind.value}:{self.user_id}"


@dataclass(frozen=True)
class RecurrenceRule:
    at: time
    # 0=Sunday .. 6=Saturday; None means every day.
    days: tuple[int, ...] | None = None


class Transport(Protocol):
    async def send(self, user_id: str, text: str) -> None: ...


class PlanSource(Protocol):
    def latest_fitness_plan(self, user_id: str) -> Any: ...

    def latest_meal_plan(self, user_id: str) -> Any: ...


class ReminderScheduler:
    def __init__(
        self,
        job_queue: Any,
        transport: Transport,
        plans: PlanSource,
        *,
        timezone: str = "UTC",
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._job_queue = job_queue
        self._transport = transport
        self._plans = plans
        self._timezone = timezone
        self._clock = clock

    # -----------------------
    # Arming
    # -----------------------

    def _replace_existing(self, name: str) -> None:
        for job in self._job_queue.get_jobs_by_name(name):
            job.schedule_removal()

    def schedule_one_shot(self, reminder: Reminder, at: datetime) -> bool:
        now = self._clock()
        if at <= now:
            logger.info(
                "Reminder not armed, instant in the past kind=%s user=%s at=%s",
                reminder.kind.value,
                reminder.user_id,
                at.isoformat(),
            )
            return False
        self._replace_existing(reminder.job_name)
        self._job_queue.run_once(self._on_job, when=at, data=reminder, name=reminder.job_name)
        logger.info("Reminder armed kind=%s user=%s at=%s", reminder.kind.value, reminder.user_id, at.isoformat())
        return True

    def schedule_after(self, reminder: Reminder, delay: timedelta) -> bool:
        return self.schedule_one_shot(reminder, self._clock() + delay)

    def schedule_recurring(self, reminder: Reminder, rule: RecurrenceRule) -> None:
        self._replace_existing(reminder.job_name)
        at = rule.at.replace(tzinfo=ZoneInfo(self._timezone))
        days = rule.days if rule.days is not None else EVERY_DAY
        self._job_queue.run_daily(self._on_job, time=at, days=days, data=reminder, name=reminder.job_name)
        logger.info(
            "Recurring reminder armed kind=%s user=%s at=%s days=%s",
            reminder.kind.value,
            reminder.user_id,
            rule.at.strftime("%H:%M"),
            ",".join(str(d) for d in days),
        )

    # -----------------------
    # Policies
    # -----------------------

    def schedule_period_reminder(self, user_id: str, predicted: date) -> bool:
        at = local_datetime(period_reminder_date(predicted), PERIOD_REMINDER_AT, tz=self._timezone)
        reminder = Reminder(ReminderKind.PERIOD, user_id, {"predicted": predicted.isoformat()})
        return self.schedule_one_shot(reminder, at)

    def schedule_medication_reminder(
        self,
        user_id: str,
        *,
        name: str,
        dosage: str,
        at: time,
        days: tuple[int, ...] | None,
    ) -> None:
        reminder = Reminder(ReminderKind.MEDICATION, user_id, {"name": name, "dosage": dosage})
        self.schedule_recurring(reminder, RecurrenceRule(at=at, days=days))

    def schedule_fitness_reminder(self, user_id: str) -> None:
        self.schedule_recurring(Reminder(ReminderKind.FITNESS, user_id), RecurrenceRule(at=FITNESS_REMINDER_AT))

    def schedule_meal_reminder(self, user_id: str) -> None:
        self.schedule_recurring(Reminder(ReminderKind.MEAL, user_id), RecurrenceRule(at=MEAL_REMINDER_AT))

    def schedule_assessment_nudge(self, user_id: str) -> bool:
        return self.schedule_after(Reminder(ReminderKind.ASSESSMENT_NUDGE, user_id), ASSESSMENT_NUDGE_DELAY)

    def schedule_diagnosis_follow_up(self, user_id: str, severity: str) -> bool:
        if (severity or "").strip().lower() != "severe":
            return False
        return self.schedule_after(Reminder(ReminderKind.DIAGNOSIS_FOLLOW_UP, user_id), DIAGNOSIS_FOLLOW_UP_DELAY)

    # -----------------------
    # Firing
    # -----------------------

    async def _on_job(self, context: ContextTypes.DEFAULT_TYPE) -> None:
        reminder: Reminder = context.job.data
        await self.deliver(reminder)

    async def _render(self, reminder: Reminder) -> str | None:
        kind = reminder.kind
        if kind is ReminderKind.FITNESS:
            plan = await asyncio.to_thread(self._plans.latest_fitness_plan, reminder.user_id)
            if plan is None:
                return None
            return t("reminder.fitness", goal=plan.fitness_goal)
        if kind is ReminderKind.MEAL:
            plan = await asyncio.to_thread(self._plans.latest_meal_plan, reminder.user_id)
            if plan is None:
                return None
            return t("reminder.meal", preference=plan.dietary_preference, goal=plan.health_goal)
        if kind is ReminderKind.PERIOD:
            return t("reminder.period", predicted=reminder.params.get("predicted", ""))
        if kind is ReminderKind.MEDICATION:
            return t("reminder.medication", name=reminder.params.get("name", ""), dosage=reminder.params.get("dosage", ""))
        if kind is ReminderKind.ASSESSMENT_NUDGE:
            return t("reminder.assessment_nudge")
        return t("reminder.diagnosis_follow_up")

    async def deliver(self, reminder: Reminder) -> bool:
        """Render and send one reminder. Never raises; returns whether a message went out."""
        try:
            text = await self._render(reminder)
            if text is None:
                logger.info("Reminder skipped, nothing to remind kind=%s user=%s", reminder.kind.value, reminder.user_id)
                return False
            await self._transport.send(reminder.user_id, text)
        except ReminderDeliveryError:
            logger.warning(
                "Reminder delivery failed kind=%s user=%s", reminder.kind.value, reminder.user_id, exc_info=True
            )
            return False
        except Exception:  # noqa: BLE001
            logger.exception("Reminder firing failed kind=%s user=%s", reminder.kind.value, reminder.user_id)
            return False
        logger.info("Reminder sent kind=%s user=%s", reminder.kind.value, reminder.user_id)
        return True

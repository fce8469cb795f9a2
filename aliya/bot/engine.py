from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from aliya.core.cycle import predict_next_period
from aliya.core.flows import FLOWS, MEDICATION, Flow, parse_int
from aliya.core.i18n import t
from aliya.core.scoring import MAX_SCORE, calculate_health_score
from aliya.core.state import FlowState, Session
from aliya.core.timeparse import EVERY_DAY, parse_clock_time, parse_iso_date, parse_weekdays
from aliya.services.advisor import HealthAdvisor
from aliya.services.records import HealthRecords
from aliya.services.reminders import ReminderScheduler

logger = logging.getLogger("aliya-bot")

# Where a session goes after a successful finalization; anything not listed returns to Idle.
_NEXT_STATE: dict[FlowState, FlowState] = {
    FlowState.ONBOARDING: FlowState.AWAITING_ASSESSMENT_CHOICE,
}


class FlowFinalizationError(RuntimeError):
    """Finalization could not complete; `reply` is the apology shown to the user."""

    def __init__(self, reply: str, reason: str) -> None:
        super().__init__(reason)
        self.reply = reply


def medication_snapshot(rows: Sequence[Any]) -> list[dict[str, str]]:
    return [
        {
            "name": r.medication_name,
            "dosage": r.dosage,
            "time": r.schedule_time,
            "days": r.days_of_week,
        }
        for r in rows
    ]


def render_medication_list(snapshot: Sequence[Mapping[str, str]]) -> str:
    lines = [t("medication.list.title"), ""]
    lines.extend(t("medication.list.row", **item) for item in snapshot)
    lines.extend(["", t("medication.list.add_or_update")])
    return "\n".join(lines)


def _render_medication_selection(snapshot: Sequence[Mapping[str, str]]) -> str:
    lines = [t("medication.select.title"), ""]
    lines.extend(t("medication.select.row", index=i, **item) for i, item in enumerate(snapshot, start=1))
    lines.extend(["", t("medication.select.hint")])
    return "\n".join(lines)


class DialogueEngine:
    """
    Drives one message through the session's current flow and returns exactly one reply.

    Step flows share a single algorithm: validate the current step, store the trimmed answer,
    then prompt the next step or finalize. Choice states map a small set of replies to
    transitions and re-prompt on anything else.
    """

    def __init__(
        self,
        *,
        records: HealthRecords,
        advisor: HealthAdvisor,
        reminders: ReminderScheduler,
    ) -> None:
        self._records = records
        self._advisor = advisor
        self._reminders = reminders
        self._choices: dict[FlowState, Callable[[Session, str], Awaitable[str]]] = {
            FlowState.AWAITING_TERMS_RESPONSE: self._on_terms,
            FlowState.AWAITING_ASSESSMENT_CHOICE: self._on_assessment_choice,
            FlowState.CYCLE_UPDATE_CHOICE: self._on_cycle_update_choice,
            FlowState.MEDICATION_CHOICE: self._on_medication_choice,
            FlowState.MEDICATION_SELECT_UPDATE: self._on_medication_select,
        }
        self._finalizers: dict[FlowState, Callable[[str, dict[str, Any]], Awaitable[str]]] = {
            FlowState.ONBOARDING: self._finish_onboarding,
            FlowState.DIAGNOSING: self._finish_diagnosis,
            FlowState.ASSESSING: self._finish_assessment,
            FlowState.FITNESS: self._finish_fitness,
            FlowState.MEAL: self._finish_meal,
            FlowState.CYCLE_TRACKING: self._finish_cycle,
            FlowState.MEDICATION_SETUP: self._finish_medication,
        }

    # -----------------------
    # Entry points
    # -----------------------

    def launch(self, session: Session, state: FlowState) -> str:
        flow = FLOWS[state]
        session.enter(state)
        logger.info("Flow started flow=%s user=%s", flow.name, session.user_id)
        return flow.resolve_steps(session.answers)[0].prompt

    async def handle(self, session: Session, text: str) -> str:
        state = session.flow_state
        if state is FlowState.IDLE:
            return t("common.unknown_input")

        choice = self._choices.get(state)
        if choice is not None:
            return await choice(session, text)

        flow = FLOWS.get(state)
        if flow is None:
            logger.warning("No handler for state=%s user=%s; resetting", state.value, session.user_id)
            session.reset()
            return t("common.unknown_input")
        return await self._step(session, flow, text)

    # -----------------------
    # Step flows
    # -----------------------

    async def _step(self, session: Session, flow: Flow, text: str) -> str:
        steps = flow.resolve_steps(session.answers)
        if session.step_index == len(steps):
            # Every answer is in but finalization never completed.
            return await self._finalize(session, flow)
        if not 0 <= session.step_index < len(steps):
            logger.error(
                "Step index out of range flow=%s user=%s index=%s", flow.name, session.user_id, session.step_index
            )
            session.reset()
            return t("common.error")

        step = steps[session.step_index]
        error = step.validate(text)
        if error is not None:
            logger.info("Validation failed flow=%s field=%s user=%s", flow.name, step.field, session.user_id)
            return error

        session.answers[step.field] = (text or "").strip()
        session.step_index += 1

        # Re-resolve: the answer just stored may extend the flow.
        steps = flow.resolve_steps(session.answers)
        if session.step_index < len(steps):
            return steps[session.step_index].prompt
        return await self._finalize(session, flow)

    async def _finalize(self, session: Session, flow: Flow) -> str:
        state = session.flow_state
        finalizer = self._finalizers[state]
        try:
            reply = await finalizer(session.user_id, dict(session.answers))
        except FlowFinalizationError as e:
            logger.warning("Flow finalization failed flow=%s user=%s reason=%s", flow.name, session.user_id, e)
            session.reset()
            return e.reply
        except Exception:
            # Leave no half-finished flow behind; the error handler replies.
            logger.warning("Flow finalization aborted flow=%s user=%s", flow.name, session.user_id)
            session.reset()
            raise

        next_state = _NEXT_STATE.get(state)
        if next_state is None:
            session.reset()
        else:
            session.enter(next_state)
        logger.info(
            "Flow completed flow=%s user=%s next=%s",
            flow.name,
            session.user_id,
            session.flow_state.value,
        )
        return reply

    async def _persist(self, failure_key: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            row = await asyncio.to_thread(func, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.exception("Database write failed")
            raise FlowFinalizationError(t(failure_key), "database error") from e
        if row is None:
            raise FlowFinalizationError(t(failure_key), "profile not found")
        return row

    async def _generate(self, failure_key: str, func: Callable[..., str | None], *args: Any, **kwargs: Any) -> str:
        text = await asyncio.to_thread(func, *args, **kwargs)
        if not text:
            raise FlowFinalizationError(t(failure_key), "text generation returned nothing")
        return text

    # -----------------------
    # Finalizers
    # -----------------------

    async def _finish_onboarding(self, user_id: str, answers: dict[str, Any]) -> str:
        await self._persist("onboarding.save_failed", self._records.create_profile, user_id, answers)
        return t("onboarding.done")

    async def _finish_diagnosis(self, user_id: str, answers: dict[str, Any]) -> str:
        symptoms = answers["symptoms"]
        severity = answers["severity"].lower()
        duration = answers["duration"]
        analysis = await self._generate(
            "diagnosis.analysis_failed",
            self._advisor.analyze_symptoms,
            symptoms=symptoms,
            severity=severity,
            duration=duration,
        )
        await self._persist(
            "diagnosis.save_failed",
            self._records.add_diagnosis,
            user_id,
            symptoms=symptoms,
            severity=severity,
            duration=duration,
            analysis=analysis,
        )
        self._reminders.schedule_diagnosis_follow_up(user_id, severity)
        return t("diagnosis.result", analysis=analysis)

    async def _finish_assessment(self, user_id: str, answers: dict[str, Any]) -> str:
        score = calculate_health_score(answers)
        analysis = await self._generate(
            "assessment.analysis_failed",
            self._advisor.analyze_assessment,
            answers,
            score=score,
            max_score=MAX_SCORE,
        )
        await self._persist(
            "assessment.save_failed",
            self._records.add_assessment,
            user_id,
            answers=answers,
            score=score,
            analysis=analysis,
        )
        return t("assessment.result", score=score, max_score=MAX_SCORE, analysis=analysis)

    async def _finish_fitness(self, user_id: str, answers: dict[str, Any]) -> str:
        params = {
            "fitness_goal": answers["fitness_goal"].lower(),
            "activity_level": answers["activity_level"].lower(),
            "available_days": int(answers["available_days"]),
            "available_minutes": int(answers["available_minutes"]),
        }
        plan = await self._generate("fitness.generate_failed", self._advisor.generate_fitness_plan, **params)
        await self._persist("fitness.save_failed", self._records.add_fitness_plan, user_id, plan_text=plan, **params)
        self._reminders.schedule_fitness_reminder(user_id)
        return t("fitness.result", plan=plan)

    async def _finish_meal(self, user_id: str, answers: dict[str, Any]) -> str:
        params = {
            "dietary_preference": answers["dietary_preference"].lower(),
            "health_goal": answers["health_goal"].lower(),
            "meals_per_day": int(answers["meals_per_day"]),
        }
        plan = await self._generate("meal.generate_failed", self._advisor.generate_meal_plan, **params)
        await self._persist("meal.save_failed", self._records.add_meal_plan, user_id, plan_text=plan, **params)
        self._reminders.schedule_meal_reminder(user_id)
        return t("meal.result", plan=plan)

    async def _finish_cycle(self, user_id: str, answers: dict[str, Any]) -> str:
        last_period = parse_iso_date(answers["last_period_date"])
        cycle_length = int(answers["average_cycle_length"])
        if last_period is None:
            raise FlowFinalizationError(t("cycle.save_failed"), "unparseable last period date")
        predicted = predict_next_period(last_period, cycle_length)
        await self._persist(
            "cycle.save_failed",
            self._records.upsert_menstrual_cycle,
            user_id,
            last_period_date=last_period,
            average_cycle_length=cycle_length,
            predicted_next_period=predicted,
        )
        self._reminders.schedule_period_reminder(user_id, predicted)
        return t(
            "cycle.result",
            last_period=last_period.isoformat(),
            cycle_length=cycle_length,
            predicted=predicted.isoformat(),
        )

    async def _finish_medication(self, user_id: str, answers: dict[str, Any]) -> str:
        name = answers["medication_name"]
        dosage = answers["dosage"]
        at = parse_clock_time(answers["schedule_time"])
        days = parse_weekdays(answers["days_of_week"])
        if at is None or days is None:
            raise FlowFinalizationError(t("medication.save_failed"), "unparseable schedule")
        schedule_time = at.strftime("%H:%M")
        days_text = answers["days_of_week"]
        await self._persist(
            "medication.save_failed",
            self._records.upsert_medication_reminder,
            user_id,
            medication_name=name,
            dosage=dosage,
            schedule_time=schedule_time,
            days_of_week=days_text,
        )
        self._reminders.schedule_medication_reminder(
            user_id,
            name=name,
            dosage=dosage,
            at=at,
            days=None if days == EVERY_DAY else days,
        )
        return t("medication.result", name=name, dosage=dosage, time=schedule_time, days=days_text)

    # -----------------------
    # Choice states
    # -----------------------

    async def _on_terms(self, session: Session, text: str) -> str:
        choice = (text or "").strip().lower()
        if choice == "accept":
            return self.launch(session, FlowState.ONBOARDING)
        if choice == "deny":
            session.reset()
            return t("terms.denied")
        return t("terms.accept_or_deny")

    async def _on_assessment_choice(self, session: Session, text: str) -> str:
        choice = (text or "").strip().lower()
        if choice == "now":
            return self.launch(session, FlowState.ASSESSING)
        if choice == "later":
            session.reset()
            self._reminders.schedule_assessment_nudge(session.user_id)
            return t("assessment_choice.later")
        if choice == "never":
            session.reset()
            return t("assessment_choice.never")
        return t("assessment_choice.bad")

    async def _on_cycle_update_choice(self, session: Session, text: str) -> str:
        choice = (text or "").strip().lower()
        if choice == "yes":
            return self.launch(session, FlowState.CYCLE_TRACKING)
        if choice == "no":
            session.reset()
            return t("cycle.update_choice.keep")
        return t("cycle.update_choice.bad")

    async def _on_medication_choice(self, session: Session, text: str) -> str:
        choice = (text or "").strip().lower()
        if choice == "add":
            return self.launch(session, FlowState.MEDICATION_SETUP)
        if choice == "update":
            snapshot = list(session.answers.get("reminders") or [])
            session.enter(FlowState.MEDICATION_SELECT_UPDATE, answers={"reminders": snapshot})
            return _render_medication_selection(snapshot)
        return t("medication.choice.bad")

    async def _on_medication_select(self, session: Session, text: str) -> str:
        snapshot = list(session.answers.get("reminders") or [])
        index = parse_int(text)
        if index is None or not 1 <= index <= len(snapshot):
            return t("medication.select.bad")
        # The name is fixed by the selection; collection resumes at the dosage step.
        session.enter(
            FlowState.MEDICATION_SETUP,
            answers={"medication_name": snapshot[index - 1]["name"]},
            step_index=1,
        )
        logger.info("Medication update started user=%s index=%s", session.user_id, index)
        return MEDICATION.steps[1].prompt

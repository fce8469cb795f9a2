from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date, datetime

from sqlalchemy import select

from aliya.db.models import (
    Assessment,
    Diagnosis,
    EventAudit,
    FitnessPlan,
    MealPlan,
    MedicationReminder,
    MenstrualCycle,
    User,
)
from aliya.db.session import get_session, ping_db


def _norm_choice(v: object) -> str:
    return str(v or "").strip().lower()


def _text(v: object) -> str:
    return str(v or "").strip()


class HealthRecords:
    """
    Persistence for profiles and everything derived from them.

    All methods take the chat-facing user id (Telegram chat id as a string) and resolve the
    internal profile key themselves. Writes for a user without a profile return None.
    Database failures propagate as SQLAlchemyError.
    """

    def ping(self) -> None:
        ping_db()

    # -----------------------
    # Profiles
    # -----------------------

    def get_profile(self, user_id: str) -> User | None:
        with get_session() as session:
            return session.execute(select(User).where(User.chat_id == user_id)).scalar_one_or_none()

    def user_exists(self, user_id: str) -> bool:
        return self.get_profile(user_id) is not None

    def create_profile(self, user_id: str, answers: Mapping[str, str]) -> User:
        sex = _norm_choice(answers.get("sex"))
        cycle_type = _norm_choice(answers.get("menstrual_cycle_type")) if sex == "female" else ""
        with get_session() as session:
            user = User(
                chat_id=user_id,
                name=_text(answers.get("name")),
                age=int(_text(answers.get("age"))),
                sex=sex,
                height_cm=int(_text(answers.get("height_cm"))),
                weight_kg=int(_text(answers.get("weight_kg"))),
                location=_text(answers.get("location")),
                medical_history=_text(answers.get("medical_history")),
                chronic_conditions=_text(answers.get("chronic_conditions")),
                allergies=_text(answers.get("allergies")),
                medications=_text(answers.get("medications")),
                menstrual_cycle_type=cycle_type or None,
            )
            session.add(user)
            session.flush()
        self._audit(user.id, event_type="profile_created", payload={"chat_id": user_id})
        return user

    def _profile_id(self, user_id: str) -> str | None:
        with get_session() as session:
            return session.execute(select(User.id).where(User.chat_id == user_id)).scalar_one_or_none()

    def _audit(self, profile_id: str, *, event_type: str, payload: dict) -> None:
        with get_session() as session:
            session.add(
                EventAudit(
                    user_id=profile_id,
                    event_type=event_type,
                    payload_json=json.dumps(payload, ensure_ascii=False),
                )
            )

    # -----------------------
    # Results
    # -----------------------

    def add_diagnosis(
        self,
        user_id: str,
        *,
        symptoms: str,
        severity: str,
        duration: str,
        analysis: str,
    ) -> Diagnosis | None:
        profile_id = self._profile_id(user_id)
        if profile_id is None:
            return None
        with get_session() as session:
            row = Diagnosis(
                user_id=profile_id,
                symptoms=symptoms,
                severity=_norm_choice(severity),
                duration=duration,
                analysis=analysis,
            )
            session.add(row)
            session.flush()
        self._audit(profile_id, event_type="diagnosis_created", payload={"diagnosis_id": row.id})
        return row

    def add_assessment(
        self,
        user_id: str,
        *,
        answers: Mapping[str, str],
        score: int,
        analysis: str,
    ) -> Assessment | None:
        profile_id = self._profile_id(user_id)
        if profile_id is None:
            return None
        with get_session() as session:
            row = Assessment(
                user_id=profile_id,
                answers_json=json.dumps(dict(answers), ensure_ascii=False),
                score=score,
                analysis=analysis,
            )
            session.add(row)
            session.flush()
        self._audit(profile_id, event_type="assessment_created", payload={"assessment_id": row.id, "score": score})
        return row

    def add_fitness_plan(
        self,
        user_id: str,
        *,
        fitness_goal: str,
        activity_level: str,
        available_days: int,
        available_minutes: int,
        plan_text: str,
    ) -> FitnessPlan | None:
        profile_id = self._profile_id(user_id)
        if profile_id is None:
            return None
        with get_session() as session:
            row = FitnessPlan(
                user_id=profile_id,
                fitness_goal=_norm_choice(fitness_goal),
                activity_level=_norm_choice(activity_level),
                available_days=int(available_days),
                available_minutes=int(available_minutes),
                plan_text=plan_text,
            )
            session.add(row)
            session.flush()
        self._audit(profile_id, event_type="fitness_plan_created", payload={"fitness_plan_id": row.id})
        return row

    def add_meal_plan(
        self,
        user_id: str,
        *,
        dietary_preference: str,
        health_goal: str,
        meals_per_day: int,
        plan_text: str,
    ) -> MealPlan | None:
        profile_id = self._profile_id(user_id)
        if profile_id is None:
            return None
        with get_session() as session:
            row = MealPlan(
                user_id=profile_id,
                dietary_preference=_norm_choice(dietary_preference),
                health_goal=_norm_choice(health_goal),
                meals_per_day=int(meals_per_day),
                plan_text=plan_text,
            )
            session.add(row)
            session.flush()
        self._audit(profile_id, event_type="meal_plan_created", payload={"meal_plan_id": row.id})
        return row

    def latest_fitness_plan(self, user_id: str) -> FitnessPlan | None:
        with get_session() as session:
            return (
                session.execute(
                    select(FitnessPlan)
                    .join(User, User.id == FitnessPlan.user_id)
                    .where(User.chat_id == user_id)
                    .order_by(FitnessPlan.created_at.desc())
                    .limit(1)
                )
                .scalars()
                .first()
            )

    def latest_meal_plan(self, user_id: str) -> MealPlan | None:
        with get_session() as session:
            return (
                session.execute(
                    select(MealPlan)
                    .join(User, User.id == MealPlan.user_id)
                    .where(User.chat_id == user_id)
                    .order_by(MealPlan.created_at.desc())
                    .limit(1)
                )
                .scalars()
                .first()
            )

    # -----------------------
    # Cycle
    # -----------------------

    def get_menstrual_cycle(self, user_id: str) -> MenstrualCycle | None:
        with get_session() as session:
            return (
                session.execute(
                    select(MenstrualCycle)
                    .join(User, User.id == MenstrualCycle.user_id)
                    .where(User.chat_id == user_id)
                    .order_by(MenstrualCycle.updated_at.desc())
                    .limit(1)
                )
                .scalars()
                .first()
            )

    def upsert_menstrual_cycle(
        self,
        user_id: str,
        *,
        last_period_date: date,
        average_cycle_length: int,
        predicted_next_period: date,
    ) -> MenstrualCycle | None:
        """One record per user: updated in place when present."""
        profile_id = self._profile_id(user_id)
        if profile_id is None:
            return None
        with get_session() as session:
            row = session.execute(
                select(MenstrualCycle).where(MenstrualCycle.user_id == profile_id)
            ).scalars().first()
            if row is None:
                row = MenstrualCycle(user_id=profile_id)
                session.add(row)
            row.last_period_date = last_period_date
            row.average_cycle_length = int(average_cycle_length)
            row.predicted_next_period = predicted_next_period
            row.updated_at = datetime.utcnow()
            session.flush()
        self._audit(
            profile_id,
            event_type="menstrual_cycle_saved",
            payload={"cycle_id": row.id, "predicted_next_period": predicted_next_period.isoformat()},
        )
        return row

    # -----------------------
    # Medication reminders
    # -----------------------

    def list_medication_reminders(self, user_id: str) -> list[MedicationReminder]:
        with get_session() as session:
            rows = (
                session.execute(
                    select(MedicationReminder)
                    .join(User, User.id == MedicationReminder.user_id)
                    .where(User.chat_id == user_id)
                    .order_by(MedicationReminder.created_at.asc())
                )
                .scalars()
                .all()
            )
        return list(rows)

    def upsert_medication_reminder(
        self,
        user_id: str,
        *,
        medication_name: str,
        dosage: str,
        schedule_time: str,
        days_of_week: str,
    ) -> MedicationReminder | None:
        """
        Create a reminder, or update the user's existing one with the same name.

        Names match case-insensitively and whitespace-trimmed; the stored spelling is the
        one the user typed last.
        """
        profile_id = self._profile_id(user_id)
        if profile_id is None:
            return None
        name = _text(medication_name)
        norm = name.casefold()
        with get_session() as session:
            rows = (
                session.execute(select(MedicationReminder).where(MedicationReminder.user_id == profile_id))
                .scalars()
                .all()
            )
            row = next((r for r in rows if (r.medication_name or "").strip().casefold() == norm), None)
            created = row is None
            if row is None:
                row = MedicationReminder(user_id=profile_id)
                session.add(row)
            row.medication_name = name
            row.dosage = _text(dosage)
            row.schedule_time = _text(schedule_time)
            row.days_of_week = _text(days_of_week)
            row.updated_at = datetime.utcnow()
            session.flush()
        self._audit(
            profile_id,
            event_type="medication_reminder_created" if created else "medication_reminder_updated",
            payload={"medication_reminder_id": row.id, "name": name},
        )
        return row

from __future__ import annotations

import logging
from collections.abc import Mapping

from aliya.services.openai_client import OpenAIChat, OpenAIClientError

logger = logging.getLogger("aliya-bot")

PROMPT_VERSION = "advisor_v1"

SYSTEM_PROMPT = (
    "You are Aliya, a health assistant providing information for educational purposes only. "
    "You are not a doctor: never give a definitive diagnosis, and always advise the user to consult "
    "a doctor for professional medical advice. Answer in plain text without markdown."
)

_ASSESSMENT_LABELS: tuple[tuple[str, str], ...] = (
    ("overall_health", "Overall Health"),
    ("fatigue_after_sleep", "Fatigue After Sleep"),
    ("fruit_veggie_servings", "Fruit/Veggie Servings"),
    ("sugary_drinks_snacks", "Sugary Drinks/Snacks"),
    ("exercise_days", "Exercise Days"),
    ("breaks_from_sitting", "Breaks from Sitting"),
    ("sleep_hours", "Sleep Hours"),
    ("wake_refreshed", "Wake Refreshed"),
    ("stress_anxiety", "Stress/Anxiety"),
    ("relaxation_techniques", "Relaxation Techniques"),
    ("chronic_conditions", "Chronic Conditions"),
    ("family_history", "Family History"),
    ("smoking_vaping", "Smoking/Vaping"),
    ("alcohol_drinks", "Alcohol Drinks"),
    ("headaches_body_aches", "Headaches/Body Aches"),
    ("weight_changes", "Weight Changes"),
)


class HealthAdvisor:
    """
    Text generation for analyses, plans and answers.

    Every method returns the generated text, or None when generation is unavailable or fails;
    failures are logged here and never raised to the caller.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str,
        timeout_s: float = 60.0,
        max_retries: int = 2,
    ) -> None:
        self._model = model
        self._chat = OpenAIChat(api_key=api_key or "", timeout_s=timeout_s, max_retries=max_retries)

    def _generate(self, purpose: str, prompt: str, *, max_tokens: int = 400) -> str | None:
        try:
            result = self._chat.chat_text(
                model=self._model,
                system=SYSTEM_PROMPT,
                user=prompt,
                max_tokens=max_tokens,
            )
        except OpenAIClientError:
            logger.exception("Text generation failed purpose=%s prompt_version=%s", purpose, PROMPT_VERSION)
            return None
        return result.content_text

    def analyze_symptoms(self, *, symptoms: str, severity: str, duration: str) -> str | None:
        prompt = (
            "Based on the following symptoms, severity and duration, list possible conditions, "
            "home care advice, and any red flags that require immediate medical attention.\n\n"
            f"Symptoms: {symptoms}\n"
            f"Severity: {severity}\n"
            f"Duration: {duration}\n\n"
            "Format your response as:\n"
            "Possible Conditions: ...\n"
            "Home Care: ...\n"
            "Red Flags: ..."
        )
        return self._generate("symptoms", prompt)

    def analyze_assessment(self, answers: Mapping[str, str], *, score: int, max_score: int) -> str | None:
        lines = "\n".join(f"- {label}: {answers.get(key, '')}" for key, label in _ASSESSMENT_LABELS)
        prompt = (
            "Based on the following answers and health score, give a brief analysis of the user's "
            "overall health and actionable recommendations to improve it.\n\n"
            f"User Data:\n{lines}\n"
            f"Health Score: {score}/{max_score}\n\n"
            "Format your response as:\n"
            "Analysis: ...\n"
            "Recommendations: ..."
        )
        return self._generate("assessment", prompt)

    def generate_fitness_plan(
        self,
        *,
        fitness_goal: str,
        activity_level: str,
        available_days: int,
        available_minutes: int,
    ) -> str | None:
        prompt = (
            "Create a weekly fitness plan tailored to the user's goal, activity level and availability. "
            "Advise the user to consult a doctor before starting any fitness program.\n\n"
            f"Fitness Goal: {fitness_goal}\n"
            f"Activity Level: {activity_level}\n"
            f"Available Days: {available_days}\n"
            f"Available Minutes per Session: {available_minutes}\n\n"
            "Format your response as:\n"
            f"Fitness Goal: {fitness_goal}\n"
            "Weekly Plan:\n"
            "- Day 1: activity, duration and details\n"
            "(continue for the available days, suggest rest days for the others)\n"
            "Notes: ..."
        )
        return self._generate("fitness_plan", prompt)

    def generate_meal_plan(self, *, dietary_preference: str, health_goal: str, meals_per_day: int) -> str | None:
        prompt = (
            "Create a daily meal plan tailored to the user's dietary preference, health goal and number "
            "of meals per day. Advise the user to consult a doctor or nutritionist before starting any diet.\n\n"
            f"Dietary Preference: {dietary_preference}\n"
            f"Health Goal: {health_goal}\n"
            f"Meals per Day: {meals_per_day}\n\n"
            "Format your response as:\n"
            "Daily Meal Plan:\n"
            "- Meal 1: details\n"
            "(continue for the number of meals per day)\n"
            "Notes: ..."
        )
        return self._generate("meal_plan", prompt)

    def answer_question(self, question: str) -> str | None:
        prompt = (
            "Answer the following general health question clearly and concisely.\n\n"
            f"Question: {question}\n\n"
            "Format your response as:\n"
            "Answer: ..."
        )
        return self._generate("question", prompt, max_tokens=300)

from __future__ import annotations

from typing import Literal

Lang = Literal["en"]

DEFAULT_LANG: Lang = "en"


STRINGS: dict[Lang, dict[str, str]] = {
    "en": {
        # Common / nav
        "common.unknown_input": "I didn't understand that. Please use a command like /start or /help to get started.",
        "common.error": "Sorry, something went wrong. Please try again or use /help for assistance.",
        "common.cancelled": "Operation cancelled. Send /start to begin again or /help for commands.",
        "common.nothing_to_cancel": "No operation to cancel. Send /start to begin or /help for commands.",
        "common.onboarding_required": "Please complete onboarding first. Send /start to begin.",
        # Start / terms
        "start.already_onboarded": "You've already completed onboarding! Use /help to see available commands.",
        "terms.accept_or_deny": "Please reply with accept or deny to continue.",
        "terms.denied": "Thank you for your time. If you change your mind, send /start to begin again. Goodbye!",
        # Onboarding
        "onboarding.name.prompt": "Please provide your name.",
        "onboarding.name.bad": "Name cannot be empty.",
        "onboarding.age.prompt": "Please provide your age (e.g., 25).",
        "onboarding.age.bad": "Please provide a valid age (1-120).",
        "onboarding.sex.prompt": "Please provide your sex (male, female, other).",
        "onboarding.sex.bad": "Please provide male, female, or other.",
        "onboarding.height.prompt": "Please provide your height in centimeters (e.g., 170).",
        "onboarding.height.bad": "Please provide a valid height (50-300 cm).",
        "onboarding.weight.prompt": "Please provide your weight in kilograms (e.g., 70).",
        "onboarding.weight.bad": "Please provide a valid weight (20-500 kg).",
        "onboarding.location.prompt": "Please provide your location (e.g., New York).",
        "onboarding.location.bad": "Location cannot be empty.",
        "onboarding.medical_history.prompt": 'Please provide a brief medical history (or type "none").',
        "onboarding.chronic_conditions.prompt": 'Please list any chronic conditions (or type "none").',
        "onboarding.allergies.prompt": 'Please list any allergies (or type "none").',
        "onboarding.medications.prompt": 'Please list any current medications (or type "none").',
        "onboarding.cycle_type.prompt": "Please specify your menstrual cycle type (regular, irregular, or none).",
        "onboarding.cycle_type.bad": "Please provide regular, irregular, or none.",
        "onboarding.done": (
            "Onboarding complete! Would you like to take a health assessment test now, later, or never? "
            "Reply with now, later, or never."
        ),
        "onboarding.save_failed": "Error saving your profile. Please try again with /start.",
        # Assessment choice after onboarding
        "assessment_choice.bad": "Please reply with now, later, or never.",
        "assessment_choice.later": "Alright, I'll remind you in 48 hours. You can also start anytime with /assessment.",
        "assessment_choice.never": "Got it. You can always start the assessment later with /assessment. Use /help for other commands.",
        # Diagnosis
        "diagnosis.symptoms.prompt": "Please describe your symptoms (e.g., fever, cough).",
        "diagnosis.symptoms.bad": "Symptoms cannot be empty.",
        "diagnosis.severity.prompt": "How severe are your symptoms? (mild, moderate, severe)",
        "diagnosis.severity.bad": "Please provide mild, moderate, or severe.",
        "diagnosis.duration.prompt": "How long have you had these symptoms? (e.g., 2 days, 1 week)",
        "diagnosis.duration.bad": "Duration cannot be empty.",
        "diagnosis.analysis_failed": "Sorry, I couldn't analyze your symptoms. Please try again or consult a doctor.",
        "diagnosis.save_failed": "Error saving diagnosis. Please try again or consult a doctor.",
        "diagnosis.result": (
            "Symptom Analysis Results\n\n"
            "{analysis}\n\n"
            "Please consult a doctor for a professional diagnosis and treatment.\n"
            "Use /diagnose to report new symptoms or /help for other commands."
        ),
        # Assessment
        "assessment.overall_health.prompt": "How would you rate your overall health? (excellent, good, fair, poor)",
        "assessment.fatigue_after_sleep.prompt": "Do you often feel fatigued even after adequate sleep? (often, sometimes, rarely, never)",
        "assessment.fruit_veggie_servings.prompt": "How many servings of fruits/vegetables do you eat daily? (e.g., 3)",
        "assessment.sugary_drinks_snacks.prompt": "Do you consume sugary drinks or snacks daily? (yes, no)",
        "assessment.exercise_days.prompt": "How many days per week do you exercise 30 minutes or more? (0-7)",
        "assessment.breaks_from_sitting.prompt": "Do you take breaks from sitting every hour? (yes, no)",
        "assessment.sleep_hours.prompt": "On average, how many hours do you sleep per night? (e.g., 7)",
        "assessment.wake_refreshed.prompt": "Do you wake up feeling refreshed most mornings? (often, sometimes, rarely, never)",
        "assessment.stress_anxiety.prompt": "How often do you feel stressed or anxious? (often, sometimes, rarely, never)",
        "assessment.relaxation_techniques.prompt": "Do you practice relaxation techniques? (yes, no)",
        "assessment.chronic_conditions.prompt": "Do you have any diagnosed chronic conditions? (yes, no)",
        "assessment.family_history.prompt": "Is there a family history of heart disease or diabetes? (yes, no)",
        "assessment.smoking_vaping.prompt": "Do you smoke or vape? (yes, no)",
        "assessment.alcohol_drinks.prompt": "How many alcoholic drinks do you have weekly? (e.g., 2)",
        "assessment.headaches_body_aches.prompt": "Do you experience frequent headaches or body aches? (often, sometimes, rarely, never)",
        "assessment.weight_changes.prompt": "Have you had unexplained weight changes in the past year? (yes, no)",
        "assessment.rating.bad": "Please provide excellent, good, fair, or poor.",
        "assessment.frequency.bad": "Please provide often, sometimes, rarely, or never.",
        "assessment.yes_no.bad": "Please provide yes or no.",
        "assessment.number.bad": "Please provide a valid number ({low}-{high}).",
        "assessment.analysis_failed": "Sorry, I couldn't analyze your health assessment. Please try again with /assessment.",
        "assessment.save_failed": "Error saving health assessment. Please try again with /assessment.",
        "assessment.result": (
            "Health Assessment Results\n\n"
            "Score: {score}/{max_score}\n\n"
            "{analysis}\n\n"
            "Please consult a doctor for personalized health advice.\n"
            "Use /assessment to take another test or /help for other commands."
        ),
        # Fitness
        "fitness.goal.prompt": "What is your fitness goal? (weight loss, muscle gain, general fitness)",
        "fitness.goal.bad": "Please provide weight loss, muscle gain, or general fitness.",
        "fitness.activity_level.prompt": "What is your current activity level? (beginner, intermediate, advanced)",
        "fitness.activity_level.bad": "Please provide beginner, intermediate, or advanced.",
        "fitness.days.prompt": "How many days per week can you exercise? (0-7)",
        "fitness.days.bad": "Please provide a valid number (0-7).",
        "fitness.minutes.prompt": "How many minutes can you exercise per session? (e.g., 30)",
        "fitness.minutes.bad": "Please provide a valid number (10-180 minutes).",
        "fitness.generate_failed": "Sorry, I couldn't generate your fitness plan. Please try again with /fitness.",
        "fitness.save_failed": "Error saving your fitness plan. Please try again with /fitness.",
        "fitness.result": (
            "Your Personalized Fitness Plan\n\n"
            "{plan}\n\n"
            "I'll remind you daily at 7:00 AM to follow this plan. "
            "Use /fitness to generate a new plan or /help for other commands."
        ),
        # Meal
        "meal.preference.prompt": "What is your dietary preference? (vegetarian, vegan, omnivore)",
        "meal.preference.bad": "Please provide vegetarian, vegan, or omnivore.",
        "meal.goal.prompt": "What is your health goal? (weight loss, muscle gain, general health)",
        "meal.goal.bad": "Please provide weight loss, muscle gain, or general health.",
        "meal.count.prompt": "How many meals do you want per day? (2-5)",
        "meal.count.bad": "Please provide a valid number (2-5).",
        "meal.generate_failed": "Sorry, I couldn't generate your meal plan. Please try again with /meal.",
        "meal.save_failed": "Error saving your meal plan. Please try again with /meal.",
        "meal.result": (
            "Your Personalized Meal Plan\n\n"
            "{plan}\n\n"
            "I'll remind you daily at 8:00 AM to follow this plan. "
            "Use /meal to generate a new plan or /help for other commands."
        ),
        # Cycle
        "cycle.ineligible": "This feature is only available for users with a menstrual cycle. Use /help for other commands.",
        "cycle.last_period.prompt": "When did your last period start? (YYYY-MM-DD, like 2025-04-01)",
        "cycle.last_period.bad": "Please provide a valid past date in YYYY-MM-DD format.",
        "cycle.length.prompt": "What is your average cycle length in days? (e.g., 28, typically 21-35)",
        "cycle.length.bad": "Please provide a valid number (21-35 days).",
        "cycle.existing": (
            "Your Menstrual Cycle Details\n\n"
            "- Last Period: {last_period}\n"
            "- Average Cycle Length: {cycle_length} days\n"
            "- Predicted Next Period: {predicted}\n\n"
            "Would you like to update your cycle details? Reply with yes to update or no to keep this data."
        ),
        "cycle.update_choice.bad": "Please reply with yes or no.",
        "cycle.update_choice.keep": "Got it. Your cycle data remains unchanged. Use /cycle to update later or /help for other commands.",
        "cycle.save_failed": "Error saving your cycle data. Please try again with /cycle.",
        "cycle.result": (
            "Menstrual Cycle Tracking\n\n"
            "- Last Period: {last_period}\n"
            "- Average Cycle Length: {cycle_length} days\n"
            "- Predicted Next Period: {predicted}\n\n"
            "I'll remind you 3 days before your predicted period. "
            "Use /cycle to update your details or /help for other commands."
        ),
        # Medication
        "medication.name.prompt": "What is the name of the medication? (e.g., Ibuprofen)",
        "medication.name.bad": "Medication name cannot be empty.",
        "medication.dosage.prompt": "What is the dosage? (e.g., 200 mg, 1 tablet)",
        "medication.dosage.bad": "Dosage cannot be empty.",
        "medication.time.prompt": "What time should I remind you to take it? (e.g., 08:00, in 24-hour format)",
        "medication.time.bad": "Please provide a valid time in HH:MM format (e.g., 08:00).",
        "medication.days.prompt": "Which days should I remind you? (e.g., Daily or Mon,Wed,Fri)",
        "medication.days.bad": 'Please provide "Daily" or days like Mon,Wed,Fri.',
        "medication.list.title": "Your Medication Reminders",
        "medication.list.row": "- {name}: {dosage} at {time} on {days}",
        "medication.list.add_or_update": "Would you like to add a new reminder or update an existing one? Reply with add or update.",
        "medication.choice.bad": "Please reply with add or update.",
        "medication.select.title": "Which medication would you like to update?",
        "medication.select.row": "{index}. {name}: {dosage} at {time} on {days}",
        "medication.select.hint": "Reply with the number of the medication to update (e.g., 1).",
        "medication.select.bad": "Please reply with a valid number from the list.",
        "medication.save_failed": "Error saving your medication reminder. Please try again with /medication.",
        "medication.result": (
            "Medication Reminder Set\n\n"
            "- Medication: {name}\n"
            "- Dosage: {dosage}\n"
            "- Time: {time}\n"
            "- Days: {days}\n\n"
            "I'll remind you as scheduled. Use /medication to add or update reminders, or /help for other commands."
        ),
        # Ask
        "ask.usage": "Please provide a health-related question after /ask (e.g., /ask What is a balanced diet?).",
        "ask.failed": "Sorry, I couldn't answer your question. Please try again or consult a healthcare professional.",
        "ask.result": (
            "Health Question Answer\n\n"
            "Question: {question}\n\n"
            "{answer}\n\n"
            "Please consult a doctor for personalized health advice.\n"
            "Use /ask to ask another question or /help for other commands."
        ),
        # Reminders
        "reminder.period": (
            "Reminder: Your next period is predicted to start on {predicted}. "
            "Prepare accordingly! Reply with /cycle to update your details."
        ),
        "reminder.medication": "Reminder: Time to take your {name} ({dosage})!",
        "reminder.fitness": "Reminder: Follow your fitness plan today! Goal: {goal}. Use /fitness to view or update your plan.",
        "reminder.meal": (
            "Reminder: Follow your meal plan today! Preference: {preference}, Goal: {goal}. "
            "Use /meal to view or update your plan."
        ),
        "reminder.assessment_nudge": "Reminder: Would you like to take your health assessment test now? Reply with /assessment to start.",
        "reminder.diagnosis_follow_up": (
            "Follow-up: How are your symptoms now? "
            "Reply with /diagnose to update or consult a doctor if symptoms persist."
        ),
    },
}


def t(key: str, *, lang: Lang = DEFAULT_LANG, **kwargs: object) -> str:
    """
    Look up a user-facing string and format it.

    Unknown keys fall back to the key itself so a missing string never breaks a reply.
    """
    text = STRINGS.get(lang, STRINGS[DEFAULT_LANG]).get(key) or STRINGS[DEFAULT_LANG].get(key) or key
    if kwargs:
        return text.format(**kwargs)
    return text

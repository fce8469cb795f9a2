INTRODUCTION_TEXT = (
    "Hello! I'm Aliya, your health assistant. I can help with symptom analysis, health assessments, "
    "fitness and meal plans, menstrual cycle tracking, medication reminders, and general health questions.\n\n"
    "Disclaimer: I am not a doctor. My advice is for informational purposes only and should not replace "
    "professional medical advice.\n\n"
    "Terms and Conditions:\n"
    "- I will collect and store your personal and health data (e.g., name, age, medical history) "
    "to provide personalized services.\n"
    "- Your data will be stored securely in a database and used only for health-related features.\n"
    "- You can stop using my services at any time, and your data will be handled per our privacy policy.\n\n"
    "Please reply with accept to agree to the terms and start onboarding, or deny to exit."
)

HELP_TEXT = (
    "Aliya Health Assistant - Available Commands\n\n"
    "/start - Begin the onboarding process (if not already completed)\n"
    "/diagnose - Analyze symptoms and get potential conditions (after onboarding)\n"
    "/assessment - Take a health assessment test (after onboarding)\n"
    "/fitness - Get a personalized fitness plan (after onboarding)\n"
    "/meal - Get a personalized meal plan (after onboarding)\n"
    "/cycle - Track or update your menstrual cycle (after onboarding, for applicable users)\n"
    "/medication - Set or update medication reminders (after onboarding)\n"
    "/ask - Ask general health-related questions (after onboarding)\n"
    "/help - Show this help menu\n"
    "/cancel - Cancel the current operation (e.g., onboarding, diagnosis)"
)

from __future__ import annotations

from datetime import date, timedelta

PRE_REMINDER_DAYS = 3


def predict_next_period(last_period: date, cycle_length: int) -> date:
    return last_period + timedelta(days=int(cycle_length))


def period_reminder_date(predicted: date) -> date:
    return predicted - timedelta(days=PRE_REMINDER_DAYS)

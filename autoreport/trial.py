from datetime import datetime, timedelta

TRIAL_DAYS = 10


def start_trial(now: datetime) -> tuple[datetime, datetime]:
    """Trial window opened at registration: (trial_start, trial_end)."""
    return now, now + timedelta(days=TRIAL_DAYS)


def is_trial_active(user, now: datetime) -> bool:
    return now <= user.trial_end


def days_left(user, now: datetime) -> int:
    delta = user.trial_end - now
    return max(delta.days, 0)

"""Monthly report scheduling worker."""

from .scheduler import next_month_start, previous_period, run_monthly_scheduler

__all__ = ["next_month_start", "previous_period", "run_monthly_scheduler"]

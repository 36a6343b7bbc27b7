"""Background tasks for FitCoach.

This package contains Celery tasks for:
- End-of-day workout summaries for trainers
- Alerts for sessions left unlogged the previous day
"""

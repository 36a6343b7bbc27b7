"""Central import of all domain models.

This file imports all models to ensure they are registered with SQLAlchemy's
metadata before any database operations (like creating tables).
"""

# Users domain
from src.domains.users.models import User, UserRole

# Workouts domain
from src.domains.workouts.models import (
    PlanExercise,
    PlanSession,
    TrainingLog,
    TrainingPlan,
)

# Notifications domain
from src.domains.notifications.models import Notification, NotificationType

__all__ = [
    # Users
    "User",
    "UserRole",
    # Workouts
    "TrainingPlan",
    "PlanSession",
    "PlanExercise",
    "TrainingLog",
    # Notifications
    "Notification",
    "NotificationType",
]

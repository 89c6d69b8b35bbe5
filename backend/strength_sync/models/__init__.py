"""Database models for StrengthSync."""

from strength_sync.models.user import User
from strength_sync.models.garmin import GarminActivity, GarminConnection
from strength_sync.models.workout_log import ExerciseLog, WorkoutLog

__all__ = [
    # User
    "User",
    # Garmin
    "GarminConnection",
    "GarminActivity",
    # Workout logs
    "WorkoutLog",
    "ExerciseLog",
]

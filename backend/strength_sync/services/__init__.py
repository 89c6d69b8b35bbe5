"""Service layer for StrengthSync.

Services hold the import pipeline: set extraction, reconciliation into
workout logs, and connection bookkeeping.
"""

from strength_sync.services.connection_store import ConnectionStore
from strength_sync.services.exercise_reconciler import ExerciseReconciler
from strength_sync.services.fit_set_extractor import extract_sets
from strength_sync.services.strength_import import StrengthImportService, WorkoutLogNotFoundError

__all__ = [
    "ConnectionStore",
    "ExerciseReconciler",
    "extract_sets",
    "StrengthImportService",
    "WorkoutLogNotFoundError",
]

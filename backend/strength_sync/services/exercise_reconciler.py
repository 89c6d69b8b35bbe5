"""Turn extracted sets into exercise-log rows.

Aggregation (``build_entries``) is pure; ``ExerciseReconciler`` adds the
persistence step. Rows are insert-only: each entry is written in its own
SAVEPOINT so one bad row is logged and skipped without losing the rest of
the batch.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from strength_sync.models.workout_log import ExerciseLog
from strength_sync.services.fit_set_extractor import ExtractedExercise

logger = logging.getLogger(__name__)

PROVENANCE_NOTE = "Synced from Garmin"

NO_EXERCISE_DATA_MESSAGE = (
    "No exercise data found in activity file. This may be a manually tracked "
    "activity without specific exercise information."
)


@dataclass
class ExerciseLogEntry:
    """Aggregated view of one exercise, ready to persist."""

    exercise_name: str
    sets_completed: int
    reps: list[int]
    weights: list[float]
    weight_kg: Optional[float]
    set_details: list[dict[str, Any]]
    notes: str = PROVENANCE_NOTE

    @property
    def reps_completed(self) -> str:
        return ", ".join(str(r) for r in self.reps)

    def to_model(self, workout_log_id: int, garmin_activity_id: Optional[str] = None) -> ExerciseLog:
        return ExerciseLog(
            workout_log_id=workout_log_id,
            exercise_name=self.exercise_name,
            sets_completed=self.sets_completed,
            reps_completed=self.reps_completed,
            weight_kg=self.weight_kg,
            set_details=self.set_details,
            notes=self.notes,
            garmin_activity_id=garmin_activity_id,
        )


@dataclass
class ReconcileResult:
    """Outcome of one reconcile call.

    ``entries`` always holds every computed entry; ``entries_created``
    counts only rows that were actually written.
    """

    entries_created: int = 0
    entries: list[ExerciseLogEntry] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    message: str = ""

    @property
    def persisted(self) -> bool:
        return self.entries_created > 0


def representative_weight(weights: list[float]) -> Optional[float]:
    """Heaviest set, or None for bodyweight-only exercises."""
    if not weights or not any(w > 0 for w in weights):
        return None
    return round(max(weights), 1)


def build_entry(exercise: ExtractedExercise) -> ExerciseLogEntry:
    set_details = [
        {"set": number, "reps": reps, "weight": weight}
        for number, (reps, weight) in enumerate(zip(exercise.reps, exercise.weights), start=1)
    ]
    return ExerciseLogEntry(
        exercise_name=exercise.name,
        sets_completed=len(set_details),
        reps=list(exercise.reps),
        weights=list(exercise.weights),
        weight_kg=representative_weight(exercise.weights),
        set_details=set_details,
    )


def build_entries(extracted: Mapping[str, ExtractedExercise]) -> list[ExerciseLogEntry]:
    """Aggregate every exercise that has at least one set, keeping order."""
    return [build_entry(exercise) for exercise in extracted.values() if exercise.reps]


class ExerciseReconciler:
    """Aggregates extracted sets and writes them to ``exercise_logs``."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def reconcile(
        self,
        extracted: Mapping[str, ExtractedExercise],
        workout_log_id: Optional[int] = None,
        garmin_activity_id: Optional[str] = None,
    ) -> ReconcileResult:
        """Aggregate and, when a workout log is given, persist.

        Args:
            extracted: Output of ``extract_sets``.
            workout_log_id: Target workout log. None means preview only.
            garmin_activity_id: Source activity, recorded on every row.

        Returns:
            ReconcileResult with the computed entries and the number of
            rows written.
        """
        entries = build_entries(extracted)
        result = ReconcileResult(entries=entries)

        if not entries:
            result.message = NO_EXERCISE_DATA_MESSAGE
            return result

        if workout_log_id is None:
            result.message = f"Found {len(entries)} exercises (preview, nothing saved)"
            return result

        for entry in entries:
            try:
                async with self.db.begin_nested():
                    self.db.add(entry.to_model(workout_log_id, garmin_activity_id))
                    await self.db.flush()
            except SQLAlchemyError as e:
                logger.error(f"Failed to create exercise_log for {entry.exercise_name!r}: {e}")
                result.failed.append(entry.exercise_name)
                continue
            result.entries_created += 1

        await self.db.commit()

        result.message = (
            f"Found {len(entries)} exercises, created {result.entries_created} exercise logs"
        )
        return result

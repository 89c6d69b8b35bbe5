"""Strength exercise import pipeline.

Fetches a Garmin activity file, scans it for strength sets and writes the
result into a workout log:

    connection lookup -> callback URL lookup -> fetch -> extract -> reconcile

Nothing is written before the final reconcile step, so a failed run can be
retried safely. Runs for the same (user, activity) pair are serialized
in-process; runs for different pairs are independent.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from strength_sync.adapters.garmin_wellness import (
    GarminAdapterError,
    GarminWellnessAdapter,
    NotConnectedError,
)
from strength_sync.core.oauth1 import CryptoUnavailableError
from strength_sync.models.garmin import GarminActivity
from strength_sync.models.workout_log import ExerciseLog, WorkoutLog
from strength_sync.observability import get_metrics_backend
from strength_sync.services.connection_store import ConnectionStore
from strength_sync.services.exercise_reconciler import ExerciseReconciler
from strength_sync.services.fit_set_extractor import ExtractedExercise, extract_sets

logger = logging.getLogger(__name__)


class WorkoutLogNotFoundError(Exception):
    """The target workout log does not exist or belongs to another user."""

    pass


@dataclass
class StrengthImportResult:
    """Outcome of one import, shaped for the HTTP response."""

    success: bool
    exercises_created: int
    exercises: list[ExtractedExercise] = field(default_factory=list)
    message: str = ""
    already_imported: bool = False
    failed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "exercisesCreated": self.exercises_created,
            "exercises": [e.to_dict() for e in self.exercises],
            "message": self.message,
        }


# (user_id, activity_id) -> lock, plus how many runs currently hold or wait on it
_import_locks: dict[tuple[int, str], asyncio.Lock] = {}
_import_lock_users: dict[tuple[int, str], int] = {}


@asynccontextmanager
async def import_lock(user_id: int, activity_id: str) -> AsyncIterator[None]:
    """Serialize imports of one activity for one user."""
    key = (user_id, activity_id)
    lock = _import_locks.setdefault(key, asyncio.Lock())
    _import_lock_users[key] = _import_lock_users.get(key, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _import_lock_users[key] -= 1
        if _import_lock_users[key] == 0:
            del _import_lock_users[key]
            del _import_locks[key]


class StrengthImportService:
    """Runs the fetch, extract and reconcile pipeline for one user."""

    def __init__(
        self,
        db: AsyncSession,
        adapter: Optional[GarminWellnessAdapter] = None,
    ):
        self.db = db
        self.adapter = adapter or GarminWellnessAdapter()
        self.connections = ConnectionStore(db)
        self.metrics = get_metrics_backend()

    async def import_activity(
        self,
        user_id: int,
        activity_id: str,
        workout_log_id: Optional[int] = None,
        force: bool = False,
    ) -> StrengthImportResult:
        """Import strength sets from one Garmin activity.

        Args:
            user_id: Owner of the connection and the workout log.
            activity_id: Garmin activity id.
            workout_log_id: Log to attach rows to. None previews without saving.
            force: Import again even if this activity was already imported
                into the workout log.

        Returns:
            StrengthImportResult. Zero exercises found is still a success.

        Raises:
            NotConnectedError: No active Garmin connection.
            WorkoutLogNotFoundError: Unknown workout log for this user.
            FileUnavailableError: The activity file could not be fetched.
            GarminConfigError: Consumer credentials missing for signing.
            CryptoUnavailableError: The request could not be signed.
        """
        start_time = time.perf_counter()
        outcome = "error"
        result: Optional[StrengthImportResult] = None

        try:
            async with import_lock(user_id, activity_id):
                result = await self._run(user_id, activity_id, workout_log_id, force)
            outcome = self._outcome(result, workout_log_id)
            return result
        except CryptoUnavailableError:
            logger.error(
                f"Refusing to fetch activity {activity_id} unsigned: HMAC-SHA1 unavailable"
            )
            raise
        except (GarminAdapterError, WorkoutLogNotFoundError) as e:
            logger.warning(f"Strength import failed for activity {activity_id}: {e}")
            raise
        finally:
            self.metrics.observe_import(
                outcome,
                (time.perf_counter() - start_time) * 1000,
                exercises_found=len(result.exercises) if result else 0,
                exercises_created=result.exercises_created if result else 0,
            )

    async def _run(
        self,
        user_id: int,
        activity_id: str,
        workout_log_id: Optional[int],
        force: bool,
    ) -> StrengthImportResult:
        connection = await self.connections.get_active(user_id)
        if connection is None:
            raise NotConnectedError("Garmin not connected")

        if workout_log_id is not None:
            await self._get_workout_log(user_id, workout_log_id)
            if not force and await self._already_imported(workout_log_id, activity_id):
                logger.info(
                    f"Activity {activity_id} already imported into workout log {workout_log_id}"
                )
                return StrengthImportResult(
                    success=True,
                    exercises_created=0,
                    message=(
                        "This activity has already been imported into this workout log. "
                        "Pass force=true to import it again."
                    ),
                    already_imported=True,
                )

        callback_url = await self._get_callback_url(user_id, activity_id)
        content = await self.adapter.fetch_activity_file(activity_id, connection, callback_url)

        # Run the synchronous byte scan in the thread pool
        loop = asyncio.get_running_loop()
        extracted = await loop.run_in_executor(None, extract_sets, content)
        reconciled = await ExerciseReconciler(self.db).reconcile(
            extracted,
            workout_log_id=workout_log_id,
            garmin_activity_id=activity_id,
        )
        await self.connections.mark_synced(connection)

        logger.info(
            f"Imported activity {activity_id} for user {user_id}: "
            f"{len(reconciled.entries)} exercises, {reconciled.entries_created} rows created"
        )

        return StrengthImportResult(
            success=True,
            exercises_created=reconciled.entries_created,
            exercises=[e for e in extracted.values() if e.reps],
            message=reconciled.message,
            failed=reconciled.failed,
        )

    async def _get_workout_log(self, user_id: int, workout_log_id: int) -> WorkoutLog:
        result = await self.db.execute(
            select(WorkoutLog).where(
                and_(
                    WorkoutLog.id == workout_log_id,
                    WorkoutLog.user_id == user_id,
                )
            )
        )
        workout_log = result.scalar_one_or_none()
        if workout_log is None:
            raise WorkoutLogNotFoundError(f"Workout log {workout_log_id} not found")
        return workout_log

    async def _already_imported(self, workout_log_id: int, activity_id: str) -> bool:
        result = await self.db.execute(
            select(func.count(ExerciseLog.id)).where(
                and_(
                    ExerciseLog.workout_log_id == workout_log_id,
                    ExerciseLog.garmin_activity_id == activity_id,
                )
            )
        )
        return result.scalar_one() > 0

    async def _get_callback_url(self, user_id: int, activity_id: str) -> Optional[str]:
        result = await self.db.execute(
            select(GarminActivity).where(
                and_(
                    GarminActivity.user_id == user_id,
                    GarminActivity.garmin_activity_id == activity_id,
                )
            )
        )
        activity = result.scalar_one_or_none()
        return activity.file_callback_url if activity else None

    @staticmethod
    def _outcome(result: StrengthImportResult, workout_log_id: Optional[int]) -> str:
        if result.already_imported:
            return "already_imported"
        if not result.exercises:
            return "no_data"
        if workout_log_id is None:
            return "preview"
        return "imported"

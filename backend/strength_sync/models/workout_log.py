"""Workout log models."""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from strength_sync.models.base import BaseModel

if TYPE_CHECKING:
    from strength_sync.models.user import User


class WorkoutLog(BaseModel):
    """A completed workout. Created by the surrounding application."""

    __tablename__ = "workout_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    workout_name: Mapped[str] = mapped_column(String(200))
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="workout_logs")
    exercise_logs: Mapped[list["ExerciseLog"]] = relationship(
        "ExerciseLog",
        back_populates="workout_log",
        cascade="all, delete-orphan",
        order_by="ExerciseLog.id",
    )

    def __repr__(self) -> str:
        return f"<WorkoutLog(id={self.id}, name={self.workout_name})>"


class ExerciseLog(BaseModel):
    """One exercise within a workout log.

    Rows imported from a device carry the source ``garmin_activity_id`` so a
    repeated import of the same activity can be detected.
    """

    __tablename__ = "exercise_logs"
    __table_args__ = (
        Index("ix_exercise_logs_workout_activity", "workout_log_id", "garmin_activity_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    workout_log_id: Mapped[int] = mapped_column(
        ForeignKey("workout_logs.id", ondelete="CASCADE"),
        index=True,
    )

    exercise_name: Mapped[str] = mapped_column(String(100))
    sets_completed: Mapped[int] = mapped_column(Integer, default=0)
    reps_completed: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)  # "5, 5, 3"
    weight_kg: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # [{"set": 1, "reps": 5, "weight": 60.0}, ...]
    set_details: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSONB, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    garmin_activity_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Relationship
    workout_log: Mapped["WorkoutLog"] = relationship("WorkoutLog", back_populates="exercise_logs")

    def __repr__(self) -> str:
        return f"<ExerciseLog(id={self.id}, name={self.exercise_name})>"

"""User model."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from strength_sync.models.base import BaseModel

if TYPE_CHECKING:
    from strength_sync.models.garmin import GarminActivity, GarminConnection
    from strength_sync.models.workout_log import WorkoutLog


class User(BaseModel):
    """Account that owns Garmin connections and workout logs."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    garmin_connections: Mapped[list["GarminConnection"]] = relationship(
        "GarminConnection",
        back_populates="user",
    )
    garmin_activities: Mapped[list["GarminActivity"]] = relationship(
        "GarminActivity",
        back_populates="user",
    )
    workout_logs: Mapped[list["WorkoutLog"]] = relationship(
        "WorkoutLog",
        back_populates="user",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"

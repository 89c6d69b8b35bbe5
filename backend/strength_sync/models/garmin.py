"""Garmin-related models."""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from strength_sync.models.base import BaseModel

if TYPE_CHECKING:
    from strength_sync.models.user import User


class GarminConnection(BaseModel):
    """A user's delegated-access link to the Garmin Health API.

    Rows are created by the OAuth handshake and deactivated, never deleted,
    when the user or Garmin revokes access so sync history is preserved.
    At most one row per user is active at a time.
    """

    __tablename__ = "garmin_connections"
    __table_args__ = (
        Index(
            "uq_garmin_connections_user_active",
            "user_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    garmin_user_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # OAuth 1.0a user token pair
    access_token: Mapped[str] = mapped_column(Text, index=True)
    token_secret: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_sync_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationship
    user: Mapped["User"] = relationship("User", back_populates="garmin_connections")

    def __repr__(self) -> str:
        return f"<GarminConnection(user_id={self.user_id}, active={self.is_active})>"


class GarminActivity(BaseModel):
    """Activity summary pushed by Garmin.

    ``raw_data`` keeps the vendor payload; the activity-files webhook adds
    ``file_callback_url`` and ``files_available`` to it.
    """

    __tablename__ = "garmin_activities"
    __table_args__ = (
        UniqueConstraint("user_id", "garmin_activity_id", name="uq_garmin_activity_user_activity"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    garmin_activity_id: Mapped[str] = mapped_column(String(64), index=True)
    activity_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    raw_data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB, nullable=True)

    # Relationship
    user: Mapped["User"] = relationship("User", back_populates="garmin_activities")

    @property
    def file_callback_url(self) -> Optional[str]:
        if not self.raw_data:
            return None
        return self.raw_data.get("file_callback_url")

    def __repr__(self) -> str:
        return f"<GarminActivity(user_id={self.user_id}, garmin_activity_id={self.garmin_activity_id})>"

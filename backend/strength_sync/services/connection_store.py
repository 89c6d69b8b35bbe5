"""Read/write access to users' Garmin connections."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from strength_sync.models.garmin import GarminConnection

logger = logging.getLogger(__name__)


class ConnectionStore:
    """Accessor for ``garmin_connections``.

    Connections are never deleted here; revocation flips ``is_active`` so
    the row and its ``last_sync_at`` survive.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_active(self, user_id: int) -> Optional[GarminConnection]:
        """Return the user's active connection, if any."""
        result = await self.db.execute(
            select(GarminConnection).where(
                and_(
                    GarminConnection.user_id == user_id,
                    GarminConnection.is_active.is_(True),
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_by_access_token(self, access_token: str) -> Optional[GarminConnection]:
        """Find the active connection Garmin refers to by its user token."""
        result = await self.db.execute(
            select(GarminConnection).where(
                and_(
                    GarminConnection.access_token == access_token,
                    GarminConnection.is_active.is_(True),
                )
            )
        )
        return result.scalars().first()

    async def upsert_active(
        self,
        user_id: int,
        access_token: str,
        token_secret: Optional[str],
        garmin_user_id: Optional[str] = None,
    ) -> GarminConnection:
        """Store a freshly authorized token pair as the user's only active connection."""
        await self.db.execute(
            update(GarminConnection)
            .where(
                and_(
                    GarminConnection.user_id == user_id,
                    GarminConnection.is_active.is_(True),
                )
            )
            .values(is_active=False)
        )

        connection = GarminConnection(
            user_id=user_id,
            access_token=access_token,
            token_secret=token_secret,
            garmin_user_id=garmin_user_id,
            is_active=True,
        )
        self.db.add(connection)
        await self.db.commit()
        await self.db.refresh(connection)
        return connection

    async def deactivate(self, connection: GarminConnection) -> None:
        connection.is_active = False
        await self.db.commit()
        logger.info(f"Deactivated Garmin connection for user {connection.user_id}")

    async def mark_synced(
        self,
        connection: GarminConnection,
        synced_at: Optional[datetime] = None,
    ) -> None:
        connection.last_sync_at = synced_at or datetime.now(timezone.utc)
        await self.db.commit()

"""Webhook endpoints for Garmin Health API push notifications.

Garmin expects a quick 200 for every notification, so failures are logged
and acknowledged rather than surfaced. Paths:
  /api/v1/webhooks/garmin/activity-files
  /api/v1/webhooks/garmin/deregistrations
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from strength_sync.core.database import get_db
from strength_sync.models.garmin import GarminActivity
from strength_sync.services.connection_store import ConnectionStore

logger = logging.getLogger(__name__)

router = APIRouter()


# ======================
# Activity files
# ======================

@router.post("/garmin/activity-files")
async def handle_activity_files(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """Record file callback URLs announced by Garmin.

    Payload::

        {"activityFiles": [{"userAccessToken": ..., "activityId": ..., "callbackURL": ...}]}
    """
    try:
        payload = await request.json()
        entries = payload.get("activityFiles") or []
        logger.info(f"Received Garmin activity-files notification with {len(entries)} entries")

        store = ConnectionStore(db)
        recorded = 0
        for entry in entries:
            if await _record_activity_file(db, store, entry):
                recorded += 1

        logger.info(f"Recorded {recorded} activity file callback URLs")
    except Exception as e:
        logger.error(f"Error processing Garmin activity-files notification: {e}")
        await db.rollback()

    return {"success": True}


async def _record_activity_file(
    db: AsyncSession,
    store: ConnectionStore,
    entry: Dict[str, Any],
) -> bool:
    access_token = entry.get("userAccessToken")
    activity_id = entry.get("activityId")
    callback_url = entry.get("callbackURL")
    if not access_token or activity_id is None or not callback_url:
        return False

    activity_id = str(activity_id)
    connection = await store.get_by_access_token(access_token)
    if connection is None:
        logger.debug(f"No active connection for activity file {activity_id}")
        return False

    result = await db.execute(
        select(GarminActivity).where(
            and_(
                GarminActivity.user_id == connection.user_id,
                GarminActivity.garmin_activity_id == activity_id,
            )
        )
    )
    activity = result.scalar_one_or_none()
    if activity is None:
        activity = GarminActivity(
            user_id=connection.user_id,
            garmin_activity_id=activity_id,
            raw_data={},
        )
        db.add(activity)

    # Reassign so the JSON column is flagged dirty
    activity.raw_data = {
        **(activity.raw_data or {}),
        "file_callback_url": callback_url,
        "files_available": True,
    }
    await db.commit()
    return True


# ======================
# Deregistrations
# ======================

@router.post("/garmin/deregistrations")
async def handle_deregistrations(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """Deactivate connections whose tokens Garmin revoked.

    Accepts ``{"deregistrations": [{"userAccessToken": ...}]}`` or a bare
    ``{"userAccessTokens": [...]}`` list.
    """
    try:
        payload = await request.json()
        entries = payload.get("deregistrations") or payload.get("userAccessTokens") or []

        store = ConnectionStore(db)
        for entry in entries:
            access_token = entry.get("userAccessToken") if isinstance(entry, dict) else entry
            if not access_token:
                continue

            connection = await store.get_by_access_token(access_token)
            if connection is not None:
                await store.deactivate(connection)
    except Exception as e:
        logger.error(f"Error processing Garmin deregistration notification: {e}")
        await db.rollback()

    return {"success": True}

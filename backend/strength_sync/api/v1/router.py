"""API v1 router aggregating all endpoint routers.

Authentication:
  /api/v1/auth/login, /logout, /me

Garmin strength import:
  /api/v1/garmin/strength-exercises, /status, /connection

Garmin push notifications:
  /api/v1/webhooks/garmin/activity-files, /deregistrations
"""

from fastapi import APIRouter

from strength_sync.api.v1.endpoints import auth, garmin, webhooks

api_router = APIRouter()

# -------------------------------------------------------------------------
# Authentication
# -------------------------------------------------------------------------
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# -------------------------------------------------------------------------
# Garmin strength import
# -------------------------------------------------------------------------
api_router.include_router(garmin.router, prefix="/garmin", tags=["garmin"])

# -------------------------------------------------------------------------
# Webhooks (no session auth; Garmin calls these directly)
# -------------------------------------------------------------------------
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])

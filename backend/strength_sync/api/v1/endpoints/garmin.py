"""Garmin strength import endpoints.

Paths:
  /api/v1/garmin/strength-exercises  (POST)
  /api/v1/garmin/status              (GET)
  /api/v1/garmin/connection          (DELETE)
"""

from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from strength_sync.adapters.garmin_wellness import (
    FileUnavailableError,
    GarminConfigError,
    GarminWellnessAdapter,
    NotConnectedError,
)
from strength_sync.api.v1.endpoints.auth import get_current_user
from strength_sync.core.database import get_db
from strength_sync.core.oauth1 import CryptoUnavailableError
from strength_sync.models.user import User
from strength_sync.services.connection_store import ConnectionStore
from strength_sync.services.strength_import import (
    StrengthImportService,
    WorkoutLogNotFoundError,
)

router = APIRouter()


# -------------------------------------------------------------------------
# Request/Response Models
# -------------------------------------------------------------------------


class StrengthImportRequest(BaseModel):
    """Body of a strength import call."""

    model_config = ConfigDict(populate_by_name=True)

    activity_id: str = Field(..., alias="activityId", min_length=1)
    workout_log_id: Optional[int] = Field(None, alias="workoutLogId")
    force: bool = False


class ImportedExercise(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    exercise_name: str = Field(..., alias="exerciseName")
    sets: int
    reps: list[int]
    weight: list[float]


class StrengthImportResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    exercises_created: int = Field(..., alias="exercisesCreated")
    exercises: list[ImportedExercise]
    message: str


class GarminStatusResponse(BaseModel):
    connected: bool
    garmin_user_id: Optional[str] = None
    last_sync: Optional[datetime] = None


# -------------------------------------------------------------------------
# Dependencies
# -------------------------------------------------------------------------


def get_garmin_adapter() -> GarminWellnessAdapter:
    return GarminWellnessAdapter()


# -------------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------------


@router.post("/strength-exercises", response_model=StrengthImportResponse)
async def import_strength_exercises(
    request: StrengthImportRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    adapter: GarminWellnessAdapter = Depends(get_garmin_adapter),
) -> StrengthImportResponse:
    """Import strength sets from a Garmin activity file.

    Without ``workoutLogId`` the exercises found are returned but nothing is
    saved. An activity with no strength sets is a successful import with
    zero exercises.
    """
    service = StrengthImportService(db, adapter=adapter)

    try:
        result = await service.import_activity(
            current_user.id,
            request.activity_id,
            workout_log_id=request.workout_log_id,
            force=request.force,
        )
    except NotConnectedError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Garmin not connected",
        )
    except FileUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except WorkoutLogNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Workout log not found",
        )
    except GarminConfigError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Garmin API credentials not configured",
        )
    except CryptoUnavailableError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not sign request to Garmin",
        )

    return StrengthImportResponse.model_validate(result.to_dict())


@router.get("/status", response_model=GarminStatusResponse)
async def get_garmin_status(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> GarminStatusResponse:
    connection = await ConnectionStore(db).get_active(current_user.id)
    if connection is None:
        return GarminStatusResponse(connected=False)

    return GarminStatusResponse(
        connected=True,
        garmin_user_id=connection.garmin_user_id,
        last_sync=connection.last_sync_at,
    )


@router.delete("/connection")
async def disconnect_garmin(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> dict[str, str]:
    """Deactivate the user's Garmin connection. Imported rows are kept."""
    store = ConnectionStore(db)
    connection = await store.get_active(current_user.id)
    if connection is None:
        return {"message": "Garmin account not connected"}

    await store.deactivate(connection)
    return {"message": "Garmin account disconnected"}

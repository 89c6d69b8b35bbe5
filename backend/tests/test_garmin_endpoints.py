"""Tests for the Garmin strength import endpoints."""

import httpx
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from strength_sync.models.garmin import GarminConnection
from strength_sync.models.workout_log import ExerciseLog, WorkoutLog

IMPORT_URL = "/api/v1/garmin/strength-exercises"


class TestStrengthExercisesEndpoint:
    """Tests for POST /garmin/strength-exercises."""

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.post(IMPORT_URL, json={"activityId": "12345"})

        assert response.status_code == 401

    async def test_requires_activity_id(self, auth_client: AsyncClient):
        response = await auth_client.post(IMPORT_URL, json={})

        assert response.status_code == 422

    async def test_import_into_workout_log(
        self,
        auth_client: AsyncClient,
        db_session: AsyncSession,
        garmin_connection: GarminConnection,
        workout_log: WorkoutLog,
        bench_press_file: bytes,
        make_adapter,
        override_adapter,
    ):
        override_adapter(make_adapter(lambda request: httpx.Response(200, content=bench_press_file)))

        response = await auth_client.post(
            IMPORT_URL,
            json={"activityId": "12345", "workoutLogId": workout_log.id},
        )

        assert response.status_code == 200
        data = response.json()
        assert data == {
            "success": True,
            "exercisesCreated": 1,
            "exercises": [
                {"exerciseName": "Bench Press", "sets": 1, "reps": [8], "weight": [70.5]},
            ],
            "message": "Found 1 exercises, created 1 exercise logs",
        }

        rows = (await db_session.execute(select(ExerciseLog))).scalars().all()
        assert [r.exercise_name for r in rows] == ["Bench Press"]

    async def test_preview(
        self,
        auth_client: AsyncClient,
        garmin_connection: GarminConnection,
        bench_press_file: bytes,
        make_adapter,
        override_adapter,
    ):
        override_adapter(make_adapter(lambda request: httpx.Response(200, content=bench_press_file)))

        response = await auth_client.post(IMPORT_URL, json={"activityId": "12345"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["exercisesCreated"] == 0
        assert data["exercises"][0]["exerciseName"] == "Bench Press"

    async def test_activity_without_strength_data(
        self,
        auth_client: AsyncClient,
        garmin_connection: GarminConnection,
        workout_log: WorkoutLog,
        make_adapter,
        override_adapter,
    ):
        override_adapter(make_adapter(lambda request: httpx.Response(200, content=bytes(64))))

        response = await auth_client.post(
            IMPORT_URL,
            json={"activityId": "12345", "workoutLogId": workout_log.id},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["exercisesCreated"] == 0
        assert data["exercises"] == []
        assert "No exercise data found" in data["message"]

    async def test_not_connected(self, auth_client: AsyncClient, make_adapter, override_adapter):
        override_adapter(make_adapter(lambda request: httpx.Response(200)))

        response = await auth_client.post(IMPORT_URL, json={"activityId": "12345"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Garmin not connected"

    async def test_file_unavailable(
        self,
        auth_client: AsyncClient,
        garmin_connection: GarminConnection,
        make_adapter,
        override_adapter,
    ):
        override_adapter(make_adapter(lambda request: httpx.Response(503)))

        response = await auth_client.post(IMPORT_URL, json={"activityId": "12345"})

        assert response.status_code == 400
        assert "Could not fetch activity file" in response.json()["detail"]

    async def test_unknown_workout_log(
        self,
        auth_client: AsyncClient,
        garmin_connection: GarminConnection,
        make_adapter,
        override_adapter,
    ):
        override_adapter(make_adapter(lambda request: httpx.Response(200)))

        response = await auth_client.post(
            IMPORT_URL,
            json={"activityId": "12345", "workoutLogId": 9999},
        )

        assert response.status_code == 404

    async def test_missing_consumer_credentials(
        self,
        auth_client: AsyncClient,
        garmin_connection: GarminConnection,
        make_adapter,
        override_adapter,
    ):
        adapter = make_adapter(lambda request: httpx.Response(200), garmin_auth_scheme="oauth1")
        adapter.settings.garmin_consumer_key = None
        override_adapter(adapter)

        response = await auth_client.post(IMPORT_URL, json={"activityId": "12345"})

        assert response.status_code == 500

    async def test_crypto_unavailable(
        self,
        auth_client: AsyncClient,
        garmin_connection: GarminConnection,
        make_adapter,
        override_adapter,
        monkeypatch,
    ):
        def broken_hmac(*args, **kwargs):
            raise ValueError("sha1 disabled")

        monkeypatch.setattr("strength_sync.core.oauth1.hmac.new", broken_hmac)
        override_adapter(make_adapter(lambda request: httpx.Response(200), garmin_auth_scheme="oauth1"))

        response = await auth_client.post(IMPORT_URL, json={"activityId": "12345"})

        assert response.status_code == 500


class TestGarminConnectionEndpoints:
    async def test_status_not_connected(self, auth_client: AsyncClient):
        response = await auth_client.get("/api/v1/garmin/status")

        assert response.status_code == 200
        assert response.json()["connected"] is False

    async def test_status_connected(
        self,
        auth_client: AsyncClient,
        garmin_connection: GarminConnection,
    ):
        response = await auth_client.get("/api/v1/garmin/status")

        assert response.status_code == 200
        data = response.json()
        assert data["connected"] is True
        assert data["garmin_user_id"] == "garmin-user-1"
        assert data["last_sync"] is None

    async def test_disconnect_deactivates(
        self,
        auth_client: AsyncClient,
        db_session: AsyncSession,
        garmin_connection: GarminConnection,
    ):
        response = await auth_client.delete("/api/v1/garmin/connection")

        assert response.status_code == 200
        assert response.json()["message"] == "Garmin account disconnected"

        result = await db_session.execute(
            select(GarminConnection).where(GarminConnection.id == garmin_connection.id)
        )
        assert result.scalar_one().is_active is False

    async def test_status_requires_authentication(self, client: AsyncClient):
        response = await client.get("/api/v1/garmin/status")

        assert response.status_code == 401

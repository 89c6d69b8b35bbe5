"""Garmin Health (Wellness) API adapter for activity file downloads.

Activity files are fetched either from the callback URL Garmin pushed with
an activity-files notification, or from the generic ``activityFile``
endpoint as a fallback. Requests carry either a bearer token or a signed
OAuth 1.0a header, depending on ``GARMIN_AUTH_SCHEME``.

No retries happen here. A ``FileUnavailableError`` is safe to retry later
because nothing has been written yet when it is raised.
"""

import logging
import time
from typing import Optional
from urllib.parse import quote

import httpx

from strength_sync.core import oauth1
from strength_sync.core.config import Settings, get_settings
from strength_sync.models.garmin import GarminConnection
from strength_sync.observability import get_metrics_backend

logger = logging.getLogger(__name__)

PROVIDER = "garmin"


class GarminAdapterError(Exception):
    """Base exception for Garmin adapter errors."""

    pass


class NotConnectedError(GarminAdapterError):
    """The user has no active Garmin connection; re-authorization is needed."""

    pass


class FileUnavailableError(GarminAdapterError):
    """The activity file could not be downloaded. Retryable."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GarminConfigError(GarminAdapterError):
    """Garmin API credentials are missing from the configuration."""

    pass


class GarminWellnessAdapter:
    """Downloads raw activity files on behalf of a connected user."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            settings: Settings override, defaults to the cached app settings.
            client: Shared HTTP client. When omitted a short-lived client is
                created per request.
        """
        self.settings = settings or get_settings()
        self._client = client
        self.metrics = get_metrics_backend()

    def activity_file_url(self, activity_id: str) -> str:
        base = self.settings.garmin_wellness_api_url.rstrip("/")
        return f"{base}/activityFile?activityId={quote(activity_id, safe='')}"

    def authorization_header(self, method: str, url: str, connection: GarminConnection) -> str:
        """Credential for one outbound request.

        Raises:
            GarminConfigError: OAuth 1.0a requested without consumer credentials.
            oauth1.CryptoUnavailableError: If the request cannot be signed.
        """
        if self.settings.garmin_auth_scheme != "oauth1":
            return f"Bearer {connection.access_token}"

        if not self.settings.garmin_consumer_key or not self.settings.garmin_consumer_secret:
            raise GarminConfigError("Garmin API credentials not configured")

        return oauth1.build_authorization_header(
            method,
            url,
            consumer_key=self.settings.garmin_consumer_key,
            consumer_secret=self.settings.garmin_consumer_secret,
            access_token=connection.access_token,
            token_secret=connection.token_secret or "",
        )

    async def fetch_activity_file(
        self,
        activity_id: str,
        connection: Optional[GarminConnection],
        callback_url: Optional[str] = None,
    ) -> bytes:
        """Download the raw activity file.

        Args:
            activity_id: Garmin activity id.
            connection: The user's connection; must be active.
            callback_url: URL from an earlier activity-files notification.

        Returns:
            The file bytes.

        Raises:
            NotConnectedError: No active connection. Raised before any I/O.
            FileUnavailableError: Transport error, timeout or non-2xx status.
        """
        if connection is None or not connection.is_active:
            raise NotConnectedError("Garmin not connected")

        url = callback_url or self.activity_file_url(activity_id)
        operation = "callback_file" if callback_url else "activity_file"
        headers = {"Authorization": self.authorization_header("GET", url, connection)}

        logger.info(f"Fetching activity file for activity {activity_id} via {operation}")

        start_time = time.perf_counter()
        status_code = 0
        try:
            response = await self._get(url, headers)
            status_code = response.status_code
        except httpx.TimeoutException as e:
            logger.warning(f"Timed out fetching activity file {activity_id}: {e}")
            self.metrics.observe_file_download(0, success=False)
            raise FileUnavailableError("Timed out fetching activity file from Garmin") from e
        except httpx.HTTPError as e:
            logger.warning(f"Transport error fetching activity file {activity_id}: {e}")
            self.metrics.observe_file_download(0, success=False)
            raise FileUnavailableError("Could not reach Garmin to fetch activity file") from e
        finally:
            self.metrics.observe_external_api(
                PROVIDER,
                operation,
                status_code,
                (time.perf_counter() - start_time) * 1000,
            )

        if not response.is_success:
            logger.error(
                f"Failed to fetch activity file {activity_id}: "
                f"{response.status_code} {response.content[:200].decode(errors='replace')}"
            )
            self.metrics.observe_file_download(0, success=False)
            raise FileUnavailableError(
                f"Could not fetch activity file from Garmin (status {response.status_code})",
                status_code=response.status_code,
            )

        content = response.content
        self.metrics.observe_file_download(len(content), success=True)
        return content

    async def _get(self, url: str, headers: dict[str, str]) -> httpx.Response:
        timeout = self.settings.garmin_http_timeout_seconds
        if self._client is not None:
            return await self._client.get(url, headers=headers, timeout=timeout)

        async with httpx.AsyncClient(follow_redirects=True) as client:
            return await client.get(url, headers=headers, timeout=timeout)

"""
Google Calendar Service
Creates Google Calendar events with a Google Meet link for confirmed bookings
"""
import logging
import time
import uuid
from datetime import datetime
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from ..errors import ProviderError
from .meeting_adapter import MeetingAdapter

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105 - OAuth endpoint URL
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/gmail.send",
]

# Refresh this many seconds before the access token actually expires
EXPIRY_MARGIN_SECONDS = 300


class GoogleMeetAdapter(MeetingAdapter):
    """
    Google Calendar + Meet over the REST API.

    Holds one OAuth token set for the clinic account. Tokens use Google's
    token-response shape plus "expiry_date" (epoch milliseconds), which is
    what /oauth2callback prints for GOOGLE_TOKEN.
    """

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        redirect_uri: Optional[str],
        tokens: Optional[dict[str, Any]] = None,
        calendar_id: str = "primary",
        timezone: str = "America/Santiago",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.calendar_id = calendar_id
        self.timezone = timezone
        self._tokens: dict[str, Any] = dict(tokens or {})
        self._client = http_client or httpx.AsyncClient(timeout=20.0)

    @property
    def is_authorized(self) -> bool:
        return bool(self._tokens.get("access_token") or self._tokens.get("refresh_token"))

    def set_credentials(self, tokens: dict[str, Any]) -> None:
        """Install tokens; keeps the stored refresh token when the new set has none"""
        refresh_token = tokens.get("refresh_token") or self._tokens.get("refresh_token")
        self._tokens = dict(tokens)
        if refresh_token:
            self._tokens["refresh_token"] = refresh_token

    @property
    def credentials(self) -> dict[str, Any]:
        return dict(self._tokens)

    def authorization_url(self) -> str:
        if not self.client_id or not self.client_secret:
            raise ProviderError("Google OAuth client is not configured")

        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(GOOGLE_SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> dict[str, Any]:
        """Exchange an authorization code and install the resulting tokens"""
        tokens = await self._token_request(
            {
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            }
        )
        self.set_credentials(tokens)
        logger.info("✅ Google OAuth tokens obtained")
        return self.credentials

    async def _token_request(self, data: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.post(GOOGLE_TOKEN_URL, data=data)
        except httpx.HTTPError as e:
            raise ProviderError(f"Google token endpoint unreachable: {e}") from e

        if response.status_code != 200:
            logger.error(f"❌ Google token request failed: {response.text}")
            raise ProviderError(f"Google token request failed ({response.status_code})")

        tokens = response.json()
        if not tokens.get("access_token"):
            raise ProviderError("No access token in Google token response")

        expires_in = int(tokens.get("expires_in", 3600))
        tokens["expiry_date"] = int((time.time() + expires_in) * 1000)
        return tokens

    def _access_token_expired(self) -> bool:
        expiry_date = self._tokens.get("expiry_date")
        if not expiry_date:
            return False
        return time.time() >= (int(expiry_date) / 1000) - EXPIRY_MARGIN_SECONDS

    async def get_access_token(self) -> str:
        """Current access token, refreshed with the refresh token when missing or expiring"""
        if not self.is_authorized:
            raise ProviderError("Google account not authorized - visit /auth")

        access_token = self._tokens.get("access_token")
        if access_token and not self._access_token_expired():
            return access_token

        refresh_token = self._tokens.get("refresh_token")
        if not refresh_token:
            raise ProviderError("Google access token expired and no refresh token is available")

        logger.info("🔄 Google access token expired, refreshing...")
        tokens = await self._token_request(
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        )
        self.set_credentials(tokens)
        logger.info("✅ Google access token refreshed")
        return tokens["access_token"]

    def build_event(
        self,
        summary: str,
        description: str,
        attendee_email: str,
        start: datetime,
        end: datetime,
    ) -> dict[str, Any]:
        return {
            "summary": summary,
            "description": description,
            "start": {"dateTime": start.strftime("%Y-%m-%dT%H:%M:%S"), "timeZone": self.timezone},
            "end": {"dateTime": end.strftime("%Y-%m-%dT%H:%M:%S"), "timeZone": self.timezone},
            "attendees": [{"email": attendee_email}],
            "conferenceData": {
                "createRequest": {
                    "requestId": f"meet-{uuid.uuid4().hex}",
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                }
            },
        }

    async def schedule_meeting(
        self,
        summary: str,
        description: str,
        attendee_email: str,
        start: datetime,
        end: datetime,
    ) -> str:
        access_token = await self.get_access_token()
        event_data = self.build_event(summary, description, attendee_email, start, end)

        try:
            response = await self._client.post(
                f"{GOOGLE_CALENDAR_API}/calendars/{self.calendar_id}/events",
                params={"conferenceDataVersion": 1, "sendUpdates": "all"},
                headers={"Authorization": f"Bearer {access_token}"},
                json=event_data,
            )
        except httpx.HTTPError as e:
            raise ProviderError(f"Google Calendar unreachable: {e}") from e

        if response.status_code not in [200, 201]:
            logger.error(f"❌ Failed to create calendar event: {response.text}")
            raise ProviderError(f"Google Calendar rejected the event ({response.status_code})")

        event = response.json()
        meeting_link = event.get("hangoutLink")
        if not meeting_link:
            for entry in event.get("conferenceData", {}).get("entryPoints", []):
                if entry.get("entryPointType") == "video":
                    meeting_link = entry.get("uri")
                    break

        if not meeting_link:
            raise ProviderError(f"Google Calendar event {event.get('id')} has no Meet link")

        logger.info(f"✅ Google Calendar event created: {event.get('id')}")
        return meeting_link

    async def aclose(self) -> None:
        await self._client.aclose()

"""
Meeting Adapter

Interface the outbound dispatcher uses to create a calendar event with a
video-conference link, plus the factory that builds the configured adapter
once at application startup.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime

from ..config import (
    CLINIC_TIMEZONE,
    GOOGLE_CALENDAR_ID,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    GOOGLE_REDIRECT_URI,
    GOOGLE_TOKEN,
    MEETING_PROVIDER,
)
from ..errors import ProviderError

logger = logging.getLogger(__name__)


class MeetingAdapter(ABC):
    """Base interface for meeting providers"""

    @abstractmethod
    async def schedule_meeting(
        self,
        summary: str,
        description: str,
        attendee_email: str,
        start: datetime,
        end: datetime,
    ) -> str:
        """
        Create the event and return its meeting link.

        Raises:
            ProviderError: on any transport, auth or provider failure
        """

    async def aclose(self) -> None:
        """Release provider resources (HTTP clients)"""
        return None


class DisabledMeetingAdapter(MeetingAdapter):
    """Used when no meeting provider is configured; every call fails as a provider error"""

    async def schedule_meeting(self, summary, description, attendee_email, start, end) -> str:
        raise ProviderError("Meeting provider is disabled")


def build_meeting_adapter(provider: str = MEETING_PROVIDER) -> MeetingAdapter:
    """
    Factory for the configured adapter.

    Raises:
        ValueError: if provider is not supported
    """
    if provider == "disabled":
        logger.info("ℹ️ Meeting provider disabled, bookings will have no video link")
        return DisabledMeetingAdapter()

    if provider == "google_meet":
        from .google_calendar_service import GoogleMeetAdapter

        tokens = None
        if GOOGLE_TOKEN:
            try:
                tokens = json.loads(GOOGLE_TOKEN)
                logger.info("✅ Google token loaded from environment")
            except json.JSONDecodeError as e:
                logger.error(f"❌ GOOGLE_TOKEN is not valid JSON: {e}")
        else:
            logger.warning("⚠️ GOOGLE_TOKEN not configured - authorize by visiting /auth")

        return GoogleMeetAdapter(
            client_id=GOOGLE_CLIENT_ID,
            client_secret=GOOGLE_CLIENT_SECRET,
            redirect_uri=GOOGLE_REDIRECT_URI,
            tokens=tokens,
            calendar_id=GOOGLE_CALENDAR_ID,
            timezone=CLINIC_TIMEZONE,
        )

    raise ValueError(f"Unsupported meeting provider: {provider}")

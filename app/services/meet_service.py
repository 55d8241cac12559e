"""
Google Meet links via the Calendar API.

A service account inserts a calendar event with a conference create request;
Google answers with the Meet (hangout) link.
"""
import logging
import random
import string
import time
from datetime import datetime, timezone

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.core import config
from app.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar"]


def _load_credentials():
    if not config.GOOGLE_CLIENT_EMAIL or not config.GOOGLE_PRIVATE_KEY:
        raise ExternalServiceError("Google Calendar not configured - GOOGLE_CLIENT_EMAIL and GOOGLE_PRIVATE_KEY required")

    info = {
        "type": "service_account",
        "client_email": config.GOOGLE_CLIENT_EMAIL,
        # Env files usually carry the PEM with literal \n sequences
        "private_key": config.GOOGLE_PRIVATE_KEY.replace("\\n", "\n"),
        "token_uri": "https://oauth2.googleapis.com/token",
    }
    return service_account.Credentials.from_service_account_info(info, scopes=CALENDAR_SCOPES)


def get_calendar_service():
    """Builds and returns an authenticated Google Calendar API service object."""
    return build("calendar", "v3", credentials=_load_credentials(), static_discovery=False, cache_discovery=False)


def _as_utc_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _conference_request_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{int(time.time() * 1000)}-{suffix}"


def build_event_body(title: str, description: str, start_time: datetime, end_time: datetime) -> dict:
    return {
        "summary": title,
        "description": description or "",
        "start": {"dateTime": _as_utc_iso(start_time), "timeZone": "UTC"},
        "end": {"dateTime": _as_utc_iso(end_time), "timeZone": "UTC"},
        "conferenceData": {
            "createRequest": {
                "requestId": _conference_request_id(),
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        },
    }


def create_meet_link(title: str, description: str, start_time: datetime, end_time: datetime, service=None) -> dict:
    """
    Create a calendar event with a Meet conference.
    
    Args:
        service: Calendar service to use (built from config when omitted)
    
    Returns:
        Dictionary with 'meet_link' and 'event_id'
    
    Raises:
        ValueError: end_time is not after start_time
        ExternalServiceError: Google is not configured, rejected the credentials
            or could not be reached
    """
    if end_time <= start_time:
        raise ValueError("end_time must be after start_time")

    body = build_event_body(title, description, start_time, end_time)
    try:
        service = service or get_calendar_service()
        created = service.events().insert(
            calendarId=config.GOOGLE_CALENDAR_ID,
            conferenceDataVersion=1,
            body=body,
        ).execute()
    except ExternalServiceError:
        raise
    except (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError, ValueError) as e:
        logger.error(f"Error creating Google Meet event: {e}")
        raise ExternalServiceError("Failed to create Google Meet event") from e

    logger.info(f"Google Meet event created: event_id={created.get('id')}")
    return {"meet_link": created.get("hangoutLink"), "event_id": created.get("id")}

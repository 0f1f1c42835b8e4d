"""
HTTP client for the scheduling backend.

The backend runs separately and exposes a REST API for:
- Looking up users by email
- Reading, replacing and clearing weekly availability
- Listing and cancelling confirmed sessions
"""

import logging
import uuid
from dataclasses import dataclass, field
import datetime
from typing import Iterable, Optional
from urllib.parse import quote

import httpx

from gymbuddy.config import get_settings
from gymbuddy.core.intelligence.slots.types import DeletionCriteria, TimeSlot, Weekday

logger = logging.getLogger(__name__)

# Every read must see the latest write
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

SNAPSHOT_UNAVAILABLE = "Current availability could not be read"


@dataclass
class UserRecord:
    """User account from the scheduling backend."""

    id: str
    name: str
    email: str

    @classmethod
    def from_dict(cls, data: dict) -> "UserRecord":
        """Create from API response dict."""
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            email=data.get("email", ""),
        )


@dataclass
class Session:
    """Confirmed workout session."""

    id: str
    day: Optional[Weekday]
    start_hour: Optional[int]
    end_hour: Optional[int]
    date: Optional[str] = None
    status: str = "confirmed"

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """Create from API response dict ({id, date, start_time, end_time, status})."""
        session_date = data.get("date")
        day = None
        if session_date:
            try:
                day = list(Weekday)[datetime.date.fromisoformat(session_date).weekday()]
            except ValueError:
                logger.warning(f"Session {data.get('id')} has unparseable date {session_date!r}")

        start = data.get("start_time", data.get("startTime"))
        end = data.get("end_time", data.get("endTime"))
        return cls(
            id=str(data.get("id", "")),
            day=day,
            start_hour=int(start) if start is not None else None,
            end_hour=int(end) if end is not None else None,
            date=session_date,
            status=data.get("status", "confirmed"),
        )


@dataclass
class AvailabilityResult:
    """Result of an availability or session write."""

    success: bool
    slots: list[TimeSlot] = field(default_factory=list)
    removed: list[TimeSlot] = field(default_factory=list)
    message: Optional[str] = None
    error: Optional[str] = None


def _json_body(response: httpx.Response) -> dict:
    """Decode a JSON object body, empty for no or non-object content."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _json_records(response: httpx.Response, key: str) -> Optional[list]:
    """Decode `[...]` or `{key: [...]}`, None for any other body."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        data = data.get(key, [])
    return data if isinstance(data, list) else None


def slot_payload(slot: TimeSlot) -> dict:
    """Wire format the backend expects for a slot."""
    return {
        "day": slot.day.value,
        "startTime": slot.start_hour,
        "endTime": slot.end_hour,
    }


def merge_slots(current: Iterable[TimeSlot], new: Iterable[TimeSlot]) -> list[TimeSlot]:
    """
    Replace the days mentioned in `new` and keep every other day.

    "Monday 9-11am" replaces the user's Monday slots only.
    """
    new = list(new)
    replaced_days = {slot.day for slot in new}
    kept = [slot for slot in current if slot.day not in replaced_days]

    merged: list[TimeSlot] = []
    for slot in kept + new:
        if slot not in merged:
            merged.append(slot)
    return merged


class SchedulingAPIClient:
    """
    HTTP client for the scheduling API.

    The API exposes:
    - GET    /user/by-email/{email}           - Look up user
    - GET    /availability/by-email/{email}   - Current weekly slots
    - POST   /availability/by-email/{email}   - Replace weekly slots
    - DELETE /availability/by-email/{email}   - Clear weekly slots
    - GET    /sessions/by-email/{email}       - Confirmed sessions
    - POST   /sessions/{id}/cancel            - Cancel a session
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        """Initialize client.

        Args:
            base_url: Scheduling API base URL (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
        """
        settings = get_settings()
        self.base_url = base_url or settings.scheduling_api_url
        self.timeout = timeout if timeout is not None else settings.scheduling_api_timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"User-Agent": "GymBuddy-Bot/1.0", **NO_CACHE_HEADERS},
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _request_headers() -> dict:
        return {"X-Request-ID": f"req_{uuid.uuid4().hex[:12]}"}

    # === Users ===

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        """Look up a user.

        Args:
            email: Account email

        Returns:
            UserRecord if found, None otherwise
        """
        client = await self._get_client()

        try:
            response = await client.get(
                f"/user/by-email/{quote(email)}",
                headers=self._request_headers(),
            )
            if response.status_code == 404:
                return None
            response.raise_for_status()

            data = _json_body(response)
            record = data.get("user", data)
            if not isinstance(record, dict) or not record:
                logger.error(f"Unreadable user record for {email}")
                return None
            return UserRecord.from_dict(record)

        except httpx.HTTPError as e:
            logger.error(f"Failed to look up user {email}: {e}")
            return None

    # === Availability ===

    async def get_availability(self, email: str) -> Optional[list[TimeSlot]]:
        """Get a user's weekly availability.

        Args:
            email: Account email

        Returns:
            Valid slots in backend order (malformed records are skipped),
            or None if the current availability could not be read
        """
        client = await self._get_client()

        try:
            response = await client.get(
                f"/availability/by-email/{quote(email)}",
                headers=self._request_headers(),
            )
            response.raise_for_status()

            records = _json_records(response, "slots")

        except httpx.HTTPError as e:
            logger.error(f"Failed to get availability for {email}: {e}")
            return None

        if records is None:
            logger.error(f"Unreadable availability body for {email}")
            return None

        slots = []
        for record in records:
            try:
                slots.append(TimeSlot.from_dict(record))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed slot {record!r}: {e}")
        return slots

    async def set_availability(self, email: str, slots: list[TimeSlot]) -> AvailabilityResult:
        """Replace a user's weekly availability.

        Args:
            email: Account email
            slots: Complete new set of slots

        Returns:
            AvailabilityResult with success status
        """
        client = await self._get_client()

        try:
            response = await client.post(
                f"/availability/by-email/{quote(email)}",
                json={"slots": [slot_payload(slot) for slot in slots]},
                headers=self._request_headers(),
            )
            response.raise_for_status()

            data = _json_body(response)
            logger.info(f"Set {len(slots)} availability slots for {email}")
            return AvailabilityResult(
                success=True,
                slots=list(slots),
                message=data.get("message"),
            )

        except httpx.HTTPError as e:
            logger.error(f"Failed to set availability for {email}: {e}")
            return AvailabilityResult(success=False, error=str(e))

    async def clear_availability(self, email: str) -> AvailabilityResult:
        """Remove all of a user's weekly availability.

        Args:
            email: Account email

        Returns:
            AvailabilityResult with success status
        """
        client = await self._get_client()

        try:
            response = await client.delete(
                f"/availability/by-email/{quote(email)}",
                headers=self._request_headers(),
            )
            response.raise_for_status()

            logger.info(f"Cleared availability for {email}")
            return AvailabilityResult(success=True, message="Availability cleared")

        except httpx.HTTPError as e:
            logger.error(f"Failed to clear availability for {email}: {e}")
            return AvailabilityResult(success=False, error=str(e))

    async def upsert_slots(
        self,
        email: str,
        slots: list[TimeSlot],
        current: Optional[list[TimeSlot]] = None,
    ) -> AvailabilityResult:
        """Write new slots, replacing only the days they mention.

        Args:
            email: Account email
            slots: Newly extracted slots
            current: Current slots (fetched if not given)

        Returns:
            AvailabilityResult whose slots are the full resulting set
        """
        if current is None:
            current = await self.get_availability(email)
        if current is None:
            return AvailabilityResult(success=False, error=SNAPSHOT_UNAVAILABLE)
        return await self.set_availability(email, merge_slots(current, slots))

    async def delete_matching(
        self,
        email: str,
        criteria: DeletionCriteria,
        current: Optional[list[TimeSlot]] = None,
    ) -> AvailabilityResult:
        """Remove the slots matching the criteria and keep the rest.

        Args:
            email: Account email
            criteria: Which slots to remove
            current: Current slots (fetched if not given)

        Returns:
            AvailabilityResult with the removed and remaining slots
        """
        if current is None:
            current = await self.get_availability(email)
        if current is None:
            return AvailabilityResult(success=False, error=SNAPSHOT_UNAVAILABLE)

        removed = criteria.select(current)
        if not removed:
            return AvailabilityResult(
                success=False,
                slots=list(current),
                error="No availability matches the request",
            )

        remaining = [slot for slot in current if not criteria.matches(slot)]
        if remaining:
            result = await self.set_availability(email, remaining)
        else:
            result = await self.clear_availability(email)

        result.removed = removed
        if result.success:
            result.slots = remaining
        return result

    # === Sessions ===

    async def list_sessions(self, email: str) -> list[Session]:
        """Get a user's confirmed sessions.

        Args:
            email: Account email

        Returns:
            List of sessions, empty on failure
        """
        client = await self._get_client()

        try:
            response = await client.get(
                f"/sessions/by-email/{quote(email)}",
                headers=self._request_headers(),
            )
            response.raise_for_status()

            records = _json_records(response, "sessions")

        except httpx.HTTPError as e:
            logger.error(f"Failed to list sessions for {email}: {e}")
            return []

        if records is None:
            logger.error(f"Unreadable sessions body for {email}")
            return []

        sessions = []
        for record in records:
            try:
                sessions.append(Session.from_dict(record))
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed session {record!r}: {e}")
        return sessions

    async def cancel_session(self, email: str, session_id: str) -> AvailabilityResult:
        """Cancel one confirmed session.

        Args:
            email: Account email of the requesting user
            session_id: Session to cancel

        Returns:
            AvailabilityResult with success status
        """
        client = await self._get_client()

        try:
            response = await client.post(
                f"/sessions/{quote(str(session_id))}/cancel",
                json={"userEmail": email},
                headers=self._request_headers(),
            )
            response.raise_for_status()

            data = _json_body(response)
            logger.info(f"Cancelled session {session_id} for {email}")
            return AvailabilityResult(
                success=True,
                message=data.get("message", "Session cancelled"),
            )

        except httpx.HTTPError as e:
            logger.error(f"Failed to cancel session {session_id}: {e}")
            return AvailabilityResult(success=False, error=str(e))


# Singleton
_client: Optional[SchedulingAPIClient] = None


def get_scheduling_client() -> SchedulingAPIClient:
    """Get singleton SchedulingAPIClient."""
    global _client
    if _client is None:
        _client = SchedulingAPIClient()
    return _client

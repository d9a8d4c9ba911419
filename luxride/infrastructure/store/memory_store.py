from __future__ import annotations

import threading
import time
import uuid
from datetime import date, datetime
from typing import Any, Callable, Mapping

from luxride.application.exceptions import GuardianRequiredError, StoreError
from luxride.application.ports.booking_store import BookingStorePort
from luxride.application.ports.profile_store import ProfileStorePort
from luxride.application.ports.wizard_session_store import WizardSessionStorePort
from luxride.application.utils.age import calculate_age, parse_date, try_calculate_age
from luxride.domain.entities.booking import BookingDraft, ConfirmedBooking
from luxride.domain.entities.profile import Profile
from luxride.domain.entities.wizard_state import WizardSession, WizardState
from luxride.domain.guardian import GUARDIAN_REQUIRED_MESSAGE, guardian_requirement_met


def build_confirmed_booking(
    draft: BookingDraft,
    owner_id: str,
    age: int | None,
    today: date,
) -> ConfirmedBooking:
    """Shared by the stores: re-check the guardian rule and stamp a new booking."""
    own_age = try_calculate_age(draft.date_of_birth, today)
    if own_age is None:
        raise StoreError("Booking is missing a valid date of birth.")
    if not guardian_requirement_met(own_age, draft.guardian_name, draft.guardian_contact):
        raise GuardianRequiredError(GUARDIAN_REQUIRED_MESSAGE)

    return ConfirmedBooking(
        id=str(uuid.uuid4()),
        owner_id=owner_id,
        full_name=draft.full_name or "",
        date_of_birth=parse_date(draft.date_of_birth).isoformat(),
        contact_details=draft.contact_details or "",
        guardian_name=draft.guardian_name or None,
        guardian_contact=draft.guardian_contact or None,
        destination=draft.destination or "",
        departure_date=draft.departure_date or "",
        preferred_vehicle=draft.preferred_vehicle or "",
        allergies_or_requests=draft.allergies_or_requests or None,
        is_confirmed=True,
        age=age if age is not None else calculate_age(draft.date_of_birth, today),
        created_at=datetime.now(),
    )


def departure_sort_key(booking: ConfirmedBooking) -> date:
    try:
        return parse_date(booking.departure_date)
    except ValueError:
        return date.min


class MemoryBookingStore(BookingStorePort):
    def __init__(self, clock: Callable[[], date] = date.today) -> None:
        self._bookings: dict[str, ConfirmedBooking] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def create_booking(self, draft: BookingDraft, owner_id: str, age: int | None = None) -> ConfirmedBooking:
        booking = build_confirmed_booking(draft, owner_id, age, self._clock())
        with self._lock:
            self._bookings[booking.id] = booking
        return booking

    def list_confirmed_bookings(self, owner_id: str) -> list[ConfirmedBooking]:
        with self._lock:
            mine = [b for b in self._bookings.values() if b.owner_id == owner_id and b.is_confirmed]
        return sorted(mine, key=departure_sort_key, reverse=True)


class MemoryProfileStore(ProfileStorePort):
    def __init__(self) -> None:
        self._profiles: dict[str, Profile] = {}
        self._by_uid: dict[str, str] = {}
        self._lock = threading.Lock()

    def ensure_profile(self, external_uid: str, email: str | None = None, display_name: str | None = None) -> Profile:
        with self._lock:
            owner_id = self._by_uid.get(external_uid)
            if owner_id is not None:
                return self._profiles[owner_id]
            profile = Profile(
                id=str(uuid.uuid4()),
                external_uid=external_uid,
                full_name=display_name or "",
                email=email,
                updated_at=datetime.now(),
            )
            self._profiles[profile.id] = profile
            self._by_uid[external_uid] = profile.id
            return profile

    def get_profile(self, owner_id: str) -> Profile | None:
        return self._profiles.get(owner_id)

    def update_profile(self, owner_id: str, changes: Mapping[str, Any]) -> Profile:
        with self._lock:
            profile = self._profiles.get(owner_id)
            if profile is None:
                raise StoreError("Profile not found for update.")
            updated = profile.with_changes(changes)
            self._profiles[owner_id] = updated
            return updated


class MemoryWizardSessionStore(WizardSessionStorePort):
    """Sessions idle for longer than `max_idle_seconds` are dropped when a new one starts."""

    def __init__(self, max_idle_seconds: float = 24 * 3600, now: Callable[[], float] = time.time) -> None:
        self._sessions: dict[str, WizardSession] = {}
        self._max_idle_seconds = max_idle_seconds
        self._now = now

    def _purge_idle(self) -> None:
        cutoff = self._now() - self._max_idle_seconds
        for session_id, session in list(self._sessions.items()):
            if (session.updated_at or 0) < cutoff:
                del self._sessions[session_id]

    def create(self, owner_id: str, state: WizardState) -> WizardSession:
        self._purge_idle()
        session = WizardSession(
            session_id=uuid.uuid4().hex,
            owner_id=owner_id,
            state=state,
            updated_at=self._now(),
        )
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> WizardSession | None:
        return self._sessions.get(session_id)

    def save(self, session_id: str, state: WizardState) -> WizardSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise StoreError(f"Booking session {session_id} not found.")
        updated = WizardSession(
            session_id=session_id,
            owner_id=session.owner_id,
            state=state,
            updated_at=self._now(),
        )
        self._sessions[session_id] = updated
        return updated

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

"""
Tests for booking submission: guardian defense, store failures and in-flight protection.
"""

from datetime import date

import pytest

from luxride.application.exceptions import GuardianRequiredError, StoreError
from luxride.application.ports.booking_store import BookingStorePort
from luxride.application.use_cases.booking_wizard import BookingWizard, BookingWizardUseCase
from luxride.application.use_cases.my_trips import ListTripsUseCase
from luxride.application.use_cases.submit_booking import UNEXPECTED_ERROR_MESSAGE, SubmitBookingUseCase
from luxride.application.utils.age import calculate_age
from luxride.application.utils.session_locks import SessionLocks
from luxride.domain.entities.booking import BookingDraft
from luxride.domain.entities.wizard_state import WizardState
from luxride.domain.guardian import GUARDIAN_REQUIRED_MESSAGE
from luxride.infrastructure.store.memory_store import MemoryBookingStore, MemoryWizardSessionStore


TODAY = date(2024, 6, 15)

ADULT_DRAFT = BookingDraft(
    full_name="Jane Doe",
    date_of_birth="1990-04-02",
    contact_details="jane@example.com",
    destination="Grand Hotel",
    departure_date="2024-07-01",
    preferred_vehicle="limousine",
    allergies_or_requests="Quiet ride",
)

MINOR_DRAFT = BookingDraft(
    full_name="Sam Young",
    date_of_birth="2010-01-01",
    contact_details="sam@example.com",
    destination="City Airport",
    departure_date="2024-08-10",
    preferred_vehicle="sedan",
)


class RecordingStore(BookingStorePort):
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls = []
        self._inner = MemoryBookingStore(clock=lambda: TODAY)

    def create_booking(self, draft, owner_id, age=None):
        self.calls.append((draft, owner_id, age))
        if self.error is not None:
            raise self.error
        return self._inner.create_booking(draft, owner_id, age)

    def list_confirmed_bookings(self, owner_id):
        return self._inner.list_confirmed_bookings(owner_id)


class FlakySessionStore(MemoryWizardSessionStore):
    def __init__(self):
        super().__init__()
        self.fail_saves = False

    def save(self, session_id, state):
        if self.fail_saves:
            raise StoreError("Session store unavailable.")
        return super().save(session_id, state)


def _setup(store: BookingStorePort, draft: BookingDraft, step: int = 4, sessions=None):
    if sessions is None:
        sessions = MemoryWizardSessionStore()
    locks = SessionLocks()
    wizard_uc = BookingWizardUseCase(sessions=sessions, locks=locks, wizard=BookingWizard(clock=lambda: TODAY))
    submit = SubmitBookingUseCase(
        store=store,
        sessions=sessions,
        locks=locks,
        wizard_use_case=wizard_uc,
        clock=lambda: TODAY,
    )
    session = sessions.create("owner-1", WizardState(step=step, draft=draft))
    return submit, sessions, locks, session.session_id


def test_confirmed_booking_copies_draft():
    store = RecordingStore()
    submit, sessions, _, sid = _setup(store, ADULT_DRAFT)

    result = submit.execute(sid, "owner-1")

    assert result.success
    assert result.status == "confirmed"
    assert result.message == "Booking confirmed successfully!"
    booking = result.booking
    assert booking.id
    assert booking.owner_id == "owner-1"
    assert booking.is_confirmed is True
    assert booking.age == calculate_age(ADULT_DRAFT.date_of_birth, TODAY) == 34
    assert booking.draft_fields() == ADULT_DRAFT.to_dict()

    assert sessions.get(sid).state == WizardState()
    assert ListTripsUseCase(store=store).execute("owner-1") == [booking]


def test_minor_with_guardian_is_confirmed():
    draft = MINOR_DRAFT.merge({"guardian_name": "A. Guardian", "guardian_contact": "a@x.com"})
    submit, _, _, sid = _setup(RecordingStore(), draft)

    result = submit.execute(sid, "owner-1")
    assert result.success
    assert result.booking.age == 14
    assert result.booking.guardian_name == "A. Guardian"
    assert result.booking.guardian_contact == "a@x.com"


def test_minor_without_guardian_never_reaches_store():
    store = RecordingStore()
    submit, sessions, _, sid = _setup(store, MINOR_DRAFT)

    result = submit.execute(sid, "owner-1")

    assert result.status == "guardian_required"
    assert result.message == GUARDIAN_REQUIRED_MESSAGE
    assert store.calls == []
    assert sessions.get(sid).state == WizardState(step=4, draft=MINOR_DRAFT)


def test_invalid_fields_are_reported():
    draft = ADULT_DRAFT.merge({"departure_date": "2024-06-01"})
    store = RecordingStore()
    submit, _, _, sid = _setup(store, draft)

    result = submit.execute(sid, "owner-1")
    assert result.status == "invalid"
    assert result.errors == {"departure_date": "Departure date cannot be in the past."}
    assert store.calls == []


def test_empty_draft_is_rejected():
    store = RecordingStore()
    submit, _, _, sid = _setup(store, BookingDraft(), step=1)

    result = submit.execute(sid, "owner-1")
    assert result.status == "invalid"
    assert result.message == "Please start your booking from the beginning."
    assert store.calls == []


def test_store_failure_keeps_session_state():
    store = RecordingStore(error=StoreError("Failed to confirm booking. Please try again."))
    submit, sessions, _, sid = _setup(store, ADULT_DRAFT)

    result = submit.execute(sid, "owner-1")

    assert result.status == "failed"
    assert result.message == "Failed to confirm booking. Please try again."
    assert result.booking is None
    assert sessions.get(sid).state == WizardState(step=4, draft=ADULT_DRAFT)


def test_unexpected_store_error_is_generic():
    store = RecordingStore(error=RuntimeError("socket closed"))
    submit, sessions, _, sid = _setup(store, ADULT_DRAFT)

    result = submit.execute(sid, "owner-1")

    assert result.status == "error"
    assert result.message == UNEXPECTED_ERROR_MESSAGE
    assert sessions.get(sid).state.draft == ADULT_DRAFT


def test_second_submission_while_in_flight():
    store = RecordingStore()
    submit, sessions, locks, sid = _setup(store, ADULT_DRAFT)

    with locks.hold(sid):
        result = submit.execute(sid, "owner-1")

    assert result.status == "in_progress"
    assert store.calls == []
    assert sessions.get(sid).state.draft == ADULT_DRAFT

    assert submit.execute(sid, "owner-1").success
    assert len(store.calls) == 1


def test_store_enforces_guardian_rule_itself():
    store = MemoryBookingStore(clock=lambda: TODAY)
    with pytest.raises(GuardianRequiredError):
        store.create_booking(MINOR_DRAFT, "owner-1", age=30)
    assert store.list_confirmed_bookings("owner-1") == []


def test_store_rejects_missing_birth_date():
    store = MemoryBookingStore(clock=lambda: TODAY)
    with pytest.raises(StoreError):
        store.create_booking(ADULT_DRAFT.merge({"date_of_birth": None}), "owner-1")


def test_trips_are_newest_departure_first_and_per_owner():
    store = MemoryBookingStore(clock=lambda: TODAY)
    early = store.create_booking(ADULT_DRAFT.merge({"departure_date": "2024-07-01"}), "owner-1")
    late = store.create_booking(ADULT_DRAFT.merge({"departure_date": "2024-09-01T10:00:00"}), "owner-1")
    store.create_booking(ADULT_DRAFT, "owner-2")

    assert [b.id for b in store.list_confirmed_bookings("owner-1")] == [late.id, early.id]


def test_failed_reset_after_confirmation_is_not_resubmitted():
    """Once stored, a booking is confirmed even if the session can't be reset, and a retry reuses it."""
    store = RecordingStore()
    sessions = FlakySessionStore()
    submit, _, locks, sid = _setup(store, ADULT_DRAFT, sessions=sessions)
    sessions.fail_saves = True

    first = submit.execute(sid, "owner-1")
    second = submit.execute(sid, "owner-1")

    assert first.status == second.status == "confirmed"
    assert second.booking.id == first.booking.id
    assert len(store.calls) == 1
    assert len(store.list_confirmed_bookings("owner-1")) == 1

    sessions.fail_saves = False
    third = submit.execute(sid, "owner-1")

    assert third.booking.id == first.booking.id
    assert len(store.calls) == 1
    assert sessions.get(sid).state == WizardState()
    assert locks.unreset_booking(sid, ADULT_DRAFT) is None


def test_submission_leaves_no_lock_behind():
    submit, _, locks, sid = _setup(RecordingStore(), ADULT_DRAFT)
    assert submit.execute(sid, "owner-1").success
    assert not locks.is_busy(sid)
    assert locks.tracked() == 0

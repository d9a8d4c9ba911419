"""
Tests for durable wizard, booking and profile persistence.
"""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest

from luxride.application.exceptions import GuardianRequiredError, StoreError
from luxride.domain.entities.booking import BookingDraft
from luxride.domain.entities.wizard_state import WizardState
from luxride.infrastructure.store.json_store import JsonBookingStore, JsonProfileStore, JsonWizardSessionStore


TODAY = date(2024, 6, 15)

DRAFT = BookingDraft(
    full_name="Jane Doe",
    date_of_birth="1990-04-02",
    contact_details="jane@example.com",
    destination="Grand Hotel",
    departure_date="2024-07-01",
    preferred_vehicle="suv",
)


def test_wizard_session_survives_restart():
    """A fresh store over the same directory sees the saved step and draft."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonWizardSessionStore(data_dir=tmpdir)
        session = store.create("owner-1", WizardState())

        store.save(session.session_id, WizardState(step=3, draft=DRAFT))

        reopened = JsonWizardSessionStore(data_dir=tmpdir).get(session.session_id)
        assert reopened is not None
        assert reopened.owner_id == "owner-1"
        assert reopened.state == WizardState(step=3, draft=DRAFT)

        # No stray temp files after atomic writes
        assert not list(Path(tmpdir).glob("*.tmp"))


def test_wizard_session_delete_and_missing():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonWizardSessionStore(data_dir=tmpdir)
        session = store.create("owner-1", WizardState())
        store.delete(session.session_id)

        assert store.get(session.session_id) is None
        with pytest.raises(StoreError):
            store.save(session.session_id, WizardState(step=2))


def test_corrupted_session_file_is_a_store_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonWizardSessionStore(data_dir=tmpdir)
        (Path(tmpdir) / "broken.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(StoreError):
            store.get("broken")


def test_bookings_persist_per_owner():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir, clock=lambda: TODAY)
        first = store.create_booking(DRAFT, "owner-1", age=34)
        second = store.create_booking(DRAFT.merge({"departure_date": "2024-12-24"}), "owner-1", age=34)
        store.create_booking(DRAFT, "owner-2", age=34)

        trips = JsonBookingStore(data_dir=tmpdir, clock=lambda: TODAY).list_confirmed_bookings("owner-1")

        assert [t.id for t in trips] == [second.id, first.id]
        assert trips[1] == first
        assert all(t.is_confirmed and t.owner_id == "owner-1" for t in trips)
        assert JsonBookingStore(data_dir=tmpdir).list_confirmed_bookings("nobody") == []


def test_json_booking_store_checks_guardian():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir, clock=lambda: TODAY)
        with pytest.raises(GuardianRequiredError):
            store.create_booking(DRAFT.merge({"date_of_birth": "2010-01-01"}), "owner-1")
        assert store.list_confirmed_bookings("owner-1") == []


def test_profile_is_keyed_by_external_uid():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonProfileStore(data_dir=tmpdir)
        created = store.ensure_profile("uid-abc", email="jane@example.com", display_name="Jane")
        again = JsonProfileStore(data_dir=tmpdir).ensure_profile("uid-abc")

        assert again.id == created.id
        assert again.full_name == "Jane"
        assert store.ensure_profile("uid-other").id != created.id


def test_profile_update_and_reload():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonProfileStore(data_dir=tmpdir)
        profile = store.ensure_profile("uid-abc")

        store.update_profile(profile.id, {"contact_details": "+1 555 0100", "preferred_music_genre": "Jazz", "email": "x"})

        reloaded = JsonProfileStore(data_dir=tmpdir).get_profile(profile.id)
        assert reloaded.contact_details == "+1 555 0100"
        assert reloaded.preferred_music_genre == "Jazz"
        assert reloaded.email is None
        assert reloaded.updated_at is not None

        with pytest.raises(StoreError):
            store.update_profile("missing", {"full_name": "Nobody"})

"""
HTTP tests for the booking, trips and profile endpoints.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from luxride.application.use_cases.booking_wizard import BookingWizard, BookingWizardUseCase
from luxride.application.use_cases.my_trips import ListTripsUseCase
from luxride.application.use_cases.personalize import SavePreferencesUseCase, SuggestPreferencesUseCase
from luxride.application.use_cases.profile import EnsureProfileUseCase, GetProfileUseCase, UpdateProfileUseCase
from luxride.application.use_cases.submit_booking import SubmitBookingUseCase
from luxride.application.utils.session_locks import SessionLocks
from luxride.infrastructure.identity.token_identity import TokenIdentityProvider
from luxride.infrastructure.llm.mock_llm import MockLLM
from luxride.infrastructure.store.memory_store import (
    MemoryBookingStore,
    MemoryProfileStore,
    MemoryWizardSessionStore,
)
from luxride.main import app
from luxride.wiring import dependencies as deps


TODAY = date(2024, 6, 15)
AUTH = {"Authorization": "Bearer uid-jane"}
OTHER = {"Authorization": "Bearer uid-other"}

PERSONAL = {"fullName": "Jane Doe", "dateOfBirth": "1990-04-02", "contactDetails": "jane@example.com"}
TRIP = {"destination": "Grand Hotel", "departureDate": "2024-07-01", "preferredVehicle": "limousine"}
REQUESTS = {"allergiesOrRequests": "Some music please"}


@pytest.fixture
def locks():
    return SessionLocks()


@pytest.fixture
def client(locks):
    clock = lambda: TODAY  # noqa: E731
    bookings = MemoryBookingStore(clock=clock)
    profiles = MemoryProfileStore()
    sessions = MemoryWizardSessionStore()
    wizard_uc = BookingWizardUseCase(sessions=sessions, locks=locks, wizard=BookingWizard(clock=clock))

    overrides = {
        deps.get_identity_provider: lambda: TokenIdentityProvider(secret=None, env="dev"),
        deps.get_ensure_profile_use_case: lambda: EnsureProfileUseCase(store=profiles),
        deps.get_wizard_use_case: lambda: wizard_uc,
        deps.get_submit_use_case: lambda: SubmitBookingUseCase(
            store=bookings, sessions=sessions, locks=locks, wizard_use_case=wizard_uc, clock=clock
        ),
        deps.get_trips_use_case: lambda: ListTripsUseCase(store=bookings),
        deps.get_profile_use_case: lambda: GetProfileUseCase(store=profiles),
        deps.get_update_profile_use_case: lambda: UpdateProfileUseCase(store=profiles),
        deps.get_suggest_use_case: lambda: SuggestPreferencesUseCase(bookings=bookings, suggester=MockLLM()),
        deps.get_save_preferences_use_case: lambda: SavePreferencesUseCase(profiles=profiles),
    }
    app.dependency_overrides.update(overrides)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _start(client) -> str:
    resp = client.post("/api/v1/booking/sessions", headers=AUTH)
    assert resp.status_code == 201
    return resp.json()["sessionId"]


def _next(client, sid, values):
    return client.post(f"/api/v1/booking/sessions/{sid}/next", json=values, headers=AUTH)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_reference_lists(client):
    steps = client.get("/api/v1/booking/steps").json()
    assert [s["name"] for s in steps] == ["Personal Info", "Trip Details", "Special Requests", "Review & Confirm"]
    assert "guardianName" in steps[0]["fields"]

    vehicles = client.get("/api/v1/vehicle-types").json()
    assert {"value": "luxury_bus", "label": "Luxury Bus"} in vehicles


def test_login_required(client):
    assert client.post("/api/v1/booking/sessions").status_code == 401
    assert client.get("/api/v1/trips", headers={"Authorization": "Token abc"}).status_code == 401


def test_full_booking_flow(client):
    sid = _start(client)

    first = _next(client, sid, PERSONAL)
    assert first.status_code == 200
    assert first.json()["action"] == "advanced"
    assert first.json()["state"]["step"] == 2
    assert first.json()["state"]["stepName"] == "Trip Details"

    assert _next(client, sid, TRIP).json()["state"]["step"] == 3
    third = _next(client, sid, REQUESTS).json()
    assert third["action"] == "review"
    assert third["state"]["step"] == 4

    review = client.get(f"/api/v1/booking/sessions/{sid}/review", headers=AUTH).json()
    assert review["ready"] is True
    assert review["age"] == 34
    assert review["requiresGuardian"] is False

    submitted = client.post(f"/api/v1/booking/sessions/{sid}/submit", headers=AUTH)
    assert submitted.status_code == 201
    body = submitted.json()
    assert body["status"] == "confirmed"
    assert body["message"] == "Booking confirmed successfully!"
    assert body["booking"]["fullName"] == "Jane Doe"
    assert body["booking"]["isConfirmed"] is True
    assert body["booking"]["age"] == 34

    trips = client.get("/api/v1/trips", headers=AUTH).json()
    assert [t["id"] for t in trips] == [body["booking"]["id"]]

    after = client.get(f"/api/v1/booking/sessions/{sid}", headers=AUTH).json()
    assert after["step"] == 1
    assert after["draft"]["fullName"] is None


def test_minor_without_guardian_is_unprocessable(client):
    sid = _start(client)
    resp = _next(client, sid, {**PERSONAL, "dateOfBirth": "2010-01-01"})

    assert resp.status_code == 422
    body = resp.json()
    assert body["action"] == "invalid"
    assert body["errors"]["guardianName"] == "Guardian name is required."
    assert body["errors"]["guardianContact"] == "Guardian contact is required."
    assert body["state"]["step"] == 1


def test_previous_keeps_draft(client):
    sid = _start(client)
    _next(client, sid, PERSONAL)

    resp = client.post(f"/api/v1/booking/sessions/{sid}/previous", json={"destination": "Pier 9"}, headers=AUTH)
    state = resp.json()["state"]
    assert state["step"] == 1
    assert state["draft"]["fullName"] == "Jane Doe"
    assert state["draft"]["destination"] == "Pier 9"

    reset = client.post(f"/api/v1/booking/sessions/{sid}/reset", headers=AUTH).json()
    assert reset["action"] == "reset"
    assert reset["state"]["draft"]["fullName"] is None


def test_submit_incomplete_booking(client):
    sid = _start(client)
    resp = client.post(f"/api/v1/booking/sessions/{sid}/submit", headers=AUTH)
    assert resp.status_code == 422
    assert resp.json()["message"] == "Please start your booking from the beginning."


def test_sessions_are_private(client):
    sid = _start(client)
    assert client.get(f"/api/v1/booking/sessions/{sid}", headers=OTHER).status_code == 404
    assert client.post(f"/api/v1/booking/sessions/{sid}/next", json=PERSONAL, headers=OTHER).status_code == 404
    assert client.get("/api/v1/booking/sessions/nope", headers=AUTH).status_code == 404


def test_profile_update(client):
    resp = client.patch("/api/v1/profile", json={"fullName": "Jane Doe", "contactDetails": "+1 555 0100"}, headers=AUTH)
    assert resp.status_code == 200
    assert resp.json()["changed"] is True
    assert resp.json()["profile"]["fullName"] == "Jane Doe"

    profile = client.get("/api/v1/profile", headers=AUTH).json()
    assert profile["contactDetails"] == "+1 555 0100"

    unchanged = client.patch("/api/v1/profile", json={}, headers=AUTH).json()
    assert unchanged["changed"] is False
    assert unchanged["message"] == "No changes to update."

    assert client.patch("/api/v1/profile", json={"fullName": "J"}, headers=AUTH).status_code == 422
    assert client.patch("/api/v1/profile", json={"dateOfBirth": "2999-01-01"}, headers=AUTH).status_code == 422


def test_suggest_and_save_preferences(client):
    sid = _start(client)
    for values in (PERSONAL, TRIP, REQUESTS):
        _next(client, sid, values)
    assert client.post(f"/api/v1/booking/sessions/{sid}/submit", headers=AUTH).status_code == 201

    resp = client.post("/api/v1/profile/preferences/suggest", headers=AUTH)
    assert resp.status_code == 200
    body = resp.json()
    assert body["tripCount"] == 1
    assert body["suggestion"] == {
        "preferredVehicleType": "limousine",
        "preferredTemperature": "21°C",
        "preferredMusicGenre": "As Requested",
    }

    saved = client.put("/api/v1/profile/preferences", json=body["suggestion"], headers=AUTH).json()
    assert saved["preferredVehicleType"] == "limousine"
    assert saved["preferredMusicGenre"] == "As Requested"


def test_discard_session(client):
    sid = _start(client)
    assert client.delete(f"/api/v1/booking/sessions/{sid}", headers=OTHER).status_code == 404
    assert client.delete(f"/api/v1/booking/sessions/{sid}", headers=AUTH).status_code == 204
    assert client.get(f"/api/v1/booking/sessions/{sid}", headers=AUTH).status_code == 404


def test_busy_session_rejects_transition(client, locks):
    sid = _start(client)
    with locks.hold(sid):
        resp = _next(client, sid, PERSONAL)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "This booking is being updated. Please try again."
    assert _next(client, sid, PERSONAL).status_code == 200

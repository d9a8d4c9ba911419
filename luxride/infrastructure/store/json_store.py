from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Mapping

from luxride.application.exceptions import StoreError
from luxride.application.ports.booking_store import BookingStorePort
from luxride.application.ports.profile_store import ProfileStorePort
from luxride.application.ports.wizard_session_store import WizardSessionStorePort
from luxride.domain.entities.booking import BookingDraft, ConfirmedBooking
from luxride.domain.entities.profile import Profile
from luxride.domain.entities.wizard_state import WizardSession, WizardState
from luxride.infrastructure.store.memory_store import build_confirmed_booking, departure_sort_key

logger = logging.getLogger(__name__)


class _JsonFiles:
    """One JSON document per key, written atomically through a temp file."""

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()

    def _get_lock(self, key: str) -> threading.Lock:
        with self._lock_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def _get_file_path(self, key: str) -> Path:
        return self._data_dir / f"{key}.json"

    def _load(self, key: str) -> dict[str, Any] | None:
        file_path = self._get_file_path(key)
        if not file_path.exists():
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("Corrupted store file", extra={"reason": f"{file_path}: {e}"})
            raise StoreError(f"Could not read {file_path.name}") from e

    def _save(self, key: str, data: dict[str, Any]) -> None:
        file_path = self._get_file_path(key)
        temp_path = file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=_json_default)
            temp_path.replace(file_path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise StoreError(f"Could not write {file_path.name}: {e}") from e


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None


class JsonWizardSessionStore(_JsonFiles, WizardSessionStorePort):
    def __init__(self, data_dir: str | Path = "./data/sessions") -> None:
        super().__init__(data_dir)

    def _serialize(self, session: WizardSession) -> dict[str, Any]:
        return {
            "session_id": session.session_id,
            "owner_id": session.owner_id,
            "step": session.state.step,
            "draft": session.state.draft.to_dict(),
            "updated_at": session.updated_at,
            "version": 1,
        }

    def _deserialize(self, data: dict[str, Any]) -> WizardSession:
        return WizardSession(
            session_id=data["session_id"],
            owner_id=data["owner_id"],
            state=WizardState(
                step=int(data.get("step", 1)),
                draft=BookingDraft.from_dict(data.get("draft")),
            ),
            updated_at=data.get("updated_at"),
        )

    def create(self, owner_id: str, state: WizardState) -> WizardSession:
        session = WizardSession(
            session_id=uuid.uuid4().hex,
            owner_id=owner_id,
            state=state,
            updated_at=datetime.now().timestamp(),
        )
        with self._get_lock(session.session_id):
            self._save(session.session_id, self._serialize(session))
        return session

    def get(self, session_id: str) -> WizardSession | None:
        with self._get_lock(session_id):
            data = self._load(session_id)
        return self._deserialize(data) if data else None

    def save(self, session_id: str, state: WizardState) -> WizardSession:
        with self._get_lock(session_id):
            data = self._load(session_id)
            if data is None:
                raise StoreError(f"Booking session {session_id} not found.")
            session = WizardSession(
                session_id=session_id,
                owner_id=data["owner_id"],
                state=state,
                updated_at=datetime.now().timestamp(),
            )
            self._save(session_id, self._serialize(session))
            return session

    def delete(self, session_id: str) -> None:
        with self._get_lock(session_id):
            self._get_file_path(session_id).unlink(missing_ok=True)


class JsonBookingStore(_JsonFiles, BookingStorePort):
    """Bookings grouped in one file per owner."""

    def __init__(self, data_dir: str | Path = "./data/bookings", clock: Callable[[], date] = date.today) -> None:
        super().__init__(data_dir)
        self._clock = clock

    def create_booking(self, draft: BookingDraft, owner_id: str, age: int | None = None) -> ConfirmedBooking:
        booking = build_confirmed_booking(draft, owner_id, age, self._clock())
        with self._get_lock(owner_id):
            data = self._load(owner_id) or {"owner_id": owner_id, "bookings": []}
            data["bookings"].append(asdict(booking))
            self._save(owner_id, data)
        return booking

    def list_confirmed_bookings(self, owner_id: str) -> list[ConfirmedBooking]:
        with self._get_lock(owner_id):
            data = self._load(owner_id) or {}
        bookings = []
        for raw in data.get("bookings", []):
            raw = dict(raw)
            raw["created_at"] = _parse_datetime(raw.get("created_at"))
            booking = ConfirmedBooking(**raw)
            if booking.is_confirmed:
                bookings.append(booking)
        return sorted(bookings, key=departure_sort_key, reverse=True)


class JsonProfileStore(_JsonFiles, ProfileStorePort):
    _INDEX_KEY = "_uid_index"

    def __init__(self, data_dir: str | Path = "./data/profiles") -> None:
        super().__init__(data_dir)

    def _to_profile(self, data: dict[str, Any]) -> Profile:
        data = dict(data)
        data["updated_at"] = _parse_datetime(data.get("updated_at"))
        return Profile(**data)

    def ensure_profile(self, external_uid: str, email: str | None = None, display_name: str | None = None) -> Profile:
        with self._get_lock(self._INDEX_KEY):
            index = self._load(self._INDEX_KEY) or {}
            owner_id = index.get(external_uid)
            if owner_id:
                existing = self._load(owner_id)
                if existing:
                    return self._to_profile(existing)

            profile = Profile(
                id=owner_id or str(uuid.uuid4()),
                external_uid=external_uid,
                full_name=display_name or "",
                email=email,
                updated_at=datetime.now(),
            )
            self._save(profile.id, asdict(profile))
            index[external_uid] = profile.id
            self._save(self._INDEX_KEY, index)
            return profile

    def get_profile(self, owner_id: str) -> Profile | None:
        with self._get_lock(owner_id):
            data = self._load(owner_id)
        return self._to_profile(data) if data else None

    def update_profile(self, owner_id: str, changes: Mapping[str, Any]) -> Profile:
        with self._get_lock(owner_id):
            data = self._load(owner_id)
            if data is None:
                raise StoreError("Profile not found for update.")
            updated = self._to_profile(data).with_changes(changes)
            self._save(owner_id, asdict(updated))
            return updated

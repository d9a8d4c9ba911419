from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


class VehicleType(str, Enum):
    sedan = "sedan"
    suv = "suv"
    van = "van"
    limousine = "limousine"
    luxury_bus = "luxury_bus"

    @property
    def label(self) -> str:
        return VEHICLE_LABELS[self]


VEHICLE_LABELS: dict[VehicleType, str] = {
    VehicleType.sedan: "Sedan",
    VehicleType.suv: "SUV",
    VehicleType.van: "Van",
    VehicleType.limousine: "Limousine",
    VehicleType.luxury_bus: "Luxury Bus",
}


@dataclass(frozen=True)
class BookingDraft:
    """Booking record filled in step by step. Every field stays optional until its step is passed."""

    full_name: str | None = None
    date_of_birth: str | None = None  # YYYY-MM-DD
    contact_details: str | None = None
    guardian_name: str | None = None
    guardian_contact: str | None = None
    destination: str | None = None
    departure_date: str | None = None  # ISO date or datetime
    preferred_vehicle: str | None = None
    allergies_or_requests: str | None = None

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "BookingDraft":
        known = set(cls.field_names())
        return cls(**{k: v for k, v in (data or {}).items() if k in known})

    def merge(self, values: Mapping[str, Any] | None) -> "BookingDraft":
        """Return a copy with the given known fields overridden; unknown keys are dropped."""
        known = set(self.field_names())
        changes = {k: v for k, v in (values or {}).items() if k in known}
        if not changes:
            return self
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def is_empty(self) -> bool:
        return all(v is None for v in asdict(self).values())


@dataclass(frozen=True)
class ConfirmedBooking:
    id: str
    owner_id: str
    full_name: str
    date_of_birth: str
    contact_details: str
    destination: str
    departure_date: str
    preferred_vehicle: str
    age: int
    is_confirmed: bool = True
    guardian_name: str | None = None
    guardian_contact: str | None = None
    allergies_or_requests: str | None = None
    created_at: datetime | None = None

    def draft_fields(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in BookingDraft.field_names()}


@dataclass(frozen=True)
class PastBooking:
    """Per-trip summary handed to the preference suggester."""

    vehicle_type: str
    temperature: str
    music_genre: str

    def to_payload(self) -> dict[str, str]:
        return {
            "vehicleType": self.vehicle_type,
            "temperature": self.temperature,
            "musicGenre": self.music_genre,
        }

from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from luxride.application.utils.age import parse_date
from luxride.application.utils.booking_steps import BOOKING_FORM_STEPS, TOTAL_STEPS, get_step
from luxride.domain.entities.booking import ConfirmedBooking, VehicleType
from luxride.domain.entities.profile import Profile
from luxride.domain.entities.wizard_state import WizardSession


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookingDraftSchema(CamelModel):
    """Partial booking values. Only the keys actually sent are merged into the draft."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    full_name: str | None = None
    date_of_birth: str | None = None
    contact_details: str | None = None
    guardian_name: str | None = None
    guardian_contact: str | None = None
    destination: str | None = None
    departure_date: str | None = None
    preferred_vehicle: str | None = None
    allergies_or_requests: str | None = None

    def provided_values(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class StepSchema(CamelModel):
    ordinal: int
    name: str
    fields: list[str]


class WizardStateSchema(CamelModel):
    session_id: str
    step: int
    step_name: str
    total_steps: int = TOTAL_STEPS
    draft: BookingDraftSchema

    @staticmethod
    def from_session(session: WizardSession) -> "WizardStateSchema":
        return WizardStateSchema(
            session_id=session.session_id,
            step=session.state.step,
            step_name=get_step(session.state.step).name,
            draft=BookingDraftSchema(**session.state.draft.to_dict()),
        )


class StepResponseSchema(CamelModel):
    action: str
    state: WizardStateSchema
    errors: dict[str, str] = Field(default_factory=dict)


class ReviewResponseSchema(CamelModel):
    state: WizardStateSchema
    ready: bool
    age: int | None = None
    requires_guardian: bool
    errors: dict[str, str] = Field(default_factory=dict)


class BookingSchema(CamelModel):
    id: str
    owner_id: str
    full_name: str
    date_of_birth: str
    contact_details: str
    guardian_name: str | None = None
    guardian_contact: str | None = None
    destination: str
    departure_date: str
    preferred_vehicle: str
    allergies_or_requests: str | None = None
    is_confirmed: bool
    age: int
    created_at: datetime | None = None

    @staticmethod
    def from_entity(booking: ConfirmedBooking) -> "BookingSchema":
        return BookingSchema(**asdict(booking))


class SubmissionResponseSchema(CamelModel):
    status: str
    message: str
    booking: BookingSchema | None = None
    errors: dict[str, str] = Field(default_factory=dict)


class ProfileSchema(CamelModel):
    id: str
    full_name: str
    date_of_birth: str
    contact_details: str
    email: str | None = None
    preferred_vehicle_type: str | None = None
    preferred_temperature: str | None = None
    preferred_music_genre: str | None = None
    updated_at: datetime | None = None

    @staticmethod
    def from_entity(profile: Profile) -> "ProfileSchema":
        return ProfileSchema(
            id=profile.id,
            full_name=profile.full_name,
            date_of_birth=profile.date_of_birth,
            contact_details=profile.contact_details,
            email=profile.email,
            preferred_vehicle_type=profile.preferred_vehicle_type,
            preferred_temperature=profile.preferred_temperature,
            preferred_music_genre=profile.preferred_music_genre,
            updated_at=profile.updated_at,
        )


class ProfileUpdateSchema(CamelModel):
    full_name: str | None = Field(default=None, min_length=2)
    date_of_birth: str | None = None
    contact_details: str | None = Field(default=None, min_length=5)

    @field_validator("date_of_birth")
    @classmethod
    def _past_or_empty(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return value
        try:
            dob = parse_date(value)
        except ValueError:
            raise ValueError("Invalid date format.")
        if dob >= date.today():
            raise ValueError("Date of birth must be in the past if provided.")
        return dob.isoformat()


class ProfileUpdateResponseSchema(CamelModel):
    profile: ProfileSchema
    changed: bool
    message: str


class PreferencesSchema(CamelModel):
    preferred_vehicle_type: str = Field(min_length=1)
    preferred_temperature: str = Field(min_length=1)
    preferred_music_genre: str = Field(min_length=1)


class SuggestionResponseSchema(CamelModel):
    suggestion: PreferencesSchema
    trip_count: int


class VehicleTypeSchema(BaseModel):
    value: str
    label: str


def vehicle_types() -> list[VehicleTypeSchema]:
    return [VehicleTypeSchema(value=v.value, label=v.label) for v in VehicleType]


def steps() -> list[StepSchema]:
    return [StepSchema(ordinal=s.ordinal, name=s.name, fields=[to_camel(f) for f in s.fields]) for s in BOOKING_FORM_STEPS]


def camel_errors(errors: dict[str, str]) -> dict[str, str]:
    return {to_camel(name): message for name, message in errors.items()}

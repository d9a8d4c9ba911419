from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Annotated, Any, Callable, Iterable, Mapping

from pydantic import AfterValidator, ConfigDict, Field, ValidationError, create_model
from pydantic_core import PydanticCustomError

from luxride.application.utils.age import parse_date, try_calculate_age
from luxride.application.utils.booking_steps import all_fields
from luxride.domain.entities.booking import BookingDraft, VehicleType
from luxride.domain.guardian import guardian_field_errors, is_under_minimum_age


@dataclass(frozen=True)
class FieldResult:
    field: str
    valid: bool
    message: str | None = None


@dataclass(frozen=True)
class ValidationReport:
    results: dict[str, FieldResult] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return all(r.valid for r in self.results.values())

    @property
    def errors(self) -> dict[str, str]:
        return {name: r.message or "Invalid value." for name, r in self.results.items() if not r.valid}


def _text(min_length: int, message: str, required: bool = True) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        if value is None:
            if required:
                raise PydanticCustomError("missing", message)
            return value
        if not isinstance(value, str):
            raise PydanticCustomError("string_type", message)
        if required and len(value.strip()) < min_length:
            raise PydanticCustomError("string_too_short", message)
        return value

    return check


def _date_of_birth(today: date) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        try:
            dob = parse_date(value)
        except (TypeError, ValueError):
            raise PydanticCustomError("date_parsing", "Invalid date format.")
        if dob >= today:
            raise PydanticCustomError("date_past", "Date of birth must be in the past.")
        return value

    return check


def _departure_date(today: date) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        try:
            departure = parse_date(value)
        except (TypeError, ValueError):
            raise PydanticCustomError("date_parsing", "Invalid date format.")
        if departure < today:
            raise PydanticCustomError("date_not_past", "Departure date cannot be in the past.")
        return value

    return check


def _vehicle(value: Any) -> Any:
    if value is None or value == "":
        raise PydanticCustomError("missing", "Please select a vehicle type.")
    try:
        VehicleType(value)
    except ValueError:
        raise PydanticCustomError("enum", "Please select a valid vehicle type.")
    return value


def _rules(today: date) -> dict[str, Callable[[Any], Any]]:
    return {
        "full_name": _text(2, "Full name must be at least 2 characters."),
        "date_of_birth": _date_of_birth(today),
        "contact_details": _text(5, "Contact details are required."),
        # Requiredness for minors comes from guardian_field_errors.
        "guardian_name": _text(0, "Guardian name must be text.", required=False),
        "guardian_contact": _text(0, "Guardian contact must be text.", required=False),
        "destination": _text(3, "Destination must be at least 3 characters."),
        "departure_date": _departure_date(today),
        "preferred_vehicle": _vehicle,
        "allergies_or_requests": _text(0, "Special requests must be text.", required=False),
    }


@dataclass(frozen=True)
class BookingSchema:
    """Field rules for one validation pass; guardian fields are required only for minors."""

    is_under_age: bool
    today: date
    age: int | None = None

    def validate(self, values: Mapping[str, Any] | BookingDraft, fields: Iterable[str] | None = None) -> ValidationReport:
        data = values.to_dict() if isinstance(values, BookingDraft) else dict(values or {})
        names = tuple(fields) if fields is not None else all_fields()
        if not names:
            return ValidationReport()

        rules = _rules(self.today)
        unknown = [n for n in names if n not in rules]
        if unknown:
            raise ValueError(f"Unknown booking fields: {unknown}")

        model = create_model(
            "BookingFields",
            __config__=ConfigDict(extra="ignore"),
            **{
                name: (Annotated[Any, AfterValidator(rules[name])], Field(default=None, validate_default=True))
                for name in names
            },
        )

        messages: dict[str, str] = {}
        try:
            model.model_validate({n: data.get(n) for n in names})
        except ValidationError as e:
            for err in e.errors():
                loc = err.get("loc") or ()
                if loc:
                    messages.setdefault(str(loc[0]), err.get("msg", "Invalid value."))

        if self.is_under_age:
            missing = guardian_field_errors(data.get("guardian_name"), data.get("guardian_contact"))
            for name, message in missing.items():
                if name in names:
                    messages.setdefault(name, message)

        return ValidationReport(
            results={
                name: FieldResult(field=name, valid=name not in messages, message=messages.get(name))
                for name in names
            }
        )


def build_booking_schema(is_under_age: bool, today: date | None = None, age: int | None = None) -> BookingSchema:
    return BookingSchema(is_under_age=is_under_age, today=today or date.today(), age=age)


def derive_schema(values: Mapping[str, Any] | BookingDraft, today: date | None = None) -> BookingSchema:
    """Rebuild the schema from the current birth date. Call right before every validation pass."""
    today = today or date.today()
    data = values.to_dict() if isinstance(values, BookingDraft) else values
    age = try_calculate_age(data.get("date_of_birth"), today)
    return build_booking_schema(is_under_minimum_age(age), today, age)

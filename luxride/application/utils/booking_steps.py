from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StepDefinition:
    ordinal: int
    name: str
    fields: tuple[str, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return not self.fields


BOOKING_FORM_STEPS: tuple[StepDefinition, ...] = (
    StepDefinition(
        1,
        "Personal Info",
        ("full_name", "date_of_birth", "contact_details", "guardian_name", "guardian_contact"),
    ),
    StepDefinition(2, "Trip Details", ("destination", "departure_date", "preferred_vehicle")),
    StepDefinition(3, "Special Requests", ("allergies_or_requests",)),
    StepDefinition(4, "Review & Confirm"),  # whole-record validation only
)

TOTAL_STEPS = len(BOOKING_FORM_STEPS)
LAST_ENTRY_STEP = TOTAL_STEPS - 1


def get_step(ordinal: int) -> StepDefinition:
    if ordinal < 1 or ordinal > TOTAL_STEPS:
        raise ValueError(f"Step must be between 1 and {TOTAL_STEPS}, got {ordinal}.")
    return BOOKING_FORM_STEPS[ordinal - 1]


def all_fields() -> tuple[str, ...]:
    return tuple(name for step in BOOKING_FORM_STEPS for name in step.fields)

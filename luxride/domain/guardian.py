"""Guardian rule for passengers below the minimum booking age."""

MIN_AGE = 18

GUARDIAN_REQUIRED_MESSAGE = f"Guardian details are required for passengers under {MIN_AGE}."

# field -> (minimum stripped length, message)
GUARDIAN_FIELDS: dict[str, tuple[int, str]] = {
    "guardian_name": (2, "Guardian name is required."),
    "guardian_contact": (5, "Guardian contact is required."),
}


def is_under_minimum_age(age: int | None) -> bool:
    return age is not None and age < MIN_AGE


def guardian_field_errors(guardian_name: str | None, guardian_contact: str | None) -> dict[str, str]:
    """Per-field messages for missing or too-short guardian details, as required of a minor."""
    values = {"guardian_name": guardian_name, "guardian_contact": guardian_contact}
    errors = {}
    for name, (min_length, message) in GUARDIAN_FIELDS.items():
        value = values[name]
        if not isinstance(value, str) or len(value.strip()) < min_length:
            errors[name] = message
    return errors


def guardian_requirement_met(age: int | None, guardian_name: str | None, guardian_contact: str | None) -> bool:
    """True when the passenger is of age, or a minor with both guardian fields filled in."""
    if not is_under_minimum_age(age):
        return True
    return not guardian_field_errors(guardian_name, guardian_contact)

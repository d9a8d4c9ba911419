from __future__ import annotations

from dataclasses import dataclass, field

from luxride.domain.entities.booking import BookingDraft


@dataclass(frozen=True)
class WizardState:
    step: int = 1
    draft: BookingDraft = field(default_factory=BookingDraft)


@dataclass(frozen=True)
class WizardSession:
    session_id: str
    owner_id: str
    state: WizardState = field(default_factory=WizardState)
    updated_at: float | None = None

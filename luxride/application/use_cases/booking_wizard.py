from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Mapping

from luxride.application.exceptions import SessionNotFoundError
from luxride.application.ports.wizard_session_store import WizardSessionStorePort
from luxride.application.utils.age import try_calculate_age
from luxride.application.utils.booking_steps import LAST_ENTRY_STEP, TOTAL_STEPS, get_step
from luxride.application.utils.booking_validation import derive_schema
from luxride.application.utils.session_locks import SessionLocks
from luxride.domain.entities.wizard_state import WizardSession, WizardState
from luxride.domain.guardian import is_under_minimum_age


@dataclass(frozen=True)
class StepResult:
    action: str  # "advanced", "review", "at_review", "invalid", "retreated", "reset"
    updated_state: WizardState
    errors: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ReviewResult:
    state: WizardState
    ready: bool
    age: int | None
    requires_guardian: bool
    errors: dict[str, str] = field(default_factory=dict)


class BookingWizard:
    """
    Step machine for the booking form.

    States are the step ordinals 1..TOTAL_STEPS. Only `advance` validates, and
    only the fields owned by the current step. The last step (Review & Confirm)
    owns no fields; it is checked as a whole by `review`.
    """

    def __init__(self, clock: Callable[[], date] = date.today) -> None:
        self._clock = clock

    def advance(self, state: WizardState, values: Mapping[str, Any] | None) -> StepResult:
        step = get_step(state.step)
        if step.is_terminal:
            return StepResult(action="at_review", updated_state=state)

        candidate = state.draft.merge(values)
        # Schema comes from the candidate so a birth date typed in this pass decides guardian fields.
        schema = derive_schema(candidate, self._clock())
        report = schema.validate(candidate, step.fields)
        if not report.valid:
            return StepResult(action="invalid", updated_state=state, errors=report.errors)

        next_step = min(state.step + 1, TOTAL_STEPS)
        action = "review" if state.step == LAST_ENTRY_STEP else "advanced"
        return StepResult(action=action, updated_state=WizardState(step=next_step, draft=candidate))

    def retreat(self, state: WizardState, values: Mapping[str, Any] | None) -> StepResult:
        draft = state.draft.merge(values)
        return StepResult(
            action="retreated",
            updated_state=WizardState(step=max(1, state.step - 1), draft=draft),
        )

    def reset(self) -> StepResult:
        return StepResult(action="reset", updated_state=WizardState())

    def review(self, state: WizardState) -> ReviewResult:
        today = self._clock()
        report = derive_schema(state.draft, today).validate(state.draft)
        age = try_calculate_age(state.draft.date_of_birth, today)
        return ReviewResult(
            state=state,
            ready=report.valid and not state.draft.is_empty(),
            age=age,
            requires_guardian=is_under_minimum_age(age),
            errors=report.errors,
        )


class BookingWizardUseCase:
    def __init__(
        self,
        sessions: WizardSessionStorePort,
        locks: SessionLocks,
        wizard: BookingWizard | None = None,
    ) -> None:
        self._sessions = sessions
        self._locks = locks
        self._wizard = wizard or BookingWizard()
        self._logger = logging.getLogger(__name__)

    def start(self, owner_id: str) -> WizardSession:
        session = self._sessions.create(owner_id, WizardState())
        self._logger.info("Booking wizard started", extra={"owner_id": owner_id, "session_id": session.session_id})
        return session

    def get(self, session_id: str, owner_id: str) -> WizardSession:
        session = self._sessions.get(session_id)
        if session is None or session.owner_id != owner_id:
            raise SessionNotFoundError(f"Booking session {session_id} not found.")
        return session

    def next(self, session_id: str, owner_id: str, values: Mapping[str, Any] | None) -> StepResult:
        return self._transition(session_id, owner_id, lambda s: self._wizard.advance(s, values))

    def previous(self, session_id: str, owner_id: str, values: Mapping[str, Any] | None = None) -> StepResult:
        return self._transition(session_id, owner_id, lambda s: self._wizard.retreat(s, values))

    def reset(self, session_id: str, owner_id: str) -> StepResult:
        return self._transition(session_id, owner_id, lambda s: self._wizard.reset())

    def review(self, session_id: str, owner_id: str) -> ReviewResult:
        session = self.get(session_id, owner_id)
        return self._wizard.review(session.state)

    def discard(self, session_id: str, owner_id: str) -> None:
        with self._locks.hold(session_id):
            self.get(session_id, owner_id)
            self._sessions.delete(session_id)
            self._locks.forget(session_id)
        self._logger.info("Booking wizard discarded", extra={"owner_id": owner_id, "session_id": session_id})

    def _transition(
        self,
        session_id: str,
        owner_id: str,
        apply: Callable[[WizardState], StepResult],
    ) -> StepResult:
        with self._locks.hold(session_id):
            session = self.get(session_id, owner_id)
            result = apply(session.state)
            if result.action == "invalid":
                self._logger.info(
                    "Booking step rejected",
                    extra={"session_id": session_id, "step": session.state.step, "reason": ",".join(result.errors)},
                )
                return result
            if result.updated_state != session.state:
                self._sessions.save(session_id, result.updated_state)
                self._locks.forget(session_id)
            self._logger.info(
                "Booking step %s",
                result.action,
                extra={"session_id": session_id, "step": result.updated_state.step},
            )
            return result


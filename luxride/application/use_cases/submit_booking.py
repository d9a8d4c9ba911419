from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable

from luxride.application.exceptions import GuardianRequiredError, StoreError, WizardBusyError
from luxride.application.ports.booking_store import BookingStorePort
from luxride.application.ports.wizard_session_store import WizardSessionStorePort
from luxride.application.use_cases.booking_wizard import BookingWizard, BookingWizardUseCase
from luxride.application.utils.age import try_calculate_age
from luxride.application.utils.booking_validation import derive_schema
from luxride.application.utils.session_locks import SessionLocks
from luxride.domain.entities.booking import BookingDraft, ConfirmedBooking
from luxride.domain.guardian import GUARDIAN_REQUIRED_MESSAGE, guardian_requirement_met

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


@dataclass(frozen=True)
class SubmissionResult:
    status: str  # "confirmed", "invalid", "guardian_required", "in_progress", "failed", "error"
    message: str
    booking: ConfirmedBooking | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status == "confirmed"


class SubmitBookingUseCase:
    """
    Hand a finished draft to the booking store.

    The guardian rule and the full field rules are checked again here, so a
    draft that slipped past step validation never reaches the store. Any
    failure leaves the wizard session exactly as it was; only a confirmed
    booking resets it.
    """

    def __init__(
        self,
        store: BookingStorePort,
        sessions: WizardSessionStorePort,
        locks: SessionLocks,
        wizard_use_case: BookingWizardUseCase,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._sessions = sessions
        self._locks = locks
        self._wizard_use_case = wizard_use_case
        self._wizard = BookingWizard(clock=clock)
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def execute(self, session_id: str, owner_id: str) -> SubmissionResult:
        try:
            with self._locks.hold(session_id):
                session = self._wizard_use_case.get(session_id, owner_id)
                return self._submit(session_id, owner_id, session.state.draft)
        except WizardBusyError:
            self._logger.info("Duplicate submission rejected", extra={"session_id": session_id})
            return SubmissionResult(
                status="in_progress",
                message="A booking submission is already in progress.",
            )

    def _submit(self, session_id: str, owner_id: str, draft: BookingDraft) -> SubmissionResult:
        if draft.is_empty():
            return SubmissionResult(status="invalid", message="Please start your booking from the beginning.")

        confirmed = self._locks.unreset_booking(session_id, draft)
        if confirmed is not None:
            self._logger.info(
                "Submission already confirmed",
                extra={"session_id": session_id, "owner_id": owner_id, "booking_id": confirmed.id},
            )
            return self._confirm(session_id, owner_id, draft, confirmed)

        today = self._clock()
        age = try_calculate_age(draft.date_of_birth, today)
        if not guardian_requirement_met(age, draft.guardian_name, draft.guardian_contact):
            self._logger.info(
                "Submission blocked",
                extra={"session_id": session_id, "owner_id": owner_id, "reason": "guardian_required"},
            )
            return SubmissionResult(status="guardian_required", message=GUARDIAN_REQUIRED_MESSAGE)

        report = derive_schema(draft, today).validate(draft)
        if not report.valid:
            return SubmissionResult(
                status="invalid",
                message="Please correct the errors in the form before confirming.",
                errors=report.errors,
            )

        try:
            booking = self._store.create_booking(draft, owner_id, age)
        except (GuardianRequiredError, StoreError) as e:
            self._logger.error(
                "Booking store rejected submission",
                extra={"session_id": session_id, "owner_id": owner_id, "reason": str(e)},
            )
            return SubmissionResult(status="failed", message=str(e) or "Failed to confirm booking. Please try again.")
        except Exception:
            self._logger.exception("Unexpected error creating booking", extra={"session_id": session_id})
            return SubmissionResult(status="error", message=UNEXPECTED_ERROR_MESSAGE)

        return self._confirm(session_id, owner_id, draft, booking)

    def _confirm(
        self,
        session_id: str,
        owner_id: str,
        draft: BookingDraft,
        booking: ConfirmedBooking,
    ) -> SubmissionResult:
        # The booking is stored; a failed reset is logged and never reported as a failure.
        try:
            self._sessions.save(session_id, self._wizard.reset().updated_state)
        except StoreError as e:
            self._locks.remember_unreset(session_id, draft, booking)
            self._logger.error(
                "Booking confirmed but session reset failed",
                extra={"session_id": session_id, "owner_id": owner_id, "booking_id": booking.id, "reason": str(e)},
            )
        else:
            self._locks.forget(session_id)
            self._logger.info(
                "Booking confirmed",
                extra={"session_id": session_id, "owner_id": owner_id, "booking_id": booking.id},
            )
        return SubmissionResult(status="confirmed", message="Booking confirmed successfully!", booking=booking)

"""
Wizard state machine for the onboarding flow.

Navigation Rules:
=================
- Start on step 1 with no completed steps.
- advance: validates the current step. On success the step joins the
  completed set and the wizard moves forward (staying on the last step).
  On failure the wizard stays put and the errors are returned.
- retreat: always allowed above step 1. Completed steps stay completed,
  but the next advance still re-validates.
- jump_to(k): allowed when k is at or before the current step, or when
  step k-1 has been completed.
- submit: only from the review step, only when the review step and then
  the whole record validate. Success resets the record and closes the
  wizard. A submission failure leaves the wizard on the review step with
  the record intact.

The completed set only drives navigation. Submission always re-validates
the whole record.
"""

import threading
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Set

from onboarding.record import OnboardingRecord
from onboarding.schemas import FIRST_STEP, LAST_STEP, STEP_DETAILS, StepId
from onboarding.submission import SubmissionFailure, SubmissionReceipt, Submitter
from onboarding.validation import ValidationResult, validate_record, validate_step


class WizardClosed(Exception):
    """The wizard has already been submitted."""


class SubmissionInProgress(Exception):
    """Another submission of the same wizard has not finished yet."""


@dataclass
class SubmissionOutcome:
    """Result of a submit attempt."""
    status: str  # 'submitted', 'blocked' or 'failed'
    result: Optional[ValidationResult] = None
    receipt: Optional[SubmissionReceipt] = None
    reason: str = ''

    @property
    def ok(self) -> bool:
        return self.status == 'submitted'

    def to_dict(self) -> Dict[str, Any]:
        data = {'ok': self.ok, 'status': self.status}
        if self.result is not None:
            data['validation'] = self.result.to_dict()
        if self.receipt is not None:
            data['receipt'] = self.receipt.to_dict()
        if self.reason:
            data['reason'] = self.reason
        return data


class OnboardingWizard:
    """Step-gated editing of one onboarding record."""

    def __init__(self, record: Optional[OnboardingRecord] = None,
                 clock: Optional[Callable[[], date]] = None):
        self.record = record if record is not None else OnboardingRecord()
        self._clock = clock or date.today
        self.current_step: StepId = FIRST_STEP
        self.completed_steps: Set[int] = set()
        self.submitted = False
        self._submit_lock = threading.Lock()

    def today(self) -> date:
        return self._clock()

    @property
    def is_submitting(self) -> bool:
        """True while a submission is pending."""
        return self._submit_lock.locked()

    def _ensure_open(self):
        if self.submitted:
            raise WizardClosed('This onboarding record has already been submitted')

    # Validation

    def validate_step(self, step: Optional[int] = None) -> ValidationResult:
        """Validate a step (the current one by default) without navigating."""
        return validate_step(step or self.current_step, self.record, self.today())

    # Navigation

    def advance(self) -> ValidationResult:
        """Validate the current step and move forward if it passes."""
        self._ensure_open()
        result = validate_step(self.current_step, self.record, self.today())
        if result.is_valid:
            self.completed_steps.add(int(self.current_step))
            if self.current_step < LAST_STEP:
                self.current_step = StepId(self.current_step + 1)
        return result

    def retreat(self) -> bool:
        """Go back one step. Returns False on the first step."""
        self._ensure_open()
        if self.current_step <= FIRST_STEP:
            return False
        self.current_step = StepId(self.current_step - 1)
        return True

    def can_jump_to(self, step: int) -> bool:
        if self.submitted:
            return False
        if step < FIRST_STEP or step > LAST_STEP:
            return False
        return step <= self.current_step or (step - 1) in self.completed_steps

    def jump_to(self, step: int) -> bool:
        """Move directly to a step if it has been reached. Returns False otherwise."""
        self._ensure_open()
        if not self.can_jump_to(step):
            return False
        self.current_step = StepId(step)
        return True

    # Submission

    def submit(self, submitter: Submitter) -> SubmissionOutcome:
        """
        Validate the whole record and hand it to ``submitter``.

        Raises:
            WizardClosed: if already submitted
            SubmissionInProgress: if another submit call is still running
        """
        self._ensure_open()
        if not self._submit_lock.acquire(blocking=False):
            raise SubmissionInProgress('A submission is already in progress')

        try:
            if self.current_step != LAST_STEP:
                return SubmissionOutcome('blocked', reason='Submission is only possible from the review step')

            today = self.today()
            review_result = validate_step(LAST_STEP, self.record, today)
            if not review_result.is_valid:
                return SubmissionOutcome('blocked', result=review_result)

            result = validate_record(self.record, today)
            if not result.is_valid:
                return SubmissionOutcome('blocked', result=result)

            try:
                receipt = submitter.submit(self.record.to_dict())
            except SubmissionFailure as e:
                return SubmissionOutcome('failed', result=result, reason=e.reason)

            self.completed_steps.add(int(LAST_STEP))
            self.record.reset()
            self.submitted = True
            return SubmissionOutcome('submitted', result=result, receipt=receipt)
        finally:
            self._submit_lock.release()

    def restart(self):
        """Start a fresh record from step 1."""
        self.record.reset()
        self.current_step = FIRST_STEP
        self.completed_steps = set()
        self.submitted = False

    # Presentation

    def steps_overview(self) -> List[Dict[str, Any]]:
        """Per-step progress for a progress indicator."""
        overview = []
        for step in StepId:
            title, description = STEP_DETAILS[step]
            overview.append({
                'id': int(step),
                'title': title,
                'description': description,
                'completed': int(step) in self.completed_steps,
                'current': step == self.current_step and not self.submitted,
                'reachable': self.can_jump_to(step),
            })
        return overview

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current_step': int(self.current_step),
            'completed_steps': sorted(self.completed_steps),
            'submitted': self.submitted,
            'submitting': self.is_submitting,
            'steps': self.steps_overview(),
            'record': self.record.to_dict(),
        }

"""
Step and whole-record validation for onboarding records.

``validate_step`` runs one step's field rules, the conditional obligations
currently in force for that step, and the step's cross-field refinements.
It always collects the complete error set for the step: rule lists stop at
the first failure within a field, never across fields.

``validate_record`` is the composite check run at submission. It
re-validates every step against the full record and does not trust that
step-by-step gating happened, so records changed after a step was marked
complete are still caught.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from onboarding.obligations import obligations_for_step
from onboarding.record import OnboardingRecord
from onboarding.rules import Rule, run_rules
from onboarding.schemas import StepId, build_step_schema


@dataclass
class ValidationError:
    """Represents a single validation error with precise field path."""
    field: str
    message: str
    code: str
    step: int = 0  # For grouping errors by step


@dataclass
class ValidationResult:
    """Container for validation results."""
    errors: List[ValidationError] = field(default_factory=list)
    is_valid: bool = True
    step: Optional[int] = None  # None when the whole record was validated

    def add_error(self, field: str, message: str, code: str = 'invalid', step: int = 0):
        """Add a validation error."""
        self.errors.append(ValidationError(field, message, code, step))
        self.is_valid = False

    def has_error(self, field: str) -> bool:
        return any(e.field == field for e in self.errors)

    def merge(self, other: 'ValidationResult'):
        """Append another result's errors to this one."""
        for error in other.errors:
            self.add_error(error.field, error.message, error.code, error.step)

    @property
    def field_errors(self) -> Dict[str, str]:
        """First error message per field, in error order."""
        by_field = {}
        for error in self.errors:
            by_field.setdefault(error.field, error.message)
        return by_field

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            'ok': self.is_valid,
            'step': self.step,
            'errors': [
                {'field': e.field, 'message': e.message, 'code': e.code, 'step': e.step}
                for e in self.errors
            ],
            'field_errors': self.field_errors,
        }

    def get_errors_by_step(self) -> Dict[int, List[ValidationError]]:
        """Group errors by step for UI display."""
        by_step = {}
        for error in self.errors:
            by_step.setdefault(error.step, []).append(error)
        return by_step


def validate_step(step: int, record: OnboardingRecord, today: Optional[date] = None) -> ValidationResult:
    """
    Validate one step of the record.

    Args:
        step: Step number (1-5)
        record: The full onboarding record
        today: Reference date for date rules (defaults to the system date)

    Returns:
        ValidationResult with every error for the step
    """
    if today is None:
        today = date.today()

    schema = build_step_schema(step, today)
    step_number = int(schema.step)
    result = ValidationResult(step=step_number)

    rules_by_field: Dict[str, List[Rule]] = {
        path: list(rules) for path, rules in schema.fields.items()
    }
    for obligation in obligations_for_step(schema.step, record, today):
        rules_by_field.setdefault(obligation.field, []).append(obligation.rule)

    for path, rules in rules_by_field.items():
        # Nested fields are not checked under a parent of the wrong shape
        parent = path.partition('.')[0]
        if parent != path and result.has_error(parent):
            continue
        outcome = run_rules(record.get_value(path), rules)
        if not outcome.ok:
            result.add_error(path, outcome.message, outcome.code, step_number)

    # A field that already failed its own rules keeps that single error
    for refinement in schema.refinements:
        for path, outcome in refinement(record, today):
            if not result.has_error(path):
                result.add_error(path, outcome.message, outcome.code, step_number)

    return result


def validate_record(record: OnboardingRecord, today: Optional[date] = None) -> ValidationResult:
    """
    Validate every step of the record as one operation.

    Returns:
        ValidationResult holding the union of all step errors
    """
    if today is None:
        today = date.today()

    result = ValidationResult()
    for step in StepId:
        result.merge(validate_step(step, record, today))
    return result


def validate_payload(payload: Dict[str, Any], today: Optional[date] = None) -> ValidationResult:
    """Validate a complete record supplied as a JSON payload."""
    return validate_record(OnboardingRecord.from_dict(payload), today)

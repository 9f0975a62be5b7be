"""
Conditional requirement resolver.

Some fields only become mandatory because of the value of another field,
possibly one captured on a different step:

- Employees under 21 (by date of birth, step 1) must give a guardian name
  and phone number (step 4). Both are checked independently.
- A remote work preference over 50% (step 3) requires manager approval
  (step 3). Approval must be ``True``; absent or ``False`` both fail.

Obligations are resolved from the whole record on every validation pass,
never cached, since the triggering fields can change between attempts.
"""

from dataclasses import dataclass
from datetime import date
from typing import List

from onboarding.record import OnboardingRecord
from onboarding.rules import MinLength, MustBeTrue, RegexMatch, Required, Rule, is_number
from onboarding.schemas import (
    MIN_PHONE_LENGTH, PHONE_FORMAT_MESSAGE, PHONE_PATTERN, StepId
)
from onboarding.utils import is_under_age


GUARDIAN_AGE_THRESHOLD = 21
REMOTE_APPROVAL_THRESHOLD = 50


@dataclass(frozen=True)
class Obligation:
    """A rule that applies to a field only under a record-wide condition."""
    step: StepId
    field: str
    rule: Rule
    reason: str


def guardian_obligations(record: OnboardingRecord, today: date) -> List[Obligation]:
    if not is_under_age(record.date_of_birth, GUARDIAN_AGE_THRESHOLD, today):
        return []

    reason = f'under_{GUARDIAN_AGE_THRESHOLD}'
    step = StepId.EMERGENCY_CONTACT
    return [
        Obligation(step, 'guardian_name',
                   Required(f'Guardian name is required for employees under {GUARDIAN_AGE_THRESHOLD}'),
                   reason),
        Obligation(step, 'guardian_phone_number',
                   Required(f'Guardian phone number is required for employees under {GUARDIAN_AGE_THRESHOLD}'),
                   reason),
        Obligation(step, 'guardian_phone_number',
                   MinLength(MIN_PHONE_LENGTH, 'Guardian phone number must be at least 10 digits'),
                   reason),
        Obligation(step, 'guardian_phone_number',
                   RegexMatch(PHONE_PATTERN, PHONE_FORMAT_MESSAGE),
                   reason),
    ]


def remote_work_obligations(record: OnboardingRecord, today: date) -> List[Obligation]:
    preference = record.remote_work_preference
    if not is_number(preference):
        return []
    if preference <= REMOTE_APPROVAL_THRESHOLD:
        return []

    return [
        Obligation(StepId.SKILLS_PREFERENCES, 'manager_approved',
                   MustBeTrue(f'Manager approval required for remote work over {REMOTE_APPROVAL_THRESHOLD}%'),
                   f'remote_over_{REMOTE_APPROVAL_THRESHOLD}'),
    ]


RESOLVERS = [guardian_obligations, remote_work_obligations]


def resolve_obligations(record: OnboardingRecord, today: date) -> List[Obligation]:
    """All obligations currently in force for the record."""
    obligations = []
    for resolver in RESOLVERS:
        obligations.extend(resolver(record, today))
    return obligations


def obligations_for_step(step: int, record: OnboardingRecord, today: date) -> List[Obligation]:
    """Obligations in force that attach to fields of ``step``."""
    return [o for o in resolve_obligations(record, today) if o.step == step]

"""
Per-step validation schemas for the onboarding wizard.

Validation Rules Documentation:
===============================

1. PERSONAL INFO (Step 1)
   - Full name: required, max 100 chars
   - Email: required, valid format
   - Phone: required, at least 10 chars, digits/spaces/hyphens/parens only
   - DOB: required, valid date between 1900-01-01 and today, must be 18+
   - Profile picture: optional; at most 2MB; JPG or PNG only

2. JOB DETAILS (Step 2)
   - Department: required enum value
   - Position title: required, at least 3 chars
   - Start date: required, between today and today + 90 days
   - Job type: required enum value
   - Salary expectation: required number
   - Manager: required

3. SKILLS & PREFERENCES (Step 3)
   - Primary skills: at least 3
   - Working hours: start and end required, HH:MM (24 hour)
   - Remote work preference: required whole number 0-100
   - Extra notes: optional, max 500 chars

4. EMERGENCY CONTACT (Step 4)
   - Contact name, relationship (enum) and phone required

5. REVIEW (Step 5)
   - Information must be confirmed

Cross-Field Refinements:
========================
- Salary band is chosen by job type: Contract is an hourly rate of
  50-150, every other job type an annual salary of 30,000-200,000.
  A value is never accepted just because it fits the other band.
- HR and Finance employees cannot start on a Friday or Saturday.
- The manager must belong to the selected department.
- Every primary skill must be in the selected department's catalog.
- Experience entries must match the primary skills exactly, each a
  whole number of years from 0 to 20.

Requirements that depend on other fields (guardian contact, manager
approval) live in ``onboarding.obligations``.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import IntEnum
from typing import Callable, Dict, List, Tuple

from onboarding.lookups import (
    DEPARTMENTS, JOB_TYPES, RELATIONSHIPS, get_manager, skills_for_department
)
from onboarding.record import OnboardingRecord, ProfilePicture, WorkingHours
from onboarding.rules import (
    DateRange, EnumMembership, FileConstraint, InstanceOf, MaxLength, MinItems,
    MinLength, MinimumAge, MustBeTrue, NumberRange, RegexMatch, Required,
    Rule, RuleOutcome, is_number, run_rules
)
from onboarding.utils import TIME_OF_DAY_PATTERN, parse_date


class StepId(IntEnum):
    """Wizard steps in order."""
    PERSONAL_INFO = 1
    JOB_DETAILS = 2
    SKILLS_PREFERENCES = 3
    EMERGENCY_CONTACT = 4
    REVIEW = 5


FIRST_STEP = StepId.PERSONAL_INFO
LAST_STEP = StepId.REVIEW

STEP_DETAILS = {
    StepId.PERSONAL_INFO: ('Personal', 'Basic info'),
    StepId.JOB_DETAILS: ('Job Details', 'Role & salary'),
    StepId.SKILLS_PREFERENCES: ('Skills', 'Abilities'),
    StepId.EMERGENCY_CONTACT: ('Emergency', 'Contact info'),
    StepId.REVIEW: ('Review', 'Confirm all'),
}

# Constants for validation
MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 254
MAX_NOTES_LENGTH = 500
MIN_PHONE_LENGTH = 10
MIN_POSITION_TITLE_LENGTH = 3
MIN_EMPLOYEE_AGE = 18
EARLIEST_DATE_OF_BIRTH = date(1900, 1, 1)
START_DATE_WINDOW_DAYS = 90
MIN_PRIMARY_SKILLS = 3
MAX_SKILL_YEARS = 20
MAX_PROFILE_PICTURE_BYTES = 2 * 1024 * 1024
PROFILE_PICTURE_MIME_TYPES = ('image/jpeg', 'image/jpg', 'image/png')

CONTRACT_JOB_TYPE = 'Contract'
HOURLY_SALARY_BAND = (50, 150)
ANNUAL_SALARY_BAND = (30000, 200000)

WEEKEND_RESTRICTED_DEPARTMENTS = ('HR', 'Finance')
RESTRICTED_START_WEEKDAYS = (4, 5)  # Friday, Saturday

# Regex patterns
EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
PHONE_PATTERN = r'^[0-9\s\-+()]{8,20}$'

PHONE_MIN_MESSAGE = 'Phone number must be at least 10 digits'
PHONE_FORMAT_MESSAGE = 'Please enter a valid phone number'
TIME_FORMAT_MESSAGE = 'Time must be in HH:MM format'

FieldFailure = Tuple[str, RuleOutcome]
Refinement = Callable[[OnboardingRecord, date], List[FieldFailure]]


@dataclass
class StepSchema:
    """Field rules and whole-record refinements for one step."""
    step: StepId
    title: str
    description: str
    fields: Dict[str, List[Rule]]
    refinements: List[Refinement] = field(default_factory=list)


def phone_rules(required_message: str = 'Phone number is required') -> List[Rule]:
    return [
        Required(required_message),
        MinLength(MIN_PHONE_LENGTH, PHONE_MIN_MESSAGE),
        RegexMatch(PHONE_PATTERN, PHONE_FORMAT_MESSAGE),
    ]


def salary_band_for(job_type: str) -> Tuple[int, int]:
    """Salary band for a job type: hourly for contracts, annual otherwise."""
    if job_type == CONTRACT_JOB_TYPE:
        return HOURLY_SALARY_BAND
    return ANNUAL_SALARY_BAND


# Refinements

def refine_salary_band(record: OnboardingRecord, today: date) -> List[FieldFailure]:
    """Check the salary against the band selected by job type."""
    salary = record.salary_expectation
    if not is_number(salary):
        return []

    low, high = salary_band_for(record.job_type)
    if record.job_type == CONTRACT_JOB_TYPE:
        message = f'Hourly rate must be between ${low} and ${high}'
    else:
        message = f'Annual salary must be between ${low:,} and ${high:,}'

    outcome = NumberRange(low, high, message=message).check(salary)
    if not outcome.ok:
        return [('salary_expectation', outcome)]
    return []


def refine_start_weekday(record: OnboardingRecord, today: date) -> List[FieldFailure]:
    """HR and Finance employees cannot start on a Friday or Saturday."""
    if record.department not in WEEKEND_RESTRICTED_DEPARTMENTS:
        return []
    start = parse_date(record.start_date)
    if start is None:
        return []
    if start.weekday() in RESTRICTED_START_WEEKDAYS:
        return [('start_date', RuleOutcome(
            False, 'HR and Finance employees cannot start on a Friday or Saturday', 'restricted_weekday'
        ))]
    return []


def refine_manager_department(record: OnboardingRecord, today: date) -> List[FieldFailure]:
    """The chosen manager must exist and belong to the selected department."""
    if not record.manager_id:
        return []
    manager = get_manager(record.manager_id)
    if manager is None:
        return [('manager_id', RuleOutcome(False, 'Selected manager does not exist', 'invalid_reference'))]
    if manager.department != record.department:
        return [('manager_id', RuleOutcome(
            False, 'Selected manager does not belong to the selected department', 'invalid_reference'
        ))]
    return []


def refine_skill_catalog(record: OnboardingRecord, today: date) -> List[FieldFailure]:
    """Every primary skill must come from the department's catalog."""
    skills = record.primary_skills
    if not isinstance(skills, (list, tuple)) or not skills:
        return []
    if not all(isinstance(skill, str) for skill in skills):
        return [('primary_skills', RuleOutcome(False, 'Skills must be given by name', 'type'))]
    catalog = skills_for_department(record.department)
    if not catalog:
        return [('primary_skills', RuleOutcome(
            False, 'Please select a department before choosing skills', 'enum'
        ))]
    unknown = [skill for skill in skills if skill not in catalog]
    if unknown:
        return [('primary_skills', RuleOutcome(
            False, f'Not available for the selected department: {", ".join(unknown)}', 'enum'
        ))]
    return []


def refine_skill_experience(record: OnboardingRecord, today: date) -> List[FieldFailure]:
    """Experience keys must equal the primary skills; each value 0-20 years."""
    skills = record.primary_skills
    experience = record.skill_experience
    if not isinstance(skills, (list, tuple)) or not all(isinstance(skill, str) for skill in skills):
        return []
    if not isinstance(experience, dict):
        return [('skill_experience', RuleOutcome(
            False, 'Experience must map each skill to a number of years', 'type'
        ))]

    failures = []
    if set(experience.keys()) != set(skills):
        failures.append(('skill_experience', RuleOutcome(
            False, 'Experience entries must match the selected skills exactly', 'mismatch'
        )))

    year_rules = [
        Required('Years of experience is required'),
        NumberRange(0, MAX_SKILL_YEARS, integer=True,
                    message=f'Experience must be between 0 and {MAX_SKILL_YEARS} years'),
    ]
    for skill in skills:
        if skill not in experience:
            continue
        outcome = run_rules(experience[skill], year_rules)
        if not outcome.ok:
            failures.append((f'skill_experience.{skill}', outcome))

    return failures


# Schemas

def personal_info_schema(today: date) -> StepSchema:
    return StepSchema(
        step=StepId.PERSONAL_INFO,
        title=STEP_DETAILS[StepId.PERSONAL_INFO][0],
        description=STEP_DETAILS[StepId.PERSONAL_INFO][1],
        fields={
            'full_name': [
                Required('Full name is required'),
                MaxLength(MAX_NAME_LENGTH),
            ],
            'email': [
                Required('Email is required'),
                MaxLength(MAX_EMAIL_LENGTH, 'Email address is too long'),
                RegexMatch(EMAIL_PATTERN, 'Please enter a valid email address'),
            ],
            'phone_number': phone_rules(),
            'date_of_birth': [
                Required('Date of birth is required'),
                DateRange(EARLIEST_DATE_OF_BIRTH, today,
                          min_message='Date of birth cannot be before 1900',
                          max_message='Date of birth cannot be in the future'),
                MinimumAge(MIN_EMPLOYEE_AGE, today, f'Must be at least {MIN_EMPLOYEE_AGE} years old'),
            ],
            'profile_picture': [
                InstanceOf((ProfilePicture,), 'Profile picture details are invalid'),
                FileConstraint(MAX_PROFILE_PICTURE_BYTES, PROFILE_PICTURE_MIME_TYPES,
                               size_message='File size must be less than 2MB',
                               type_message='Only JPG and PNG files are allowed'),
            ],
        },
    )


def job_details_schema(today: date) -> StepSchema:
    return StepSchema(
        step=StepId.JOB_DETAILS,
        title=STEP_DETAILS[StepId.JOB_DETAILS][0],
        description=STEP_DETAILS[StepId.JOB_DETAILS][1],
        fields={
            'department': [
                Required('Please select a department'),
                EnumMembership(tuple(DEPARTMENTS)),
            ],
            'position_title': [
                Required('Position title is required'),
                MinLength(MIN_POSITION_TITLE_LENGTH, 'Position title must be at least 3 characters'),
                MaxLength(MAX_NAME_LENGTH),
            ],
            'start_date': [
                Required('Start date is required'),
                DateRange(today, today + timedelta(days=START_DATE_WINDOW_DAYS),
                          min_message='Start date cannot be in the past',
                          max_message='Start date cannot be more than 90 days in the future'),
            ],
            'job_type': [
                Required('Please select a job type'),
                EnumMembership(tuple(JOB_TYPES)),
            ],
            'salary_expectation': [
                Required('Salary expectation is required'),
                NumberRange(0, float('inf'), message='Salary expectation must be a positive number'),
            ],
            'manager_id': [
                Required('Please select a manager'),
            ],
        },
        refinements=[refine_salary_band, refine_start_weekday, refine_manager_department],
    )


def skills_preferences_schema(today: date) -> StepSchema:
    return StepSchema(
        step=StepId.SKILLS_PREFERENCES,
        title=STEP_DETAILS[StepId.SKILLS_PREFERENCES][0],
        description=STEP_DETAILS[StepId.SKILLS_PREFERENCES][1],
        fields={
            'primary_skills': [
                MinItems(MIN_PRIMARY_SKILLS, f'Please select at least {MIN_PRIMARY_SKILLS} skills'),
            ],
            'preferred_working_hours': [
                InstanceOf((WorkingHours,), 'Working hours must have a start and end time'),
            ],
            'preferred_working_hours.start': [
                Required('Start time is required'),
                RegexMatch(TIME_OF_DAY_PATTERN.pattern, TIME_FORMAT_MESSAGE),
            ],
            'preferred_working_hours.end': [
                Required('End time is required'),
                RegexMatch(TIME_OF_DAY_PATTERN.pattern, TIME_FORMAT_MESSAGE),
            ],
            'remote_work_preference': [
                Required('Remote work preference is required'),
                NumberRange(0, 100, integer=True,
                            message='Remote work preference must be between 0 and 100'),
            ],
            'extra_notes': [
                MaxLength(MAX_NOTES_LENGTH, 'Notes cannot exceed 500 characters'),
            ],
        },
        refinements=[refine_skill_catalog, refine_skill_experience],
    )


def emergency_contact_schema(today: date) -> StepSchema:
    return StepSchema(
        step=StepId.EMERGENCY_CONTACT,
        title=STEP_DETAILS[StepId.EMERGENCY_CONTACT][0],
        description=STEP_DETAILS[StepId.EMERGENCY_CONTACT][1],
        fields={
            'contact_name': [
                Required('Contact name is required'),
                MaxLength(MAX_NAME_LENGTH),
            ],
            'relationship': [
                Required('Please select a relationship'),
                EnumMembership(tuple(RELATIONSHIPS)),
            ],
            'contact_phone_number': phone_rules(),
        },
    )


def review_schema(today: date) -> StepSchema:
    return StepSchema(
        step=StepId.REVIEW,
        title=STEP_DETAILS[StepId.REVIEW][0],
        description=STEP_DETAILS[StepId.REVIEW][1],
        fields={
            'confirm_information': [
                MustBeTrue('You must confirm that all information is correct'),
            ],
        },
    )


SCHEMA_BUILDERS = {
    StepId.PERSONAL_INFO: personal_info_schema,
    StepId.JOB_DETAILS: job_details_schema,
    StepId.SKILLS_PREFERENCES: skills_preferences_schema,
    StepId.EMERGENCY_CONTACT: emergency_contact_schema,
    StepId.REVIEW: review_schema,
}


def build_step_schema(step: int, today: date) -> StepSchema:
    """
    Build the schema for a step.

    Date bounds depend on ``today``, so schemas are built per validation
    pass rather than cached.

    Raises:
        ValueError: if ``step`` is not a wizard step
    """
    return SCHEMA_BUILDERS[StepId(step)](today)

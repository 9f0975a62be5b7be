"""
Review summary for the final wizard step.

Builds a read-only, display-ready view of the record so the employee can
check everything before confirming. Lookup ids are resolved to names and
values are formatted; nothing here validates or mutates the record.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

from onboarding.lookups import get_manager
from onboarding.record import OnboardingRecord, ProfilePicture, WorkingHours
from onboarding.obligations import GUARDIAN_AGE_THRESHOLD, REMOTE_APPROVAL_THRESHOLD
from onboarding.rules import is_number
from onboarding.schemas import CONTRACT_JOB_TYPE
from onboarding.utils import (
    format_currency, format_date, format_file_size, format_percentage
)


NOT_PROVIDED = 'Not provided'


@dataclass
class ReviewRow:
    label: str
    value: str


@dataclass
class ReviewSection:
    """A card of the review page."""
    title: str
    rows: List[ReviewRow] = field(default_factory=list)

    def add(self, label: str, value: Any):
        self.rows.append(ReviewRow(label, value if value not in (None, '') else NOT_PROVIDED))


@dataclass
class ReviewSummary:
    """All review sections plus a few key facts."""
    sections: List[ReviewSection] = field(default_factory=list)
    age: Any = None
    requires_guardian: bool = False
    requires_manager_approval: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert summary to dictionary for API response."""
        return {
            'key_facts': {
                'age': self.age,
                'requires_guardian': self.requires_guardian,
                'requires_manager_approval': self.requires_manager_approval,
            },
            'sections': [
                {
                    'title': s.title,
                    'rows': [{'label': r.label, 'value': r.value} for r in s.rows],
                }
                for s in self.sections
            ],
        }


def _salary_label(record: OnboardingRecord) -> str:
    if record.salary_expectation in (None, ''):
        return ''
    amount = format_currency(record.salary_expectation)
    if record.job_type == CONTRACT_JOB_TYPE:
        return f'{amount} per hour'
    return f'{amount} per year'


def build_review_summary(record: OnboardingRecord, today: date) -> ReviewSummary:
    """
    Build the review summary for a record.

    Args:
        record: The onboarding record
        today: Reference date for the age shown next to the date of birth

    Returns:
        ReviewSummary with personal, job, skills and emergency sections
    """
    age = record.age(today)
    summary = ReviewSummary(age=age)

    # Personal information
    personal = ReviewSection('Personal Information')
    personal.add('Full Name', record.full_name)
    personal.add('Email', record.email)
    personal.add('Phone', record.phone_number)
    if age is not None:
        personal.add('Date of Birth', f'{format_date(record.date_of_birth)} (Age: {age})')
    else:
        personal.add('Date of Birth', format_date(record.date_of_birth))
    if isinstance(record.profile_picture, ProfilePicture):
        picture = record.profile_picture
        personal.add('Profile Picture', f'{picture.filename} ({format_file_size(picture.size)})')
    summary.sections.append(personal)

    # Job details
    job = ReviewSection('Job Details')
    job.add('Department', record.department)
    job.add('Position', record.position_title)
    job.add('Start Date', format_date(record.start_date))
    job.add('Job Type', record.job_type)
    job.add('Salary Expectation', _salary_label(record))
    manager = get_manager(record.manager_id)
    job.add('Manager', manager.name if manager else '')
    summary.sections.append(job)

    # Skills and preferences
    skills = ReviewSection('Skills & Preferences')
    experience = record.skill_experience if isinstance(record.skill_experience, dict) else {}
    skill_labels = [
        f'{skill} ({experience.get(skill, 0)} yrs)' for skill in record.primary_skills or []
    ]
    skills.add('Primary Skills', ', '.join(skill_labels))
    hours = record.preferred_working_hours
    if isinstance(hours, WorkingHours) and hours.start and hours.end:
        skills.add('Working Hours', f'{hours.start} - {hours.end}')
    else:
        skills.add('Working Hours', '')
    skills.add('Remote Work', format_percentage(record.remote_work_preference))
    remote = record.remote_work_preference
    if is_number(remote) and remote > REMOTE_APPROVAL_THRESHOLD:
        summary.requires_manager_approval = True
        skills.add('Manager Approval', 'Approved' if record.manager_approved is True else 'Not approved')
    if record.extra_notes:
        skills.add('Notes', record.extra_notes)
    summary.sections.append(skills)

    # Emergency contact
    emergency = ReviewSection('Emergency Contact')
    emergency.add('Contact Name', record.contact_name)
    emergency.add('Relationship', record.relationship)
    emergency.add('Phone', record.contact_phone_number)
    if age is not None and age < GUARDIAN_AGE_THRESHOLD:
        summary.requires_guardian = True
        emergency.add('Guardian Name', record.guardian_name)
        emergency.add('Guardian Phone', record.guardian_phone_number)
    summary.sections.append(emergency)

    return summary

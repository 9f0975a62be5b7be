"""
The onboarding record.

A single mutable aggregate holding every field of every step. Steps are
views over this record, never separate copies.

Record Invariants:
==================
- skill_experience has exactly one entry per selected primary skill.
  Selecting a skill adds a zero entry, deselecting removes it, and
  re-selecting starts again at zero.
- manager_id is cleared whenever department changes, since the manager
  directory is filtered by department.

The mutators below keep these invariants. ``from_dict`` loads data as
given, so records built from untrusted input can still violate them and
are caught by validation.
"""

import math
from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any, Dict, List, Optional

from onboarding.utils import calculate_age, parse_date


DATE_FIELDS = {'date_of_birth', 'start_date'}
NUMBER_FIELDS = {'salary_expectation'}
INTEGER_FIELDS = {'remote_work_preference'}
BOOLEAN_FIELDS = {'manager_approved', 'confirm_information'}


def coerce_to_bool(value: Any) -> Any:
    """Coerce 'true'/'false' style inputs to booleans, leaving other values as given."""
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', '1', 'yes', 'on'):
            return True
        if lowered in ('false', '0', 'no', 'off', ''):
            return False
    if isinstance(value, int) and value in (0, 1):
        return value == 1
    return value


def coerce_to_number(value: Any) -> Any:
    """Coerce numeric strings to int or float, leaving other values as given."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        str_value = value.strip().replace(',', '')
        if str_value == '':
            return None
        try:
            return int(str_value)
        except ValueError:
            pass
        try:
            number = float(str_value)
        except ValueError:
            return value
        # 'nan' and 'inf' parse as floats but are not amounts
        return number if math.isfinite(number) else value
    return value


def coerce_to_int(value: Any) -> Any:
    """Coerce whole numbers to int, leaving other values as given."""
    number = coerce_to_number(value)
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def coerce_to_date(value: Any) -> Any:
    """Parse date strings, leaving unparseable values as given so they fail validation."""
    if value is None or (isinstance(value, str) and value.strip() == ''):
        return None
    parsed = parse_date(value)
    return parsed if parsed is not None else value


@dataclass
class ProfilePicture:
    """Descriptor of an uploaded profile picture (the bytes stay with the uploader)."""
    filename: str = ''
    size: int = 0
    mime_type: str = ''

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['ProfilePicture']:
        if not data:
            return None
        return cls(
            filename=data.get('filename', ''),
            size=coerce_to_int(data.get('size')),
            mime_type=data.get('mime_type', '')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'filename': self.filename, 'size': self.size, 'mime_type': self.mime_type}


@dataclass
class WorkingHours:
    """Preferred working hours as HH:MM strings."""
    start: str = '09:00'
    end: str = '17:00'

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'WorkingHours':
        if not data:
            return cls()
        return cls(start=data.get('start', ''), end=data.get('end', ''))

    def to_dict(self) -> Dict[str, str]:
        return {'start': self.start, 'end': self.end}


@dataclass
class OnboardingRecord:
    """All onboarding fields across all steps."""
    # Step 1: personal info
    full_name: str = ''
    email: str = ''
    phone_number: str = ''
    date_of_birth: Any = None
    profile_picture: Optional[ProfilePicture] = None

    # Step 2: job details
    department: str = ''
    position_title: str = ''
    start_date: Any = None
    job_type: str = ''
    salary_expectation: Any = None
    manager_id: str = ''

    # Step 3: skills and preferences
    primary_skills: List[str] = field(default_factory=list)
    skill_experience: Dict[str, Any] = field(default_factory=dict)
    preferred_working_hours: WorkingHours = field(default_factory=WorkingHours)
    remote_work_preference: Any = 0
    manager_approved: Optional[bool] = None
    extra_notes: str = ''

    # Step 4: emergency contact
    contact_name: str = ''
    relationship: str = ''
    contact_phone_number: str = ''
    guardian_name: str = ''
    guardian_phone_number: str = ''

    # Step 5: review
    confirm_information: bool = False

    # Field access

    def get_value(self, path: str) -> Any:
        """
        Read a field by path.

        Nested values use dotted paths: ``preferred_working_hours.start``,
        ``skill_experience.Python``.
        """
        name, _, rest = path.partition('.')
        if name not in FIELD_NAMES:
            raise KeyError(path)
        value = getattr(self, name)
        if not rest:
            return value
        if name == 'skill_experience':
            return value.get(rest) if isinstance(value, dict) else None
        if name == 'preferred_working_hours' and rest in ('start', 'end'):
            return getattr(value, rest, None)
        raise KeyError(path)

    def set_value(self, path: str, value: Any):
        """
        Write a field by path, coercing raw input and keeping invariants.

        Raises:
            KeyError: unknown path, or experience for an unselected skill
            ValueError: a list or object field given a value of the wrong shape
        """
        name, _, rest = path.partition('.')
        if name not in FIELD_NAMES:
            raise KeyError(path)

        if name == 'department':
            self.set_department(value)
        elif name == 'primary_skills':
            if value and not isinstance(value, (list, tuple)):
                raise ValueError(f'{path} must be a list')
            if any(not isinstance(skill, str) for skill in value or []):
                raise ValueError(f'{path} must be a list of skill names')
            self.set_primary_skills(value or [])
        elif name == 'skill_experience':
            if rest:
                self.set_skill_experience(rest, value)
            else:
                if value and not isinstance(value, dict):
                    raise ValueError(f'{path} must be an object')
                for skill, years in (value or {}).items():
                    self.set_skill_experience(skill, years)
        elif name == 'preferred_working_hours':
            if rest in ('start', 'end'):
                setattr(self.preferred_working_hours, rest, value)
            elif rest:
                raise KeyError(path)
            elif not value or isinstance(value, dict):
                self.preferred_working_hours = WorkingHours.from_dict(value)
            else:
                raise ValueError(f'{path} must be an object')
        elif rest:
            raise KeyError(path)
        elif name == 'profile_picture':
            if isinstance(value, ProfilePicture) or value is None:
                self.profile_picture = value
            elif isinstance(value, dict):
                self.profile_picture = ProfilePicture.from_dict(value)
            else:
                raise ValueError(f'{path} must be an object')
        else:
            setattr(self, name, _coerce(name, value))

    def update(self, values: Dict[str, Any]):
        """
        Apply several field writes.

        Department is written first so a manager sent in the same batch
        is not cleared by the department change.
        """
        ordered = sorted(values.items(), key=lambda item: item[0] != 'department')
        for path, value in ordered:
            self.set_value(path, value)

    # Invariant-keeping mutators

    def set_department(self, department: Any):
        """Change department, clearing a manager chosen for the old one."""
        if department != self.department:
            self.manager_id = ''
        self.department = department

    def set_primary_skills(self, skills: List[str]):
        """Replace the selected skills, syncing experience entries."""
        selected = []
        for skill in skills:
            if skill not in selected:
                selected.append(skill)

        experience = {}
        for skill in selected:
            if skill in self.primary_skills:
                experience[skill] = self.skill_experience.get(skill, 0)
            else:
                experience[skill] = 0

        self.primary_skills = selected
        self.skill_experience = experience

    def toggle_skill(self, skill: str, selected: bool):
        """Select or deselect one skill."""
        if selected:
            if skill not in self.primary_skills:
                self.primary_skills.append(skill)
                self.skill_experience[skill] = 0
        else:
            if skill in self.primary_skills:
                self.primary_skills.remove(skill)
            self.skill_experience.pop(skill, None)

    def set_skill_experience(self, skill: str, years: Any):
        """
        Set years of experience for a selected skill.

        Raises:
            KeyError: if the skill is not selected
        """
        if skill not in self.primary_skills:
            raise KeyError(skill)
        self.skill_experience[skill] = coerce_to_int(years)

    # Derived values

    def age(self, today: date) -> Optional[int]:
        """Age on ``today``, or None if no valid date of birth is set."""
        return calculate_age(self.date_of_birth, today)

    # Lifecycle and serialization

    def reset(self):
        """Clear every field back to its default."""
        fresh = OnboardingRecord()
        for f in fields(self):
            setattr(self, f.name, getattr(fresh, f.name))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-friendly primitives with stable key order."""
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, date):
                value = value.isoformat()
            elif isinstance(value, (ProfilePicture, WorkingHours)):
                value = value.to_dict()
            elif isinstance(value, list):
                value = list(value)
            elif isinstance(value, dict):
                value = dict(value)
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OnboardingRecord':
        """
        Build a record from a payload without repairing invariants.

        Unknown keys are ignored.
        """
        record = cls()
        for name in FIELD_NAMES:
            if name not in data:
                continue
            value = data[name]
            # Structured fields of the wrong shape are kept as given for validation
            if name == 'profile_picture':
                if not value or isinstance(value, dict):
                    value = ProfilePicture.from_dict(value)
                record.profile_picture = value
            elif name == 'preferred_working_hours':
                if not value or isinstance(value, dict):
                    value = WorkingHours.from_dict(value)
                record.preferred_working_hours = value
            elif name == 'primary_skills':
                record.primary_skills = list(value) if isinstance(value, (list, tuple)) else value
            elif name == 'skill_experience':
                if isinstance(value, dict):
                    value = {skill: coerce_to_int(years) for skill, years in value.items()}
                record.skill_experience = value
            else:
                setattr(record, name, _coerce(name, value))
        return record


FIELD_NAMES = tuple(f.name for f in fields(OnboardingRecord))


def _coerce(name: str, value: Any) -> Any:
    if name in DATE_FIELDS:
        return coerce_to_date(value)
    if name in NUMBER_FIELDS:
        return coerce_to_number(value)
    if name in INTEGER_FIELDS:
        return coerce_to_int(value)
    if name in BOOLEAN_FIELDS:
        return coerce_to_bool(value)
    return value

"""
Field rule library.

Atomic, stateless rules over a single field value. Each rule's ``check``
returns a ``RuleOutcome`` carrying pass/fail, a human-readable message and
a stable error code. Rules never raise for bad input.

A field carries an ordered list of rules; ``run_rules`` stops at the first
failure so the reported error for a field is deterministic.

Empty values (None, blank strings, empty collections) pass every rule
except ``Required`` and ``MustBeTrue``. Optional fields simply omit
``Required``.
"""

import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional, Tuple

from onboarding.utils import calculate_age, parse_date


@dataclass(frozen=True)
class RuleOutcome:
    """Result of checking one value against one rule."""
    ok: bool
    message: str = ''
    code: str = ''


PASS = RuleOutcome(True)


def is_empty(value: Any) -> bool:
    """True for None, blank strings and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def is_number(value: Any) -> bool:
    """True for finite ints and floats. Booleans, NaN and infinities are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return f'{int(value):,}'
    return f'{value:,.2f}'


class Rule:
    """Base class for field rules."""

    def check(self, value: Any) -> RuleOutcome:
        raise NotImplementedError


@dataclass(frozen=True)
class Required(Rule):
    message: str = 'This field is required'

    def check(self, value: Any) -> RuleOutcome:
        if is_empty(value):
            return RuleOutcome(False, self.message, 'required')
        return PASS


@dataclass(frozen=True)
class MinLength(Rule):
    length: int
    message: Optional[str] = None

    def check(self, value: Any) -> RuleOutcome:
        if is_empty(value):
            return PASS
        if not isinstance(value, str):
            return RuleOutcome(False, 'Must be text', 'type')
        if len(value.strip()) < self.length:
            return RuleOutcome(
                False, self.message or f'Must be at least {self.length} characters', 'min_length'
            )
        return PASS


@dataclass(frozen=True)
class MaxLength(Rule):
    length: int
    message: Optional[str] = None

    def check(self, value: Any) -> RuleOutcome:
        if is_empty(value):
            return PASS
        if not isinstance(value, str):
            return RuleOutcome(False, 'Must be text', 'type')
        if len(value) > self.length:
            return RuleOutcome(
                False, self.message or f'Maximum {self.length} characters allowed', 'max_length'
            )
        return PASS


@dataclass(frozen=True)
class NumberRange(Rule):
    minimum: float
    maximum: float
    integer: bool = False
    message: Optional[str] = None

    def check(self, value: Any) -> RuleOutcome:
        if is_empty(value):
            return PASS
        if not is_number(value):
            return RuleOutcome(False, 'Must be a valid number', 'type')
        if self.integer and not float(value).is_integer():
            return RuleOutcome(False, 'Must be a whole number', 'type')
        if value < self.minimum or value > self.maximum:
            message = self.message or (
                f'Must be between {_format_number(self.minimum)} and {_format_number(self.maximum)}'
            )
            code = 'min_value' if value < self.minimum else 'max_value'
            return RuleOutcome(False, message, code)
        return PASS


@dataclass(frozen=True)
class RegexMatch(Rule):
    pattern: str
    message: str = 'Invalid format'

    def check(self, value: Any) -> RuleOutcome:
        if is_empty(value):
            return PASS
        if not isinstance(value, str):
            return RuleOutcome(False, self.message, 'format')
        if not re.match(self.pattern, value.strip()):
            return RuleOutcome(False, self.message, 'format')
        return PASS


@dataclass(frozen=True)
class EnumMembership(Rule):
    choices: Tuple[str, ...]
    message: Optional[str] = None

    def check(self, value: Any) -> RuleOutcome:
        if is_empty(value):
            return PASS
        if value not in self.choices:
            return RuleOutcome(
                False, self.message or f'Must be one of: {", ".join(self.choices)}', 'enum'
            )
        return PASS


@dataclass(frozen=True)
class DateRange(Rule):
    minimum: Optional[date] = None
    maximum: Optional[date] = None
    min_message: Optional[str] = None
    max_message: Optional[str] = None

    def check(self, value: Any) -> RuleOutcome:
        if is_empty(value):
            return PASS
        parsed = parse_date(value)
        if parsed is None:
            return RuleOutcome(False, 'Please enter a valid date (YYYY-MM-DD)', 'format')
        if self.minimum is not None and parsed < self.minimum:
            return RuleOutcome(
                False, self.min_message or f'Date cannot be before {self.minimum.isoformat()}', 'min_date'
            )
        if self.maximum is not None and parsed > self.maximum:
            return RuleOutcome(
                False, self.max_message or f'Date cannot be after {self.maximum.isoformat()}', 'max_date'
            )
        return PASS


@dataclass(frozen=True)
class MinimumAge(Rule):
    years: int
    today: date
    message: Optional[str] = None

    def check(self, value: Any) -> RuleOutcome:
        if is_empty(value):
            return PASS
        age = calculate_age(value, self.today)
        if age is None:
            return RuleOutcome(False, 'Please enter a valid date (YYYY-MM-DD)', 'format')
        if age < self.years:
            return RuleOutcome(
                False, self.message or f'Must be at least {self.years} years old', 'min_age'
            )
        return PASS


@dataclass(frozen=True)
class MinItems(Rule):
    count: int
    message: Optional[str] = None

    def check(self, value: Any) -> RuleOutcome:
        if value is None:
            value = []
        if not isinstance(value, (list, tuple, set, frozenset)):
            return RuleOutcome(False, 'Must be a list', 'type')
        if len(value) < self.count:
            return RuleOutcome(
                False, self.message or f'Please select at least {self.count} items', 'min_items'
            )
        return PASS


@dataclass(frozen=True)
class MustBeTrue(Rule):
    message: str = 'This must be confirmed'

    def check(self, value: Any) -> RuleOutcome:
        if value is not True:
            return RuleOutcome(False, self.message, 'must_be_true')
        return PASS


@dataclass(frozen=True)
class InstanceOf(Rule):
    """Value must be one of the given types (for structured fields)."""
    kinds: Tuple[type, ...]
    message: str = 'Invalid value'

    def check(self, value: Any) -> RuleOutcome:
        if is_empty(value):
            return PASS
        if not isinstance(value, self.kinds):
            return RuleOutcome(False, self.message, 'type')
        return PASS


def _attr(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


@dataclass(frozen=True)
class FileConstraint(Rule):
    max_bytes: int
    allowed_mime_types: Tuple[str, ...]
    size_message: Optional[str] = None
    type_message: Optional[str] = None

    def check(self, value: Any) -> RuleOutcome:
        if value is None:
            return PASS
        size = _attr(value, 'size')
        mime_type = _attr(value, 'mime_type')
        if not is_number(size) or size < 0:
            return RuleOutcome(False, 'File size is missing or invalid', 'file_size')
        if size > self.max_bytes:
            return RuleOutcome(
                False, self.size_message or f'File size must be less than {self.max_bytes} bytes', 'file_size'
            )
        if mime_type not in self.allowed_mime_types:
            return RuleOutcome(
                False,
                self.type_message or f'File type must be one of: {", ".join(self.allowed_mime_types)}',
                'file_type'
            )
        return PASS


def run_rules(value: Any, rules: Iterable[Rule]) -> RuleOutcome:
    """
    Check a value against an ordered rule list.

    Returns the first failing outcome, or ``PASS`` if every rule passes.
    """
    for rule in rules:
        outcome = rule.check(value)
        if not outcome.ok:
            return outcome
    return PASS

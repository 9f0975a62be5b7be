"""
Unit tests for the field rule library.
"""

from datetime import date

from onboarding.record import ProfilePicture
from onboarding.rules import (
    PASS, DateRange, EnumMembership, FileConstraint, InstanceOf, MaxLength, MinItems,
    MinLength, MinimumAge, MustBeTrue, NumberRange, RegexMatch, Required,
    is_empty, is_number, run_rules
)


class TestIsEmpty:
    def test_empty_values(self):
        assert is_empty(None)
        assert is_empty('')
        assert is_empty('   ')
        assert is_empty([])
        assert is_empty({})

    def test_non_empty_values(self):
        assert not is_empty('a')
        assert not is_empty(0)
        assert not is_empty(False)
        assert not is_empty(['x'])


class TestRequired:
    def test_missing_fails(self):
        outcome = Required('Name is required').check('')
        assert outcome.ok is False
        assert outcome.message == 'Name is required'
        assert outcome.code == 'required'

    def test_zero_is_present(self):
        assert Required().check(0).ok


class TestLengthRules:
    def test_min_length(self):
        assert MinLength(3).check('abc').ok
        outcome = MinLength(3).check('ab')
        assert outcome.code == 'min_length'

    def test_min_length_ignores_surrounding_whitespace(self):
        assert MinLength(3).check(' ab ').ok is False

    def test_max_length(self):
        assert MaxLength(5).check('abcde').ok
        assert MaxLength(5).check('abcdef').code == 'max_length'

    def test_non_string(self):
        assert MaxLength(5).check(12).code == 'type'

    def test_empty_passes(self):
        assert MinLength(3).check('').ok
        assert MaxLength(3).check(None).ok


class TestNumberRange:
    def test_within_range(self):
        assert NumberRange(0, 100).check(0).ok
        assert NumberRange(0, 100).check(100).ok

    def test_below_and_above(self):
        assert NumberRange(0, 100).check(-1).code == 'min_value'
        assert NumberRange(0, 100).check(101).code == 'max_value'

    def test_custom_message(self):
        outcome = NumberRange(0, 100, message='Out of range').check(150)
        assert outcome.message == 'Out of range'

    def test_default_message_formats_bounds(self):
        outcome = NumberRange(30000, 200000).check(10)
        assert outcome.message == 'Must be between 30,000 and 200,000'

    def test_integer_only(self):
        assert NumberRange(0, 20, integer=True).check(3).ok
        assert NumberRange(0, 20, integer=True).check(3.0).ok
        assert NumberRange(0, 20, integer=True).check(2.5).code == 'type'

    def test_rejects_non_numbers(self):
        assert NumberRange(0, 100).check('50').code == 'type'
        assert NumberRange(0, 100).check(True).code == 'type'

    def test_rejects_non_finite(self):
        rule = NumberRange(0, float('inf'))
        assert rule.check(float('nan')).code == 'type'
        assert rule.check(float('inf')).code == 'type'
        assert rule.check(float('-inf')).code == 'type'

    def test_is_number(self):
        assert is_number(3)
        assert is_number(2.5)
        assert not is_number(True)
        assert not is_number(float('nan'))
        assert not is_number('12')


class TestRegexMatch:
    def test_match(self):
        assert RegexMatch(r'^\d+$').check('123').ok

    def test_mismatch(self):
        outcome = RegexMatch(r'^\d+$', 'Digits only').check('12a')
        assert outcome.ok is False
        assert outcome.message == 'Digits only'
        assert outcome.code == 'format'


class TestEnumMembership:
    def test_member(self):
        assert EnumMembership(('A', 'B')).check('A').ok

    def test_non_member(self):
        outcome = EnumMembership(('A', 'B')).check('C')
        assert outcome.code == 'enum'
        assert outcome.message == 'Must be one of: A, B'


class TestDateRules:
    def test_date_range(self):
        rule = DateRange(date(2025, 1, 1), date(2025, 12, 31))
        assert rule.check('2025-06-01').ok
        assert rule.check('2024-12-31').code == 'min_date'
        assert rule.check('2026-01-01').code == 'max_date'

    def test_date_range_bounds_inclusive(self):
        rule = DateRange(date(2025, 1, 1), date(2025, 12, 31))
        assert rule.check(date(2025, 1, 1)).ok
        assert rule.check(date(2025, 12, 31)).ok

    def test_unparseable_date(self):
        assert DateRange(date(2025, 1, 1)).check('not-a-date').code == 'format'

    def test_minimum_age_uses_calendar_age(self):
        rule = MinimumAge(18, date(2025, 6, 1))
        assert rule.check('2007-06-01').ok
        outcome = rule.check('2007-06-02')
        assert outcome.ok is False
        assert outcome.code == 'min_age'


class TestMinItems:
    def test_enough_items(self):
        assert MinItems(3).check(['a', 'b', 'c']).ok

    def test_too_few(self):
        assert MinItems(3).check(['a', 'b']).code == 'min_items'

    def test_none_counts_as_empty(self):
        assert MinItems(1).check(None).code == 'min_items'

    def test_not_a_list(self):
        assert MinItems(1).check('abc').code == 'type'


class TestMustBeTrue:
    def test_true_passes(self):
        assert MustBeTrue().check(True).ok

    def test_false_and_absent_fail(self):
        assert MustBeTrue().check(False).code == 'must_be_true'
        assert MustBeTrue().check(None).code == 'must_be_true'

    def test_truthy_non_bool_fails(self):
        assert MustBeTrue().check('true').ok is False


class TestFileConstraint:
    rule = FileConstraint(2 * 1024 * 1024, ('image/jpeg', 'image/png'))

    def test_no_file_passes(self):
        assert self.rule.check(None).ok

    def test_valid_file(self):
        assert self.rule.check(ProfilePicture('me.png', 1024, 'image/png')).ok

    def test_accepts_dict(self):
        assert self.rule.check({'filename': 'me.jpg', 'size': 10, 'mime_type': 'image/jpeg'}).ok

    def test_too_large(self):
        picture = ProfilePicture('big.png', 2 * 1024 * 1024 + 1, 'image/png')
        assert self.rule.check(picture).code == 'file_size'

    def test_wrong_type(self):
        picture = ProfilePicture('doc.pdf', 1024, 'application/pdf')
        assert self.rule.check(picture).code == 'file_type'


class TestInstanceOf:
    rule = InstanceOf((ProfilePicture,), 'Bad picture')

    def test_matching_type(self):
        assert self.rule.check(ProfilePicture('me.png', 10, 'image/png')).ok

    def test_wrong_type(self):
        outcome = self.rule.check('me.png')
        assert outcome.ok is False
        assert outcome.message == 'Bad picture'
        assert outcome.code == 'type'

    def test_empty_passes(self):
        assert self.rule.check(None).ok


class TestRunRules:
    def test_stops_at_first_failure(self):
        rules = [Required('Missing'), MinLength(10, 'Too short'), RegexMatch(r'^\d+$', 'Digits only')]
        outcome = run_rules('abc', rules)
        assert outcome.message == 'Too short'

    def test_required_reported_before_other_rules(self):
        rules = [Required('Missing'), MinLength(10, 'Too short')]
        assert run_rules('', rules).message == 'Missing'

    def test_all_pass(self):
        assert run_rules('0412345678', [Required(), MinLength(10)]) is PASS

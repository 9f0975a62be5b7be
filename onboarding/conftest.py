"""
Shared pytest fixtures.

All date rules are evaluated against a fixed reference date,
Monday 2 June 2025, so results do not depend on when tests run.
"""

from datetime import date

import pytest

from onboarding import create_app, db
from onboarding.record import OnboardingRecord


REFERENCE_DATE = date(2025, 6, 2)


def make_valid_payload():
    """A record payload that passes every step."""
    return {
        'full_name': 'Alex Morgan',
        'email': 'alex.morgan@example.com',
        'phone_number': '0412 345 678',
        'date_of_birth': '1990-04-15',
        'profile_picture': None,
        'department': 'Engineering',
        'position_title': 'Software Engineer',
        'start_date': '2025-06-16',
        'job_type': 'Full-time',
        'salary_expectation': 95000,
        'manager_id': 'mgr-001',
        'primary_skills': ['Python', 'SQL', 'Testing'],
        'skill_experience': {'Python': 5, 'SQL': 3, 'Testing': 2},
        'preferred_working_hours': {'start': '09:00', 'end': '17:00'},
        'remote_work_preference': 20,
        'manager_approved': None,
        'extra_notes': '',
        'contact_name': 'Jordan Morgan',
        'relationship': 'Spouse',
        'contact_phone_number': '0498 765 432',
        'guardian_name': '',
        'guardian_phone_number': '',
        'confirm_information': True,
    }


@pytest.fixture
def today():
    return REFERENCE_DATE


@pytest.fixture
def valid_payload():
    return make_valid_payload()


@pytest.fixture
def valid_record():
    return OnboardingRecord.from_dict(make_valid_payload())


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'WTF_CSRF_ENABLED': False,
        'RATELIMIT_ENABLED': False,
        'ONBOARDING_REFERENCE_DATE': REFERENCE_DATE.isoformat(),
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()

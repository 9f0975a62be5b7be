"""
Submission collaborators.

A submitter accepts one fully validated record and either returns a
receipt or raises ``SubmissionFailure`` with an opaque reason. Retrying is
left to the user; nothing here retries.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError


class SubmissionFailure(Exception):
    """The submission collaborator rejected or could not store the record."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass
class SubmissionReceipt:
    """Acknowledgement returned by a successful submission."""
    submission_id: Any
    submitted_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'submission_id': self.submission_id,
            'submitted_at': self.submitted_at.isoformat() if self.submitted_at else None,
        }


class Submitter:
    """Interface for handing a validated record to its destination."""

    def submit(self, payload: Dict[str, Any]) -> SubmissionReceipt:
        raise NotImplementedError


class DatabaseSubmitter(Submitter):
    """Stores submissions in the application database."""

    def submit(self, payload: Dict[str, Any]) -> SubmissionReceipt:
        # Import here to avoid circular import
        from onboarding import db
        from onboarding.models import Submission

        submission = Submission(
            full_name=payload.get('full_name', ''),
            email=payload.get('email', ''),
            department=payload.get('department', ''),
            start_date=payload.get('start_date'),
        )
        submission.set_payload(payload)

        try:
            db.session.add(submission)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'Failed to store submission: {str(e)}')
            raise SubmissionFailure('The submission could not be stored') from e

        return SubmissionReceipt(submission.id, submission.created_at)

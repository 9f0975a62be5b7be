"""
Database models for the onboarding application.

Only submitted records are stored. Partial progress lives in memory for
the duration of a browser session and is never persisted.
"""

import json
from datetime import datetime
from onboarding import db


class Submission(db.Model):
    """
    A validated onboarding record handed over at the end of the wizard.
    """
    __tablename__ = 'onboarding_submissions'

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Denormalized for listing without decoding the payload
    full_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(254), nullable=False)
    department = db.Column(db.String(50), nullable=False)
    start_date = db.Column(db.String(10), nullable=True)

    payload_json = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), default='received', nullable=False)

    def __repr__(self):
        return f'<Submission {self.id} - {self.email} ({self.status})>'

    def to_dict(self):
        """Convert submission to dictionary for API responses."""
        return {
            'id': self.id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'full_name': self.full_name,
            'email': self.email,
            'department': self.department,
            'start_date': self.start_date,
            'status': self.status,
        }

    def get_payload(self):
        """Deserialize the JSON payload."""
        return json.loads(self.payload_json)

    def set_payload(self, payload):
        """Serialize the payload to JSON with stable ordering."""
        self.payload_json = json.dumps(payload, indent=2, sort_keys=True)

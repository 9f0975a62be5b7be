"""
Static lookup data consulted by the onboarding validation engine.

These tables are read-only inputs. The engine never checks their
internal consistency.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional


DEPARTMENTS = ['Engineering', 'Marketing', 'Sales', 'HR', 'Finance', 'Operations']

JOB_TYPES = ['Full-time', 'Part-time', 'Contract', 'Internship']

RELATIONSHIPS = ['Spouse', 'Partner', 'Parent', 'Sibling', 'Child', 'Friend', 'Other']

SKILLS_BY_DEPARTMENT: Dict[str, List[str]] = {
    'Engineering': [
        'Python', 'JavaScript', 'TypeScript', 'React', 'Node.js',
        'SQL', 'Cloud Infrastructure', 'Testing', 'System Design',
    ],
    'Marketing': [
        'SEO', 'Content Writing', 'Social Media', 'Analytics',
        'Brand Strategy', 'Email Campaigns', 'Copywriting',
    ],
    'Sales': [
        'Negotiation', 'CRM', 'Lead Generation', 'Account Management',
        'Presentations', 'Forecasting',
    ],
    'HR': [
        'Recruiting', 'Employee Relations', 'Payroll', 'Compliance',
        'Training', 'Performance Management',
    ],
    'Finance': [
        'Accounting', 'Budgeting', 'Financial Modeling', 'Auditing',
        'Tax', 'Excel', 'Reporting',
    ],
    'Operations': [
        'Logistics', 'Process Improvement', 'Vendor Management',
        'Project Management', 'Scheduling', 'Quality Assurance',
    ],
}


@dataclass(frozen=True)
class Manager:
    """Entry in the manager directory."""
    id: str
    name: str
    department: str

    def to_dict(self) -> Dict[str, str]:
        return {'id': self.id, 'name': self.name, 'department': self.department}


MANAGERS: List[Manager] = [
    Manager('mgr-001', 'Sarah Johnson', 'Engineering'),
    Manager('mgr-002', 'Michael Chen', 'Engineering'),
    Manager('mgr-003', 'Emily Davis', 'Marketing'),
    Manager('mgr-004', 'James Wilson', 'Sales'),
    Manager('mgr-005', 'Olivia Brown', 'Sales'),
    Manager('mgr-006', 'Priya Patel', 'HR'),
    Manager('mgr-007', 'David Martinez', 'Finance'),
    Manager('mgr-008', 'Grace Lee', 'Finance'),
    Manager('mgr-009', 'Robert Taylor', 'Operations'),
]


def skills_for_department(department: Optional[str]) -> List[str]:
    """Skill catalog for a department (empty for unknown departments)."""
    if not isinstance(department, str) or not department:
        return []
    return list(SKILLS_BY_DEPARTMENT.get(department, []))


def managers_for_department(department: Optional[str]) -> List[Manager]:
    """Managers a new hire in the given department may report to."""
    if not department:
        return []
    return [m for m in MANAGERS if m.department == department]


def get_manager(manager_id: Optional[str]) -> Optional[Manager]:
    """Look up a manager by id."""
    if not manager_id:
        return None
    for manager in MANAGERS:
        if manager.id == manager_id:
            return manager
    return None

"""
Default team roster.

Seeded into the team store by the sample data loader when it is empty.

Structure (matches TeamMember fields):
- name: Display name, also what people type after @ in comments
- email: Must be unique across the team
- role: A TeamMemberRole value
- department: Free-form grouping
- skills: Free-form list, matched case-insensitively against required skills
- hours_per_week: Weekly capacity used for utilization and overload checks
"""

from typing import Dict, Any, List

DEFAULT_TEAM_MEMBERS: List[Dict[str, Any]] = [
    {
        "name": "Marco Bianchi",
        "email": "marco.bianchi@example.com",
        "role": "manager",
        "department": "Operations",
        "skills": ["planning", "budgeting", "procurement"],
        "hours_per_week": 40,
    },
    {
        "name": "Giulia Rossi",
        "email": "giulia.rossi@example.com",
        "role": "coordinator",
        "department": "Construction",
        "skills": ["electrical", "safety", "site supervision"],
        "hours_per_week": 40,
    },
    {
        "name": "Luca Ferrari",
        "email": "luca.ferrari@example.com",
        "role": "technician",
        "department": "Construction",
        "skills": ["plumbing", "hvac"],
        "hours_per_week": 36,
    },
    {
        "name": "Sara Conti",
        "email": "sara.conti@example.com",
        "role": "technician",
        "department": "Design",
        "skills": ["interior design", "flooring", "lighting"],
        "hours_per_week": 30,
    },
]


def get_default_team() -> List[Dict[str, Any]]:
    """Get the default team configuration."""
    return DEFAULT_TEAM_MEMBERS

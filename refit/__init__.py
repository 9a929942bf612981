"""
Refit project manager core.

Store refit and renovation projects over a key-value JSON store: locations,
projects and phases, contractors, quotes and payment schedules, tasks,
appointments, team members, comments, notifications and the activity log.
"""

__version__ = "1.0.0"

"""
Sample data for demos and first runs.

Seeds one store with a refit project in progress: phases, a contractor, an
approved quote with a payment schedule, tasks, an appointment and the
default team. Nothing is seeded when projects already exist.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from config.team import get_default_team
from .app import RefitApp
from .models import PhaseStatus, Priority, ProjectStatus, TaskStatus, TaskType, TriggerEvent
from .utils.datetime_utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def load_sample_data(app: RefitApp, now: Optional[datetime] = None) -> bool:
    """Seed sample records. Returns False when the project store is not empty."""
    if app.projects.count() > 0:
        logger.info("Projects already present, sample data not loaded")
        return False

    now = ensure_utc(now) if now is not None else utc_now()
    today = now.date()

    def day(offset: int) -> str:
        return (today + timedelta(days=offset)).isoformat()

    if app.team.count() == 0:
        for entry in get_default_team():
            entry = dict(entry)
            hours_per_week = entry.pop("hours_per_week")
            app.team.create({**entry, "availability": {"hours_per_week": hours_per_week}})
    team = app.team.list_all()

    location = app.locations.create({
        "name": "Milano Duomo",
        "code": "MI-001",
        "type": "store",
        "subtype": "flagship",
        "address": {"street": "Via Torino 12", "city": "Milano", "province": "MI", "cap": "20123"},
        "surface": 420,
        "floors": 2,
        "manager": "Anna Galli",
        "contacts": {"phone": "+39 02 1234567", "email": "milano.duomo@example.com"},
    })

    project = app.projects.create({
        "location_id": location.id,
        "name": "Milano Duomo store refit",
        "description": "Full interior refit of the ground floor sales area",
        "type": "refit",
        "status": ProjectStatus.IN_PROGRESS,
        "priority": Priority.HIGH,
        "budget": {"planned": 120000, "approved": 115000, "spent": 38000},
        "dates": {"start_planned": day(-20), "end_planned": day(40), "start_actual": day(-18)},
        "project_manager": team[0].name if team else "",
        "team": [m.id for m in team],
    })

    demolition = app.projects.add_phase(project.id, {
        "name": "Demolition",
        "status": PhaseStatus.COMPLETED,
        "start_date": day(-18),
        "end_date": day(-8),
        "duration": 10,
        "budget": 15000,
        "progress": 100,
    })
    systems = app.projects.add_phase(project.id, {
        "name": "Electrical and plumbing",
        "status": PhaseStatus.IN_PROGRESS,
        "start_date": day(-7),
        "end_date": day(10),
        "duration": 17,
        "dependencies": [demolition.id],
        "budget": 45000,
        "progress": 40,
    })
    finishing = app.projects.add_phase(project.id, {
        "name": "Finishing and fit-out",
        "start_date": day(11),
        "end_date": day(40),
        "duration": 29,
        "dependencies": [systems.id],
        "budget": 55000,
    })

    contractor = app.contractors.create({
        "company_name": "Impianti Lombardi Srl",
        "vat_number": "IT01234567890",
        "address": {"street": "Via Mecenate 76", "city": "Milano", "province": "MI", "cap": "20138"},
        "contacts": {
            "phone": "+39 02 7654321",
            "email": "info@impiantilombardi.example.com",
            "referent_name": "Paolo Lombardi",
        },
        "specializations": ["electrical", "plumbing", "hvac"],
    })
    app.contractors.add_review(contractor.id, {
        "project_id": project.id,
        "reviewer_name": team[0].name if team else "Project Manager",
        "quality": 5,
        "punctuality": 4,
        "communication": 4,
        "price": 3,
        "comment": "Clean work, a couple of days late on the first milestone",
    })

    template = app.payment_templates.get_default()
    quote = app.quotes.create({
        "project_id": project.id,
        "phase_ids": [systems.id],
        "contractor_id": contractor.id,
        "quote_number": "Q-2024-001",
        "status": "approved",
        "request_date": day(-30),
        "response_date": day(-25),
        "total_amount": 45000,
        "items": [
            {"description": "Electrical system", "quantity": 1, "unit_price": 28000, "total_price": 28000},
            {"description": "Plumbing", "quantity": 1, "unit_price": 12000, "total_price": 12000},
            {"description": "HVAC adjustments", "quantity": 1, "unit_price": 5000, "total_price": 5000},
        ],
    })
    if template is not None:
        terms = app.payment_templates.apply_template(template.id, quote.id)
        quote = app.quotes.set_payment_terms(quote.id, terms)
    app.payments.sync_schedule(quote, {TriggerEvent.ORDER_CONFIRMATION.value: day(-25)}, now=now)

    assignee = team[2].id if len(team) > 2 else None
    app.tasks.create({
        "title": "Strip out old shelving",
        "project_id": project.id,
        "phase_id": demolition.id,
        "status": TaskStatus.COMPLETED,
        "type": TaskType.CONSTRUCTION,
        "estimated_hours": 16,
        "actual_hours": 14,
        "progress_percentage": 100,
        "due_date": day(-10),
        "completed_at": now - timedelta(days=11),
    })
    app.tasks.create({
        "title": "Lay new power lines",
        "description": "Main switchboard and sales floor circuits",
        "project_id": project.id,
        "phase_id": systems.id,
        "status": TaskStatus.IN_PROGRESS,
        "type": TaskType.ELECTRICAL,
        "priority": Priority.HIGH,
        "required_skills": ["electrical"],
        "assigned_to": [team[1].id] if len(team) > 1 else [],
        "estimated_hours": 24,
        "due_date": day(5),
        "checklist": [
            {"id": "check-1", "title": "Switchboard", "completed": True},
            {"id": "check-2", "title": "Sales floor circuits"},
        ],
    })
    app.tasks.create({
        "title": "Move washroom plumbing",
        "project_id": project.id,
        "phase_id": systems.id,
        "type": TaskType.PLUMBING,
        "required_skills": ["plumbing"],
        "assigned_to": [assignee] if assignee else [],
        "estimated_hours": 12,
        "due_date": day(8),
    })
    app.tasks.create({
        "title": "Choose floor finish",
        "project_id": project.id,
        "phase_id": finishing.id,
        "type": TaskType.FINISHING,
        "priority": Priority.URGENT,
        "required_skills": ["flooring"],
        "estimated_hours": 6,
        "due_date": day(12),
    })

    app.appointments.create({
        "project_id": project.id,
        "phase_id": systems.id,
        "location_id": location.id,
        "title": "Site inspection with electrician",
        "type": "site_visit",
        "scheduled_date": day(2),
        "start_time": "10:00",
        "end_time": "11:30",
        "location": {"type": "physical", "location_id": location.id},
        "participants": [
            {"type": "external", "name": "Paolo Lombardi", "role": "contractor"},
        ] + [{"user_id": m.id, "name": m.name} for m in team[:2]],
        "organizer": team[0].name if team else "",
        "priority": Priority.HIGH,
    })

    logger.info(f"Sample data loaded: project {project.id} with {app.tasks.count()} tasks")
    return True

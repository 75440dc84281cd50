"""
Operator commands, registered on the Flask CLI as ``flask hub ...``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import click
from flask.cli import with_appcontext

from volunteer_hub.engagement import EventCategory, LocationType, TaskStatus, lifecycle_status
from volunteer_hub.models import Event, Skill, Task, TaskSkill, User, Volunteer, db
from volunteer_hub.services.store import EngagementStore

DEMO_EMAIL = "demo@volunteerhub.example"
DEMO_PASSWORD = "volunteer-demo"

DEMO_SKILLS = [
    ("Teaching", "book"),
    ("First Aid", "heart"),
    ("Event Planning", "calendar"),
    ("Web Development", "code"),
    ("Gardening", "leaf"),
    ("Data Entry", "table"),
]

DEMO_EVENTS = [
    # title, category, location type, place, days from now, hours long, tasks (description, skill names)
    (
        "Community Garden Cleanup",
        EventCategory.ENVIRONMENT,
        LocationType.PHYSICAL,
        "Riverside Park",
        3,
        4,
        [("Weed the vegetable beds", ["Gardening"]), ("Welcome and sign in volunteers", ["Event Planning"])],
    ),
    (
        "After-School Tutoring",
        EventCategory.EDUCATION,
        LocationType.VIRTUAL,
        None,
        10,
        2,
        [("Tutor algebra students", ["Teaching"]), ("Prepare worksheets", ["Teaching", "Data Entry"])],
    ),
    (
        "Health Fair First Aid Tent",
        EventCategory.HEALTHCARE,
        LocationType.PHYSICAL,
        "Central Library",
        40,
        6,
        [("Staff the first aid tent", ["First Aid"])],
    ),
    (
        "Nonprofit Website Sprint",
        EventCategory.TECH,
        LocationType.VIRTUAL,
        None,
        -14,
        8,
        [("Fix accessibility issues on the donation page", ["Web Development"])],
    ),
]


def seed_demo_data(now: datetime | None = None) -> dict[str, int]:
    """Create the demo account, skills, events and tasks. Safe to run twice."""
    now = (now or datetime.now(timezone.utc)).replace(tzinfo=None, microsecond=0)
    created = {"skills": 0, "events": 0, "tasks": 0, "users": 0}

    skills = {}
    for name, icon in DEMO_SKILLS:
        skill = Skill.find_by_name(name)
        if skill is None:
            skill = Skill(name=name, icon=icon)
            db.session.add(skill)
            created["skills"] += 1
        skills[name] = skill
    db.session.flush()

    if User.find_by_email(DEMO_EMAIL) is None:
        user = User(email=DEMO_EMAIL)
        user.set_password(DEMO_PASSWORD)
        user.volunteer = Volunteer(full_name="Demo Volunteer")
        db.session.add(user)
        created["users"] += 1

    for title, category, location_type, place, offset_days, hours, tasks in DEMO_EVENTS:
        if Event.query.filter_by(title=title).first() is not None:
            continue
        start = now + timedelta(days=offset_days)
        event = Event(
            title=title,
            description=f"{title}: join fellow volunteers and make a difference.",
            category=category,
            location_type=location_type,
            location_name=place,
            start_date=start,
            end_date=start + timedelta(hours=hours),
            registration_deadline=start - timedelta(days=1) if offset_days > 1 else None,
            capacity=20,
        )
        for description, skill_names in tasks:
            task = Task(description=description, task_status=TaskStatus.UNASSIGNED)
            task.required_skills = [
                TaskSkill(skill=skills[name], position=position) for position, name in enumerate(skill_names)
            ]
            event.tasks.append(task)
            created["tasks"] += 1
        db.session.add(event)
        created["events"] += 1

    db.session.commit()
    return created


@click.group(name="hub")
def hub_cli():
    """Volunteer Hub management commands."""


@hub_cli.command("init-db")
@with_appcontext
def init_db():
    """Create all database tables."""
    db.create_all()
    click.echo("Database tables created.")


@hub_cli.command("seed-demo")
@with_appcontext
def seed_demo():
    """Load a demo volunteer account with events and tasks."""
    db.create_all()
    created = seed_demo_data()
    click.echo(
        "Seeded {users} user(s), {skills} skill(s), {events} event(s) and {tasks} task(s).".format(**created)
    )
    click.echo(f"Demo login: {DEMO_EMAIL} / {DEMO_PASSWORD}")


@hub_cli.command("list-events")
@click.option("--limit", default=20, show_default=True, help="Maximum number of events to show.")
@with_appcontext
def list_events(limit):
    """List events with their current lifecycle status."""
    now = datetime.now(timezone.utc)
    events = EngagementStore().list_events()[:limit]
    if not events:
        click.echo("No events found.")
        return
    for event in events:
        status = lifecycle_status(now, event)
        click.echo(f"{event.event_id:>4}  {event.start:%Y-%m-%d %H:%M}  {status.value:<10} {event.title}")

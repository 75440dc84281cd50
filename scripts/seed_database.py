# scripts/seed_database.py
"""
Database seeding script.
Populates the database with faker-generated volunteers, events, tasks,
registrations and chat messages for local development.
"""

import argparse
import os
import sys
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from faker import Faker  # noqa: E402

from app import app  # noqa: E402
from volunteer_hub.cli import DEMO_SKILLS  # noqa: E402
from volunteer_hub.engagement import (  # noqa: E402
    EventCategory,
    LocationType,
    RegistrationStatus,
    TaskStatus,
    TimePreference,
    Weekday,
    WorkType,
)
from volunteer_hub.engagement.onboarding import format_preferred_location  # noqa: E402
from volunteer_hub.models import (  # noqa: E402
    ChatMessage,
    Event,
    Registration,
    Skill,
    Task,
    TaskSkill,
    User,
    Volunteer,
    VolunteerSkill,
    db,
)

fake = Faker()

DEFAULT_PASSWORD = "password123"

stats = {
    "volunteers": 0,
    "events": 0,
    "tasks": 0,
    "registrations": 0,
    "messages": 0,
    "errors": [],
}


def _commit_batch(pending_count, batch_size):
    """Commit the current session once the batch threshold is reached."""
    if pending_count >= batch_size:
        try:
            db.session.commit()
        except Exception as exc:  # noqa: BLE001 - surface commit issues during seeding
            db.session.rollback()
            stats["errors"].append(f"Batch commit failed: {exc}")
            print(f"  ❌ Batch commit failed: {exc}")
        return 0
    return pending_count


def clear_database():
    """Delete seeded rows, children first."""
    print("\n🗑️  Clearing existing data...")
    for model in (ChatMessage, TaskSkill, Task, Registration, VolunteerSkill, Volunteer, User, Event, Skill):
        deleted = model.query.delete()
        print(f"  - {model.__tablename__}: {deleted}")
    db.session.commit()


def seed_skills():
    skills = []
    for name, icon in DEMO_SKILLS:
        skill = Skill.find_by_name(name)
        if skill is None:
            skill = Skill(name=name, icon=icon)
            db.session.add(skill)
        skills.append(skill)
    db.session.commit()
    return skills


def seed_volunteers(count, skills, dry_run=False, batch_size=50):
    print(f"\n👥 Seeding {count} volunteers...")
    volunteers = []
    pending = 0
    for _ in range(count):
        email = fake.unique.email()
        if dry_run:
            print(f"  [dry run] {email}")
            continue
        is_virtual = fake.boolean()
        is_in_person = not is_virtual or fake.boolean()
        start = fake.date_between(start_date="-30d", end_date="+30d")
        user = User(email=email)
        user.set_password(DEFAULT_PASSWORD)
        volunteer = Volunteer(
            full_name=fake.name(),
            mobile=fake.phone_number()[:20],
            age=fake.random_int(16, 80),
            organization=fake.company() if fake.boolean(chance_of_getting_true=40) else None,
            work_types=fake.random_elements([w.value for w in WorkType], length=2, unique=True),
            preferred_location=format_preferred_location(is_virtual, is_in_person, fake.city()),
            availability_start=start,
            availability_end=start + timedelta(days=fake.random_int(30, 180)),
            time_preference=fake.random_element([t.value for t in TimePreference]),
            days_available=fake.random_elements([d.value for d in Weekday], length=3, unique=True),
            onboarding_step=3,
            onboarding_completed=True,
        )
        volunteer.skills = [VolunteerSkill(skill=skill) for skill in fake.random_elements(skills, length=2, unique=True)]
        user.volunteer = volunteer
        db.session.add(user)
        volunteers.append(volunteer)
        stats["volunteers"] += 1
        pending = _commit_batch(pending + 1, batch_size)
    db.session.commit()
    return volunteers


def seed_events(count, skills, dry_run=False):
    print(f"\n📅 Seeding {count} events...")
    now = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
    events = []
    for _ in range(count):
        start = now + timedelta(days=fake.random_int(-30, 60), hours=fake.random_int(8, 18) - now.hour)
        location_type = fake.random_element(list(LocationType))
        title = f"{fake.catch_phrase()} Volunteer Day"
        if dry_run:
            print(f"  [dry run] {title} on {start:%Y-%m-%d}")
            continue
        event = Event(
            title=title[:200],
            description=fake.paragraph(nb_sentences=4),
            category=fake.random_element(list(EventCategory)),
            location_type=location_type,
            location_name=fake.city() if location_type is LocationType.PHYSICAL else None,
            start_date=start,
            end_date=start + timedelta(hours=fake.random_int(2, 8)),
            registration_deadline=start - timedelta(days=1) if fake.boolean() else None,
            capacity=fake.random_element([None, 10, 25, 50]),
            thumbnail_image=f"https://picsum.photos/seed/{fake.uuid4()[:8]}/640/360",
        )
        for _ in range(fake.random_int(1, 5)):
            task = Task(description=fake.sentence(nb_words=6), task_status=TaskStatus.UNASSIGNED)
            task.required_skills = [
                TaskSkill(skill=skill, position=position)
                for position, skill in enumerate(fake.random_elements(skills, length=fake.random_int(0, 2), unique=True))
            ]
            event.tasks.append(task)
            stats["tasks"] += 1
        db.session.add(event)
        events.append(event)
        stats["events"] += 1
    db.session.commit()
    return events


def seed_participation(volunteers, events, dry_run=False):
    """Register volunteers, claim some tasks and post chat messages."""
    if dry_run or not volunteers or not events:
        return
    print("\n🙋 Seeding registrations, task claims and messages...")
    for volunteer in volunteers:
        for event in fake.random_elements(events, length=min(3, len(events)), unique=True):
            db.session.add(
                Registration(volunteer=volunteer, event=event, status=RegistrationStatus.REGISTERED)
            )
            stats["registrations"] += 1
            open_tasks = [task for task in event.tasks if task.volunteer_id is None and task.volunteer is None]
            if open_tasks and fake.boolean(chance_of_getting_true=50):
                task = fake.random_element(open_tasks)
                task.volunteer = volunteer
                task.task_status = fake.random_element(list(TaskStatus.assigned_statuses()))
            if fake.boolean(chance_of_getting_true=60):
                db.session.add(
                    ChatMessage(
                        event=event,
                        volunteer=volunteer,
                        volunteer_name=volunteer.full_name,
                        body=fake.sentence(nb_words=12),
                    )
                )
                stats["messages"] += 1
    db.session.commit()


def seed_database(clear=False, volunteers=25, events=12, dry_run=False):
    """Main function to seed the database"""
    print("=" * 60)
    print("Volunteer Hub Seeding Script")
    print("=" * 60)
    if dry_run:
        print("\n⚠️  DRY RUN MODE - No changes will be made to the database\n")

    with app.app_context():
        db.create_all()
        if clear and not dry_run:
            clear_database()
        skills = seed_skills() if not dry_run else []
        seeded_volunteers = seed_volunteers(volunteers, skills, dry_run)
        seeded_events = seed_events(events, skills, dry_run)
        seed_participation(seeded_volunteers, seeded_events, dry_run)

        print("\n" + "=" * 60)
        print("Seeding Summary")
        print("=" * 60)
        for key in ("volunteers", "events", "tasks", "registrations", "messages"):
            print(f"{key.capitalize()}: {stats[key]}")
        if stats["errors"]:
            print(f"\n⚠️  Errors encountered: {len(stats['errors'])}")
            for error in stats["errors"][:10]:
                print(f"  - {error}")
        else:
            print("\n✅ Seeding completed successfully!")
        if not dry_run:
            print(f"\nEvery seeded volunteer can log in with password: {DEFAULT_PASSWORD}")


def main():
    """Command-line interface"""
    parser = argparse.ArgumentParser(description="Seed the database with sample volunteer data")
    parser.add_argument("--clear", action="store_true", help="Clear existing data before seeding")
    parser.add_argument("--volunteers", type=int, default=25, help="Number of volunteers (default: 25)")
    parser.add_argument("--events", type=int, default=12, help="Number of events (default: 12)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be created without creating it")
    args = parser.parse_args()
    seed_database(clear=args.clear, volunteers=args.volunteers, events=args.events, dry_run=args.dry_run)


if __name__ == "__main__":
    main()

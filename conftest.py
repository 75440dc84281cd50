# conftest.py

import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone

import pytest

# Set testing environment BEFORE importing app so TestingConfig is selected
os.environ["FLASK_ENV"] = "testing"

from app import create_app  # noqa: E402
from volunteer_hub.engagement import (  # noqa: E402
    EventCategory,
    LocationType,
    RegistrationStatus,
    SubmissionGuard,
    TaskStatus,
)
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
from volunteer_hub.services.chat_feed import ChatFeed  # noqa: E402
from volunteer_hub.services.engagement_service import EngagementService  # noqa: E402


def naive_utc(moment):
    """Datetimes are stored as naive UTC"""
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


@pytest.fixture(scope="function")
def app():
    """Create a Flask application backed by an isolated temporary database"""
    db_fd, temp_db = tempfile.mkstemp(suffix=f"_{uuid.uuid4().hex[:8]}.db")
    flask_app = create_app(
        {
            "TESTING": True,
            "WTF_CSRF_ENABLED": False,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{temp_db}",
            "SQLALCHEMY_ENGINE_OPTIONS": {"connect_args": {"check_same_thread": False, "timeout": 5}},
            "SECRET_KEY": "test-secret-key-for-testing-only",
            "MONITORING_ENABLED": False,
            "ERROR_ALERTING_ENABLED": False,
            "ENABLE_FILE_LOGGING": False,
            "ENABLE_CONSOLE_LOGGING": False,
            "LOG_LEVEL": "DEBUG",
        }
    )
    try:
        with flask_app.app_context():
            db.create_all()
            yield flask_app
            db.session.remove()
            db.drop_all()
            db.engine.dispose()
    finally:
        try:
            os.close(db_fd)
        except OSError:
            pass
        try:
            if os.path.exists(temp_db):
                os.unlink(temp_db)
        except OSError:
            pass


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    """A test client for the app"""
    return app.test_client()


@pytest.fixture
def now():
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
def skills(app):
    """A small skill catalogue"""
    created = [Skill(name="Teaching", icon="book"), Skill(name="First Aid", icon="heart"), Skill(name="Gardening")]
    db.session.add_all(created)
    db.session.commit()
    return {skill.name: skill for skill in created}


def _make_user(email, password="password123", full_name=None, onboarded=True):
    user = User(email=email)
    user.set_password(password)
    user.volunteer = Volunteer(
        full_name=full_name,
        onboarding_step=3 if onboarded else 1,
        onboarding_completed=onboarded,
    )
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def test_user(app):
    """Onboarded volunteer account"""
    return _make_user("volunteer@example.com", full_name="Vol Unteer")


@pytest.fixture
def other_user(app):
    return _make_user("other@example.com", full_name="Other Person")


@pytest.fixture
def new_user(app):
    """Account that has not started onboarding"""
    return _make_user("newcomer@example.com", onboarded=False)


@pytest.fixture
def volunteer(test_user):
    return test_user.volunteer


@pytest.fixture
def make_event(app, now):
    """Factory for events, offsets in hours relative to now"""

    def _make(title="Park Cleanup", start_in=48, duration=3, **kwargs):
        start = now + timedelta(hours=start_in)
        fields = {
            "title": title,
            "category": EventCategory.ENVIRONMENT,
            "location_type": LocationType.PHYSICAL,
            "location_name": "Riverside Park",
            "start_date": naive_utc(start),
            "end_date": naive_utc(start + timedelta(hours=duration)),
        }
        fields.update(kwargs)
        for key in ("registration_deadline",):
            if fields.get(key) is not None and fields[key].tzinfo is not None:
                fields[key] = naive_utc(fields[key])
        event = Event(**fields)
        db.session.add(event)
        db.session.commit()
        return event

    return _make


@pytest.fixture
def test_event(make_event):
    return make_event()


@pytest.fixture
def register(app):
    """Factory that registers a volunteer for an event"""

    def _register(volunteer, event, status=RegistrationStatus.REGISTERED, **kwargs):
        registration = Registration(volunteer_id=volunteer.id, event_id=event.id, status=status, **kwargs)
        db.session.add(registration)
        db.session.commit()
        return registration

    return _register


@pytest.fixture
def make_task(app):
    """Factory for tasks, optionally assigned and with required skills"""

    def _make(event, description="Hand out gloves", volunteer=None, status=None, skills=(), feedback=None):
        if status is None:
            status = TaskStatus.TO_DO if volunteer is not None else TaskStatus.UNASSIGNED
        task = Task(
            event_id=event.id,
            description=description,
            volunteer_id=volunteer.id if volunteer is not None else None,
            task_status=status,
            feedback=feedback,
        )
        task.required_skills = [TaskSkill(skill_id=skill.id, position=index) for index, skill in enumerate(skills)]
        db.session.add(task)
        db.session.commit()
        return task

    return _make


@pytest.fixture
def give_skills(app):
    def _give(volunteer, *skills):
        for skill in skills:
            db.session.add(VolunteerSkill(volunteer_id=volunteer.id, skill_id=skill.id))
        db.session.commit()

    return _give


@pytest.fixture
def post_message(app):
    def _post(event, volunteer, body, created_at=None):
        message = ChatMessage(
            event_id=event.id,
            volunteer_id=volunteer.id,
            volunteer_name=volunteer.full_name or "Volunteer",
            body=body,
        )
        if created_at is not None:
            message.created_at = naive_utc(created_at)
        db.session.add(message)
        db.session.commit()
        return message

    return _post


@pytest.fixture
def service(app):
    """Engagement service with its own feed and guard"""
    return EngagementService(feed=ChatFeed(), guard=SubmissionGuard())


@pytest.fixture
def auth_client(client, test_user):
    """Client logged in as the onboarded test volunteer"""
    response = client.post("/login", json={"email": "volunteer@example.com", "password": "password123"})
    assert response.status_code == 200
    return client

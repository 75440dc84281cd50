from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from volunteer_hub.engagement import TaskStatus
from volunteer_hub.models import (
    Event,
    EventInterest,
    Registration,
    RegistrationStatus,
    Skill,
    Task,
    User,
    Volunteer,
    VolunteerSkill,
    db,
)


class TestUserModel:
    """Test User model functionality"""

    def test_password_hashing(self, test_user):
        """Passwords are stored hashed and verified"""
        assert test_user.password_hash != "password123"
        assert test_user.check_password("password123")
        assert not test_user.check_password("wrong")

    def test_find_by_email_is_case_insensitive(self, test_user):
        assert User.find_by_email("  VOLUNTEER@example.com ") == test_user
        assert User.find_by_email("") is None
        assert User.find_by_email("nobody@example.com") is None

    def test_find_by_email_database_error(self, test_user):
        with patch.object(User, "query") as mock_query:
            mock_query.filter.side_effect = SQLAlchemyError("Database error")
            assert User.find_by_email("volunteer@example.com") is None

    def test_update_last_login(self, test_user):
        assert test_user.last_login is None
        assert test_user.update_last_login() is True
        assert test_user.last_login is not None

    def test_duplicate_email(self, test_user):
        duplicate = User(email="volunteer@example.com", password_hash="x")
        db.session.add(duplicate)
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    def test_deleting_user_removes_volunteer(self, test_user):
        volunteer_id = test_user.volunteer.id
        db.session.delete(test_user)
        db.session.commit()
        assert db.session.get(Volunteer, volunteer_id) is None


class TestVolunteerModel:
    """Test Volunteer profile model"""

    def test_defaults(self, new_user):
        volunteer = new_user.volunteer
        assert volunteer.onboarding_step == 1
        assert volunteer.onboarding_completed is False
        assert volunteer.work_types == []
        assert volunteer.days_available == []

    def test_skill_ids(self, volunteer, skills, give_skills):
        give_skills(volunteer, skills["Teaching"], skills["Gardening"])
        db.session.refresh(volunteer)
        assert volunteer.skill_ids == {skills["Teaching"].id, skills["Gardening"].id}

    def test_duplicate_skill_link(self, volunteer, skills, give_skills):
        give_skills(volunteer, skills["Teaching"])
        db.session.add(VolunteerSkill(volunteer_id=volunteer.id, skill_id=skills["Teaching"].id))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    @pytest.mark.parametrize("age", [15, 121])
    def test_age_constraint(self, volunteer, age):
        volunteer.age = age
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    def test_onboarding_step_constraint(self, volunteer):
        volunteer.onboarding_step = 4
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    def test_find_helpers(self, test_user):
        volunteer = test_user.volunteer
        assert Volunteer.find_by_id(volunteer.id) == volunteer
        assert Volunteer.find_by_user_id(test_user.id) == volunteer
        assert Volunteer.find_by_id(9999) is None


class TestEventModels:
    """Test Event, Registration and Task models"""

    def test_end_before_start_rejected(self, make_event, now):
        with pytest.raises(IntegrityError):
            make_event(duration=-1)
        db.session.rollback()

    def test_capacity_must_be_positive(self, make_event):
        with pytest.raises(IntegrityError):
            make_event(capacity=0)
        db.session.rollback()

    def test_one_registration_per_volunteer_and_event(self, volunteer, test_event, register):
        register(volunteer, test_event)
        with pytest.raises(IntegrityError):
            register(volunteer, test_event, RegistrationStatus.NOT_REGISTERED)
        db.session.rollback()

    def test_one_interest_per_volunteer_and_event(self, volunteer, test_event):
        db.session.add(EventInterest(volunteer_id=volunteer.id, event_id=test_event.id))
        db.session.commit()
        db.session.add(EventInterest(volunteer_id=volunteer.id, event_id=test_event.id))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    @pytest.mark.parametrize("rating", [0, 6])
    def test_star_rating_range(self, volunteer, test_event, register, rating):
        with pytest.raises(IntegrityError):
            register(volunteer, test_event, star_rating=rating)
        db.session.rollback()

    def test_registration_find(self, volunteer, test_event, register):
        registration = register(volunteer, test_event)
        assert Registration.find(volunteer.id, test_event.id) == registration
        assert Event.find_by_id(test_event.id) == test_event

    def test_assigned_status_requires_volunteer(self, test_event, make_task):
        with pytest.raises(IntegrityError):
            make_task(test_event, status=TaskStatus.DONE)
        db.session.rollback()

    def test_unassigned_status_forbids_volunteer(self, test_event, volunteer, make_task):
        with pytest.raises(IntegrityError):
            make_task(test_event, volunteer=volunteer, status=TaskStatus.UNASSIGNED)
        db.session.rollback()

    def test_required_skills_keep_position(self, test_event, make_task, skills):
        task = make_task(test_event, skills=[skills["Gardening"], skills["Teaching"]])
        db.session.expire_all()
        stored = db.session.get(Task, task.id)
        assert [link.skill.name for link in stored.required_skills] == ["Gardening", "Teaching"]

    def test_event_tasks_relationship(self, test_event, make_task):
        make_task(test_event, "First")
        make_task(test_event, "Second")
        db.session.refresh(test_event)
        assert [task.description for task in test_event.tasks] == ["First", "Second"]


class TestSafeCrudHelpers:
    """Test the (result, error) CRUD helpers on BaseModel"""

    def test_safe_create(self):
        skill, error = Skill.safe_create(name="Cooking", icon="pot")
        assert error is None
        assert skill.id is not None

    def test_safe_create_integrity_error(self, skills):
        skill, error = Skill.safe_create(name="Teaching")
        assert skill is None
        assert error is not None

    def test_safe_update(self, skills):
        skill = skills["Gardening"]
        success, error = skill.safe_update(icon="leaf", not_a_column="ignored")
        assert success is True
        assert error is None
        assert skill.icon == "leaf"

    def test_safe_update_database_error(self, skills):
        skill = skills["Gardening"]
        with patch.object(db.session, "commit", side_effect=SQLAlchemyError("Database error")):
            success, error = skill.safe_update(icon="leaf")
        assert success is False
        assert "Database error" in error

    def test_safe_delete(self, skills):
        skill = skills["Gardening"]
        skill_id = skill.id
        success, error = skill.safe_delete()
        assert success is True
        assert db.session.get(Skill, skill_id) is None

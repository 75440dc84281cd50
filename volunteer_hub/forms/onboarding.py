# volunteer_hub/forms/onboarding.py
"""
Onboarding and profile forms.

The forms handle presence, length and type coercion; the engagement rules
decide whether the values make a valid profile.
"""

from flask_wtf import FlaskForm
from wtforms import BooleanField, DateField, IntegerField, SelectField, SelectMultipleField, StringField
from wtforms.validators import DataRequired, Length, Optional

from ..engagement.enums import TIME_PREFERENCE_LABELS, WORK_TYPE_LABELS, Weekday
from ..engagement.onboarding import WEEKEND, Availability, PersonalInfo, WorkPreferences

WORK_TYPE_CHOICES = [(work_type.value, label) for work_type, label in WORK_TYPE_LABELS.items()]
TIME_PREFERENCE_CHOICES = [(preference.value, label) for preference, label in TIME_PREFERENCE_LABELS.items()]
DAY_CHOICES = [(day.value, day.value.capitalize()) for day in Weekday] + [(WEEKEND, "Weekend")]


class PersonalInfoForm(FlaskForm):
    """Step 1: personal information"""

    full_name = StringField(
        "Full Name",
        validators=[
            DataRequired(message="Full name is required."),
            Length(max=200, message="Full name must be less than 200 characters."),
        ],
    )
    mobile = StringField(
        "Mobile Number",
        validators=[
            DataRequired(message="Mobile number is required."),
            Length(max=50, message="Mobile number must be less than 50 characters."),
        ],
    )
    age = IntegerField("Age", validators=[DataRequired(message="Age is required.")])
    organization = StringField(
        "Organization",
        validators=[Optional(), Length(max=200, message="Organization must be less than 200 characters.")],
    )

    def to_personal_info(self):
        return PersonalInfo(
            full_name=self.full_name.data,
            mobile=self.mobile.data,
            age=self.age.data,
            organization=self.organization.data,
        )


class WorkPreferencesForm(FlaskForm):
    """Step 2: work preferences"""

    work_types = SelectMultipleField("Work Types", choices=WORK_TYPE_CHOICES)
    is_virtual = BooleanField("Virtual", default=False)
    is_in_person = BooleanField("In person", default=False)
    place_name = StringField(
        "Place Name",
        validators=[Optional(), Length(max=200, message="Place name must be less than 200 characters.")],
    )

    def to_work_preferences(self):
        return WorkPreferences(
            work_types=self.work_types.data or [],
            is_virtual=bool(self.is_virtual.data),
            is_in_person=bool(self.is_in_person.data),
            place_name=self.place_name.data,
        )


class AvailabilityForm(FlaskForm):
    """Step 3: availability"""

    start_date = DateField("Start Date", validators=[Optional()])
    end_date = DateField("End Date", validators=[Optional()])
    time_preference = SelectField(
        "Time Preference", choices=[("", "Select...")] + TIME_PREFERENCE_CHOICES, validators=[Optional()]
    )
    days_available = SelectMultipleField("Days Available", choices=DAY_CHOICES)

    def to_availability(self):
        return Availability(
            start_date=self.start_date.data,
            end_date=self.end_date.data,
            time_preference=self.time_preference.data or None,
            days_available=self.days_available.data or [],
        )


class ProfileForm(PersonalInfoForm, WorkPreferencesForm, AvailabilityForm):
    """Full profile edit; runs every onboarding section at once"""

    skill_ids = SelectMultipleField("Skills", coerce=int, validate_choice=False)

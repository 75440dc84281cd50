# volunteer_hub/forms/engagement.py
"""
Forms for event actions: tasks, feedback and chat
"""

from flask_wtf import FlaskForm
from wtforms import BooleanField, IntegerField, SelectMultipleField, StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional


class ClaimTasksForm(FlaskForm):
    """Claim one or more tasks on an event"""

    task_ids = SelectMultipleField(
        "Tasks",
        coerce=int,
        validate_choice=False,
        validators=[DataRequired(message="Select at least one task to claim.")],
    )


class ReleaseTaskForm(FlaskForm):
    confirmed = BooleanField("I want to release this task", default=False)


class FeedbackForm(FlaskForm):
    """Post-event rating and comments"""

    star_rating = IntegerField(
        "Rating",
        validators=[
            InputRequired(message="Please choose a rating."),
            NumberRange(min=1, max=5, message="Rating must be between 1 and 5 stars."),
        ],
    )
    feedback = TextAreaField(
        "Feedback",
        validators=[
            DataRequired(message="Please write some feedback before submitting."),
            Length(max=5000, message="Feedback must be less than 5000 characters."),
        ],
    )


class ChatMessageForm(FlaskForm):
    body = TextAreaField(
        "Message",
        validators=[
            DataRequired(message="Message cannot be empty."),
            Length(max=2000, message="Message must be less than 2000 characters."),
        ],
    )
    client_ref = StringField("Client Reference", validators=[Optional(), Length(max=64)])

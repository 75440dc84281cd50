# volunteer_hub/forms/auth.py
"""
Authentication forms
"""

from flask_wtf import FlaskForm
from wtforms import BooleanField, PasswordField, StringField
from wtforms.validators import DataRequired, Email, EqualTo, Length, Optional


class LoginForm(FlaskForm):
    """Form for volunteer login"""

    email = StringField(
        "Email",
        validators=[DataRequired(message="Email is required."), Email(message="Invalid email address.")],
    )
    password = PasswordField("Password", validators=[DataRequired(message="Password is required.")])
    remember_me = BooleanField("Remember me", default=False)


class SignupForm(FlaskForm):
    """Form for creating a volunteer account"""

    email = StringField(
        "Email",
        validators=[
            DataRequired(message="Email is required."),
            Email(message="Invalid email address."),
            Length(max=255, message="Email must be less than 255 characters."),
        ],
    )
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(message="Password is required."),
            Length(min=8, message="Password must be at least 8 characters long."),
        ],
    )
    confirm_password = PasswordField(
        "Confirm Password",
        validators=[Optional(), EqualTo("password", message="Passwords must match.")],
    )
    full_name = StringField(
        "Full Name",
        validators=[Optional(), Length(max=200, message="Full name must be less than 200 characters.")],
    )

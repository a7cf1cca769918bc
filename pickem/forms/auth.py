from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, Email, Length, Optional, Regexp


class APIForm(FlaskForm):
    """JSON API forms are authenticated by bearer token, not CSRF"""

    class Meta:
        csrf = False


class LoginForm(APIForm):
    email = StringField(
        "Email", validators=[DataRequired(), Email(message="Valid email is required")]
    )
    password = PasswordField(
        "Password", validators=[DataRequired(message="Password is required")]
    )


class RegistrationForm(APIForm):
    email = StringField(
        "Email", validators=[DataRequired(), Email(message="Valid email is required")]
    )
    username = StringField(
        "Username",
        validators=[
            DataRequired(),
            Length(
                min=3, max=50, message="Username must be between 3 and 50 characters"
            ),
            Regexp(
                r"^[a-zA-Z0-9_]+$",
                message="Username can only contain letters, numbers, and underscores",
            ),
        ],
    )
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(),
            Length(min=8, message="Password must be at least 8 characters long"),
            Regexp(
                r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).*$",
                message="Password must contain at least one uppercase letter, one lowercase letter, and one number",
            ),
        ],
    )
    first_name = StringField("First Name", validators=[Optional(), Length(min=1, max=100)])
    last_name = StringField("Last Name", validators=[Optional(), Length(min=1, max=100)])

from wtforms import BooleanField, IntegerField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, InputRequired, Length, NumberRange, Optional

from pickem.forms.auth import APIForm
from pickem.models.enums import ScoringType, TieBreaker


class CreateLeagueForm(APIForm):
    name = StringField(
        "League Name",
        validators=[
            DataRequired(),
            Length(min=1, max=200, message="League name must be 1-200 characters"),
        ],
    )
    description = TextAreaField(
        "Description",
        validators=[
            Optional(),
            Length(max=1000, message="Description must be less than 1000 characters"),
        ],
    )
    is_public = BooleanField("Public", default=False)
    max_participants = IntegerField(
        "Maximum Participants",
        validators=[
            Optional(),
            NumberRange(
                min=2, max=100, message="Max participants must be between 2 and 100"
            ),
        ],
    )
    scoring_type = StringField(
        "Scoring Type",
        validators=[
            Optional(),
            AnyOf(
                [member.value for member in ScoringType],
                message="Scoring type must be confidence, straight, or survivor",
            ),
        ],
    )
    season_year = IntegerField(
        "Season Year",
        validators=[
            InputRequired(message="Season year is required"),
            NumberRange(
                min=2020, max=2030, message="Season year must be between 2020 and 2030"
            ),
        ],
    )
    allow_late_picks = BooleanField("Allow Late Picks", default=False)
    tie_breaker = StringField(
        "Tie Breaker",
        validators=[Optional(), AnyOf([member.value for member in TieBreaker])],
    )

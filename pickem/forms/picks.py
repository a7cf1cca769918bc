from wtforms import IntegerField, StringField
from wtforms.validators import AnyOf, InputRequired, NumberRange, Optional

from pickem.forms.auth import APIForm
from pickem.models.enums import OverUnderSide, PickType
from pickem.models.pick import MAX_CONFIDENCE_POINTS, MIN_CONFIDENCE_POINTS


class UpdatePickForm(APIForm):
    picked_team_id = IntegerField(
        "Picked Team",
        validators=[Optional(), NumberRange(min=1, message="Valid team ID is required")],
    )
    side = StringField(
        "Side",
        validators=[
            Optional(),
            AnyOf(
                [member.value for member in OverUnderSide],
                message="Side must be over or under",
            ),
        ],
    )
    confidence_points = IntegerField(
        "Confidence Points",
        validators=[
            Optional(),
            NumberRange(
                min=MIN_CONFIDENCE_POINTS,
                max=MAX_CONFIDENCE_POINTS,
                message=f"Confidence points must be between {MIN_CONFIDENCE_POINTS} and {MAX_CONFIDENCE_POINTS}",
            ),
        ],
    )


class MakePickForm(UpdatePickForm):
    game_id = IntegerField(
        "Game",
        validators=[
            InputRequired(message="Valid game ID is required"),
            NumberRange(min=1, message="Valid game ID is required"),
        ],
    )
    league_id = IntegerField(
        "League",
        validators=[
            InputRequired(message="Valid league ID is required"),
            NumberRange(min=1, message="Valid league ID is required"),
        ],
    )
    pick_type = StringField(
        "Pick Type",
        validators=[
            InputRequired(message="Pick type is required"),
            AnyOf(
                [member.value for member in PickType],
                message="Pick type must be spread, over_under, or straight",
            ),
        ],
    )

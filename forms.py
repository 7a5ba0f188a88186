# forms.py
from flask_wtf import FlaskForm
from wtforms import HiddenField, StringField
from wtforms.validators import DataRequired, ValidationError

from rules.names import NAME_MAX_LENGTH, NAME_MIN_LENGTH, validate_player_name

PROMPT_TITLE = "Submit Score to the Leaderboard"
PROMPT_BODY = "Provide a nickname to submit your score."
DEFAULT_NAME = "Anonymous Grand Floppus"


def leaderboard_name(form, field):
    ok, err = validate_player_name(field.data)
    if not ok:
        raise ValidationError(err)


class ScoreSubmissionForm(FlaskForm):
    """Name-entry prompt shown before a score is submitted."""

    title = PROMPT_TITLE
    body = PROMPT_BODY

    name = StringField(
        "Nickname",
        default=DEFAULT_NAME,
        validators=[DataRequired(message="Please enter a name."), leaderboard_name],
        render_kw={"minlength": NAME_MIN_LENGTH, "maxlength": NAME_MAX_LENGTH + 1, "required": True},
    )
    score = HiddenField("Score", default="0")

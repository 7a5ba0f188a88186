# app.py
import os

from flask import (
    Blueprint,
    Flask,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from flask_wtf import CSRFProtect

from forms import ScoreSubmissionForm
from leaderboard import DEFAULT_LIMIT, LeaderboardStore, format_played_at
from rules.names import validate_player_name
from score_store import HighestScore
from utils import env_flag, parse_score


csrf = CSRFProtect()

bp = Blueprint("leaderboard", __name__)
api = Blueprint("api", __name__, url_prefix="/api")


class SubmissionRejected(Exception):
    """Raised when a submission fails the name rule in strict mode."""


def get_store() -> LeaderboardStore:
    return current_app.extensions["leaderboard"]


def submit_entry(name, raw_score):
    """
    Validate and store one submission.

    Returns the stored entry, or None when the name fails the length rule.
    In strict mode a failing name raises SubmissionRejected instead.
    Store errors propagate.
    """
    ok, err = validate_player_name(name)
    if not ok:
        current_app.logger.info(f"Leaderboard submission not stored: {err}")
        if current_app.config["LEADERBOARD_STRICT_NAMES"]:
            raise SubmissionRejected(err)
        return None

    return get_store().insert_one({"name": name, "score": parse_score(raw_score)})


def top_entries():
    return get_store().get_top_entries(current_app.config["LEADERBOARD_LIMIT"])


# --- API ---

@api.post("/leaderboard")
def post_leaderboard():
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or data.get("name") is None:
        return jsonify({"message": "Bad request!"}), 400

    try:
        submit_entry(data["name"], data.get("score"))
    except SubmissionRejected as e:
        return jsonify({"message": str(e)}), 400
    except Exception:
        current_app.logger.exception("Leaderboard insert failed")
        return jsonify({"message": "Bad request!"}), 400

    # Name-rule failures land here too unless strict mode is on.
    return "Success", 200


@api.get("/leaderboard")
def get_leaderboard():
    return jsonify([entry.to_dict() for entry in top_entries()]), 200


# --- Pages ---

@bp.route("/leaderboard")
def leaderboard_page():
    form = ScoreSubmissionForm()
    highest_score = HighestScore(session)
    form.score.data = highest_score.get()
    return render_template(
        "leaderboard.html",
        leaderboard=top_entries(),
        highest_score=highest_score.get(),
        form=form,
    )


@bp.route("/leaderboard/submit", methods=["POST"])
def leaderboard_submit():
    form = ScoreSubmissionForm()
    if not form.validate_on_submit():
        for errors in form.errors.values():
            for err in errors:
                flash(err, "error")
        return redirect(url_for("leaderboard.leaderboard_page"))

    score = parse_score(form.score.data)
    try:
        submit_entry(form.name.data, score)
    except SubmissionRejected as e:
        flash(str(e), "error")
        return redirect(url_for("leaderboard.leaderboard_page"))
    except Exception:
        current_app.logger.exception("Leaderboard insert failed")
        flash("Could not save your score. Please try again.", "error")
        return redirect(url_for("leaderboard.leaderboard_page"))

    HighestScore(session).offer(score)
    flash("Score submitted!", "success")
    return redirect(url_for("leaderboard.leaderboard_page"))


@bp.get("/health")
def health():
    return "ok", 200


# --- App factory ---

def create_app(test_config=None):
    app = Flask(__name__)

    # --- Security / config ---
    app.config.update(
        SECRET_KEY=os.environ.get("FLASK_SECRET_KEY", "dev-only-change-me"),
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_SECURE=bool(
            os.environ.get("FLASK_HTTPS")
        ),  # set FLASK_HTTPS=1 behind HTTPS
        DATABASE_URL=os.environ.get("DATABASE_URL"),
        DATA_DIR=os.environ.get("DATA_DIR", "data"),
        LEADERBOARD_LIMIT=int(os.environ.get("LEADERBOARD_LIMIT", DEFAULT_LIMIT)),
        LEADERBOARD_STRICT_NAMES=env_flag(os.environ.get("LEADERBOARD_STRICT_NAMES")),
    )
    if test_config:
        app.config.update(test_config)

    csrf.init_app(app)
    # JSON clients carry no form token.
    csrf.exempt(api)

    store = LeaderboardStore(
        database_url=app.config["DATABASE_URL"],
        data_dir=app.config["DATA_DIR"],
    )
    app.extensions["leaderboard"] = store

    app.register_blueprint(bp)
    app.register_blueprint(api)
    app.add_template_filter(format_played_at, "played_at")

    try:
        # Create table if needed
        store.init_db()
        app.logger.info(f"Leaderboard DB ready ({store.backend})")
    except Exception as e:
        app.logger.warning(f"Leaderboard init failed: {e}")

    return app


if __name__ == "__main__":

    create_app().run(debug=True)

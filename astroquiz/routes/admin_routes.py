from functools import wraps

from flask import Blueprint, jsonify, request

from astroquiz.errors import Unauthorized, ValidationError
from astroquiz.services.auth_service import (
    check_password,
    current_admin,
    end_admin_session,
    issue_admin_token,
    start_admin_session,
)
from astroquiz.services.log_service import get_recent_logs, log_event
from astroquiz.services.participant_service import (
    delete_participant,
    delete_school,
    delete_submission,
    get_all_participants,
    get_all_schools,
    get_all_submissions,
    get_participant,
    get_participant_display,
    get_school,
    get_school_display,
    get_stats,
    get_submission,
    get_submission_summary,
    update_participant,
    update_school,
)
from astroquiz.services.question_service import (
    create_question,
    delete_question,
    get_all_questions,
    get_question,
    get_question_display,
    update_question,
)
from astroquiz.services.registration_service import register_school, register_solo
from astroquiz.services.scoring_service import get_submission_display
from astroquiz.services.settings_service import get_settings, get_settings_display, update_settings
from astroquiz.sockets.admin_events import broadcast_stats

admin_bp = Blueprint("admin", __name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if data is not None else {}


def _posted_id(label):
    """Id for the POST /delete fallbacks, from the JSON body or the query string."""
    data = _json_body()
    target = data.get("id") if isinstance(data, dict) else None
    target = target or request.args.get("id")
    if not target or not isinstance(target, str):
        raise ValidationError(f"Missing {label} id")
    return target


# -------------------
# LOGIN REQUIRED
# -------------------
def login_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        if current_admin() is None:
            raise Unauthorized()
        return f(*args, **kwargs)
    return wrapped


# -------------------
# LOGIN / LOGOUT
# -------------------
@admin_bp.route("/login", methods=["POST"])
def login():
    data = _json_body()
    password = data.get("password") if isinstance(data, dict) else None
    if not check_password(password):
        log_event("admin", f"failed login from {request.remote_addr}")
        return jsonify({"message": "Invalid credentials"}), 401

    start_admin_session()
    log_event("admin", f"login from {request.remote_addr}")
    return jsonify({"message": "Login successful", "token": issue_admin_token()})


@admin_bp.route("/logout", methods=["POST"])
def logout():
    end_admin_session()
    return jsonify({"message": "Logged out"})


# -------------------
# SETTINGS / STATS / LOGS
# -------------------
@admin_bp.route("/settings", methods=["GET"])
@login_required
def admin_settings():
    return jsonify(get_settings_display(get_settings()))


@admin_bp.route("/settings", methods=["PUT"])
@login_required
def admin_update_settings():
    changes = _json_body()
    settings = update_settings(changes)
    log_event("settings", ", ".join(f"{k}={v}" for k, v in changes.items()) or "no changes")
    return jsonify(get_settings_display(settings))


@admin_bp.route("/stats", methods=["GET"])
@login_required
def admin_stats():
    return jsonify(get_stats())


@admin_bp.route("/logs", methods=["GET"])
@login_required
def admin_logs():
    limit = request.args.get("limit", 200, type=int)
    return jsonify(get_recent_logs(max(1, min(limit, 1000))))


# -------------------
# PARTICIPANTS
# -------------------
@admin_bp.route("/participants", methods=["GET"])
@login_required
def admin_participants():
    return jsonify([get_participant_display(p) for p in get_all_participants()])


@admin_bp.route("/participants", methods=["POST"])
@login_required
def admin_create_participant():
    participant = register_solo(_json_body(), enforce_gate=False)
    log_event("admin", f"created solo participant {participant.name} ({participant.passcode})")
    broadcast_stats()
    return jsonify(get_participant_display(participant)), 201


@admin_bp.route("/participants/<participant_id>", methods=["GET"])
@login_required
def admin_participant(participant_id):
    return jsonify(get_participant_display(get_participant(participant_id)))


@admin_bp.route("/participants/<participant_id>", methods=["PUT"])
@login_required
def admin_update_participant(participant_id):
    participant = update_participant(participant_id, _json_body())
    return jsonify(get_participant_display(participant))


@admin_bp.route("/participants/<participant_id>", methods=["DELETE"])
@login_required
def admin_delete_participant(participant_id):
    delete_participant(participant_id)
    log_event("admin", f"deleted participant {participant_id}")
    broadcast_stats()
    return jsonify({"success": True})


# Clients that cannot send DELETE post the id instead
@admin_bp.route("/participants/delete", methods=["POST"])
@login_required
def admin_delete_participant_post():
    return admin_delete_participant(_posted_id("participant"))


# -------------------
# SCHOOLS
# -------------------
@admin_bp.route("/schools", methods=["GET"])
@login_required
def admin_schools():
    return jsonify([get_school_display(s) for s in get_all_schools()])


@admin_bp.route("/schools", methods=["POST"])
@login_required
def admin_create_school():
    data = _json_body()
    if not isinstance(data, dict):
        data = {}
    school, _members = register_school(
        data.get("schoolName"), data.get("members"), data.get("team"), enforce_gate=False
    )
    log_event("admin", f"created school {school.name} (team {school.team})")
    broadcast_stats()
    return jsonify(get_school_display(school)), 201


@admin_bp.route("/schools/<school_id>", methods=["GET"])
@login_required
def admin_school(school_id):
    return jsonify(get_school_display(get_school(school_id)))


@admin_bp.route("/schools/<school_id>", methods=["PUT"])
@login_required
def admin_update_school(school_id):
    school = update_school(school_id, _json_body())
    return jsonify(get_school_display(school))


@admin_bp.route("/schools/<school_id>", methods=["DELETE"])
@login_required
def admin_delete_school(school_id):
    delete_school(school_id)
    log_event("admin", f"deleted school {school_id} with its members")
    broadcast_stats()
    return jsonify({"success": True})


@admin_bp.route("/schools/delete", methods=["POST"])
@login_required
def admin_delete_school_post():
    return admin_delete_school(_posted_id("school"))


# -------------------
# QUESTIONS
# -------------------
@admin_bp.route("/questions", methods=["GET"])
@login_required
def admin_questions():
    return jsonify([get_question_display(q, include_answer=True) for q in get_all_questions()])


@admin_bp.route("/questions", methods=["POST"])
@login_required
def admin_create_question():
    question = create_question(_json_body())
    return jsonify(get_question_display(question, include_answer=True)), 201


@admin_bp.route("/questions/<question_id>", methods=["GET"])
@login_required
def admin_question(question_id):
    return jsonify(get_question_display(get_question(question_id), include_answer=True))


@admin_bp.route("/questions/<question_id>", methods=["PUT"])
@login_required
def admin_update_question(question_id):
    question = update_question(question_id, _json_body())
    return jsonify(get_question_display(question, include_answer=True))


@admin_bp.route("/questions/<question_id>", methods=["DELETE"])
@login_required
def admin_delete_question(question_id):
    delete_question(question_id)
    log_event("admin", f"deleted question {question_id}")
    return jsonify({"success": True})


# -------------------
# SUBMISSIONS
# -------------------
@admin_bp.route("/quiz-submissions", methods=["GET"])
@login_required
def admin_submissions():
    return jsonify([get_submission_summary(s) for s in get_all_submissions()])


@admin_bp.route("/quiz-submissions/<submission_id>", methods=["GET"])
@login_required
def admin_submission(submission_id):
    submission = get_submission(submission_id)
    participant = submission.participant
    return jsonify({
        "submission": get_submission_display(submission),
        "participant": get_participant_display(participant) if participant else None,
    })


@admin_bp.route("/quiz-submissions/<submission_id>", methods=["DELETE"])
@login_required
def admin_delete_submission(submission_id):
    participant = delete_submission(submission_id)
    who = participant.id if participant else "unknown participant"
    log_event("admin", f"deleted submission {submission_id}, reopened quiz for {who}")
    broadcast_stats()
    return jsonify({"success": True})


@admin_bp.route("/quiz-submissions/delete", methods=["POST"])
@login_required
def admin_delete_submission_post():
    return admin_delete_submission(_posted_id("submission"))

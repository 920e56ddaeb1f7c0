from flask import Blueprint, jsonify, request

from astroquiz.services.log_service import log_event
from astroquiz.services.participant_service import get_participant_display, start_quiz
from astroquiz.services.question_service import get_question_display
from astroquiz.services.registration_service import register_school, register_solo
from astroquiz.services.scoring_service import (
    eligible_questions_for,
    get_submission_display,
    submit_quiz,
    validate_submission,
)
from astroquiz.services.settings_service import get_settings, get_settings_display
from astroquiz.sockets.admin_events import broadcast_stats

public_bp = Blueprint("public", __name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if data is not None else {}


@public_bp.route("/settings", methods=["GET"])
def settings():
    return jsonify(get_settings_display(get_settings()))


# -------------------
# REGISTRATION
# -------------------
@public_bp.route("/participants", methods=["POST"])
def register_solo_participant():
    participant = register_solo(_json_body())
    log_event("registration", f"solo participant {participant.name} ({participant.passcode})")
    broadcast_stats()
    return jsonify({"newParticipants": [get_participant_display(participant)]})


@public_bp.route("/schools/register", methods=["POST"])
def register_school_team():
    data = _json_body()
    if not isinstance(data, dict):
        data = {}
    school, members = register_school(data.get("schoolName"), data.get("members"), data.get("team"))
    log_event("registration", f"school {school.name} (team {school.team}) with {len(members)} members")
    broadcast_stats()
    return jsonify({
        "school": {"id": school.id, "name": school.name, "team": school.team},
        "newParticipants": [
            {
                "name": p.name,
                "passcode": p.passcode,
                "subject": p.subject,
                "isLeader": bool(p.is_leader),
            }
            for p in members
        ],
    })


# -------------------
# QUIZ
# -------------------
@public_bp.route("/participants/verify", methods=["POST"])
def verify_participant():
    data = _json_body()
    passcode = data.get("passcode") if isinstance(data, dict) else None
    participant = start_quiz(passcode)
    return jsonify({"participant": get_participant_display(participant)})


@public_bp.route("/questions", methods=["GET"])
def questions():
    participant = start_quiz(request.args.get("passcode"))
    eligible = eligible_questions_for(participant)
    return jsonify([get_question_display(q) for q in eligible])


@public_bp.route("/quiz-submissions", methods=["POST"])
def submit():
    participant_id, answers, time_taken = validate_submission(_json_body())
    submission = submit_quiz(participant_id, answers, time_taken)
    log_event(
        "submission",
        f"participant {participant_id} scored {submission.score}/{submission.total_marks} in {time_taken}s",
    )
    broadcast_stats()
    return jsonify(get_submission_display(submission))

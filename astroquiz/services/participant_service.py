from extensions import db
from astroquiz.errors import AlreadyCompleted, NotFound, QuizInactive, ValidationError
from astroquiz.models import Participant, QuizSubmission, School
from astroquiz.models.participant import MODE_SCHOOL, MODE_SOLO
from astroquiz.services.registration_service import TEAM_TAGS
from astroquiz.services.settings_service import QUIZ_ACTIVE, require_open

EDITABLE_PARTICIPANT_FIELDS = ("name", "email", "phone", "institution")


def _iso(value):
    return value.isoformat() if value else None


def find_by_passcode(passcode):
    if not isinstance(passcode, str) or not passcode.strip():
        raise ValidationError("Passcode required")
    participant = Participant.query.filter_by(passcode=passcode.strip().upper()).first()
    if participant is None:
        raise NotFound("Invalid passcode")
    return participant


def start_quiz(passcode):
    """Participant allowed to start (or resume) the quiz right now."""
    participant = find_by_passcode(passcode)
    if participant.has_completed_quiz:
        raise AlreadyCompleted("Quiz already completed")
    require_open(QUIZ_ACTIVE, QuizInactive)
    return participant


def get_participant_display(participant: Participant):
    return {
        "id": participant.id,
        "name": participant.name,
        "email": participant.email,
        "phone": participant.phone,
        "institution": participant.institution,
        "passcode": participant.passcode,
        "mode": participant.mode,
        "schoolId": participant.school_id,
        "subject": participant.subject,
        "isLeader": bool(participant.is_leader),
        "hasCompletedQuiz": bool(participant.has_completed_quiz),
        "registeredAt": _iso(participant.registered_at),
    }


def get_school_display(school: School, with_members=True):
    base = {
        "id": school.id,
        "name": school.name,
        "team": school.team,
        "createdAt": _iso(school.created_at),
    }
    if with_members:
        base["members"] = [get_participant_display(p) for p in school.members]
    return base


# -------------------
# PARTICIPANTS
# -------------------
def get_all_participants():
    return Participant.query.order_by(Participant.registered_at, Participant.id).all()


def get_participant(participant_id):
    participant = db.session.get(Participant, participant_id)
    if participant is None:
        raise NotFound("Participant not found")
    return participant


def update_participant(participant_id, data):
    """Admin edit of contact fields. Passcode, mode and team fields stay fixed."""
    participant = get_participant(participant_id)
    if not isinstance(data, dict):
        raise ValidationError("Invalid participant payload")

    details = []
    for field in data:
        if field not in EDITABLE_PARTICIPANT_FIELDS:
            details.append({"field": field, "message": "Field cannot be changed"})
    for field in EDITABLE_PARTICIPANT_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if value is not None and not isinstance(value, str):
            details.append({"field": field, "message": "Must be a string"})
        elif field == "name" and not (value or "").strip():
            details.append({"field": "name", "message": "Name is required"})
    if details:
        raise ValidationError("Invalid participant payload", details)

    for field in EDITABLE_PARTICIPANT_FIELDS:
        if field in data:
            value = (data[field] or "").strip()
            setattr(participant, field, value or None)
    db.session.commit()
    return participant


def delete_participant(participant_id):
    """Deletes the participant together with their submission, if any."""
    participant = get_participant(participant_id)
    db.session.delete(participant)
    db.session.commit()


# -------------------
# SCHOOLS
# -------------------
def get_all_schools():
    return School.query.order_by(School.created_at, School.id).all()


def get_school(school_id):
    school = db.session.get(School, school_id)
    if school is None:
        raise NotFound("School not found")
    return school


def update_school(school_id, data):
    school = get_school(school_id)
    if not isinstance(data, dict):
        raise ValidationError("Invalid school payload")

    details = []
    name = data.get("name", school.name)
    if not isinstance(name, str) or not name.strip():
        details.append({"field": "name", "message": "School name is required"})
    team = data.get("team", school.team)
    if team not in TEAM_TAGS:
        details.append({"field": "team", "message": "Team must be A or B"})
    if details:
        raise ValidationError("Invalid school payload", details)

    school.name = name.strip()
    school.team = team
    db.session.commit()
    return school


def delete_school(school_id):
    """Deletes the school, its members and their submissions in one commit."""
    school = get_school(school_id)
    db.session.delete(school)
    db.session.commit()


# -------------------
# SUBMISSIONS
# -------------------
def get_all_submissions():
    return QuizSubmission.query.order_by(QuizSubmission.completed_at, QuizSubmission.id).all()


def get_submission(submission_id):
    submission = db.session.get(QuizSubmission, submission_id)
    if submission is None:
        raise NotFound("Submission not found")
    return submission


def get_submission_summary(submission: QuizSubmission):
    participant = submission.participant
    return {
        "id": submission.id,
        "participantId": submission.participant_id,
        "participantName": participant.name if participant else "Unknown",
        "schoolId": participant.school_id if participant else None,
        "participantMode": participant.mode if participant else MODE_SOLO,
        "subject": participant.subject if participant else None,
        "score": submission.score,
        "totalMarks": submission.total_marks,
        "timeTaken": submission.time_taken,
        "completedAt": _iso(submission.completed_at),
    }


def delete_submission(submission_id):
    """
    Removes a submission and reopens the quiz for its participant.
    Both changes go out in the same commit.
    """
    submission = get_submission(submission_id)
    participant = submission.participant
    if participant is not None:
        participant.has_completed_quiz = False
    db.session.delete(submission)
    db.session.commit()
    return participant


# -------------------
# STATS
# -------------------
def get_stats():
    count = db.func.count
    return {
        "totalSoloRegistrations": db.session.query(count(Participant.id))
        .filter(Participant.mode == MODE_SOLO).scalar() or 0,
        "totalSchools": db.session.query(count(School.id)).scalar() or 0,
        "totalSchoolMembers": db.session.query(count(Participant.id))
        .filter(Participant.mode == MODE_SCHOOL).scalar() or 0,
        "totalSubmissions": db.session.query(count(QuizSubmission.id)).scalar() or 0,
    }

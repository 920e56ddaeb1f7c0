from sqlalchemy.exc import IntegrityError

from extensions import db
from astroquiz.errors import AlreadyCompleted, NotFound, QuizInactive, ValidationError
from astroquiz.models import Participant, QuizSubmission
from astroquiz.services.eligibility_service import entrant_for, select_questions
from astroquiz.services.question_service import get_all_questions
from astroquiz.services.settings_service import QUIZ_ACTIVE, require_open


def score_answers(answers, eligible_questions):
    """
    Returns (score, total_marks).

    total_marks is the sum of marks over every eligible question, answered or
    not. A question scores its marks only when the submitted letter equals
    correct_answer exactly; there is no partial credit.
    """
    score = 0
    total_marks = 0
    for question in eligible_questions:
        marks = question.marks or 0
        total_marks += marks
        given = answers.get(str(question.id))
        if given is not None and given == question.correct_answer:
            score += marks
    return score, total_marks


def validate_submission(data):
    if not isinstance(data, dict):
        raise ValidationError("Invalid submission data")

    details = []
    participant_id = data.get("participantId")
    if not isinstance(participant_id, str) or not participant_id:
        details.append({"field": "participantId", "message": "Participant id is required"})

    answers = data.get("answers")
    if not isinstance(answers, dict):
        details.append({"field": "answers", "message": "Answers must be an object of questionId -> option"})
    else:
        for key, value in answers.items():
            if not isinstance(value, str):
                details.append({"field": f"answers.{key}", "message": "Answer must be a string"})

    time_taken = data.get("timeTaken")
    if not isinstance(time_taken, int) or isinstance(time_taken, bool) or time_taken < 0:
        details.append({"field": "timeTaken", "message": "Time taken must be a non-negative integer (seconds)"})

    if details:
        raise ValidationError("Invalid submission data", details)
    return participant_id, answers, time_taken


def get_participant(participant_id):
    participant = db.session.get(Participant, participant_id)
    if participant is None:
        raise NotFound("Participant not found")
    return participant


def eligible_questions_for(participant):
    return select_questions(entrant_for(participant), get_all_questions())


def submit_quiz(participant_id, answers, time_taken):
    """
    Scores and stores a submission. The submission row and the participant's
    completed flag are committed together; the flag flip is conditional on it
    still being false so a concurrent second submit cannot slip through.
    """
    participant = get_participant(participant_id)
    if participant.has_completed_quiz:
        raise AlreadyCompleted("Participant already completed quiz")
    require_open(QUIZ_ACTIVE, QuizInactive)

    eligible = eligible_questions_for(participant)
    score, total_marks = score_answers(answers, eligible)

    try:
        flipped = Participant.query.filter_by(id=participant.id, has_completed_quiz=False)\
            .update({Participant.has_completed_quiz: True}, synchronize_session="fetch")
        if not flipped:
            db.session.rollback()
            raise AlreadyCompleted("Participant already completed quiz")

        submission = QuizSubmission(
            participant_id=participant.id,
            score=score,
            total_marks=total_marks,
            time_taken=time_taken,
        )
        submission.set_answers(answers)
        db.session.add(submission)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise AlreadyCompleted("Participant already completed quiz")

    return submission


def get_submission_display(submission: QuizSubmission):
    return {
        "id": submission.id,
        "participantId": submission.participant_id,
        "answers": submission.get_answers(),
        "score": submission.score,
        "totalMarks": submission.total_marks,
        "timeTaken": submission.time_taken,
        "completedAt": submission.completed_at.isoformat() if submission.completed_at else None,
    }

from astroquiz.models.participant import MODE_SCHOOL, MODE_SOLO
from astroquiz.models.question import MODE_BOTH, MODE_SOLO as QUESTION_SOLO, MODE_TEAM


class SoloEntrant:
    """Solo participant as seen by question selection."""
    mode = MODE_SOLO

    def __init__(self, participant_id, name):
        self.participant_id = participant_id
        self.name = name


class SchoolEntrant:
    """School team member; only this variant carries a subject."""
    mode = MODE_SCHOOL

    def __init__(self, participant_id, name, school_id, subject, is_leader):
        self.participant_id = participant_id
        self.name = name
        self.school_id = school_id
        self.subject = subject
        self.is_leader = is_leader


def entrant_for(participant):
    if participant.mode == MODE_SOLO:
        return SoloEntrant(participant.id, participant.name)
    if participant.mode in (MODE_SCHOOL, "team"):
        return SchoolEntrant(
            participant.id,
            participant.name,
            participant.school_id,
            participant.subject or None,
            bool(participant.is_leader),
        )
    raise ValueError(f"Unknown participant mode: {participant.mode}")


def _is_eligible(entrant, question):
    subject = question.subject or None
    if isinstance(entrant, SoloEntrant):
        return question.mode == QUESTION_SOLO and subject is None
    if isinstance(entrant, SchoolEntrant):
        if question.mode not in (MODE_TEAM, MODE_BOTH):
            return False
        return subject is None or subject == entrant.subject
    return False


def select_questions(entrant, questions):
    """
    Questions this entrant may see and is scored on, ordered by order_index.
    Must be used for both serving and scoring so the two sets agree.
    """
    eligible = [q for q in questions if _is_eligible(entrant, q)]
    eligible.sort(key=lambda q: (q.order_index or 0, str(q.id)))
    return eligible

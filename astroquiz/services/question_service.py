from extensions import db
from astroquiz.errors import NotFound, ValidationError
from astroquiz.models import Question
from astroquiz.models.question import MODE_BOTH, MODE_SOLO, MODE_TEAM, OPTION_KEYS
from astroquiz.services.registration_service import SUBJECTS

QUESTION_MODES = (MODE_SOLO, MODE_TEAM, MODE_BOTH)
MODE_ALIASES = {"school": MODE_TEAM}

SAMPLE_QUESTIONS = [
    {
        "text": "Which planet in our solar system has the most extensive ring system?",
        "options": {"A": "Jupiter", "B": "Saturn", "C": "Uranus", "D": "Neptune"},
        "correctAnswer": "B", "timeLimit": 60, "marks": 5, "orderIndex": 1, "mode": MODE_SOLO,
    },
    {
        "text": "What is the closest star to Earth after the Sun?",
        "options": {"A": "Proxima Centauri", "B": "Alpha Centauri A", "C": "Sirius", "D": "Betelgeuse"},
        "correctAnswer": "A", "timeLimit": 45, "marks": 3, "orderIndex": 2, "mode": MODE_SOLO,
    },
    {
        "text": "What type of galaxy is the Milky Way?",
        "options": {"A": "Elliptical", "B": "Spiral", "C": "Irregular", "D": "Lenticular"},
        "correctAnswer": "B", "timeLimit": 40, "marks": 4, "orderIndex": 3, "mode": MODE_BOTH,
    },
    {
        "text": "Which moon of Jupiter is known for its volcanic activity?",
        "options": {"A": "Europa", "B": "Ganymede", "C": "Io", "D": "Callisto"},
        "correctAnswer": "C", "timeLimit": 50, "marks": 4, "orderIndex": 4, "mode": MODE_BOTH,
    },
    {
        "text": "What is the main component of the Sun?",
        "options": {"A": "Helium", "B": "Hydrogen", "C": "Carbon", "D": "Oxygen"},
        "correctAnswer": "B", "timeLimit": 35, "marks": 3, "orderIndex": 5,
        "mode": MODE_TEAM, "subject": "Astrophysics",
    },
]


def _positive_int(value):
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_question(data):
    """Normalized column values for a question payload (camelCase JSON in)."""
    if not isinstance(data, dict):
        raise ValidationError("Invalid question payload")

    details = []

    text = data.get("text")
    if not isinstance(text, str) or not text.strip():
        details.append({"field": "text", "message": "Question text is required"})
        text = None

    options = data.get("options")
    clean_options = {}
    if not isinstance(options, dict):
        details.append({"field": "options", "message": "Options must be an object with keys A-D"})
    else:
        extra = sorted(set(options) - set(OPTION_KEYS))
        if extra:
            details.append({"field": "options", "message": "Unknown option keys: " + ", ".join(map(str, extra))})
        for key in OPTION_KEYS:
            value = options.get(key)
            if not isinstance(value, str) or not value.strip():
                details.append({"field": f"options.{key}", "message": f"Option {key} is required"})
            else:
                clean_options[key] = value.strip()

    correct = data.get("correctAnswer")
    if correct not in OPTION_KEYS:
        details.append({"field": "correctAnswer", "message": "Correct answer must be one of A, B, C, D"})

    time_limit = data.get("timeLimit")
    if not _positive_int(time_limit):
        details.append({"field": "timeLimit", "message": "Time limit must be a positive integer (seconds)"})

    marks = data.get("marks")
    if not _positive_int(marks):
        details.append({"field": "marks", "message": "Marks must be a positive integer"})

    order_index = data.get("orderIndex", 0)
    if not isinstance(order_index, int) or isinstance(order_index, bool):
        details.append({"field": "orderIndex", "message": "Order index must be an integer"})

    mode = data.get("mode", MODE_BOTH)
    if isinstance(mode, str):
        mode = MODE_ALIASES.get(mode, mode)
    if mode not in QUESTION_MODES:
        details.append({"field": "mode", "message": "Mode must be one of: solo, team, both"})

    subject = data.get("subject") or None
    if mode == MODE_SOLO:
        # Solo questions never carry a subject
        subject = None
    elif subject is not None and subject not in SUBJECTS:
        details.append({"field": "subject", "message": "Subject must be one of: " + ", ".join(SUBJECTS)})
    elif mode == MODE_TEAM and subject is None:
        details.append({"field": "subject", "message": "Team questions must have a subject"})

    if details:
        raise ValidationError("Invalid question payload", details)

    return {
        "text": text.strip(),
        "options": clean_options,
        "correct_answer": correct,
        "time_limit": time_limit,
        "marks": marks,
        "order_index": order_index,
        "mode": mode,
        "subject": subject,
    }


def _apply(question, values):
    question.text = values["text"]
    question.set_options(values["options"])
    question.correct_answer = values["correct_answer"]
    question.time_limit = values["time_limit"]
    question.marks = values["marks"]
    question.order_index = values["order_index"]
    question.mode = values["mode"]
    question.subject = values["subject"]


def get_all_questions():
    return Question.query.order_by(Question.order_index, Question.id).all()


def get_question(question_id):
    question = db.session.get(Question, question_id)
    if question is None:
        raise NotFound("Question not found")
    return question


def create_question(data):
    values = validate_question(data)
    question = Question()
    _apply(question, values)
    db.session.add(question)
    db.session.commit()
    return question


def update_question(question_id, data):
    question = get_question(question_id)
    values = validate_question(data)
    _apply(question, values)
    db.session.commit()
    return question


def delete_question(question_id):
    question = get_question(question_id)
    db.session.delete(question)
    db.session.commit()


def seed_sample_questions():
    """Inserts the sample astronomy set when the question table is empty."""
    if db.session.query(db.func.count(Question.id)).scalar():
        return 0
    for data in SAMPLE_QUESTIONS:
        question = Question()
        _apply(question, validate_question(data))
        db.session.add(question)
    db.session.commit()
    return len(SAMPLE_QUESTIONS)


def get_question_display(question: Question, include_answer=False):
    base = {
        "id": question.id,
        "text": question.text,
        "options": question.get_options(),
        "timeLimit": question.time_limit,
        "marks": question.marks,
        "orderIndex": question.order_index,
        "mode": question.mode,
        "subject": question.subject,
    }
    if include_answer:
        base["correctAnswer"] = question.correct_answer
    return base

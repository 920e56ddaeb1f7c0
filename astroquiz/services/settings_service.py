from extensions import db
from astroquiz.errors import ValidationError
from astroquiz.models import SystemSettings
from astroquiz.models.system_settings import SETTINGS_ID

SOLO_REGISTRATION_OPEN = "solo_registration_open"
SCHOOL_REGISTRATION_OPEN = "school_registration_open"
QUIZ_ACTIVE = "quiz_active"

FLAGS = (SOLO_REGISTRATION_OPEN, SCHOOL_REGISTRATION_OPEN, QUIZ_ACTIVE)

# JSON field name -> column
FLAG_FIELDS = {
    "soloRegistrationOpen": SOLO_REGISTRATION_OPEN,
    "schoolRegistrationOpen": SCHOOL_REGISTRATION_OPEN,
    "quizActive": QUIZ_ACTIVE,
}


def get_settings():
    """Singleton settings row, created with every flag open on first access."""
    settings = db.session.get(SystemSettings, SETTINGS_ID)
    if settings is None:
        settings = SystemSettings(
            id=SETTINGS_ID,
            solo_registration_open=True,
            school_registration_open=True,
            quiz_active=True,
        )
        db.session.add(settings)
        db.session.commit()
    return settings


def is_open(flag):
    if flag not in FLAGS:
        raise ValueError(f"Unknown settings flag: {flag}")
    settings = db.session.get(SystemSettings, SETTINGS_ID)
    if settings is None:
        return True
    return bool(getattr(settings, flag))


def require_open(flag, error_cls):
    if not is_open(flag):
        raise error_cls()


def update_settings(changes):
    """
    Applies a partial update given as {jsonField: bool}.
    Unknown fields and non-boolean values are rejected before anything is written.
    """
    if not isinstance(changes, dict):
        raise ValidationError("Invalid settings payload")

    details = []
    for field, value in changes.items():
        if field not in FLAG_FIELDS:
            details.append({"field": field, "message": "Unknown setting"})
        elif not isinstance(value, bool):
            details.append({"field": field, "message": "Expected a boolean"})
    if details:
        raise ValidationError("Invalid settings payload", details)

    settings = get_settings()
    for field, value in changes.items():
        setattr(settings, FLAG_FIELDS[field], value)
    db.session.commit()
    return settings


def get_settings_display(settings):
    return {
        "soloRegistrationOpen": bool(settings.solo_registration_open),
        "schoolRegistrationOpen": bool(settings.school_registration_open),
        "quizActive": bool(settings.quiz_active),
    }

import secrets
import string

from flask import current_app
from sqlalchemy.exc import IntegrityError

from extensions import db
from astroquiz.errors import CodeSpaceExhausted
from astroquiz.models import Participant

ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_MAX_ATTEMPTS = 50
PASSCODE_CONSTRAINT = "uq_participants_passcode"
PASSCODE_COLUMN = "participants.passcode"


def generate_code(length: int) -> str:
    """Random code drawn uniformly from [A-Z0-9]."""
    if length <= 0:
        raise ValueError("Code length must be positive")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def generate_unique_code(length: int, exists, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> str:
    """
    Keeps generating until `exists(code)` returns False.
    Raises CodeSpaceExhausted after max_attempts collisions.
    """
    for _ in range(max_attempts):
        code = generate_code(length)
        if not exists(code):
            return code
    raise CodeSpaceExhausted()


def passcode_exists(code: str) -> bool:
    return db.session.query(Participant.id).filter_by(passcode=code).first() is not None


def new_passcode(taken=None) -> str:
    """
    Unique passcode for a participant about to be inserted.
    `taken` holds codes already handed out inside the same unit of work.
    """
    taken = taken if taken is not None else set()
    code = generate_unique_code(
        current_app.config["PASSCODE_LENGTH"],
        lambda c: c in taken or passcode_exists(c),
        current_app.config["CODE_MAX_ATTEMPTS"],
    )
    taken.add(code)
    return code


def _is_passcode_collision(exc: IntegrityError) -> bool:
    """Unique violation on the passcode index; NOT NULL and other failures don't count."""
    msg = str(getattr(exc, "orig", exc)).lower()
    if PASSCODE_CONSTRAINT in msg:
        return True
    # sqlite names the column instead of the constraint
    return "unique" in msg and PASSCODE_COLUMN in msg


def run_with_unique_codes(unit_of_work, max_attempts=None):
    """
    Runs `unit_of_work()` and commits it. The unique index on
    participants.passcode is the real guard: on a passcode collision the
    whole unit is rolled back and run again with fresh codes.
    """
    if max_attempts is None:
        max_attempts = current_app.config["CODE_MAX_ATTEMPTS"]

    for attempt in range(1, max_attempts + 1):
        try:
            result = unit_of_work()
            db.session.commit()
            return result
        except IntegrityError as e:
            db.session.rollback()
            if not _is_passcode_collision(e):
                raise
            current_app.logger.warning("Passcode collision on insert (attempt %s/%s)", attempt, max_attempts)
        except Exception:
            db.session.rollback()
            raise

    raise CodeSpaceExhausted()

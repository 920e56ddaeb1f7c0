import uuid

from extensions import db

MODE_SOLO = "solo"
MODE_SCHOOL = "school"


class Participant(db.Model):
    """
    One quiz entrant. Solo and school members share this table; the
    school-only columns (school_id, subject, is_leader) stay empty for solo.
    """
    __tablename__ = "participants"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(200), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    institution = db.Column(db.String(200), nullable=True)

    passcode = db.Column(db.String(16), nullable=False)
    mode = db.Column(db.String(10), nullable=False, default=MODE_SOLO)

    school_id = db.Column(db.String(36), db.ForeignKey("schools.id", ondelete="CASCADE"), nullable=True)
    subject = db.Column(db.String(50), nullable=True)
    is_leader = db.Column(db.Boolean, default=False, nullable=False)

    has_completed_quiz = db.Column(db.Boolean, default=False, nullable=False)
    registered_at = db.Column(db.DateTime, server_default=db.func.now())

    school = db.relationship("School", back_populates="members")
    submission = db.relationship(
        "QuizSubmission",
        uselist=False,
        back_populates="participant",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.UniqueConstraint("passcode", name="uq_participants_passcode"),
        db.Index("ix_participants_school", "school_id"),
        db.Index("ix_participants_mode", "mode"),
    )

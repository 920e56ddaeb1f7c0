import json
import uuid

from extensions import db


class QuizSubmission(db.Model):
    __tablename__ = "quiz_submissions"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    participant_id = db.Column(
        db.String(36),
        db.ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
    )
    answers = db.Column(db.Text, nullable=False, default="{}")
    score = db.Column(db.Integer, nullable=False)
    total_marks = db.Column(db.Integer, nullable=False)
    time_taken = db.Column(db.Integer, nullable=False)
    completed_at = db.Column(db.DateTime, server_default=db.func.now())

    participant = db.relationship("Participant", back_populates="submission")

    __table_args__ = (
        db.UniqueConstraint("participant_id", name="uq_quiz_submissions_participant"),
    )

    def get_answers(self):
        try:
            return json.loads(self.answers) if self.answers else {}
        except ValueError:
            return {}

    def set_answers(self, answers):
        self.answers = json.dumps(answers) if answers else "{}"

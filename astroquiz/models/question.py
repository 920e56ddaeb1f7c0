import json
import uuid

from extensions import db

MODE_SOLO = "solo"
MODE_TEAM = "team"
MODE_BOTH = "both"
OPTION_KEYS = ("A", "B", "C", "D")


class Question(db.Model):
    __tablename__ = "questions"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    text = db.Column(db.Text, nullable=False)
    options = db.Column(db.Text, nullable=False, default="{}")
    correct_answer = db.Column(db.String(1), nullable=False)
    time_limit = db.Column(db.Integer, nullable=False)
    marks = db.Column(db.Integer, nullable=False)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    mode = db.Column(db.String(10), nullable=False, default=MODE_BOTH)
    subject = db.Column(db.String(50), nullable=True)

    __table_args__ = (
        db.Index("ix_questions_order", "order_index"),
    )

    def get_options(self):
        try:
            return json.loads(self.options) if self.options else {}
        except ValueError:
            return {}

    def set_options(self, options):
        self.options = json.dumps(options) if options else "{}"

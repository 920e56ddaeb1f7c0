import uuid

from extensions import db


class School(db.Model):
    __tablename__ = "schools"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(200), nullable=False)
    team = db.Column(db.String(1), default="A")
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    members = db.relationship(
        "Participant",
        back_populates="school",
        cascade="all, delete-orphan",
        order_by="Participant.registered_at",
    )

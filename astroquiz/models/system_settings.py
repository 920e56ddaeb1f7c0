from extensions import db

SETTINGS_ID = "system"


class SystemSettings(db.Model):
    __tablename__ = "system_settings"

    id = db.Column(db.String(20), primary_key=True, default=SETTINGS_ID)
    solo_registration_open = db.Column(db.Boolean, default=True, nullable=False)
    school_registration_open = db.Column(db.Boolean, default=True, nullable=False)
    quiz_active = db.Column(db.Boolean, default=True, nullable=False)

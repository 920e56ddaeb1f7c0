import logging
import socket

from flask import Flask

from config import Config
from extensions import db, socketio


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.debug and not app.testing:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(logging.INFO)

    db.init_app(app)
    socketio.init_app(app, cors_allowed_origins="*", async_mode="threading")

    # Models must be imported before create_all
    from astroquiz import models  # noqa: F401
    from astroquiz.routes import register_routes
    from astroquiz.sockets import register_sockets
    from astroquiz.services.question_service import seed_sample_questions
    from astroquiz.services.settings_service import get_settings

    register_routes(app)
    register_sockets(socketio)

    with app.app_context():
        db.create_all()
        get_settings()
        if app.config.get("SEED_SAMPLE_QUESTIONS"):
            seeded = seed_sample_questions()
            if seeded:
                app.logger.info("Seeded %s sample astronomy questions", seeded)

    return app


if __name__ == "__main__":
    app = create_app()
    ip = socket.gethostbyname(socket.gethostname())
    print(f"ASTRONOMY QUIZ READY ON {ip}:5000")
    socketio.run(app, host="0.0.0.0", port=5000, allow_unsafe_werkzeug=True)

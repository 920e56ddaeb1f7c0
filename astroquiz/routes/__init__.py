from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from astroquiz.errors import QuizError
from .admin_routes import admin_bp
from .public_routes import public_bp


def _handle_quiz_error(e):
    return jsonify(e.to_dict()), e.status_code


def _handle_db_error(e):
    db.session.rollback()
    current_app.logger.exception("Database error: %s", e)
    return jsonify({"message": "Storage failure"}), 500


def register_routes(app):
    app.register_blueprint(public_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_error_handler(QuizError, _handle_quiz_error)
    app.register_error_handler(SQLAlchemyError, _handle_db_error)

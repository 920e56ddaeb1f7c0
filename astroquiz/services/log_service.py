from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from astroquiz.models import LogEntry


def log_event(source, message):
    """
    Writes to the app logger and to the log_entries table, then trims the
    table to LOG_RETENTION rows. Call only outside an open unit of work:
    this commits. A failed audit write is logged and rolled back, never raised.
    """
    if not message:
        return
    current_app.logger.info("[%s] %s", source, message)

    try:
        entry = LogEntry(source=source, message=str(message))
        db.session.add(entry)
        db.session.flush()

        limit = current_app.config.get("LOG_RETENTION", 1000)
        count = db.session.query(db.func.count(LogEntry.id)).scalar() or 0
        excess = max(0, count - limit)
        if excess > 0:
            old_ids = [row[0] for row in db.session.query(LogEntry.id)
                       .order_by(LogEntry.created_at.asc(), LogEntry.id.asc())
                       .limit(excess)
                       .all()]
            if old_ids:
                LogEntry.query.filter(LogEntry.id.in_(old_ids))\
                    .delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Could not store log entry [%s] %s", source, message)


def get_recent_logs(limit=200):
    rows = LogEntry.query.order_by(LogEntry.created_at.desc(), LogEntry.id.desc()).limit(limit).all()
    return [
        {
            "id": row.id,
            "createdAt": row.created_at.isoformat() if row.created_at else None,
            "source": row.source,
            "message": row.message,
        }
        for row in rows
    ]

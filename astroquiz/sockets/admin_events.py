from flask import request
from flask_socketio import emit, join_room

from extensions import socketio
from astroquiz.services.auth_service import current_admin
from astroquiz.services.participant_service import get_stats

ADMIN_ROOM = "admins"


def broadcast_stats():
    """Pushes fresh dashboard counters to every connected admin."""
    socketio.emit("admin_stats_update", get_stats(), to=ADMIN_ROOM)


def register_admin_events(socketio):

    # ---------------------------
    # ADMIN CONNECT
    # ---------------------------
    @socketio.on("connect")
    def handle_connect(auth=None):
        token = auth.get("token") if isinstance(auth, dict) else None
        if current_admin(token=token) is None:
            return False

        join_room(ADMIN_ROOM)
        emit("admin_stats", get_stats(), to=request.sid)

    # ---------------------------
    # ADMIN STATS REFRESH
    # ---------------------------
    @socketio.on("admin_get_stats")
    def handle_get_stats():
        emit("admin_stats", get_stats())

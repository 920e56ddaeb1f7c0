from .admin_events import register_admin_events


def register_sockets(socketio):
    register_admin_events(socketio)

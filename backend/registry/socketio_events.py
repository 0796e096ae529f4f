from flask_socketio import emit
from flask import current_app
from registry import socketio


def handle_connect():
    emit('connected', {'message': 'Connected'})


def handle_update_leaderboard(data=None):
    # Fan out to every client, the sender included, so all leaderboards re-fetch
    current_app.logger.info("[leaderboard] refresh requested")
    socketio.emit('sendUsers', namespace='/')


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the default namespace."""
    socketio.on_event('connect', handle_connect, namespace='/')
    socketio.on_event('updateLeaderBoard', handle_update_leaderboard, namespace='/')
    socketio.on_event('ping', handle_ping, namespace='/')

from flask_socketio import emit
from flask import current_app, request
from salvo import socketio
from salvo.messages import CreateRoom, ErrorEvent, JoinRoom, parse_message
from salvo.services.games.errors import GameError


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _service():
    return current_app.extensions['salvo']


def _channel():
    return current_app.extensions['salvo.socket']


def handle_connect(auth=None):
    current_app.logger.info(f"[socket-connect] sid={_get_sid()}")
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    # Leaving frees the seat; an emptied room is disposed by the service
    sid = _get_sid()
    players = _channel().players_for(sid)
    current_app.logger.info(f"[socket-disconnect] sid={sid} players={len(players)}")
    for player_id in players:
        _service().leave_player(player_id)


def handle_message(data):
    """Apply one tagged message; the reply doubles as the Socket.IO ack."""
    try:
        message = parse_message(data)
        reply = _service().handle(message, _channel(), handle=_get_sid())
    except GameError as exc:
        emit('error', exc.to_dict())
        return exc.to_dict()
    if isinstance(message, (CreateRoom, JoinRoom)):
        emit(reply['type'], reply)
    return reply


def handle_ping(data):
    emit('pong', data or {})


def handle_error(exc):
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} {exc!r}")
    emit('error', ErrorEvent(message='Internal server error').to_dict())


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the game namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('message', handle_message, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
    socketio.on_error(namespace)(handle_error)

from flask import Blueprint, jsonify, request, current_app
from salvo.messages import parse_message
from salvo.services.games.errors import GameError


games = Blueprint('games', __name__)


def _service():
    return current_app.extensions['salvo']


@games.route('', methods=['POST'])
def post_message():
    """
    Accepts one tagged message (createRoom, joinRoom, move, leaveRoom).
    Events it produces are buffered for each player until their next poll.
    """
    data = request.get_json(silent=True)
    try:
        message = parse_message(data)
        reply = _service().handle(message, current_app.extensions['salvo.polling'])
    except GameError as exc:
        kind = data.get('type') if isinstance(data, dict) else None
        current_app.logger.info(f"[rejected] type={kind} code={exc.code}")
        return jsonify(exc.to_dict()), exc.status
    return jsonify(reply), 200


@games.route('/<string:room_code>', methods=['GET'])
def poll_game(room_code):
    """
    Returns the current game state and player list. With ?player=<id>, also
    drains the events buffered for that player.
    """
    player_id = request.args.get('player')
    try:
        payload = _service().poll(room_code, player_id)
    except GameError as exc:
        return jsonify(exc.to_dict()), exc.status
    return jsonify(payload), 200

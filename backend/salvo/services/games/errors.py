"""Game error kinds.

Every error rejects a single operation and leaves the session untouched.
`status` is the HTTP status used by the polling transport.
"""


class GameError(Exception):
    code = 'game_error'
    status = 400
    default_message = 'Invalid request'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {'type': 'error', 'message': self.message, 'code': self.code}


class RoomNotFound(GameError):
    code = 'room_not_found'
    status = 404
    default_message = 'Room not found'


class RoomFull(GameError):
    code = 'room_full'
    status = 403
    default_message = 'Room is full!'


class NotYourTurn(GameError):
    code = 'not_your_turn'
    status = 409
    default_message = 'Not your turn!'


class InvalidPhase(GameError):
    code = 'invalid_phase'
    status = 409
    default_message = 'Moves are not accepted right now'


class InvalidPlacement(GameError):
    code = 'invalid_placement'
    default_message = 'Cannot place ship there!'


class DuplicateShot(GameError):
    code = 'duplicate_shot'
    default_message = 'Already fired at this location!'


class InvalidCoordinates(GameError):
    code = 'invalid_coordinates'
    default_message = 'Coordinates are outside the board'


class PlayerNotFound(GameError):
    code = 'player_not_found'
    status = 403
    default_message = 'Player not found'


class MalformedMessage(GameError):
    code = 'malformed_message'
    default_message = 'Malformed message'

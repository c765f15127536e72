from flask import Flask, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get('CORS_ORIGINS', '*')
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One registry and service per application; transports reach them
    # through app.extensions rather than module globals.
    from salvo.services.games.registry import SessionRegistry
    from salvo.services.games.service import GameService
    from salvo.channels import PollingChannel, SocketChannel

    registry = SessionRegistry(
        rows=flask_app.config.get('BOARD_ROWS', 7),
        cols=flask_app.config.get('BOARD_COLS', 9),
        ship_sizes=flask_app.config.get('SHIP_SIZES', (5, 4, 3, 3, 2)),
        code_length=flask_app.config.get('ROOM_CODE_LENGTH', 6),
    )
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    flask_app.extensions['salvo'] = GameService(registry, logger=flask_app.logger)
    flask_app.extensions['salvo.polling'] = PollingChannel()
    flask_app.extensions['salvo.socket'] = SocketChannel(socketio, namespace=namespace)

    from salvo.main import main
    flask_app.register_blueprint(main)

    from salvo.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/game')

    from salvo.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    from salvo.services.games.scheduler import start_idle_reaper
    start_idle_reaper(flask_app)

    @flask_app.errorhandler(500)
    def internal_error(error):
        flask_app.logger.error(f"[server-error] {getattr(error, 'original_exception', error)!r}")
        return jsonify({'type': 'error', 'error': 'Internal server error', 'code': 'server_error'}), 500

    return flask_app

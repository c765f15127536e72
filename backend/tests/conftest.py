import os
import sys
import pytest

# Ensure the backend root (containing the `salvo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from salvo import create_app, socketio
from salvo.services.games.session import Session


class TestConfig:
    TESTING = True
    PORT = 3000
    BOARD_ROWS = 7
    BOARD_COLS = 9
    SHIP_SIZES = (5, 4, 3, 3, 2)
    ROOM_CODE_LENGTH = 6
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/ws'
    POLL_IDLE_TIMEOUT_SEC = 30
    IDLE_SWEEP_INTERVAL_SEC = 5


# Non-overlapping horizontal fleet for a 7x9 board: ship i sits on row i from col 0
FLEET = [(0, 0, True), (1, 0, True), (2, 0, True), (3, 0, True), (4, 0, True)]
FLEET_CELLS = [(row, col) for row, size in enumerate((5, 4, 3, 3, 2)) for col in range(size)]


@pytest.fixture()
def fleet():
    return list(FLEET)


@pytest.fixture()
def fleet_cells():
    return list(FLEET_CELLS)


@pytest.fixture()
def place_fleet():
    def _place(session: Session, seat: int):
        return [session.apply_move(seat, row, col, horizontal) for row, col, horizontal in FLEET]
    return _place


@pytest.fixture()
def session():
    s = Session('ABC123')
    s.join('Alice')
    s.join('Bob')
    return s


@pytest.fixture()
def battle_session(session, place_fleet):
    place_fleet(session, 1)
    place_fleet(session, 2)
    return session


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def sio_factory(flask_app):
    """Builds extra Socket.IO clients, e.g. a second seat."""
    clients = []

    def _make():
        c = socketio.test_client(flask_app, namespace='/ws')
        clients.append(c)
        return c

    yield _make
    for c in clients:
        try:
            c.disconnect(namespace='/ws')
        except Exception:
            pass

import os

class Config:
    # Listen port; the only setting read from the environment
    PORT = int(os.environ.get('PORT', '3000'))
    # Board and fleet are fixed for every room
    BOARD_ROWS = 7
    BOARD_COLS = 9
    SHIP_SIZES = (5, 4, 3, 3, 2)
    ROOM_CODE_LENGTH = 6
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/ws'
    # Polling players silent for longer than this are removed from their room
    POLL_IDLE_TIMEOUT_SEC = 30
    IDLE_SWEEP_INTERVAL_SEC = 5

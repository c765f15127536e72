from typing import List, Optional

from salvo import socketio


def sweep_idle_players(app, now: Optional[float] = None) -> List[str]:
    """Remove polling players that stopped polling, disposing rooms left empty."""
    service = app.extensions['salvo']
    timeout = int(app.config.get('POLL_IDLE_TIMEOUT_SEC', 30))
    with app.app_context():
        reaped = service.reap_idle(timeout, now=now)
        if reaped:
            app.logger.info(f"[idle-sweep] reaped={len(reaped)} rooms={len(service.registry)}")
    return reaped


def start_idle_reaper(app) -> bool:
    """Start the background sweep for the given app.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Runs every IDLE_SWEEP_INTERVAL_SEC on a Socket.IO background task
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return False

    interval = int(app.config.get('IDLE_SWEEP_INTERVAL_SEC', 5))
    if interval <= 0:
        return False

    def _worker():
        while True:
            socketio.sleep(interval)
            try:
                sweep_idle_players(app)
            except Exception:
                app.logger.exception("[idle-sweep] failed")

    socketio.start_background_task(_worker)
    app.logger.info(f"[idle-sweep] started interval={interval}s timeout={app.config.get('POLL_IDLE_TIMEOUT_SEC', 30)}s")
    return True

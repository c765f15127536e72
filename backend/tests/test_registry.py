import threading

import pytest

from salvo.services.games.errors import RoomNotFound
from salvo.services.games.registry import CODE_ALPHABET, SessionRegistry
from salvo.services.games.session import Phase


def test_create_returns_unique_codes():
    registry = SessionRegistry()
    codes = {registry.create()[0] for _ in range(200)}
    assert len(codes) == 200
    assert len(registry) == 200
    for code in codes:
        assert len(code) == 6
        assert set(code) <= set(CODE_ALPHABET)


def test_created_session_uses_registry_settings():
    registry = SessionRegistry(rows=5, cols=6, ship_sizes=(3, 2), code_length=4)
    code, session = registry.create()
    assert len(code) == 4
    assert session.code == code
    assert (session.rows, session.cols, session.ship_sizes) == (5, 6, (3, 2))
    assert session.phase == Phase.WAITING


def test_get_is_case_insensitive():
    registry = SessionRegistry()
    code, session = registry.create()
    assert registry.get(code.lower()) is session
    assert code.lower() in registry


def test_get_unknown_raises():
    registry = SessionRegistry()
    with pytest.raises(RoomNotFound):
        registry.get('NOPE00')
    with pytest.raises(RoomNotFound):
        registry.get(None)


def test_remove_is_idempotent_and_closes_session():
    registry = SessionRegistry()
    code, session = registry.create()
    registry.remove(code)
    registry.remove(code)
    assert code not in registry
    assert session.closed
    with pytest.raises(RoomNotFound):
        registry.get(code)


def test_collision_retry(monkeypatch):
    registry = SessionRegistry(code_length=2)
    first, _ = registry.create()
    picks = iter([list(first), list(first), list('ZZ' if first != 'ZZ' else 'YY')])
    monkeypatch.setattr('salvo.services.games.registry.random.choices', lambda alphabet, k: next(picks))
    second, _ = registry.create()
    assert second != first
    assert len(registry) == 2


def test_concurrent_creates_do_not_clash():
    registry = SessionRegistry()
    codes = []
    lock = threading.Lock()

    def worker():
        for _ in range(50):
            code, _ = registry.create()
            with lock:
                codes.append(code)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(set(codes)) == 400
    assert len(registry) == 400

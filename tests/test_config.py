import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'anchorage-repair')))

from anchorage import config


def test_reload_reads_environment(monkeypatch):
    monkeypatch.setenv("PORT", "9123")
    monkeypatch.setenv("EXPED_RETURN_GRACE_S", "2.5")
    monkeypatch.setenv("LOAD_SHIP_TYPES", "no")
    try:
        cfg = config.reload_from_env()
        assert cfg is config.CONFIG
        assert cfg.port == 9123
        assert cfg.exped_return_grace_s == 2.5
        assert cfg.load_ship_types is False
    finally:
        monkeypatch.undo()
        config.reload_from_env()


def test_bad_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("PORT", "eighty")
    monkeypatch.setenv("WS_MAX_QUEUE", "")
    cfg = config.Config()
    assert cfg.port == 8000
    assert cfg.ws_max_queue == 100

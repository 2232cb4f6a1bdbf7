import pytest

from deckhand.config import Config, set_config


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Isolate every test from user/local config files."""
    monkeypatch.delenv("DECKHAND_PROCESS__TIMEOUT_MS", raising=False)
    config = Config()
    set_config(config)
    yield config
    set_config(Config())

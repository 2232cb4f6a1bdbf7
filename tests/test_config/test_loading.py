from pathlib import Path

import pytest

import deckhand.config as config_module
from deckhand.config import Config, get_config, set_config
from deckhand.exceptions import ConfigurationError


def test_load_prefers_local_config_yaml(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)

    home_cfg = tmp_path / "home_config.yaml"
    home_cfg.write_text("process:\n  timeout_ms: 1000\n", encoding="utf-8")
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", home_cfg)

    local_cfg = tmp_path / "deckhand.yaml"
    local_cfg.write_text(
        (
            "process:\n"
            "  timeout_ms: 30000\n"
            "  mirror_output: false\n"
            "protocol:\n"
            "  content_tools:\n"
            "    - propose_edit\n"
            "    - create_file\n"
        ),
        encoding="utf-8",
    )

    cfg = Config.load()

    assert cfg.process.timeout_ms == 30000
    assert cfg.process.mirror_output is False
    assert cfg.protocol.content_tools == ["propose_edit", "create_file"]


def test_load_falls_back_to_default_path_when_no_local(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)

    home_cfg = tmp_path / "home_config.yaml"
    home_cfg.write_text("diff:\n  context_lines: 5\n", encoding="utf-8")
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", home_cfg)

    cfg = Config.load()

    assert cfg.diff.context_lines == 5
    assert cfg.process.timeout_ms == 120_000


def test_missing_config_file_yields_defaults(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")

    cfg = Config.load()

    assert cfg.process.kill_grace_seconds == 5.0
    assert cfg.edits.require_approval is True
    assert cfg.logging.format == "console"


def test_env_overrides_nested_values(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DECKHAND_PROCESS__TIMEOUT_MS", "2500")

    cfg = Config()

    assert cfg.process.timeout_ms == 2500


def test_save_round_trips_through_yaml(tmp_path: Path):
    cfg = Config()
    cfg.edits.preview_lines = 4
    target = tmp_path / "nested" / "config.yaml"

    cfg.save(target)
    loaded = Config.from_yaml(target)

    assert loaded.edits.preview_lines == 4
    assert loaded.model_dump() == cfg.model_dump()


def test_set_config_replaces_global_instance():
    cfg = Config(diff={"context_lines": 1})
    set_config(cfg)

    assert get_config() is cfg


def test_invalid_yaml_raises_configuration_error(tmp_path: Path):
    broken = tmp_path / "broken.yaml"
    broken.write_text("process: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid config file"):
        Config.from_yaml(broken)


def test_invalid_value_raises_configuration_error(tmp_path: Path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("logging:\n  format: xml\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        Config.from_yaml(bad)

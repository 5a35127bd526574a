from pathlib import Path

import config


def _write_config(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")


def _use_config(tmp_path, monkeypatch, text: str) -> Path:
    config_dir = tmp_path / ".scripturesketch"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    _write_config(config_path, text)
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    return config_path


def test_set_preference_updates_existing_key(tmp_path, monkeypatch):
    config_path = _use_config(
        tmp_path,
        monkeypatch,
        "[preferences]\nhas_performed_word_group_migration_v1 = false\n\n[logging]\nlevel = \"INFO\"\n",
    )

    config.set_preference("has_performed_word_group_migration_v1", True)

    updated = config_path.read_text(encoding="utf-8")
    assert "has_performed_word_group_migration_v1 = true" in updated
    assert "= false" not in updated
    assert config.load_config()["logging"]["level"] == "INFO"


def test_set_preference_adds_section_when_missing(tmp_path, monkeypatch):
    config_path = _use_config(tmp_path, monkeypatch, "[logging]\nlevel = \"DEBUG\"\n")

    config.set_preference("seen_welcome", True)

    updated = config_path.read_text(encoding="utf-8")
    assert "[preferences]" in updated
    assert config.load_config()["preferences"]["seen_welcome"] is True


def test_preference_flags_round_trip(tmp_path, monkeypatch):
    _use_config(tmp_path, monkeypatch, "[catalog]\ndefault_text_position = \"top\"\n\n[preferences]\n")
    flags = config.PreferenceFlags()

    assert flags.get_bool("migrated") is False
    flags.set_bool("migrated", True)
    flags.set_bool("other", False)

    assert flags.get_bool("migrated") is True
    assert flags.get_bool("other") is False
    assert config.get_config_value("catalog", "default_text_position") == "top"


def test_env_overrides_text_position(tmp_path, monkeypatch):
    _use_config(tmp_path, monkeypatch, "[catalog]\ndefault_text_position = \"below\"\n")
    monkeypatch.setenv("SCRIPTURESKETCH_DEFAULT_TEXT_POSITION", "TOP")

    assert config.load_config()["catalog"]["default_text_position"] == "top"

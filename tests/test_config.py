import json
from pathlib import Path

from deadcity.presentation.cli import config


def test_missing_config_returns_defaults(tmp_path: Path) -> None:
    assert config.load_config(tmp_path / "config.json") == config.default_config()


def test_invalid_values_are_normalized(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"text_display_mode": "slow", "default_seed": -4, "log_level": "chatty"}),
        encoding="utf-8",
    )

    loaded = config.load_config(path)

    assert loaded == {"text_display_mode": "instant", "default_seed": None, "log_level": "WARNING"}


def test_save_and_reload(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"

    config.save_config({"text_display_mode": "step", "default_seed": 12, "log_level": "debug"}, path)

    assert config.load_config(path) == {"text_display_mode": "step", "default_seed": 12, "log_level": "DEBUG"}


def test_unreadable_config_falls_back(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2", encoding="utf-8")

    assert config.load_config(path) == config.default_config()


def test_save_dir_lives_under_user_data_dir() -> None:
    assert config.get_save_dir().parent == config.get_user_data_dir()

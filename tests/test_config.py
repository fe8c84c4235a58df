# file: tests/test_config.py
from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from phonedial.config import load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path: Path) -> None:
    # Keep a developer's .env or PHONEDIAL_* variables out of the tests.
    monkeypatch.chdir(tmp_path)
    for key in [
        "PHONEDIAL_CONFIG",
        "PHONEDIAL_LOG_LEVEL",
        "PHONEDIAL_HISTORY_CAPACITY",
        "PHONEDIAL_HISTORY_ENABLED",
        "PHONEDIAL_BUSINESS_START_HOUR",
        "PHONEDIAL_BUSINESS_END_HOUR",
        "PHONEDIAL_DEFAULT_MESSAGE",
    ]:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    s = load_settings()
    assert s.log_level == "INFO"
    assert s.history_enabled
    assert s.history_capacity == 50
    assert (s.business_start_hour, s.business_end_hour) == (9, 18)
    assert s.countries_path is None


def test_precedence_env_over_dotenv_over_yaml(monkeypatch, tmp_path: Path) -> None:
    cfg = tmp_path / "phonedial.yaml"
    cfg.write_text(
        "log_level: WARNING\nhistory_capacity: 10\ndefault_message: from yaml\n",
        encoding="utf-8",
    )
    dotenv = tmp_path / ".env"
    dotenv.write_text(
        "PHONEDIAL_HISTORY_CAPACITY=20\nPHONEDIAL_DEFAULT_MESSAGE=from dotenv\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("PHONEDIAL_DEFAULT_MESSAGE", "from env")

    s = load_settings(yaml_path=cfg, env_path=dotenv)
    assert s.log_level == "WARNING"
    assert s.history_capacity == 20
    assert s.default_message == "from env"


def test_config_path_from_environment(monkeypatch, tmp_path: Path) -> None:
    cfg = tmp_path / "custom.yaml"
    cfg.write_text("history_enabled: false\n", encoding="utf-8")
    monkeypatch.setenv("PHONEDIAL_CONFIG", str(cfg))
    assert load_settings().history_enabled is False


def test_dotenv_in_working_directory_is_picked_up(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("PHONEDIAL_LOG_LEVEL=DEBUG\n", encoding="utf-8")
    assert load_settings().log_level == "DEBUG"


def test_invalid_business_window(monkeypatch) -> None:
    monkeypatch.setenv("PHONEDIAL_BUSINESS_START_HOUR", "18")
    monkeypatch.setenv("PHONEDIAL_BUSINESS_END_HOUR", "9")
    with pytest.raises(ValidationError):
        load_settings()

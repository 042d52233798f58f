from __future__ import annotations

from pathlib import Path

import pytest

from jtrack.config_loader import load_config
from jtrack.storage import STORAGE_KEY


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("JTRACK_DATA_DIR", raising=False)


def test_defaults_without_config_file():
    config = load_config()
    assert config.storage.data_dir == Path("data")
    assert config.storage.key == STORAGE_KEY
    assert config.follow_up_days == 7
    assert config.dashboard.limit == 5
    assert config.dashboard.week_span_days == 6


def test_yaml_values_are_applied(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "storage:\n"
        "  data_dir: tracker-data\n"
        "  key: my-jobs\n"
        "applications:\n"
        "  follow_up_days: 10\n"
        "dashboard:\n"
        "  limit: 3\n"
    )
    config = load_config(path)

    assert config.storage.data_dir == Path("tracker-data")
    assert config.storage.key == "my-jobs"
    assert config.follow_up_days == 10
    assert config.dashboard.limit == 3
    assert config.dashboard.week_span_days == 6


def test_environment_overrides_data_dir(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("storage:\n  data_dir: from-yaml\n")
    monkeypatch.setenv("JTRACK_DATA_DIR", str(tmp_path / "from-env"))

    assert load_config(path).storage.data_dir == tmp_path / "from-env"


def test_missing_explicit_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_invalid_values_raise(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("dashboard:\n  limit: zero\n")
    with pytest.raises(ValueError, match="limit"):
        load_config(path)

    path.write_text("applications:\n  follow_up_days: -1\n")
    with pytest.raises(ValueError, match="follow_up_days"):
        load_config(path)

    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_config(path)


def test_empty_yaml_file_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path).follow_up_days == 7

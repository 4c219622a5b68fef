"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from autograder.config import DEFAULT_DASHBOARD_PORT, DEFAULT_PORT
from autograder.config_loader import load_config


def test_load_config_resolves_relative_paths(tmp_path):
    config_path = tmp_path / "autograder_config.yml"
    config_path.write_text("data_dir: store\ngrades_dir: /srv/grades\nport: 8080\nverbose: true\n")

    config = load_config(config_path)

    assert config.data_dir == tmp_path / "store"
    assert str(config.grades_dir) == "/srv/grades"
    assert config.port == 8080
    assert config.verbose is True


def test_load_config_defaults(tmp_path):
    config_path = tmp_path / "autograder_config.yml"
    config_path.write_text("")

    config = load_config(config_path)

    assert config.data_dir == tmp_path / "data"
    assert config.grades_dir == tmp_path / "grades"
    assert config.port == DEFAULT_PORT
    assert config.dashboard_port == DEFAULT_DASHBOARD_PORT
    assert config.cors_origins == "*"


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yml")


def test_load_config_invalid_port(tmp_path):
    config_path = tmp_path / "autograder_config.yml"
    config_path.write_text("port: 70000\n")
    with pytest.raises(ValidationError):
        load_config(config_path)

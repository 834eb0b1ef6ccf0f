"""Tests for command-line parsing and settings validation."""

import pytest
from pydantic import ValidationError

from treeserve.cli import main, settings_from_args
from treeserve.config import Settings


def test_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = settings_from_args([])
    assert settings.port == 8080
    assert settings.root_dir == str(tmp_path.resolve())
    assert settings.random_button is False
    assert settings.auth_enabled is False


def test_flags_override(tmp_path):
    settings = settings_from_args(
        ["--port", "9000", "--dir", str(tmp_path), "--password", "pw", "--random-button"]
    )
    assert settings.port == 9000
    assert settings.root_dir == str(tmp_path.resolve())
    assert settings.password == "pw"
    assert settings.random_button is True
    assert settings.auth_enabled is True


def test_environment_is_read(tmp_path, monkeypatch):
    monkeypatch.setenv("TREESERVE_PASSWORD", "from-env")
    monkeypatch.setenv("TREESERVE_ROOT_DIR", str(tmp_path))
    settings = settings_from_args([])
    assert settings.password == "from-env"
    assert settings.root_dir == str(tmp_path.resolve())


def test_root_must_be_a_directory(tmp_path):
    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("x")
    with pytest.raises(ValidationError):
        Settings(root_dir=str(not_a_dir), _env_file=None)
    with pytest.raises(ValidationError):
        Settings(root_dir=str(tmp_path / "missing"), _env_file=None)


def test_queue_size_must_be_positive(tmp_path):
    with pytest.raises(ValidationError):
        Settings(root_dir=str(tmp_path), live_client_queue_size=0, _env_file=None)


def test_main_rejects_bad_directory(tmp_path, capsys):
    assert main(["--dir", str(tmp_path / "missing")]) == 2
    assert "treeserve:" in capsys.readouterr().err

"""
Tests for settings persistence and repository path detection.
"""

import importlib
import json
import logging

import pytest

from gitdash import app_meta


@pytest.fixture
def settings_dir(tmp_path, monkeypatch):
    path = tmp_path / "config"
    monkeypatch.setenv(app_meta.CONFIG_DIR_ENV, str(path))
    return path


def test_settings_path_honours_override(settings_dir):
    assert app_meta.get_settings_path() == str(settings_dir / "settings.json")


def test_missing_file_gives_defaults(settings_dir):
    assert app_meta.load_settings() == app_meta.DEFAULT_SETTINGS


def test_corrupt_file_gives_defaults(settings_dir):
    settings_dir.mkdir()
    (settings_dir / "settings.json").write_text("{not json", encoding="utf-8")
    assert app_meta.load_settings() == app_meta.DEFAULT_SETTINGS


def test_round_trip_ignores_unknown_keys(settings_dir):
    data = dict(app_meta.DEFAULT_SETTINGS, branch="develop", commit_limit=25, extra=1)
    assert app_meta.save_settings(data)

    on_disk = json.loads((settings_dir / "settings.json").read_text(encoding="utf-8"))
    assert "extra" not in on_disk

    loaded = app_meta.load_settings()
    assert loaded["branch"] == "develop"
    assert loaded["commit_limit"] == 25


def test_save_failure_is_reported(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    assert not app_meta.save_settings({}, str(blocker / "settings.json"))


@pytest.mark.parametrize(
    "value,expected", [(5, 5), ("7", 7), (-1, 10), ("many", 10), (None, 10)]
)
def test_int_setting_falls_back(value, expected):
    assert app_meta.get_int_setting({"commit_limit": value}, "commit_limit") == expected


@pytest.mark.parametrize("value,expected", [(None, None), (3, 3.0), (0, None), ("x", None)])
def test_git_timeout(value, expected):
    assert app_meta.get_git_timeout({"git_timeout": value}) == expected


def test_detect_prefers_stored_path(tmp_path):
    settings = {"repo_path": str(tmp_path)}
    assert app_meta.detect_initial_repo_path(settings, cwd="/") == str(tmp_path)


def test_detect_falls_back_to_git_work_tree(tmp_path):
    (tmp_path / ".git").mkdir()
    nested = tmp_path / "src"
    nested.mkdir()
    settings = {"repo_path": ""}

    assert app_meta.detect_initial_repo_path(settings, cwd=str(nested)) == str(nested)
    assert settings["repo_path"] == str(nested)


def test_detect_gives_up_outside_repo(tmp_path, monkeypatch):
    monkeypatch.setattr(app_meta, "is_git_work_tree", lambda path: False)
    assert app_meta.detect_initial_repo_path({}, cwd=str(tmp_path)) == ""


def test_import_does_not_read_settings(settings_dir, caplog):
    settings_dir.mkdir()
    (settings_dir / "settings.json").write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="gitdash.app_meta"):
        module = importlib.reload(app_meta)

    assert not hasattr(module, "SETTINGS")
    assert caplog.records == []

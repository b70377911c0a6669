"""Tests for workspace keyword settings."""

import pytest

from markdown_todo.config import (
    CONFIG_ENV_VAR,
    find_config_file,
    load_workspace_settings,
)


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestFindConfigFile:
    def test_none(self, tmp_path):
        assert find_config_file(tmp_path) is None

    def test_yaml_preferred_over_yml(self, tmp_path):
        (tmp_path / ".markdown-todo.yml").write_text("{}")
        (tmp_path / ".markdown-todo.yaml").write_text("{}")
        assert find_config_file(tmp_path) == tmp_path / ".markdown-todo.yaml"

    def test_env_relative_to_root(self, tmp_path, monkeypatch):
        (tmp_path / "conf").mkdir()
        (tmp_path / "conf" / "keywords.yaml").write_text("{}")
        monkeypatch.setenv(CONFIG_ENV_VAR, "conf/keywords.yaml")
        assert find_config_file(tmp_path) == tmp_path / "conf" / "keywords.yaml"

    def test_env_missing_file(self, tmp_path, monkeypatch):
        (tmp_path / ".markdown-todo.yaml").write_text("{}")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.yaml"))
        assert find_config_file(tmp_path) is None


class TestLoadWorkspaceSettings:
    def test_no_file(self, tmp_path):
        settings = load_workspace_settings(tmp_path)
        assert not settings.exists()
        assert settings.keywords is None

    def test_flat_key(self, tmp_path):
        (tmp_path / ".markdown-todo.yaml").write_text(
            "markdown-todo.keywords:\n"
            "  - keyword: NOW\n"
            "    color: '#ff0000'\n"
            "  - keyword: LATER\n"
        )
        settings = load_workspace_settings(str(tmp_path))
        assert settings.exists()
        assert settings.keywords == [
            {"keyword": "NOW", "color": "#ff0000"},
            {"keyword": "LATER"},
        ]

    def test_nested_key(self, tmp_path):
        (tmp_path / ".markdown-todo.yaml").write_text(
            "markdown-todo:\n  keywords:\n    - keyword: WIP\n"
        )
        assert load_workspace_settings(tmp_path).keywords == [{"keyword": "WIP"}]

    def test_malformed_file(self, tmp_path, caplog):
        (tmp_path / ".markdown-todo.yaml").write_text("markdown-todo.keywords: [oops\n")
        settings = load_workspace_settings(tmp_path)
        assert settings.exists()
        assert settings.keywords is None
        assert "Cannot read" in caplog.text

    def test_non_mapping_file(self, tmp_path):
        (tmp_path / ".markdown-todo.yaml").write_text("- keyword: TODO\n")
        assert load_workspace_settings(tmp_path).keywords is None

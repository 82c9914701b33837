"""Tests for layered configuration loading."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from gitspaces.config import Config, load_config
from gitspaces.core.errors import ConfigError, SpacesError


def _write(path: Path, data: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def global_config(tmp_path: Path):
    """Point the global layer at a file inside tmp_path."""
    path = tmp_path / "home" / ".gitspaces" / "config.json"
    with patch("gitspaces.config.loader.get_default_config_path", return_value=path):
        yield path


class TestDefaults:
    """Tests for the built-in defaults."""

    def test_no_files_gives_defaults(self, tmp_path: Path, global_config: Path) -> None:
        config = load_config(root=tmp_path / "repo")

        assert config == Config()
        assert config.storage.directory == ".git/git-spaces"
        assert config.storage.hunks_file == "hunks.json"
        assert config.storage.groups_file == "spaces.json"
        assert config.spaces.default_group_name == "Main"
        assert config.spaces.default_group_goal == "Default workspace"
        assert config.git.apply_whitespace == "nowarn"
        assert config.logging.console_level == "WARNING"


class TestLayering:
    """Tests for global + repository-local merging."""

    def test_local_overrides_global(self, tmp_path: Path, global_config: Path) -> None:
        root = tmp_path / "repo"
        _write(
            global_config,
            {"spaces": {"default_group_name": "Global", "default_group_goal": "g"}},
        )
        _write(root / ".gitspaces" / "config.json", {"spaces": {"default_group_name": "Local"}})

        config = load_config(root=root)

        assert config.spaces.default_group_name == "Local"
        # Untouched keys of the global layer survive the deep merge
        assert config.spaces.default_group_goal == "g"

    def test_explicit_path_skips_layers(self, tmp_path: Path, global_config: Path) -> None:
        _write(global_config, {"git": {"executable": "/opt/git"}})
        explicit = _write(tmp_path / "custom.json", {"logging": {"level": "DEBUG"}})

        config = load_config(path=explicit, root=tmp_path)

        assert config.git.executable == "git"
        assert config.logging.level == "DEBUG"


class TestErrors:
    """Tests for invalid configuration."""

    def test_invalid_json_raises_config_error(self, tmp_path: Path, global_config: Path) -> None:
        global_config.parent.mkdir(parents=True)
        global_config.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(root=tmp_path)

    def test_unknown_key_rejected(self, tmp_path: Path, global_config: Path) -> None:
        _write(global_config, {"storage": {"bogus": 1}})

        with pytest.raises(ConfigError) as exc_info:
            load_config(root=tmp_path)

        assert "validation failed" in str(exc_info.value)

    def test_document_name_must_be_plain(self, tmp_path: Path) -> None:
        explicit = _write(tmp_path / "c.json", {"storage": {"hunks_file": "../escape.json"}})

        with pytest.raises(ConfigError):
            load_config(path=explicit)

    def test_bad_whitespace_action_rejected(self, tmp_path: Path) -> None:
        explicit = _write(tmp_path / "c.json", {"git": {"apply_whitespace": "sometimes"}})

        with pytest.raises(SpacesError):
            load_config(path=explicit)

    def test_missing_explicit_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(path=tmp_path / "nope.json")

        assert "File not found" in str(exc_info.value)

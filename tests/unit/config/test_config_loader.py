"""Unit tests for the layered TOML loader."""

import tomllib
from pathlib import Path

import pytest

from slotwise.config.loader import (
    config_layers,
    current_environment,
    find_config_dir,
    load_config,
    merge,
    read_toml,
)


class TestMerge:
    """Tests for merge."""

    def test_nested_tables_merge_key_by_key(self) -> None:
        base = {"scheduler": {"grid_minutes": 15, "tick_interval_seconds": 30}}
        override = {"scheduler": {"grid_minutes": 30}}

        assert merge(base, override) == {
            "scheduler": {"grid_minutes": 30, "tick_interval_seconds": 30}
        }

    def test_later_layers_win(self) -> None:
        result = merge({"a": {"x": 1}}, {"a": "replaced"}, {"b": [1, 2]}, {"b": [3]})
        assert result == {"a": "replaced", "b": [3]}

    def test_inputs_untouched(self) -> None:
        base = {"a": {"x": 1}}
        merge(base, {"a": {"y": 2}})
        assert base == {"a": {"x": 1}}


class TestReadToml:
    """Tests for read_toml."""

    def test_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "test.toml"
        path.write_text("[conflicts]\ntimeout_minutes = 5")
        assert read_toml(path) == {"conflicts": {"timeout_minutes": 5}}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_toml(tmp_path / "nonexistent.toml")

    def test_invalid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "invalid.toml"
        path.write_text("invalid = [unclosed")
        with pytest.raises(tomllib.TOMLDecodeError):
            read_toml(path)


class TestLocation:
    """Tests for current_environment and find_config_dir."""

    def test_environment_from_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SLOTWISE_ENV", "production")
        assert current_environment() == "production"

    def test_environment_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SLOTWISE_ENV", raising=False)
        assert current_environment() == "development"

    def test_explicit_dir(self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SLOTWISE_CONFIG_DIR", str(test_config_dir))
        assert find_config_dir() == test_config_dir

    def test_explicit_dir_must_exist(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SLOTWISE_CONFIG_DIR", str(tmp_path / "missing"))
        with pytest.raises(FileNotFoundError):
            find_config_dir()

    def test_searches_parent_directories(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("SLOTWISE_CONFIG_DIR", raising=False)
        nested = test_config_dir.parent / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_dir(nested) == test_config_dir.resolve()


class TestLoadConfig:
    """Tests for config_layers and load_config."""

    def test_environment_overrides_default(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files({
            "default.toml": "debug = false\n[conflicts]\ntimeout_minutes = 30",
            "staging.toml": "[conflicts]\ntimeout_minutes = 10",
        })
        monkeypatch.setenv("SLOTWISE_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("SLOTWISE_ENV", "staging")

        assert load_config() == {"debug": False, "conflicts": {"timeout_minutes": 10}}

    def test_explicit_arguments(self, test_config_dir: Path, mock_toml_files) -> None:
        mock_toml_files({"production.toml": "debug = true"})

        assert load_config("production", test_config_dir) == {"debug": True}
        assert config_layers(test_config_dir, "production") == [
            test_config_dir / "production.toml"
        ]

    def test_missing_files_yield_empty_config(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Model defaults apply when no TOML file exists."""
        monkeypatch.setenv("SLOTWISE_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("SLOTWISE_ENV", "nonexistent")
        assert load_config() == {}

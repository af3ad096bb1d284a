"""Tests for configuration settings."""

import pathlib as _pathlib

import pydantic as _pydantic
import pytest as _pytest

import rimecfg.config as config


class TestSettingsDefaults:
    """Test Settings default values when environment is clean."""

    def test_default_rime_dir(self) -> None:
        """Default Rime directory should be Squirrel's."""
        settings = config.Settings()
        assert settings.rime_dir == _pathlib.Path.home() / "Library" / "Rime"

    def test_default_debounce(self) -> None:
        """Default debounce window should be 0.3 seconds."""
        assert config.Settings().debounce_seconds == 0.3

    def test_default_verbose_is_false(self) -> None:
        """Verbose should be False by default."""
        assert config.Settings().verbose is False


class TestSettingsPrecedence:
    """Test where settings values come from."""

    def test_env_overrides_default(
        self,
        tmp_path: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        """RIMECFG_* environment variables should be read."""
        monkeypatch.setenv("RIMECFG_RIME_DIR", str(tmp_path))
        monkeypatch.setenv("RIMECFG_DEBOUNCE_SECONDS", "0.5")
        settings = config.Settings()
        assert settings.rime_dir == tmp_path
        assert settings.debounce_seconds == 0.5

    def test_settings_file_read(
        self,
        tmp_path: _pathlib.Path,
        isolated_settings: _pathlib.Path,
    ) -> None:
        """The user settings file should supply values."""
        (isolated_settings / "config.yaml").write_text(
            f"rime_dir: {tmp_path}\nverbose: true\n", encoding="utf-8"
        )
        settings = config.Settings()
        assert settings.rime_dir == tmp_path
        assert settings.verbose is True

    def test_env_overrides_settings_file(
        self,
        isolated_settings: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        """Environment variables should take precedence over the file."""
        (isolated_settings / "config.yaml").write_text(
            "debounce_seconds: 1.5\n", encoding="utf-8"
        )
        monkeypatch.setenv("RIMECFG_DEBOUNCE_SECONDS", "0.1")
        assert config.Settings().debounce_seconds == 0.1

    def test_init_overrides_env(
        self,
        tmp_path: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        """Constructor arguments should take precedence over everything."""
        monkeypatch.setenv("RIMECFG_RIME_DIR", "/somewhere/else")
        assert config.Settings(rime_dir=tmp_path).rime_dir == tmp_path

    def test_rime_dir_expanded(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """A leading ~ in rime_dir should be expanded."""
        monkeypatch.setenv("RIMECFG_RIME_DIR", "~/Rime")
        assert config.Settings().rime_dir == _pathlib.Path.home() / "Rime"


class TestSettingsValidation:
    """Test rejection of bad settings."""

    def test_negative_debounce_rejected(self) -> None:
        """A negative debounce window should fail validation."""
        with _pytest.raises(_pydantic.ValidationError):
            config.Settings(debounce_seconds=-1)

    def test_invalid_settings_file(self, isolated_settings: _pathlib.Path) -> None:
        """A malformed settings file should raise ConfigFileError."""
        (isolated_settings / "config.yaml").write_text("rime_dir: [unclosed\n", encoding="utf-8")
        with _pytest.raises(config.ConfigFileError, match="invalid YAML"):
            config.Settings()

    def test_non_map_settings_file(self, isolated_settings: _pathlib.Path) -> None:
        """A settings file that is not a map should raise ConfigFileError."""
        (isolated_settings / "config.yaml").write_text("- a\n", encoding="utf-8")
        with _pytest.raises(config.ConfigFileError, match="mapping"):
            config.Settings()

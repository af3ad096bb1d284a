"""
Settings for rimecfg.

Config precedence (highest to lowest):
1. Constructor arguments
2. Environment variables (RIMECFG_*)
3. User settings file (~/.config/rimecfg/config.yaml)
4. Field defaults
"""

import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import rimecfg.config.sources as sources
import rimecfg.constants as constants


class Settings(_pydantic_settings.BaseSettings):
    """
    rimecfg configuration settings.

    All settings can be overridden via environment variables with the
    RIMECFG_ prefix, e.g. RIMECFG_RIME_DIR=~/.local/share/fcitx5/rime.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="RIMECFG_",
        extra="ignore",
    )

    rime_dir: _pathlib.Path = _pydantic.Field(
        default=constants.DEFAULT_RIME_DIR,
        description="Rime user directory holding default.yaml and squirrel.yaml",
    )

    debounce_seconds: float = _pydantic.Field(
        default=constants.DEFAULT_DEBOUNCE_SECONDS,
        ge=0,
        description="Quiescence window before an edit is written to disk",
    )

    verbose: bool = _pydantic.Field(
        default=False,
        description="Log debug output",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            sources.YamlSettingsSource(settings_cls),
        )

    @_pydantic.field_validator("rime_dir", mode="after")
    @classmethod
    def _expand_rime_dir(cls, value: _pathlib.Path) -> _pathlib.Path:
        return value.expanduser()

    def describe(self) -> dict[str, _typing.Any]:
        """Return the settings as plain values for display."""
        return {
            "rime_dir": str(self.rime_dir),
            "debounce_seconds": self.debounce_seconds,
            "verbose": self.verbose,
            "settings_file": str(sources.get_user_config_path()),
        }

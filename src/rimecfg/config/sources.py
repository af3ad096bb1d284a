"""Custom pydantic-settings source for rimecfg settings.

The user settings file is an optional YAML map whose keys match the
Settings fields:

    rime_dir: ~/Library/Rime
    debounce_seconds: 0.5

It is read from ~/.config/rimecfg/config.yaml, or from the directory named
by RIMECFG_CONFIG_DIR. Environment variables and constructor arguments
take precedence over it.
"""

import collections.abc as _abc
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = "RIMECFG_CONFIG_DIR"

CONFIG_FILE_NAME = "config.yaml"


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


class YamlSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """Settings source that loads the user's YAML settings file."""

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        *,
        user_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            user_config_path: Override path for the user settings file (for
                testing). If not provided, uses RIMECFG_CONFIG_DIR or the
                default XDG path.
        """
        super().__init__(settings_cls)
        self._path = user_config_path or get_user_config_path()
        self._data = self._load_yaml_file(self._path) if self._path.exists() else {}

    @property
    def path(self) -> _pathlib.Path:
        return self._path

    def _load_yaml_file(self, path: _pathlib.Path) -> dict[str, _typing.Any]:
        """
        Load a YAML file and return its contents as a dict.

        Raises:
            ConfigFileError: If the file cannot be read, is malformed YAML,
                or contains non-dict content at the top level.
        """
        try:
            content = path.read_text(encoding="utf-8")
        except PermissionError as e:
            raise ConfigFileError(path, f"permission denied: {e}") from e
        except OSError as e:
            raise ConfigFileError(path, f"cannot read file: {e}") from e

        try:
            parsed = _yaml.safe_load(content)
        except _yaml.YAMLError as e:
            raise ConfigFileError(path, f"invalid YAML: {e}") from e

        # Empty file
        if parsed is None:
            return {}

        if not isinstance(parsed, dict):
            type_name = type(parsed).__name__
            raise ConfigFileError(
                path,
                f"config must be a YAML mapping (dict), got {type_name}",
            )
        return parsed

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        value = self._data.get(field_name)
        return value, field_name, isinstance(value, (_abc.Mapping, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return only the keys that name Settings fields."""
        return {
            name: value
            for name, value in self._data.items()
            if name in self.settings_cls.model_fields and value is not None
        }


def get_user_config_dir() -> _pathlib.Path:
    """
    Get the user config directory.

    Respects RIMECFG_CONFIG_DIR environment variable if set,
    otherwise uses XDG standard path.
    """
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env)
    return _pathlib.Path.home() / ".config" / "rimecfg"


def get_user_config_path() -> _pathlib.Path:
    """Get the path to the user settings file."""
    return get_user_config_dir() / CONFIG_FILE_NAME

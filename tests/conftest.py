"""
Shared pytest fixtures for rimecfg tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import pathlib as _pathlib
import typing as _typing

import click.testing as _click_testing
import pytest as _pytest

import rimecfg.store as store

# Debounce window used by tests that wait for real timers
TEST_DEBOUNCE_SECONDS = 0.05

DEFAULT_YAML = """\
# Rime default settings
schema_list:
  - schema: luna_pinyin        # 朙月拼音
  - schema: double_pinyin      # 自然碼雙拼
menu:
  page_size: 5
key_binder:
  select_first_character: bracketleft
  select_last_character: bracketright
  bindings:
    - {when: composing, accept: Control+b, send: Shift+Left}
    - {when: composing, accept: Control+f, send: Shift+Right}
    - {when: has_menu, accept: minus, send: Page_Up}
    - {when: has_menu, accept: equal, send: Page_Down}
    - {when: always, accept: Control+period, toggle: ascii_punct}
"""

SQUIRREL_YAML = """\
style:
  color_scheme: native
  font_face: Avenir
  font_point: 16
app_options:
  com.apple.Spotlight:
    ascii_mode: true
"""

# Environment keys that should be cleared for isolated tests
ENV_KEYS_TO_CLEAR = [
    "RIMECFG_RIME_DIR",
    "RIMECFG_DEBOUNCE_SECONDS",
    "RIMECFG_VERBOSE",
]


@_pytest.fixture(autouse=True)
def isolated_settings(
    tmp_path_factory: _pytest.TempPathFactory,
    monkeypatch: _pytest.MonkeyPatch,
) -> _pathlib.Path:
    """Point the user settings file at an empty directory."""
    for key in ENV_KEYS_TO_CLEAR:
        monkeypatch.delenv(key, raising=False)
    config_dir = tmp_path_factory.mktemp("rimecfg-config")
    monkeypatch.setenv("RIMECFG_CONFIG_DIR", str(config_dir))
    return config_dir


@_pytest.fixture
def rime_dir(tmp_path: _pathlib.Path) -> _pathlib.Path:
    """A Rime directory with base files for both domains and no patches."""
    directory = tmp_path / "Rime"
    directory.mkdir()
    (directory / "default.yaml").write_text(DEFAULT_YAML, encoding="utf-8")
    (directory / "squirrel.yaml").write_text(SQUIRREL_YAML, encoding="utf-8")
    return directory


@_pytest.fixture
def empty_rime_dir(tmp_path: _pathlib.Path) -> _pathlib.Path:
    """A Rime directory with no files at all."""
    directory = tmp_path / "EmptyRime"
    directory.mkdir()
    return directory


@_pytest.fixture
def manager(rime_dir: _pathlib.Path) -> _typing.Iterator[store.ConfigManager]:
    """A loaded manager over ``rime_dir`` with a short debounce window."""
    with store.ConfigManager(rime_dir, debounce_seconds=TEST_DEBOUNCE_SECONDS) as m:
        yield m


@_pytest.fixture
def cli_runner() -> _click_testing.CliRunner:
    """Click test runner."""
    return _click_testing.CliRunner()

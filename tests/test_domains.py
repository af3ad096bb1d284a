"""Tests for configuration domains."""

import pathlib as _pathlib

import pytest as _pytest

import rimecfg.domains as domains


class TestConfigDomain:
    """Tests for domain file naming and parsing."""

    def test_file_names(self) -> None:
        """Each domain should name its base and patch files."""
        domain = domains.ConfigDomain.SQUIRREL
        assert domain.base_file_name == "squirrel.yaml"
        assert domain.patch_file_name == "squirrel.custom.yaml"

    def test_paths(self, tmp_path: _pathlib.Path) -> None:
        """Paths should be resolved inside the Rime directory."""
        domain = domains.ConfigDomain.DEFAULT
        assert domain.base_path(tmp_path) == tmp_path / "default.yaml"
        assert domain.patch_path(tmp_path) == tmp_path / "default.custom.yaml"

    def test_parse(self) -> None:
        """Names and members should both parse."""
        assert domains.ConfigDomain.parse("default") is domains.ConfigDomain.DEFAULT
        assert domains.ConfigDomain.parse(domains.ConfigDomain.SQUIRREL) is (
            domains.ConfigDomain.SQUIRREL
        )

    def test_parse_unknown(self) -> None:
        """Unknown names should raise ValueError."""
        with _pytest.raises(ValueError):
            domains.ConfigDomain.parse("weasel")

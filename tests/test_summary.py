"""Tests for the configuration summary."""

import pathlib as _pathlib

import rimecfg.domains as domains
import rimecfg.store as store
import rimecfg.summary as summary


class TestConfigSummary:
    """Tests for building a summary from a manager."""

    def test_from_base_files(self, manager: store.ConfigManager) -> None:
        """Values should come from both domains."""
        result = summary.ConfigSummary.from_manager(manager)

        assert result.schema_list == ["luna_pinyin", "double_pinyin"]
        assert result.page_size == 5
        assert result.color_scheme == "native"
        assert result.font_face == "Avenir"
        assert result.font_point == 16
        assert result.app_options == [
            summary.AppOption(bundle_id="com.apple.Spotlight", ascii_mode=True)
        ]

    def test_reflects_customizations(self, manager: store.ConfigManager) -> None:
        """Customized values should show in the summary."""
        manager.set(domains.ConfigDomain.SQUIRREL, "style/font_point", 20)
        manager.set(
            domains.ConfigDomain.SQUIRREL,
            "app_options/com.apple.Terminal/ascii_mode",
            False,
        )

        result = summary.ConfigSummary.from_manager(manager)

        assert result.font_point == 20
        assert [option.bundle_id for option in result.app_options] == [
            "com.apple.Spotlight",
            "com.apple.Terminal",
        ]
        assert result.app_options[1].ascii_mode is False

    def test_defaults_for_missing_values(self, tmp_path: _pathlib.Path) -> None:
        """Missing or mistyped values should fall back to defaults."""
        (tmp_path / "default.yaml").write_text("menu:\n  page_size: many\n", encoding="utf-8")
        (tmp_path / "squirrel.yaml").write_text("style:\n  font_point: big\n", encoding="utf-8")

        with store.ConfigManager(tmp_path) as manager:
            result = summary.ConfigSummary.from_manager(manager)

        assert result == summary.ConfigSummary()
        assert result.page_size == 5
        assert result.color_scheme == "purity_of_form_custom"

    def test_example_configuration(self, empty_rime_dir: _pathlib.Path) -> None:
        """The bundled example should summarize like a real configuration."""
        with store.ConfigManager(empty_rime_dir) as manager:
            result = summary.ConfigSummary.from_manager(manager)

        assert result.schema_list == ["rime_ice", "double_pinyin", "t9"]
        assert result.page_size == 9
        assert result.color_scheme == "dark_temple"

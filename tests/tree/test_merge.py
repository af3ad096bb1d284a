"""Tests for deep_merge."""

import rimecfg.tree as tree


class TestDeepMerge:
    """Tests for the merge rule."""

    def test_empty_patch_returns_base_itself(self) -> None:
        """Merging an empty patch should return the base object unchanged."""
        base = {"menu": {"page_size": 5}}
        assert tree.deep_merge(base, {}) is base

    def test_empty_base_yields_patch(self) -> None:
        """Merging into an empty base should yield the patch."""
        patch = {"menu": {"page_size": 7}, "schema_list": [{"schema": "rime_ice"}]}
        assert tree.deep_merge({}, patch) == patch

    def test_nested_maps_merge_recursively(self) -> None:
        """Sibling keys of a patched map entry should survive."""
        base = {"style": {"font_face": "Avenir", "font_point": 16}}
        result = tree.deep_merge(base, {"style": {"font_point": 18}})
        assert result == {"style": {"font_face": "Avenir", "font_point": 18}}

    def test_lists_are_replaced_not_merged(self) -> None:
        """A patched list should replace the base list."""
        base = {"schema_list": [{"schema": "a"}, {"schema": "b"}]}
        result = tree.deep_merge(base, {"schema_list": [{"schema": "c"}]})
        assert result == {"schema_list": [{"schema": "c"}]}

    def test_scalar_replaces_map(self) -> None:
        """A scalar patch value should replace a map base value."""
        result = tree.deep_merge({"style": {"font_point": 16}}, {"style": "plain"})
        assert result == {"style": "plain"}

    def test_map_replaces_scalar(self) -> None:
        """A map patch value should replace a scalar base value."""
        result = tree.deep_merge({"style": "plain"}, {"style": {"font_point": 16}})
        assert result == {"style": {"font_point": 16}}

    def test_inputs_not_modified(self) -> None:
        """Neither input should be modified by a merge."""
        base = {"style": {"font_point": 16}}
        patch = {"style": {"font_point": 18, "inline": {"a": 1}}}
        result = tree.deep_merge(base, patch)

        result["style"]["inline"]["a"] = 2
        assert base == {"style": {"font_point": 16}}
        assert patch == {"style": {"font_point": 18, "inline": {"a": 1}}}
